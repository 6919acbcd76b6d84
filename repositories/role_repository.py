"""Role Repository - Data access layer for roles and their policies"""

from uuid import UUID

from fastapi import HTTPException, Depends
from sqlalchemy.orm import Session
from sqlalchemy import select

from db.session import get_db
from models import Role, Policy
from schemas.role import RoleCreate, PolicyCreate


class RoleRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_or_404(self, role_id: UUID) -> Role:
        role = self.session.get(Role, role_id)
        if not role:
            raise HTTPException(status_code=404, detail="Role not found")
        return role

    def get_policy_or_404(self, role: Role, policy_id: UUID) -> Policy:
        stmt = (
            select(Policy)
            .where(Policy.id == policy_id)
            .where(Policy.role_id == role.id)
        )
        policy = self.session.scalar(stmt)
        if not policy:
            raise HTTPException(status_code=404, detail="Policy not found")
        return policy

    def create(self, role_data: RoleCreate) -> Role:
        existing = self.session.scalar(select(Role).where(Role.name == role_data.name))
        if existing:
            raise HTTPException(
                status_code=409,
                detail=f"Role with name '{role_data.name}' already exists"
            )

        role = Role(**role_data.model_dump())
        self.session.add(role)
        self.session.commit()
        self.session.refresh(role)
        return role

    def add_policy(self, role: Role, policy_data: PolicyCreate) -> Policy:
        policy = Policy(**policy_data.model_dump())
        role.policies.append(policy)
        self.session.commit()
        self.session.refresh(policy)
        return policy


def get_role_repository(db: Session = Depends(get_db)) -> RoleRepository:
    """Dependency for role repository"""
    return RoleRepository(db)
