"""Roles API endpoints - roles and the policies granted to them"""

from uuid import UUID
from fastapi import APIRouter, Depends, Request, Response, status

from schemas.role import RoleCreate, RoleRead, PolicyCreate, PolicyRead
from repositories.role_repository import RoleRepository, get_role_repository

router = APIRouter()


@router.post("/", response_model=RoleRead, status_code=status.HTTP_201_CREATED)
def create_role(
    role_data: RoleCreate,
    role_repo: RoleRepository = Depends(get_role_repository),
):
    return role_repo.create(role_data)


@router.get("/{role_id}/", response_model=RoleRead)
def get_role(
    role_id: UUID,
    role_repo: RoleRepository = Depends(get_role_repository),
):
    return role_repo.get_or_404(role_id)


@router.post("/{role_id}/policies/", response_model=PolicyRead, status_code=status.HTTP_201_CREATED)
def create_policy(
    role_id: UUID,
    policy_data: PolicyCreate,
    request: Request,
    response: Response,
    role_repo: RoleRepository = Depends(get_role_repository),
):
    """
    Add a policy to a role.

    Responds with 201 Created and the location of the new policy.
    """
    role = role_repo.get_or_404(role_id)
    policy = role_repo.add_policy(role, policy_data)
    response.headers["Location"] = str(
        request.url_for("load_policy", role_id=str(role.id), policy_id=str(policy.id))
    )
    return policy


@router.get("/{role_id}/policies/{policy_id}/", response_model=PolicyRead, name="load_policy")
def load_policy(
    role_id: UUID,
    policy_id: UUID,
    role_repo: RoleRepository = Depends(get_role_repository),
):
    role = role_repo.get_or_404(role_id)
    return role_repo.get_policy_or_404(role, policy_id)
