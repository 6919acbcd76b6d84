import uuid

from sqlalchemy import ForeignKey, JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Role(Base):
    __tablename__ = "role"
    name: Mapped[str] = mapped_column(String(100), unique=True)
    description: Mapped[str] = mapped_column(Text, default="")

    policies: Mapped[list["Policy"]] = relationship(
        "Policy",
        back_populates="role",
        cascade="all, delete-orphan",
        order_by="Policy.created_at",
    )


class Policy(Base):
    """Grants a role access to a module function, optionally limited"""
    __tablename__ = "policy"

    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("role.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    module: Mapped[str] = mapped_column(String(100), nullable=False)
    function: Mapped[str] = mapped_column(String(100), nullable=False)

    # e.g. {"Class": ["article", "image"], "Section": ["standard"]}
    limitations: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    role: Mapped["Role"] = relationship("Role", back_populates="policies")

    def __repr__(self):
        return f"<Policy(module='{self.module}', function='{self.function}')>"
