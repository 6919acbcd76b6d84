"""Content type and field definition models"""

import uuid
from typing import Any, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, JSON, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base


class ContentType(Base):
    """A content type groups the field definitions content is built from"""
    __tablename__ = "content_types"

    identifier: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    main_language_code: Mapped[str] = mapped_column(String(20), nullable=False, default="eng-GB")
    names: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    field_definitions: Mapped[list["FieldDefinitionRecord"]] = relationship(
        "FieldDefinitionRecord",
        back_populates="content_type",
        cascade="all, delete-orphan",
        order_by="FieldDefinitionRecord.position",
    )

    def get_field_definition(self, identifier: str) -> Optional["FieldDefinitionRecord"]:
        for field_definition in self.field_definitions:
            if field_definition.identifier == identifier:
                return field_definition
        return None

    def __repr__(self):
        return f"<ContentType(identifier='{self.identifier}')>"


class FieldDefinitionRecord(Base):
    """Stored field definition, see schemas.field_definition for the value object"""
    __tablename__ = "field_definitions"

    content_type_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("content_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    identifier: Mapped[str] = mapped_column(String(100), nullable=False)
    field_group: Mapped[str] = mapped_column(String(100), default="content", nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    field_type_identifier: Mapped[str] = mapped_column(String(100), nullable=False)

    is_translatable: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_searchable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_info_collector: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    names: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    descriptions: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    field_settings: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    validator_configuration: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    default_value: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    content_type: Mapped["ContentType"] = relationship("ContentType", back_populates="field_definitions")

    __table_args__ = (
        UniqueConstraint('content_type_id', 'identifier', name='uq_field_definition_identifier_per_type'),
    )

    def __repr__(self):
        return f"<FieldDefinitionRecord(identifier='{self.identifier}', type='{self.field_type_identifier}')>"
