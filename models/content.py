"""Content, version and field models"""

import enum
import uuid
from typing import Any, Optional

from sqlalchemy import Enum as SQLEnum, ForeignKey, Integer, JSON, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base


class VersionStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Content(Base):
    __tablename__ = "contents"

    content_type_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("content_types.id"),
        nullable=False,
        index=True
    )
    main_language_code: Mapped[str] = mapped_column(String(20), nullable=False)
    # None until the first version is published
    current_version_no: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    content_type = relationship("ContentType")
    versions: Mapped[list["ContentVersion"]] = relationship(
        "ContentVersion",
        back_populates="content",
        cascade="all, delete-orphan",
        order_by="ContentVersion.version_no",
    )

    def get_version(self, version_no: int) -> Optional["ContentVersion"]:
        for version in self.versions:
            if version.version_no == version_no:
                return version
        return None

    def __repr__(self):
        return f"<Content(id='{self.id}', current_version_no={self.current_version_no})>"


class ContentVersion(Base):
    __tablename__ = "content_versions"

    content_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("contents.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    version_no: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[VersionStatus] = mapped_column(
        SQLEnum(VersionStatus, values_callable=lambda x: [e.value for e in x]),
        default=VersionStatus.DRAFT,
        nullable=False
    )
    initial_language_code: Mapped[str] = mapped_column(String(20), nullable=False)

    content: Mapped["Content"] = relationship("Content", back_populates="versions")
    fields: Mapped[list["ContentField"]] = relationship(
        "ContentField",
        back_populates="version",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint('content_id', 'version_no', name='uq_content_version_no'),
    )

    @property
    def language_codes(self) -> list[str]:
        return sorted({field.language_code for field in self.fields})

    def get_field(self, identifier: str, language_code: str) -> Optional["ContentField"]:
        for field in self.fields:
            if field.field_definition_identifier == identifier and field.language_code == language_code:
                return field
        return None

    def __repr__(self):
        return f"<ContentVersion v{self.version_no} ({self.status.value})>"


class ContentField(Base):
    """
    A field of one content version in one language.

    `field_key` is shared by the rows of the same field (definition and
    language) across versions.
    """
    __tablename__ = "content_fields"

    version_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("content_versions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    field_key: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    field_definition_identifier: Mapped[str] = mapped_column(String(100), nullable=False)
    field_type_identifier: Mapped[str] = mapped_column(String(100), nullable=False)
    language_code: Mapped[str] = mapped_column(String(20), nullable=False)

    # Persistence representation produced by the field type
    data: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    version: Mapped["ContentVersion"] = relationship("ContentVersion", back_populates="fields")

    __table_args__ = (
        UniqueConstraint(
            'version_id', 'field_definition_identifier', 'language_code',
            name='uq_content_field_per_version_language'
        ),
    )

    def __repr__(self):
        return f"<ContentField({self.field_definition_identifier}/{self.language_code})>"
