"""Image file references - which content field rows use which stored image"""

import uuid

from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class ImageFileReference(Base):
    """
    One row per content field row referencing a stored image.

    Several rows may point to the same path (new drafts, copies for new
    languages). A stored image is removed once no row references its path.
    """
    __tablename__ = "image_file_references"

    content_field_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("content_fields.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    path: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    uri: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self):
        return f"<ImageFileReference(path='{self.path}')>"
