"""External storage handlers - keep stored field data in line with the content lifecycle"""

from abc import ABC, abstractmethod

from sqlalchemy import event, func, select
from sqlalchemy.orm import Session

from core.exceptions import InvalidArgumentError, StorageError
from core.logging_config import get_logger
from field_types.image import ImageValue
from models import ContentField, ImageFileReference
from services.image_storage_service import ImageStorage

logger = get_logger(__name__)


class ExternalStorageHandler(ABC):
    """
    Called by the content service for every affected field row of a field type
    that keeps data outside of the content tables.
    """

    @abstractmethod
    def store_field_data(self, field: ContentField, value):
        """A value was set on a field row (create, update or new draft)"""

    @abstractmethod
    def copy_field_data(self, field: ContentField, value):
        """A non translatable value was copied to a field row of another language"""

    def publish_field_data(self, field: ContentField) -> None:
        """The version of the field row was published"""

    @abstractmethod
    def delete_field_data(self, fields: list[ContentField]) -> None:
        """The field rows are about to be deleted with their version or content"""


class ImageExternalStorageHandler(ExternalStorageHandler):
    """
    Stores uploaded images and tracks which field rows reference which stored
    file. A file is removed when the last reference to it is released.

    Files are only touched once the database agrees: released files are
    removed after the session commits, and files written during a transaction
    that rolls back are removed again.
    """

    def __init__(self, session: Session, storage: ImageStorage):
        self.session = session
        self.storage = storage
        # path -> uri
        self._pending_removals: dict[str, str] = {}
        self._written: dict[str, str] = {}

        event.listen(session, "after_commit", self._after_commit)
        event.listen(session, "after_soft_rollback", self._after_rollback)

    def store_field_data(self, field: ContentField, value: ImageValue) -> ImageValue:
        if field.id is None:
            self.session.flush()

        if value.input_uri is not None:
            storage_path = self._storage_path(field, value)
            is_new_file = self._reference_count(storage_path) == 0
            value = self.storage.store(value, storage_path)
            if is_new_file:
                self._written[value.id] = value.uri
        elif value.id is not None:
            self._ensure_stored(value)

        if value.id is not None and value.image_id is None:
            value = value.model_copy(update={"image_id": f"{field.version.content_id}-{field.field_key}"})

        self._reference(field, value)
        return value

    def copy_field_data(self, field: ContentField, value: ImageValue) -> ImageValue:
        if value.id is None:
            self._reference(field, value)
            return value

        copied = self.storage.copy_for_translation(value)
        self._reference(field, copied)
        logger.debug_ctx(
            "Copied image for translation",
            path=copied.id,
            language_code=field.language_code,
        )
        return copied

    def delete_field_data(self, fields: list[ContentField]) -> None:
        for field in fields:
            for reference in self._references(field):
                self._release(reference)

    def _storage_path(self, field: ContentField, value: ImageValue) -> str:
        version = field.version
        return (
            f"{self.storage.prefix}/{version.content_id}/{field.field_key.hex}/"
            f"{version.version_no}-{field.language_code}/{value.file_name}"
        )

    def _ensure_stored(self, value: ImageValue) -> None:
        """A value without a source file must point at a file that is already stored"""
        if self._reference_count(value.id) > 0 or value.id in self._written:
            return
        if value.uri is None or not self.storage.exists(value.uri):
            raise InvalidArgumentError("id", f"image '{value.id}' is not a stored file")

    def _references(self, field: ContentField) -> list[ImageFileReference]:
        if field.id is None:
            return []
        stmt = select(ImageFileReference).where(ImageFileReference.content_field_id == field.id)
        return list(self.session.scalars(stmt).all())

    def _reference_count(self, path: str) -> int:
        stmt = (
            select(func.count())
            .select_from(ImageFileReference)
            .where(ImageFileReference.path == path)
        )
        return self.session.scalar(stmt)

    def _reference(self, field: ContentField, value: ImageValue) -> None:
        """Point the field row at the value's file, releasing what it used before"""
        if field.id is None:
            self.session.flush()

        references = self._references(field)
        if value.id is not None and not any(reference.path == value.id for reference in references):
            self.session.add(ImageFileReference(
                content_field_id=field.id,
                path=value.id,
                uri=value.uri,
            ))
            self._pending_removals.pop(value.id, None)

        for reference in references:
            if reference.path != value.id:
                self._release(reference)
        self.session.flush()

    def _release(self, reference: ImageFileReference) -> None:
        self.session.delete(reference)
        self.session.flush()

        if self._reference_count(reference.path) == 0:
            self._pending_removals[reference.path] = reference.uri

    def _after_commit(self, session: Session) -> None:
        removals = self._pending_removals
        self._pending_removals = {}
        self._written = {}

        for path, uri in removals.items():
            logger.info_ctx("Removing unreferenced image", path=path, uri=uri)
            self._remove(uri)

    def _after_rollback(self, session: Session, previous_transaction) -> None:
        if previous_transaction.parent is not None:
            return

        written = self._written
        self._pending_removals = {}
        self._written = {}

        for path, uri in written.items():
            logger.info_ctx("Removing image of rolled back transaction", path=path, uri=uri)
            self._remove(uri)

    def _remove(self, uri: str) -> None:
        # The transaction is already over, a failed removal leaves an orphaned file
        try:
            self.storage.remove(uri)
        except StorageError as e:
            logger.error_ctx("Image could not be removed", uri=uri, error=str(e))
