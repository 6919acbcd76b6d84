"""
Content Service - versioned content built from field definitions.

Every lifecycle operation calls the external storage handler of a field type
once per affected field row:

- create_content / update_content      -> store_field_data
- new language, non translatable field -> copy_field_data
- create_content_draft                 -> store_field_data (value already stored)
- publish_version                      -> publish_field_data
- delete_version / delete_content      -> delete_field_data
"""

import uuid
from collections.abc import Mapping
from typing import Any, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from core.exceptions import (
    BadStateError,
    ContentFieldValidationError,
    ContentValidationError,
    InvalidArgumentError,
    NotFoundError,
)
from core.logging_config import get_logger
from db.session import get_db
from field_types.base_field_type import FieldType
from field_types.schema_validator import ValidationError
from models import Content, ContentField, ContentType, ContentVersion, VersionStatus
from schemas.field_definition import ContentTypeFieldDefinition
from services.external_storage_handler import ExternalStorageHandler, ImageExternalStorageHandler
from services.field_type_loader_service import FieldTypeLoader, get_field_type_loader
from services.image_storage_service import get_image_storage

logger = get_logger(__name__)


class ContentService:

    def __init__(
        self,
        session: Session,
        field_type_loader: Optional[FieldTypeLoader] = None,
        storage_handlers: Optional[dict[str, ExternalStorageHandler]] = None,
    ):
        self.session = session
        self.field_type_loader = field_type_loader or get_field_type_loader()
        self.storage_handlers = storage_handlers or {}

    def load_content(self, content_id: UUID) -> Content:
        content = self.session.get(Content, content_id)
        if content is None:
            raise NotFoundError("Content", content_id)
        return content

    def load_version(self, content: Content, version_no: Optional[int] = None) -> ContentVersion:
        """Load a version, the published one by default"""
        version_no = version_no or content.current_version_no
        version = content.get_version(version_no) if version_no else None
        if version is None:
            raise NotFoundError("Version", f"{content.id}/{version_no}")
        return version

    def load_field_value(self, version: ContentVersion, identifier: str, language_code: Optional[str] = None):
        language_code = language_code or version.content.main_language_code
        field = version.get_field(identifier, language_code)
        if field is None:
            raise NotFoundError("Field", f"{identifier}/{language_code}")
        return self._field_type(field.field_type_identifier).from_persistence(field.data)

    def create_content(
        self,
        content_type: ContentType,
        fields: Mapping[str, Any],
        language_code: Optional[str] = None,
    ) -> ContentVersion:
        """Create content with a first draft version holding the given field values"""
        language_code = language_code or content_type.main_language_code
        accepted = self._accept_fields(content_type, fields, language_code, creating=True)

        content = Content(content_type=content_type, main_language_code=language_code)
        version = ContentVersion(
            content=content,
            version_no=1,
            status=VersionStatus.DRAFT,
            initial_language_code=language_code,
        )
        self.session.add(content)

        try:
            self.session.flush()
            for identifier, (definition, field_type, value) in accepted.items():
                field = self._new_field(version, definition, language_code)
                self._store_value(field, field_type, value)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info_ctx("Created content", content_id=str(content.id), content_type=content_type.identifier)
        return version

    def update_content(
        self,
        version: ContentVersion,
        fields: Mapping[str, Any],
        initial_language_code: Optional[str] = None,
    ) -> ContentVersion:
        """
        Set field values on a draft.

        Values of non translatable fields are always set in the main language
        and copied to the other languages of the version. Updating in a language
        the version does not have yet adds that language.
        """
        if version.status != VersionStatus.DRAFT:
            raise BadStateError(f"Version {version.version_no} is not a draft")

        content = version.content
        content_type = content.content_type
        language_code = initial_language_code or version.initial_language_code
        is_new_language = language_code not in version.language_codes

        accepted = self._accept_fields(content_type, fields, language_code, creating=False)

        try:
            for identifier, (definition, field_type, value) in accepted.items():
                target_language = language_code if definition.is_translatable else content.main_language_code
                field = version.get_field(identifier, target_language)
                if field is None:
                    field = self._new_field(version, definition, target_language)
                self._store_value(field, field_type, value)

                if not definition.is_translatable:
                    for other_language in version.language_codes:
                        if other_language != target_language:
                            self._copy_to_language(version, definition, field, other_language)

            if is_new_language:
                self._add_language(version, content_type, language_code)

            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info_ctx(
            "Updated content",
            content_id=str(content.id),
            version_no=version.version_no,
            language_code=language_code,
            fields=sorted(accepted),
        )
        return version

    def create_content_draft(self, content: Content, from_version_no: Optional[int] = None) -> ContentVersion:
        """Create a new draft from a version, the published one by default"""
        source = self.load_version(content, from_version_no)
        draft = ContentVersion(
            content=content,
            version_no=max(version.version_no for version in content.versions) + 1,
            status=VersionStatus.DRAFT,
            initial_language_code=source.initial_language_code,
        )

        try:
            self.session.flush()
            for source_field in source.fields:
                field = ContentField(
                    version=draft,
                    field_key=source_field.field_key,
                    field_definition_identifier=source_field.field_definition_identifier,
                    field_type_identifier=source_field.field_type_identifier,
                    language_code=source_field.language_code,
                    data=source_field.data,
                )
                self.session.add(field)
                field_type = self._field_type(field.field_type_identifier)
                self._store_value(field, field_type, field_type.from_persistence(source_field.data))
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info_ctx("Created draft", content_id=str(content.id), version_no=draft.version_no)
        return draft

    def publish_version(self, version: ContentVersion) -> ContentVersion:
        if version.status != VersionStatus.DRAFT:
            raise BadStateError(f"Version {version.version_no} is not a draft")

        content = version.content
        try:
            for other in content.versions:
                if other.status == VersionStatus.PUBLISHED:
                    other.status = VersionStatus.ARCHIVED
            version.status = VersionStatus.PUBLISHED
            content.current_version_no = version.version_no

            for field in version.fields:
                handler = self.storage_handlers.get(field.field_type_identifier)
                if handler is not None:
                    handler.publish_field_data(field)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info_ctx("Published version", content_id=str(content.id), version_no=version.version_no)
        return version

    def delete_version(self, version: ContentVersion) -> None:
        """Delete a draft or archived version together with its field data"""
        content = version.content
        if version.status == VersionStatus.PUBLISHED:
            raise BadStateError("The published version can not be deleted, delete the content instead")
        if len(content.versions) == 1:
            raise BadStateError("The last version can not be deleted, delete the content instead")

        version_no = version.version_no
        try:
            self._delete_fields(version.fields)
            content.versions.remove(version)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info_ctx("Deleted version", content_id=str(content.id), version_no=version_no)

    def delete_content(self, content: Content) -> None:
        content_id = str(content.id)
        try:
            self._delete_fields([field for version in content.versions for field in version.fields])
            self.session.delete(content)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info_ctx("Deleted content", content_id=content_id)

    def _field_type(self, handle: str) -> FieldType:
        return self.field_type_loader.build(handle)

    def _accept_fields(
        self,
        content_type: ContentType,
        fields: Mapping[str, Any],
        language_code: str,
        creating: bool,
    ) -> dict:
        """
        Normalize and validate input for every field definition.

        All fields are validated before errors are raised together in a
        ContentFieldValidationError.
        """
        known = {record.identifier for record in content_type.field_definitions}
        unknown = sorted(set(fields) - known)
        if unknown:
            raise InvalidArgumentError("fields", f"unknown field definitions: {', '.join(unknown)}")

        accepted = {}
        errors = {}
        for record in content_type.field_definitions:
            if record.identifier not in fields and not creating:
                continue

            definition = ContentTypeFieldDefinition.model_validate(record)
            field_type = self._field_type(definition.field_type_identifier)
            raw_value = fields.get(record.identifier, definition.default_value)

            try:
                value = field_type.accept_value(raw_value)
            except ContentValidationError as e:
                errors[definition.identifier] = {
                    language_code: e.errors or [ValidationError(message=str(e))]
                }
                continue

            field_errors = field_type.validate_value(definition, value)
            if definition.is_required and field_type.is_empty_value(value):
                field_errors.append(ValidationError(
                    message=f"Value for required field definition '{definition.identifier}' is empty",
                    target=definition.identifier,
                ))

            if field_errors:
                errors[definition.identifier] = {language_code: field_errors}
            else:
                accepted[definition.identifier] = (definition, field_type, value)

        if errors:
            logger.warning_ctx("Content field validation failed", fields=sorted(errors))
            raise ContentFieldValidationError(errors)
        return accepted

    def _new_field(self, version: ContentVersion, definition, language_code: str) -> ContentField:
        field = ContentField(
            version=version,
            field_key=uuid.uuid4(),
            field_definition_identifier=definition.identifier,
            field_type_identifier=definition.field_type_identifier,
            language_code=language_code,
        )
        self.session.add(field)
        return field

    def _store_value(self, field: ContentField, field_type: FieldType, value) -> None:
        handler = self.storage_handlers.get(field.field_type_identifier)
        if handler is not None:
            value = handler.store_field_data(field, value)
        field.data = field_type.to_persistence(value)

    def _copy_to_language(
        self,
        version: ContentVersion,
        definition,
        source: ContentField,
        language_code: str,
    ) -> None:
        field_type = self._field_type(source.field_type_identifier)
        target = version.get_field(definition.identifier, language_code)
        if target is None:
            target = self._new_field(version, definition, language_code)
            self.session.flush()

        value = field_type.from_persistence(source.data)
        handler = self.storage_handlers.get(source.field_type_identifier)
        if handler is not None:
            value = handler.copy_field_data(target, value)
        target.data = field_type.to_persistence(value)

    def _add_language(self, version: ContentVersion, content_type: ContentType, language_code: str) -> None:
        """Fill the fields a new language did not get values for"""
        main_language_code = version.content.main_language_code
        for record in content_type.field_definitions:
            if version.get_field(record.identifier, language_code) is not None:
                continue

            definition = ContentTypeFieldDefinition.model_validate(record)
            source = version.get_field(record.identifier, main_language_code)
            if not definition.is_translatable and source is not None:
                self._copy_to_language(version, definition, source, language_code)
            else:
                field_type = self._field_type(definition.field_type_identifier)
                field = self._new_field(version, definition, language_code)
                self._store_value(field, field_type, field_type.empty_value())

    def _delete_fields(self, fields: list[ContentField]) -> None:
        by_type: dict[str, list[ContentField]] = {}
        for field in fields:
            by_type.setdefault(field.field_type_identifier, []).append(field)

        for handle, typed_fields in by_type.items():
            handler = self.storage_handlers.get(handle)
            if handler is not None:
                handler.delete_field_data(typed_fields)


def get_content_service(db: Session = Depends(get_db)) -> ContentService:
    """Dependency for the content service"""
    return ContentService(
        db,
        storage_handlers={
            "ezimage": ImageExternalStorageHandler(db, get_image_storage()),
        },
    )
