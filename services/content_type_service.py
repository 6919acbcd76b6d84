"""Content Type Service - content types and their field definitions"""

from typing import Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from core.exceptions import ContentTypeValidationError, InvalidArgumentError, NotFoundError
from core.logging_config import get_logger
from db.session import get_db
from field_types.schema_validator import ValidationError
from models import ContentType, FieldDefinitionRecord
from schemas.field_definition import ContentTypeCreate, ContentTypeFieldDefinition, FieldDefinitionCreate
from services.field_type_loader_service import FieldTypeLoader, get_field_type_loader

logger = get_logger(__name__)


class ContentTypeService:

    def __init__(self, session: Session, field_type_loader: Optional[FieldTypeLoader] = None):
        self.session = session
        self.field_type_loader = field_type_loader or get_field_type_loader()

    def load_content_type(self, identifier: str) -> ContentType:
        stmt = select(ContentType).where(ContentType.identifier == identifier)
        content_type = self.session.scalar(stmt)
        if content_type is None:
            raise NotFoundError("Content type", identifier)
        return content_type

    def load_field_definition(self, content_type: ContentType, identifier: str) -> ContentTypeFieldDefinition:
        record = content_type.get_field_definition(identifier)
        if record is None:
            raise NotFoundError("Field definition", f"{content_type.identifier}/{identifier}")
        return ContentTypeFieldDefinition.model_validate(record)

    def create_content_type(self, data: ContentTypeCreate) -> ContentType:
        """
        Create a content type.

        Every field definition is checked against its field type's settings and
        validator schemas. All definitions are checked before failing.
        """
        existing = self.session.scalar(select(ContentType).where(ContentType.identifier == data.identifier))
        if existing is not None:
            raise InvalidArgumentError("identifier", f"content type '{data.identifier}' already exists")

        errors = {}
        seen = set()
        for field_definition in data.field_definitions:
            if field_definition.identifier in seen:
                errors.setdefault(field_definition.identifier, []).append(ValidationError(
                    message=f"Field definition identifier '{field_definition.identifier}' is not unique",
                    target="identifier",
                ))
                continue
            seen.add(field_definition.identifier)

            definition_errors = self._validate_field_definition(field_definition)
            if definition_errors:
                errors[field_definition.identifier] = definition_errors

        if errors:
            logger.warning_ctx("Content type validation failed", content_type=data.identifier, fields=sorted(errors))
            raise ContentTypeValidationError(errors)

        content_type = ContentType(
            identifier=data.identifier,
            main_language_code=data.main_language_code,
            names=data.names,
        )
        for position, field_definition in enumerate(data.field_definitions, start=1):
            content_type.field_definitions.append(self._build_record(field_definition, position))

        self.session.add(content_type)
        self.session.commit()
        self.session.refresh(content_type)

        logger.info_ctx(
            "Created content type",
            content_type=content_type.identifier,
            fields=[record.identifier for record in content_type.field_definitions],
        )
        return content_type

    def add_field_definition(
        self,
        content_type: ContentType,
        field_definition: FieldDefinitionCreate,
    ) -> ContentTypeFieldDefinition:
        if content_type.get_field_definition(field_definition.identifier) is not None:
            raise ContentTypeValidationError({field_definition.identifier: [ValidationError(
                message=f"Field definition identifier '{field_definition.identifier}' is not unique",
                target="identifier",
            )]})

        errors = self._validate_field_definition(field_definition)
        if errors:
            raise ContentTypeValidationError({field_definition.identifier: errors})

        position = max((record.position for record in content_type.field_definitions), default=0) + 1
        record = self._build_record(field_definition, position)
        content_type.field_definitions.append(record)
        self.session.commit()
        self.session.refresh(record)
        return ContentTypeFieldDefinition.model_validate(record)

    def _validate_field_definition(self, field_definition: FieldDefinitionCreate) -> list[ValidationError]:
        field_type_class = self.field_type_loader.get_field_type(field_definition.field_type_identifier)
        if field_type_class is None:
            return [ValidationError(
                message=f"Field type '{field_definition.field_type_identifier}' not found",
                target="field_type_identifier",
            )]

        field_type = field_type_class()
        return (
            field_type.validate_field_settings(field_definition.field_settings)
            + field_type.validate_validator_configuration(field_definition.validator_configuration)
        )

    def _build_record(self, field_definition: FieldDefinitionCreate, position: int) -> FieldDefinitionRecord:
        return FieldDefinitionRecord(
            identifier=field_definition.identifier,
            field_group=field_definition.field_group,
            position=field_definition.position if field_definition.position is not None else position,
            field_type_identifier=field_definition.field_type_identifier,
            is_translatable=field_definition.is_translatable,
            is_required=field_definition.is_required,
            is_searchable=field_definition.is_searchable,
            is_info_collector=field_definition.is_info_collector,
            names=field_definition.names,
            descriptions=field_definition.descriptions,
            field_settings=field_definition.field_settings or {},
            validator_configuration=field_definition.validator_configuration or {},
            default_value=field_definition.default_value,
        )


def get_content_type_service(db: Session = Depends(get_db)) -> ContentTypeService:
    """Dependency for the content type service"""
    return ContentTypeService(db)
