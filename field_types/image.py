"""Image field type - value, normalization and hash conversion"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import AliasChoices, ConfigDict, Field as PydanticField
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from core.exceptions import ContentValidationError, InvalidArgumentError
from core.logging_config import get_logger
from field_types.base_field_type import FieldType, FieldValue, field_type
from field_types.schema_validator import ValidationError

logger = get_logger(__name__)

# Keys of the hash representation, all of them always present
HASH_KEYS = (
    "id", "path", "inputUri", "fileName", "alternativeText",
    "fileSize", "imageId", "uri", "width", "height",
)


class ImageValue(FieldValue):
    """
    Value of an image field.

    `id` is the storage path once the image has been stored, `input_uri` the
    local file to store when creating or replacing the image. Keys are accepted
    in camelCase and snake_case; `path` is accepted as an alias of `inputUri`.
    """
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: Optional[str] = None
    input_uri: Optional[str] = PydanticField(
        default=None,
        validation_alias=AliasChoices("inputUri", "input_uri", "path"),
    )
    file_name: Optional[str] = None
    alternative_text: Optional[str] = None
    file_size: Optional[int] = None
    image_id: Optional[str] = None
    uri: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def path(self) -> Optional[str]:
        """The source file before storage, the storage path afterwards"""
        return self.input_uri or self.id

    def __str__(self):
        return self.file_name or ""


def _build_value(data: Mapping) -> ImageValue:
    try:
        return ImageValue.model_validate(dict(data))
    except PydanticValidationError as e:
        errors = [
            ValidationError(
                message=error["msg"],
                target=".".join(str(part) for part in error["loc"]),
            )
            for error in e.errors()
        ]
        raise ContentValidationError(f"Invalid image data: {e.error_count()} error(s)", errors) from e


@field_type(handle="ezimage", label="Image", category="media", icon="image")
class ImageFieldType(FieldType):

    @property
    def validator_schema(self) -> dict:
        return {
            "FileSizeValidator": {
                "maxFileSize": {
                    "type": "int",
                    "default": False,
                },
            },
        }

    def empty_value(self) -> ImageValue:
        return ImageValue()

    def accept_value(self, input_value: Any) -> ImageValue:
        if input_value is None:
            return self.empty_value()

        if isinstance(input_value, ImageValue):
            value = input_value
        elif isinstance(input_value, str):
            value = ImageValue(input_uri=input_value)
        elif isinstance(input_value, Mapping):
            value = self.from_hash(input_value)
        else:
            raise InvalidArgumentError(
                "input_value",
                f"expected an ImageValue, a mapping or a file path, got {type(input_value).__name__}",
            )

        return self._complete_from_input_uri(value)

    def _complete_from_input_uri(self, value: ImageValue) -> ImageValue:
        """Derive file name and size from the source file"""
        if value.input_uri is None:
            return value

        source = Path(value.input_uri)
        if not source.is_file():
            raise InvalidArgumentError("input_uri", f"file '{value.input_uri}' does not exist")

        update = {}
        if value.file_name is None:
            update["file_name"] = source.name
        if value.file_size is None:
            update["file_size"] = source.stat().st_size

        if update:
            logger.debug(f"Derived {sorted(update)} from {value.input_uri}")
            value = value.model_copy(update=update)
        return value

    def is_empty_value(self, value: ImageValue) -> bool:
        return value.id is None and value.input_uri is None

    def validate_value(self, field_definition, value: ImageValue) -> list[ValidationError]:
        errors = []
        if self.is_empty_value(value):
            return errors

        if not value.file_name:
            errors.append(ValidationError(
                message="Image file name could not be determined",
                target="fileName",
            ))
        if value.file_size is None or value.file_size < 0:
            errors.append(ValidationError(
                message="Image file size could not be determined",
                target="fileSize",
            ))
        if value.input_uri is None and value.uri is None:
            errors.append(ValidationError(
                message="A stored image needs a uri",
                target="uri",
            ))

        file_size_validator = field_definition.get_validators().get("FileSizeValidator") or {}
        max_file_size = file_size_validator.get("maxFileSize")
        if (
            isinstance(max_file_size, int)
            and not isinstance(max_file_size, bool)
            and max_file_size > 0
            and value.file_size is not None
            and value.file_size > max_file_size
        ):
            errors.append(ValidationError(
                message=f"The file size cannot exceed {max_file_size} bytes",
                target="fileSize",
            ))

        return errors

    def to_hash(self, value: ImageValue) -> dict:
        return {
            "id": value.id,
            "path": value.path,
            "inputUri": value.input_uri,
            "fileName": value.file_name,
            "alternativeText": value.alternative_text,
            "fileSize": value.file_size,
            "imageId": value.image_id,
            "uri": value.uri,
            "width": value.width,
            "height": value.height,
        }

    def from_hash(self, hash_value: Optional[Mapping]) -> ImageValue:
        """
        Build a value from a hash.

        `inputUri` is a creation instruction. `path` only is one when it points
        somewhere else than the stored `id`.
        """
        if hash_value is None:
            return self.empty_value()

        data = dict(hash_value)
        path = data.pop("path", None)
        input_uri = data.pop("inputUri", None)
        snake_input_uri = data.pop("input_uri", None)
        if input_uri is None:
            input_uri = snake_input_uri
        if input_uri is None and path is not None and path != data.get("id"):
            input_uri = path
        data["inputUri"] = input_uri
        return _build_value(data)

    def to_persistence(self, value: ImageValue) -> dict:
        data = self.to_hash(value)
        del data["path"]
        del data["inputUri"]
        return data

    def from_persistence(self, data: Optional[Mapping]) -> ImageValue:
        """Stored data never carries a source file to import"""
        if data is None:
            return self.empty_value()

        stored = {
            key: value
            for key, value in data.items()
            if key not in ("inputUri", "input_uri", "path")
        }
        return _build_value(stored)
