"""Text line field type"""

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ContentValidationError, InvalidArgumentError
from field_types.base_field_type import FieldType, FieldValue, field_type
from field_types.schema_validator import ValidationError


class TextLineValue(FieldValue):
    text: Optional[str] = None

    def __str__(self):
        return self.text or ""


@field_type(handle="ezstring", label="Text line", category="text", icon="type")
class TextLineFieldType(FieldType):

    @property
    def validator_schema(self) -> dict:
        return {
            "StringLengthValidator": {
                "minStringLength": {
                    "type": "int",
                    "default": False,
                },
                "maxStringLength": {
                    "type": "int",
                    "default": False,
                },
            },
        }

    def empty_value(self) -> TextLineValue:
        return TextLineValue()

    def accept_value(self, input_value: Any) -> TextLineValue:
        if input_value is None:
            return self.empty_value()
        if isinstance(input_value, TextLineValue):
            return input_value
        if isinstance(input_value, str):
            return TextLineValue(text=input_value)
        if isinstance(input_value, Mapping):
            try:
                return TextLineValue.model_validate(dict(input_value))
            except PydanticValidationError as e:
                raise ContentValidationError(f"Invalid text line data: {e.error_count()} error(s)") from e
        raise InvalidArgumentError(
            "input_value",
            f"expected a TextLineValue, a mapping or a string, got {type(input_value).__name__}",
        )

    def is_empty_value(self, value: TextLineValue) -> bool:
        return value.text is None or value.text.strip() == ""

    def validate_value(self, field_definition, value: TextLineValue) -> list[ValidationError]:
        errors = []
        if self.is_empty_value(value):
            return errors

        constraints = field_definition.get_validators().get("StringLengthValidator") or {}
        length = len(value.text)
        min_length = constraints.get("minStringLength")
        max_length = constraints.get("maxStringLength")

        if _is_limit(min_length) and length < min_length:
            errors.append(ValidationError(
                message=f"The string can not be shorter than {min_length} characters",
                target="text",
            ))
        if _is_limit(max_length) and length > max_length:
            errors.append(ValidationError(
                message=f"The string can not exceed {max_length} characters",
                target="text",
            ))
        return errors

    def to_hash(self, value: TextLineValue) -> Optional[str]:
        return value.text

    def from_hash(self, hash_value: Optional[str]) -> TextLineValue:
        if hash_value is None:
            return self.empty_value()
        return TextLineValue(text=hash_value)


def _is_limit(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
