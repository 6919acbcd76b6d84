"""Base class for field types and the @field_type registration decorator"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from field_types.schema_validator import (
    ValidationError,
    validate_field_settings,
    validate_validator_configuration,
)


def field_type(
    handle: str,
    label: str,
    category: str = "general",
    icon: Optional[str] = None,
    version: str = "1.0",
):
    """
    Register a FieldType subclass under a handle.

    The loader picks up every decorated class exported by a field type package.
    """
    def decorator(cls):
        cls.handle = handle
        cls.label = label
        cls.version = version
        cls._field_type_category = category
        cls._field_type_icon = icon
        return cls
    return decorator


class FieldValue(BaseModel):
    """Immutable value held by a content field"""
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class FieldType(ABC):
    """
    A field type defines the shape of its values and how they are normalized,
    validated and converted to and from hashes.
    """
    handle: str
    label: str

    @property
    def settings_schema(self) -> dict:
        """Schema of the field settings accepted by this type"""
        return {}

    @property
    def validator_schema(self) -> dict:
        """Schema of the validators (and their options) accepted by this type"""
        return {}

    def validate_field_settings(self, field_settings: Any) -> list[ValidationError]:
        return validate_field_settings(field_settings, self.settings_schema)

    def validate_validator_configuration(self, validator_configuration: Any) -> list[ValidationError]:
        return validate_validator_configuration(validator_configuration, self.validator_schema)

    @abstractmethod
    def empty_value(self) -> FieldValue:
        ...

    @abstractmethod
    def accept_value(self, input_value: Any) -> FieldValue:
        """
        Normalize raw input into a value of this type.

        Raises InvalidArgumentError for input that can not be turned into a
        value, ContentValidationError for input with mismatching types.
        """

    @abstractmethod
    def is_empty_value(self, value: FieldValue) -> bool:
        ...

    def validate_value(self, field_definition, value: FieldValue) -> list[ValidationError]:
        """Apply the definition's validator configuration to a value"""
        return []

    @abstractmethod
    def to_hash(self, value: FieldValue) -> Any:
        ...

    @abstractmethod
    def from_hash(self, hash_value: Any) -> FieldValue:
        ...

    def to_persistence(self, value: FieldValue) -> Any:
        """Data stored for a content field"""
        return self.to_hash(value)

    def from_persistence(self, data: Any) -> FieldValue:
        """Build a value from stored field data"""
        return self.from_hash(data)

    def __repr__(self):
        return f"<FieldType(handle='{self.handle}')>"
