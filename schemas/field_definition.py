"""Field definition schemas - descriptors of the fields of a content type"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class FieldDefinition(BaseModel, ABC):
    """
    Describes a field of a content type independent of any stored value.

    Field definitions are immutable. Names and descriptions are kept per
    language code, e.g. {"eng-GB": "Image", "ger-DE": "Bild"}.
    """
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: Optional[UUID] = None
    identifier: str
    field_group: str = "content"
    position: int = 0
    field_type_identifier: str
    is_translatable: bool = True
    is_required: bool = False
    is_searchable: bool = False
    is_info_collector: bool = False
    default_value: Any = None

    @abstractmethod
    def get_names(self) -> dict[str, str]:
        """Names of the field in all languages of the content type"""

    @abstractmethod
    def get_name(self, language_code: str) -> Optional[str]:
        """Name in the given language, None if there is none"""

    @abstractmethod
    def get_descriptions(self) -> dict[str, str]:
        ...

    @abstractmethod
    def get_description(self, language_code: str) -> Optional[str]:
        ...

    @abstractmethod
    def get_validators(self) -> dict:
        """Validator configuration supported by the field type"""

    @abstractmethod
    def get_field_settings(self) -> dict:
        ...


class ContentTypeFieldDefinition(FieldDefinition):
    """Field definition as attached to a stored content type"""
    names: dict[str, str] = PydanticField(default_factory=dict)
    descriptions: dict[str, str] = PydanticField(default_factory=dict)
    field_settings: dict = PydanticField(default_factory=dict)
    validator_configuration: dict = PydanticField(default_factory=dict)

    def get_names(self) -> dict[str, str]:
        return dict(self.names)

    def get_name(self, language_code: str) -> Optional[str]:
        return self.names.get(language_code)

    def get_descriptions(self) -> dict[str, str]:
        return dict(self.descriptions)

    def get_description(self, language_code: str) -> Optional[str]:
        return self.descriptions.get(language_code)

    def get_validators(self) -> dict:
        return dict(self.validator_configuration)

    def get_field_settings(self) -> dict:
        return dict(self.field_settings)


class FieldDefinitionCreate(BaseModel):
    """Schema for adding a field definition to a content type"""
    identifier: str = PydanticField(..., max_length=100, pattern=r'^[a-z][a-z0-9_]*$')
    field_type_identifier: str = PydanticField(..., max_length=100)
    field_group: str = "content"
    position: Optional[int] = None
    names: dict[str, str] = PydanticField(default_factory=dict)
    descriptions: dict[str, str] = PydanticField(default_factory=dict)

    is_translatable: bool = True
    is_required: bool = False
    is_searchable: bool = False
    is_info_collector: bool = False

    # Not type checked here, the field type's schema decides what is valid
    field_settings: Any = PydanticField(default_factory=dict)
    validator_configuration: Any = PydanticField(default_factory=dict)
    default_value: Any = None


class ContentTypeCreate(BaseModel):
    """Schema for creating a content type with its field definitions"""
    identifier: str = PydanticField(..., max_length=100, pattern=r'^[a-z][a-z0-9_]*$')
    main_language_code: str = "eng-GB"
    names: dict[str, str] = PydanticField(default_factory=dict)
    field_definitions: list[FieldDefinitionCreate] = PydanticField(default_factory=list)
