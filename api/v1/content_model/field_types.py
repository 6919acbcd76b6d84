"""Field Types API endpoints - read-only, serves field types from runtime loader"""

from fastapi import APIRouter

from field_types.base_field_type import FieldType
from schemas.field_type_registry import FieldTypeRead
from services.field_type_loader_service import get_field_type_loader

router = APIRouter()


def _describe(field_type: FieldType) -> FieldTypeRead:
    return FieldTypeRead(
        handle=field_type.handle,
        label=field_type.label,
        category=getattr(field_type, "_field_type_category", "general"),
        icon=getattr(field_type, "_field_type_icon", None),
        settings_schema=field_type.settings_schema,
        validator_schema=field_type.validator_schema,
        version=getattr(field_type, "version", None),
    )


@router.get("/", response_model=list[FieldTypeRead])
def list_field_types():
    """
    List all available field types, ordered by category and label.

    Field definitions are validated against the settings and validator
    schemas returned here.
    """
    descriptions = [
        _describe(field_type_class())
        for field_type_class in get_field_type_loader().get_all_field_types().values()
    ]
    return sorted(descriptions, key=lambda description: (description.category, description.label))


@router.get("/{handle}/", response_model=FieldTypeRead)
def get_field_type(handle: str):
    """Get a field type by handle, 404 for unknown handles"""
    return _describe(get_field_type_loader().build(handle))
