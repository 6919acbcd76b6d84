"""Built-in field types, registered through the @field_type decorator"""

from field_types.image import ImageFieldType, ImageValue
from field_types.text_line import TextLineFieldType, TextLineValue

__all__ = [
    "ImageFieldType",
    "ImageValue",
    "TextLineFieldType",
    "TextLineValue",
]
