"""Field Type Registry schemas"""

from pydantic import BaseModel
from typing import Optional


class FieldTypeRead(BaseModel):
    """Schema for reading field types from runtime loader"""
    handle: str
    label: str
    category: str = "general"
    icon: Optional[str] = None
    settings_schema: dict = {}
    validator_schema: dict = {}
    version: Optional[str] = None
