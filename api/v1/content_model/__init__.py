"""Content model API routes"""

from fastapi import APIRouter
from . import field_types, roles

router = APIRouter()

router.include_router(field_types.router, prefix="/field-types", tags=["Field Types"])
router.include_router(roles.router, prefix="/roles", tags=["Roles"])
