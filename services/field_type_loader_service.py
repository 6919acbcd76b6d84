"""Field Type Loader Service - registry of the field types content can be built from"""

from typing import Dict, Optional, Type
import importlib
import inspect

from core.exceptions import NotFoundError
from core.logging_config import get_logger
from core.settings import settings
from field_types.base_field_type import FieldType

logger = get_logger(__name__)


def _is_field_type(candidate) -> bool:
    """A concrete FieldType subclass registered through @field_type"""
    return (
        inspect.isclass(candidate)
        and issubclass(candidate, FieldType)
        and candidate is not FieldType
        and not inspect.isabstract(candidate)
        and hasattr(candidate, "handle")
    )


class FieldTypeLoader:
    """
    Registry of field types by handle.

    Field type packages (FIELD_TYPE_PACKAGES, comma separated) are imported
    on first use; every exported @field_type class gets registered. A handle
    can only be registered once.
    """
    _instance: Optional['FieldTypeLoader'] = None
    _field_types: Dict[str, Type[FieldType]] = {}
    _loaded: bool = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load_field_types(self, packages: Optional[list[str]] = None) -> None:
        if self._loaded:
            return

        if packages is None:
            packages = [package.strip() for package in settings.FIELD_TYPE_PACKAGES.split(",") if package.strip()]

        for package in packages:
            try:
                module = importlib.import_module(package)
            except ImportError as e:
                logger.error_ctx("Field type package could not be imported", package=package, error=str(e))
                raise

            for _, field_type_class in inspect.getmembers(module, _is_field_type):
                self.register(field_type_class)

        self._loaded = True
        logger.info_ctx("Loaded field types", handles=sorted(self._field_types), packages=packages)

    def register(self, field_type_class: Type[FieldType]) -> None:
        handle = field_type_class.handle
        registered = self._field_types.get(handle)
        if registered is not None and registered is not field_type_class:
            raise ValueError(
                f"Field type handle '{handle}' is already registered by {registered.__module__}.{registered.__name__}"
            )

        self._field_types[handle] = field_type_class
        logger.debug_ctx("Registered field type", handle=handle, label=getattr(field_type_class, "label", None))

    def get_field_type(self, handle: str) -> Optional[Type[FieldType]]:
        """Field type class registered under handle, None when unknown"""
        self.load_field_types()
        return self._field_types.get(handle)

    def get_all_field_types(self) -> Dict[str, Type[FieldType]]:
        self.load_field_types()
        return self._field_types.copy()

    def field_type_exists(self, handle: str) -> bool:
        return self.get_field_type(handle) is not None

    def build(self, handle: str) -> FieldType:
        """Instance of the field type registered under handle"""
        field_type_class = self.get_field_type(handle)
        if field_type_class is None:
            raise NotFoundError("Field type", handle)
        return field_type_class()


_field_type_loader: Optional[FieldTypeLoader] = None


def get_field_type_loader() -> FieldTypeLoader:
    """Shared loader with the configured field type packages loaded"""
    global _field_type_loader
    if _field_type_loader is None:
        _field_type_loader = FieldTypeLoader()
        _field_type_loader.load_field_types()
    return _field_type_loader
