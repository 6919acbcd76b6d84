import pytest
from unittest.mock import patch

from core.exceptions import NotFoundError
from field_types import ImageFieldType, TextLineFieldType
from field_types.base_field_type import field_type
from services.field_type_loader_service import FieldTypeLoader, get_field_type_loader


@pytest.mark.unit
class TestFieldTypeLoader:

    def test_builtin_field_types_are_loaded(self):
        loader = get_field_type_loader()

        assert loader.get_field_type("ezimage") is ImageFieldType
        assert loader.get_field_type("ezstring") is TextLineFieldType
        assert loader.field_type_exists("ezimage")
        assert not loader.field_type_exists("ezunknown")

    def test_loader_is_singleton(self):
        assert FieldTypeLoader() is get_field_type_loader()

    def test_build(self):
        field_type = get_field_type_loader().build("ezimage")

        assert isinstance(field_type, ImageFieldType)
        assert repr(field_type) == "<FieldType(handle='ezimage')>"

    def test_build_unknown_handle(self):
        with pytest.raises(NotFoundError) as exc_info:
            get_field_type_loader().build("ezunknown")

        assert exc_info.value.identifier == "ezunknown"

    def test_get_all_field_types_returns_copy(self):
        field_types = get_field_type_loader().get_all_field_types()
        field_types.pop("ezimage")

        assert get_field_type_loader().field_type_exists("ezimage")

    def test_load_from_packages(self):
        with patch.object(FieldTypeLoader, "_instance", None), \
                patch.object(FieldTypeLoader, "_field_types", {}), \
                patch.object(FieldTypeLoader, "_loaded", False):
            loader = FieldTypeLoader()
            loader.load_field_types(["field_types"])

            assert set(loader.get_all_field_types()) == {"ezimage", "ezstring"}

    def test_load_unknown_package(self):
        with patch.object(FieldTypeLoader, "_instance", None), \
                patch.object(FieldTypeLoader, "_field_types", {}), \
                patch.object(FieldTypeLoader, "_loaded", False):
            loader = FieldTypeLoader()

            with pytest.raises(ModuleNotFoundError):
                loader.load_field_types(["no_such_field_types"])

            assert loader._loaded is False

    def test_packages_from_settings(self):
        with patch.object(FieldTypeLoader, "_instance", None), \
                patch.object(FieldTypeLoader, "_field_types", {}), \
                patch.object(FieldTypeLoader, "_loaded", False), \
                patch("services.field_type_loader_service.settings") as mock_settings:
            mock_settings.FIELD_TYPE_PACKAGES = " field_types , "
            loader = FieldTypeLoader()
            loader.load_field_types()

            assert loader.field_type_exists("ezstring")

    def test_register_duplicate_handle(self):
        @field_type(handle="ezimage", label="Other image")
        class OtherImageFieldType(ImageFieldType):
            pass

        with patch.object(FieldTypeLoader, "_instance", None), \
                patch.object(FieldTypeLoader, "_field_types", {}), \
                patch.object(FieldTypeLoader, "_loaded", True):
            loader = FieldTypeLoader()
            loader.register(ImageFieldType)
            loader.register(ImageFieldType)

            with pytest.raises(ValueError):
                loader.register(OtherImageFieldType)

            assert loader.get_field_type("ezimage") is ImageFieldType
