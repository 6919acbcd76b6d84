import pytest

from core.exceptions import InvalidArgumentError
from field_types.text_line import TextLineFieldType, TextLineValue
from schemas.field_definition import ContentTypeFieldDefinition


def _definition(min_length=False, max_length=False) -> ContentTypeFieldDefinition:
    return ContentTypeFieldDefinition(
        identifier="name",
        field_type_identifier="ezstring",
        validator_configuration={
            "StringLengthValidator": {
                "minStringLength": min_length,
                "maxStringLength": max_length,
            },
        },
    )


@pytest.mark.unit
class TestTextLineFieldType:

    def setup_method(self):
        self.field_type = TextLineFieldType()

    @pytest.mark.parametrize("input_value,expected", [
        (None, TextLineValue()),
        ("Hello", TextLineValue(text="Hello")),
        ({"text": "Hello"}, TextLineValue(text="Hello")),
        (TextLineValue(text="Hello"), TextLineValue(text="Hello")),
    ])
    def test_accept_value(self, input_value, expected):
        assert self.field_type.accept_value(input_value) == expected

    @pytest.mark.parametrize("input_value", [1, 2.5, ["Hello"]])
    def test_accept_unsupported_value(self, input_value):
        with pytest.raises(InvalidArgumentError):
            self.field_type.accept_value(input_value)

    @pytest.mark.parametrize("value,expected", [
        (TextLineValue(), True),
        (TextLineValue(text=""), True),
        (TextLineValue(text="   "), True),
        (TextLineValue(text="a"), False),
    ])
    def test_is_empty_value(self, value, expected):
        assert self.field_type.is_empty_value(value) is expected

    @pytest.mark.parametrize("text,min_length,max_length,messages", [
        ("Hello", False, False, []),
        ("Hello", 5, 5, []),
        ("Hi", 3, False, ["The string can not be shorter than 3 characters"]),
        ("Hello world", False, 5, ["The string can not exceed 5 characters"]),
        ("", 3, False, []),
    ])
    def test_validate_value(self, text, min_length, max_length, messages):
        errors = self.field_type.validate_value(_definition(min_length, max_length), TextLineValue(text=text))

        assert [error.message for error in errors] == messages

    def test_hash(self):
        assert self.field_type.to_hash(TextLineValue(text="Hello")) == "Hello"
        assert self.field_type.to_hash(TextLineValue()) is None
        assert self.field_type.from_hash("Hello") == TextLineValue(text="Hello")
        assert self.field_type.from_hash(None) == TextLineValue()

    def test_validator_configuration(self):
        assert self.field_type.validate_validator_configuration(
            {"StringLengthValidator": {"minStringLength": 1, "maxStringLength": 255}}
        ) == []

        errors = self.field_type.validate_validator_configuration(
            {"StringLengthValidator": {"minStringLength": {}}}
        )
        assert len(errors) == 1
