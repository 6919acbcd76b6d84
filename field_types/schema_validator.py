"""
Schema validation for field settings and validator configuration.

Schemas map a setting name to a descriptor, and validators to a mapping of
option descriptors:

    settings schema:  {"defaultLayout": {"type": "string", "default": ""}}
    validator schema: {"FileSizeValidator": {"maxFileSize": {"type": "int", "default": False}}}

Both validators return a list of ValidationError records; an empty list means
the data was accepted.
"""

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ValidationError(BaseModel):
    """A single validation failure"""
    model_config = ConfigDict(frozen=True)

    message: str
    # Setting, validator or value attribute the message is about
    target: Optional[str] = None

    def __str__(self):
        return self.message


def _matches_type(value: Any, type_name: Optional[str]) -> bool:
    if type_name in ("int", "integer"):
        return isinstance(value, int) and not isinstance(value, bool)
    if type_name == "float":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if type_name == "string":
        return isinstance(value, str)
    if type_name in ("bool", "boolean"):
        return isinstance(value, bool)
    if type_name == "array":
        return isinstance(value, (list, tuple))
    if type_name == "hash":
        return isinstance(value, Mapping)
    return False


def _accepts(value: Any, descriptor: Mapping) -> bool:
    """None and the declared default (e.g. False for "disabled") are always accepted"""
    if value is None:
        return True
    default = descriptor.get("default")
    if default is not None and type(value) is type(default) and value == default:
        return True
    return _matches_type(value, descriptor.get("type"))


def validate_field_settings(field_settings: Any, settings_schema: Mapping) -> list[ValidationError]:
    """Reject unknown setting names and values of the wrong type"""
    if field_settings is None:
        return []
    if not isinstance(field_settings, Mapping):
        return [ValidationError(
            message=f"Field settings must be a mapping, got {type(field_settings).__name__}",
            target="fieldSettings",
        )]

    errors = []
    for name, value in field_settings.items():
        descriptor = settings_schema.get(name)
        if descriptor is None:
            errors.append(ValidationError(message=f"Setting '{name}' is unknown", target=name))
        elif not _accepts(value, descriptor):
            errors.append(ValidationError(
                message=f"Setting '{name}' value must be of {descriptor.get('type')} type",
                target=name,
            ))
    return errors


def validate_validator_configuration(
    validator_configuration: Any,
    validator_schema: Mapping,
) -> list[ValidationError]:
    """Reject unknown validators, unknown options and option values of the wrong type"""
    if validator_configuration is None:
        return []
    if not isinstance(validator_configuration, Mapping):
        return [ValidationError(
            message=f"Validator configuration must be a mapping, got {type(validator_configuration).__name__}",
            target="validatorConfiguration",
        )]

    errors = []
    for validator_name, options in validator_configuration.items():
        option_schema = validator_schema.get(validator_name)
        if option_schema is None:
            errors.append(ValidationError(
                message=f"Validator '{validator_name}' is unknown",
                target=validator_name,
            ))
            continue

        if options is None:
            continue
        if not isinstance(options, Mapping):
            errors.append(ValidationError(
                message=f"Options of validator '{validator_name}' must be a mapping",
                target=validator_name,
            ))
            continue

        for option_name, value in options.items():
            descriptor = option_schema.get(option_name)
            if descriptor is None:
                errors.append(ValidationError(
                    message=f"Validator parameter '{option_name}' of '{validator_name}' is unknown",
                    target=f"{validator_name}.{option_name}",
                ))
            elif not _accepts(value, descriptor):
                errors.append(ValidationError(
                    message=(
                        f"Validator parameter '{option_name}' of '{validator_name}' "
                        f"value must be of {descriptor.get('type')} type"
                    ),
                    target=f"{validator_name}.{option_name}",
                ))
    return errors
