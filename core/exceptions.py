"""Domain exceptions raised by field types, storage and content services"""

from typing import Optional


class ContentRepositoryError(Exception):
    """Base class for all content repository errors"""


class InvalidArgumentError(ContentRepositoryError):
    """An argument could not be used, e.g. a source file that does not exist"""

    def __init__(self, argument: str, message: str):
        self.argument = argument
        super().__init__(f"Argument '{argument}' is invalid: {message}")


class ContentValidationError(ContentRepositoryError):
    """Content or content type data was rejected by validation"""

    def __init__(self, message: str, errors: Optional[list] = None):
        self.errors = errors or []
        super().__init__(message)


class ContentFieldValidationError(ContentValidationError):
    """
    One or more field values were rejected.

    `field_errors` maps field definition identifier -> language code -> list of
    ValidationError records.
    """

    def __init__(self, field_errors: dict):
        self.field_errors = field_errors
        errors = [
            error
            for by_language in field_errors.values()
            for language_errors in by_language.values()
            for error in language_errors
        ]
        identifiers = ", ".join(sorted(field_errors))
        super().__init__(f"Content fields did not validate: {identifiers}", errors)


class ContentTypeValidationError(ContentValidationError):
    """
    Field definitions were rejected, e.g. unknown settings or a validator
    configuration of the wrong type.

    `definition_errors` maps field definition identifier -> list of
    ValidationError records.
    """

    def __init__(self, definition_errors: dict):
        self.definition_errors = definition_errors
        errors = [error for errors in definition_errors.values() for error in errors]
        details = "; ".join(
            f"{identifier}: " + ", ".join(str(error) for error in errors)
            for identifier, errors in definition_errors.items()
        )
        super().__init__(f"Field definitions did not validate: {details}", errors)


class NotFoundError(ContentRepositoryError):
    def __init__(self, what: str, identifier):
        self.what = what
        self.identifier = identifier
        super().__init__(f"{what} '{identifier}' not found")


class BadStateError(ContentRepositoryError):
    """The requested operation is not allowed in the current state"""


class StorageError(ContentRepositoryError):
    """Raised by image storage implementations when an I/O operation fails"""

    def __init__(self, uri: Optional[str], message: str):
        self.uri = uri
        super().__init__(f"Storage error for '{uri}': {message}")
