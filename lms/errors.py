"""Exceptions raised by the LMS core."""

from typing import Optional


class LmsError(Exception):
    """Base exception for LMS core errors."""
    pass


class DecodeError(LmsError):
    """Raised when a course package cannot be read."""
    def __init__(self, message: str = "", filename: Optional[str] = None):
        self.filename = filename
        self.message = message or "Course package could not be decoded"
        super().__init__(self.message)


class MalformedPackage(DecodeError):
    """Raised when a decoded manifest lacks its organization or resources."""
    def __init__(self, missing: str, message: str = ""):
        self.missing = missing
        super().__init__(message or f"Manifest is missing its {missing} section")


class ValidationError(LmsError):
    """Raised when a record fails field validation.

    Roster rows carry the 1-based line number they were read from.
    """
    def __init__(self, message: str, row_number: Optional[int] = None):
        self.row_number = row_number
        self.message = message
        super().__init__(f"Row {row_number}: {message}" if row_number else message)


class RosterFormatError(ValidationError):
    """Raised when roster text does not start with the expected header."""
    pass


class AuthorizationError(LmsError):
    """Raised when the acting admin may not perform the requested call."""
    def __init__(self, actor_id: Optional[int] = None, message: str = ""):
        self.actor_id = actor_id
        self.message = message or "Not permitted for this actor"
        super().__init__(self.message)


class NotFoundError(LmsError):
    """Raised when a referenced record does not exist."""
    def __init__(self, entity: str, entity_id=None, message: str = ""):
        self.entity = entity
        self.entity_id = entity_id
        self.message = message or f"{entity} {entity_id} not found"
        super().__init__(self.message)
