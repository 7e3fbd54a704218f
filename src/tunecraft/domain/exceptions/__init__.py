"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, message is stored as an attribute so callers can inspect it without
    # parsing str(exception). Never raise this directly - raise a specific subclass.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity does not exist or is soft-deleted."""

    # A soft-deleted user/track/playlist is reported exactly like a missing one.
    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityException(DomainException):
    """Raised when trying to create a duplicate entity."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class PreconditionFailedException(DomainException):
    """A precondition of the requested operation does not hold.

    Distinct from EntityNotFoundException: the entity exists, it just cannot
    take part in the operation. A request layer may still map both to 404.
    """

    pass


class NotAnArtistException(PreconditionFailedException):
    """Raised when an artist-only operation targets a user without the ARTIST role."""

    def __init__(self, user_id: Any, role: Any) -> None:
        super().__init__(f"User {user_id} is not an artist (role: {role})")
        self.user_id = user_id
        self.role = role


class BusinessRuleViolation(DomainException):
    """A business rule was violated.

    Example:
        raise BusinessRuleViolation("Cannot modify system-generated playlists")
    """

    pass


class ValidationError(DomainException):
    """Input validation failed.

    Example:
        raise ValidationError("Invalid UserId: not-a-uuid")
    """

    pass


class AuthorizationError(DomainException):
    """User is known but not allowed to perform this action.

    Example:
        raise AuthorizationError("You can only modify your own playlists")
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Example:
        raise ConfigurationError("Unable to create SQLite database directory")
    """

    pass


__all__ = [
    "DomainException",
    "EntityNotFoundException",
    "DuplicateEntityException",
    "PreconditionFailedException",
    "NotAnArtistException",
    "BusinessRuleViolation",
    "ValidationError",
    "AuthorizationError",
    "ConfigurationError",
]
