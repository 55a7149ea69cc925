"""
Domain errors raised by the service layer.

Routes translate these into HTTP responses: ValidationError -> 422,
AuthorizationError -> 403, NotFoundError -> 404.
"""

from typing import Dict, List, Optional


class ValidationError(ValueError):
    """Field-level validation failure carrying per-field messages."""

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        super().__init__("; ".join(self.full_messages))

    @property
    def full_messages(self) -> List[str]:
        """Messages prefixed with the humanized field name, e.g. "Name can't be blank"."""
        return [
            message if field == "base" else f"{humanize(field)} {message}"
            for field, messages in self.errors.items()
            for message in messages
        ]


class AuthorizationError(Exception):
    """The actor is not allowed to perform the operation."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(LookupError):
    """A referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: Optional[int] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


def humanize(field: str) -> str:
    """Turn an attribute name into a label: "password_confirmation" -> "Password confirmation"."""
    return field.replace("_", " ").capitalize()


class ErrorCollector:
    """Accumulates field errors and raises them together."""

    def __init__(self):
        self.errors: Dict[str, List[str]] = {}

    def add(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def __bool__(self) -> bool:
        return bool(self.errors)

    def raise_if_any(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)
