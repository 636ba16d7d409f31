"""
Domain error taxonomy.

Every service operation either returns a value or raises exactly one of
these. The API layer maps them onto HTTP responses; nothing below the API
knows about status codes beyond the ``status_code`` hint carried here.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for errors surfaced to callers."""

    kind: str = "domain_error"
    status_code: int = 400

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"detail": self.message, "kind": self.kind}


class ValidationError(DomainError):
    """A required field is missing or malformed."""

    kind = "validation_error"
    status_code = 400


class AuthError(DomainError):
    """Bad credentials or a registration conflict."""

    kind = "auth_error"
    status_code = 401


class EmailAlreadyRegisteredError(AuthError):
    status_code = 400

    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email


class PermissionDeniedError(DomainError):
    """A capability check failed."""

    kind = "permission_denied"
    status_code = 403


class NotFoundError(DomainError):
    """A referenced id does not exist (or is not visible to the caller)."""

    kind = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(DomainError):
    """Duplicate record or an operation the target's state forbids."""

    kind = "conflict"
    status_code = 409


class MailDeliveryError(DomainError):
    """The mail transport rejected or could not deliver a message."""

    kind = "mail_delivery_error"
    status_code = 502
