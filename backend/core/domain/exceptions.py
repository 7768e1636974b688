"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  ``core.domain.exception_handler`` maps them to HTTP
responses.

Mapping cheatsheet
------------------
┌────────────────────────┬──────┐
│ Domain Exception       │ Code │
├────────────────────────┼──────┤
│ DomainError            │ 400  │
│ InvalidTransition      │ 400  │
│ AuthenticationFailed   │ 400  │
│ PermissionDenied       │ 403  │
│ NotFound               │ 404  │
│ Conflict               │ 409  │
│ StorageError           │ 500  │
└────────────────────────┴──────┘

Recommended usage inside a service::

    from core.domain.exceptions import InvalidTransition

    if target not in allowed:
        raise InvalidTransition(current=report.status, target=target)
"""

from __future__ import annotations


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Caught at the view boundary and converted to a 400 Bad Request.
    """

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class PermissionDenied(DomainError):
    """
    The caller is not allowed to perform this operation (not an
    administrator, not the owner, or email not yet verified).

    Maps to HTTP 403.
    """

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class AuthenticationFailed(DomainError):
    """
    Credentials did not match an account.  Maps to HTTP 400 to keep the
    response shape the login page expects.
    """

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested resource does not exist.

    Maps to HTTP 404.
    """

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of stored data.

    Typical usage: registering an email that is already taken.
    Maps to HTTP 409.
    """

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class InvalidTransition(DomainError):
    """
    A report status that the escalation policy does not currently allow.

    This is a validation failure of the requested target, so it maps to
    HTTP 400 like any other ``DomainError``.

    Example::

        raise InvalidTransition(
            current="monitoring",
            target="action_required",
            reason="Allowed: monitoring, resolved, pending",
        )
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid status transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            elif target:
                parts.append(f"to '{target}'")
            if reason:
                parts.append(f"- {reason}")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason


class StorageError(DomainError):
    """
    A persistence or media-storage write failed.  The operation has not
    been applied.  Maps to HTTP 500 with a generic message; the cause is
    only logged.
    """

    def __init__(self, message: str = "A storage error occurred. Please try again later.") -> None:
        super().__init__(message)
