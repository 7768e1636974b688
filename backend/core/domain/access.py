"""
core.domain.access — Administrator and ownership guards.

NoiseWatch has two account types (``admin`` and ``user``).  Views use
the DRF permission class ``IsAdministrator`` for whole endpoints; service
code calls ``require_admin`` / ``require_self_or_admin`` when the rule
depends on the target object.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rest_framework.permissions import BasePermission

from core.domain.exceptions import PermissionDenied

if TYPE_CHECKING:
    from accounts.models import User


def is_admin(user: Any) -> bool:
    """Return True for authenticated administrators (or Django superusers)."""
    if user is None or not getattr(user, "is_authenticated", False):
        return False
    return bool(user.is_superuser or getattr(user, "user_type", None) == "admin")


def require_admin(user: User, message: str = "") -> None:
    """
    Raise ``PermissionDenied`` unless ``user`` is an administrator.
    """
    if not is_admin(user):
        raise PermissionDenied(message or "Administrator access required.")


def require_self_or_admin(user: User, target_id: Any, message: str = "") -> None:
    """
    Raise ``PermissionDenied`` unless ``user`` is the target account or an
    administrator.
    """
    if is_admin(user):
        return
    if getattr(user, "is_authenticated", False) and str(user.pk) == str(target_id):
        return
    raise PermissionDenied(message or "You can only modify your own account.")


class IsAdministrator(BasePermission):
    """DRF permission: authenticated caller with ``user_type == 'admin'``."""

    message = "Administrator access required."

    def has_permission(self, request, view) -> bool:
        return is_admin(request.user)
