"""
core.domain.transactions — Helpers for safe state changes.

Wraps ``transaction.atomic`` and ``select_for_update`` into reusable
patterns so that every service follows the same approach: lock the row,
validate against the locked copy, write, and let any database failure
roll the whole block back.

Usage::

    from core.domain.transactions import lock_for_update, run_in_atomic

    with transaction.atomic():
        report = lock_for_update(NoiseReport, report_id)
        ...
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from django.db import DatabaseError, models, transaction

from core.domain.exceptions import NotFound, StorageError

T = TypeVar("T")
M = TypeVar("M", bound=models.Model)


def run_in_atomic(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Execute ``fn(*args, **kwargs)`` inside ``transaction.atomic()``.

    ``DatabaseError`` raised anywhere inside the block is re-raised as
    ``StorageError`` after the rollback; domain exceptions propagate
    unchanged.

    Returns:
        Whatever ``fn`` returns.
    """
    try:
        with transaction.atomic():
            return fn(*args, **kwargs)
    except DatabaseError as exc:
        raise StorageError() from exc


def lock_for_update(model_class: type[M], pk: Any, message: str = "") -> M:
    """
    Acquire a row-level lock on the given model instance.

    Must be called inside an ``atomic()`` block.

    Raises:
        NotFound: If no row with that PK exists (``message`` overrides
            the default text).
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except (model_class.DoesNotExist, ValueError, TypeError):
        raise NotFound(message or f"{model_class._meta.verbose_name.title()} not found.")
