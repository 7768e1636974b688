"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF handler turning those exceptions into responses.
transactions       Helpers for ``transaction.atomic`` + ``select_for_update``.
access             Administrator / ownership guards.

Usage from any app::

    from core.domain.exceptions import DomainError, InvalidTransition
    from core.domain.transactions import lock_for_update
    from core.domain.access import require_admin
"""
