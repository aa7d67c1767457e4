from __future__ import annotations

import logging

from core.elections_services import ensure_atomic_commit_supported as _ensure_storage_transactions

logger = logging.getLogger(__name__)

_storage_checked: bool = False


def ensure_atomic_commit_supported() -> None:
    """Refuse to serve votes from a database without multi-record transactions.

    This is intended to run once at web process startup (WSGI init). Vote
    submission would otherwise be able to leave a spent token without a vote,
    which no request-level error can repair.
    """

    global _storage_checked
    if _storage_checked:
        return

    _ensure_storage_transactions()
    logger.info("Startup: database supports atomic multi-record commits")

    _storage_checked = True
