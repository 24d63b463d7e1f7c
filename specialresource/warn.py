"""Logging of errors that are reported but not fatal."""

from __future__ import annotations

import logging

_log = logging.getLogger(__name__)


def on_error(err: BaseException | None) -> bool:
    """Log ``err`` as a warning if there is one; return whether anything was logged."""
    if err is None:
        return False
    _log.warning("OnError: %s", err)
    return True


def on_error_or_not_found(found: bool, err: BaseException | None) -> bool:
    """Log a warning when a lookup failed or found nothing; return whether anything was logged."""
    if found and err is None:
        return False
    reason = str(err) if err is not None else "not found"
    _log.warning("OnErrorOrNotFound: %s", reason)
    return True