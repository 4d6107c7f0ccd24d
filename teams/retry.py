# teams/retry.py
import functools
import logging
import time

from django.conf import settings
from django.db import OperationalError, connection

from .exceptions import TransientConflict

logger = logging.getLogger('teamforge.teams')


def _retry_settings():
    config = getattr(settings, "TEAM_FORMATION", {})
    return (
        max(1, int(config.get("TRANSIENT_RETRY_LIMIT", 3))),
        float(config.get("RETRY_BACKOFF_SECONDS", 0.05)),
    )


def retry_on_conflict(func):
    """
    Re-run a whole transactional operation when the database reports a
    transient conflict (lock timeout, serialization failure, deadlock).

    Business errors pass straight through. Once the attempts are used up the
    caller gets TransientConflict. Inside an outer atomic block the failed
    transaction cannot be replayed, so the conflict is surfaced immediately.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        attempts, backoff = _retry_settings()

        for attempt in range(1, attempts + 1):
            try:
                return func(*args, **kwargs)
            except OperationalError as e:
                if connection.in_atomic_block:
                    logger.warning(f"Transient conflict in {func.__name__} inside outer transaction: {e}")
                    raise TransientConflict() from e

                if attempt == attempts:
                    logger.warning(f"Transient conflict in {func.__name__}: giving up after {attempts} attempts: {e}")
                    raise TransientConflict() from e

                logger.warning(f"Transient conflict in {func.__name__} (attempt {attempt}/{attempts}), retrying: {e}")
                time.sleep(backoff * attempt)

    return wrapper
