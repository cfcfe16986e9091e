# marketplace/core/retry.py
"""
Bounded retry for idempotent reads.

Only read paths are wrapped. Status mutations are never retried: a failed
write surfaces to the caller as an upstream error.

A failed statement leaves the session's transaction unusable, so the session
is rolled back before the next attempt. Inside a unit of work that rollback
would discard the writes already flushed, so reads there fail fast instead.
"""
import logging

from sqlalchemy.exc import OperationalError
from tenacity import (
    before_sleep_log,
    retry,
    stop_after_attempt,
    wait_exponential,
)

from marketplace.core.config import settings
from marketplace.db.session import in_unit_of_work

logger = logging.getLogger(__name__)

_log_before_sleep = before_sleep_log(logger, logging.WARNING)


def _session(retry_state):
    if retry_state.args:
        return retry_state.args[0]
    return retry_state.kwargs["db"]


def _retryable(retry_state) -> bool:
    outcome = retry_state.outcome
    if not outcome.failed or not isinstance(outcome.exception(), OperationalError):
        return False
    return not in_unit_of_work(_session(retry_state))


def _rollback_before_sleep(retry_state) -> None:
    _session(retry_state).rollback()
    _log_before_sleep(retry_state)


retry_read = retry(
    stop=stop_after_attempt(settings.READ_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
    retry=_retryable,
    before_sleep=_rollback_before_sleep,
    reraise=True,
)
