"""Bounded retry loop for optimistic-concurrency conflicts"""

import logging
import time
from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from atm_core.config import settings
from atm_core.domain.exceptions import ConcurrencyConflictError, StoreUnavailableError, VersionConflictError
from atm_core.infrastructure.observability.metrics import retry_exhausted_counter, version_conflict_counter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Fixed attempt budget with a linear backoff between attempts"""

    def __init__(self, max_attempts: int | None = None, backoff_seconds: float | None = None):
        self.max_attempts = max_attempts if max_attempts is not None else settings.retry_max_attempts
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.retry_backoff_seconds

    def delay(self, attempt: int) -> float:
        """Delay after the given failed attempt (1-based): 1x, 2x, 3x the base step"""
        return self.backoff_seconds * attempt


def run_with_retry(db: Session, operation: Callable[[], T], name: str, policy: RetryPolicy | None = None) -> T:
    """
    Run operation as one unit of work, re-running it whole on version conflicts.

    The operation must read every piece of state it validates from the
    session on each call and must not commit; commit happens here once it
    returns. A conflict rolls back the session so the next attempt starts
    from a fresh read. Any other exception rolls back and propagates as is.

    Raises:
        ConcurrencyConflictError: every attempt hit a version conflict
        StoreUnavailableError: the database failed for any other reason
    """
    policy = policy or RetryPolicy()
    attempt = 0
    while True:
        attempt += 1
        try:
            result = operation()
            db.commit()
            return result

        except VersionConflictError as e:
            db.rollback()
            version_conflict_counter.labels(operation=name).inc()

            if attempt >= policy.max_attempts:
                retry_exhausted_counter.labels(operation=name).inc()
                logger.error(
                    "Optimistic lock conflicts exhausted retries",
                    extra={"operation": name, "attempt": attempt},
                )
                raise ConcurrencyConflictError(
                    f"{name} could not complete after {attempt} attempts due to concurrent updates"
                ) from e

            backoff = policy.delay(attempt)
            logger.warning(
                "Optimistic lock conflict - will retry",
                extra={"operation": name, "attempt": attempt, "backoff_seconds": backoff},
            )
            time.sleep(backoff)

        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Database error", extra={"operation": name, "attempt": attempt}, exc_info=True)
            raise StoreUnavailableError(f"{name} failed due to database error") from e

        except Exception:
            db.rollback()
            raise
