"""Retry support for remote repository host calls."""
import functools
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Type

from glfast.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently a call is retried.

    Attributes:
        max_attempts: Total number of attempts including the first one
        delay: Seconds to wait before the second attempt
        backoff: Multiplier applied to the delay after every failure
        exceptions: Exception types that are candidates for a retry
        should_retry: Optional predicate narrowing ``exceptions`` further
    """

    max_attempts: int = 3
    delay: float = 1.0
    backoff: float = 2.0
    exceptions: Tuple[Type[BaseException], ...] = (Exception,)
    should_retry: Optional[Callable[[BaseException], bool]] = None

    def retries(self, exc: BaseException) -> bool:
        if not isinstance(exc, self.exceptions):
            return False
        return self.should_retry is None or self.should_retry(exc)


def retry(policy: RetryPolicy, sleep: Optional[Callable[[float], None]] = None):
    """Decorate a callable so transient failures are retried.

    Exceptions rejected by the policy propagate immediately; the last
    failure is re-raised once the attempts are exhausted.

    Example:
        @retry(RetryPolicy(max_attempts=3, exceptions=(requests.ConnectionError,)))
        def get_project_archive(self, project_path):
            ...
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            wait = policy.delay
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    if not policy.retries(exc) or attempt >= policy.max_attempts:
                        raise
                    logger.warning(
                        f"{func.__name__} failed (attempt {attempt}/{policy.max_attempts}): {exc}"
                    )
                    logger.info(f"Retrying in {wait:.1f}s...")
                    (sleep or time.sleep)(wait)
                    wait *= policy.backoff
                    attempt += 1

        return wrapper

    return decorator
