import logging
from typing import Callable

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from flightwise.utils.log import get_logger

logger = get_logger(__name__)


def bounded_retry(
    max_attempts: int,
    backoff_unit: float,
    is_retryable: Callable[[BaseException], bool],
) -> Retrying:
    """
    Retry policy shared by every external call site.

    Sleeps attempt * backoff_unit between attempts and re-raises the last
    error once max_attempts is reached. Errors rejected by is_retryable
    propagate on the first attempt.
    """
    return Retrying(
        reraise=True,
        retry=retry_if_exception(is_retryable),
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_incrementing(start=backoff_unit, increment=backoff_unit),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
