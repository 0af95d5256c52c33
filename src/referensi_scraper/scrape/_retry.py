import logging
from collections.abc import Callable
from typing import Any

import httpx
from tenacity import RetryCallState, retry, retry_if_exception, stop_after_attempt, wait_exponential_jitter

logger = logging.getLogger(__name__)

_TOO_MANY_REQUESTS = 429


def is_transient(exc: BaseException) -> bool:
    """True for failures worth another attempt: network errors, 5xx and 429.

    Other 4xx responses (a removed NPSN page answers 404) will not change on retry.
    """
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status == _TOO_MANY_REQUESTS
    return False


def default_http_retry(label: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Return a tenacity retry decorator for upstream page fetches.

    Up to three attempts in total for transient failures, logging
    ``"Retrying <label> (attempt N): <outcome>"`` before each wait. The final
    exception is re-raised unchanged.
    """

    def _log_retry(retry_state: RetryCallState) -> None:
        logger.warning("Retrying %s (attempt %d): %s", label, retry_state.attempt_number, retry_state.outcome)

    return retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential_jitter(initial=1, max=10),
        retry=retry_if_exception(is_transient),
        before_sleep=_log_retry,
        reraise=True,
    )
