# humidor/utils/retry.py
import logging

import redis
import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from humidor.utils.logging import get_logger

logger = get_logger(__name__)

# Never wrap payment charges with these: a retried charge can bill twice.


def _retry_on(predicate, attempts: int, multiplier: float, max_wait: float):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=multiplier, min=multiplier, max=max_wait),
        retry=predicate,
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def is_transient_http_error(exc: BaseException) -> bool:
    """Connection errors, timeouts and 5xx answers; a 4xx will fail the same way again."""
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError):
        return exc.response is not None and exc.response.status_code >= 500
    return False


def http_retry(attempts: int = 3):
    """Outbound HTTP calls that are safe to repeat (email delivery)."""
    return _retry_on(retry_if_exception(is_transient_http_error), attempts, multiplier=0.3, max_wait=3)


def redis_retry(attempts: int = 3):
    return _retry_on(retry_if_exception_type(redis.RedisError), attempts, multiplier=0.2, max_wait=2)
