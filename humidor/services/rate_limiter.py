import redis
from redis.exceptions import RedisError

from humidor.domain.errors import RateLimitExceededError
from humidor.utils.settings import (
    REDIS_URL,
    CHECKOUT_RATE_LIMIT,
    CHECKOUT_RATE_WINDOW_SECONDS,
)
from humidor.utils.logging import get_logger
from humidor.utils.retry import redis_retry

logger = get_logger(__name__)

# INCR and EXPIRE in one script: the first hit of a window sets the TTL,
# nothing can slip between the two calls
_HIT_LUA = """
local current = redis.call('INCR', KEYS[1])
if current == 1 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
end
return current
"""


class RateLimiter:
    """
    Fixed window request counter kept in Redis, shared by all instances.
    -hit() counts a request and tells whether it is still within the limit
    -enforce() raises RateLimitExceededError instead
    -Redis outage fails open (logged), checkout must not depend on it
    """

    def __init__(
        self,
        url: str | None = None,
        limit: int | None = None,
        window_seconds: int | None = None,
        prefix: str = "ratelimit:checkout",
        client: redis.Redis | None = None,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.limit = limit or CHECKOUT_RATE_LIMIT
        self.window_seconds = window_seconds or CHECKOUT_RATE_WINDOW_SECONDS
        self.prefix = prefix

    def _key(self, identity: str) -> str:
        return f"{self.prefix}:{identity}"

    @redis_retry()
    def _incr(self, key: str) -> int:
        return int(self.redis.eval(_HIT_LUA, 1, key, self.window_seconds))

    def hit(self, identity: str) -> bool:
        key = self._key(identity)
        try:
            count = self._incr(key)
        except RedisError as e:
            logger.warning(f"Rate limiter unavailable, allowing request for {key}: {e}")
            return True

        if count > self.limit:
            logger.info(f"Rate limit exceeded for {key}: {count}/{self.limit}")
            return False
        return True

    def enforce(self, identity: str) -> None:
        if not self.hit(identity):
            raise RateLimitExceededError(
                "Too many checkout attempts. Please wait a moment and try again.",
                retry_after=self.window_seconds,
            )
