# humidor/api/deps.py
from functools import lru_cache

from fastapi import Depends, HTTPException, Query

from humidor.domain.errors import RateLimitExceededError
from humidor.services.notification_service import NotificationService
from humidor.services.payment_gateway import PaymentGateway
from humidor.services.rate_limiter import RateLimiter
from humidor.utils.settings import RATE_LIMIT_ENABLED


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway()


def get_notifier() -> NotificationService:
    return NotificationService()


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter | None:
    if not RATE_LIMIT_ENABLED:
        return None
    return RateLimiter()


def checkout_rate_limit(
    user_id: int = Query(...),
    limiter: RateLimiter | None = Depends(get_rate_limiter),
):
    if limiter is None:
        return
    try:
        limiter.enforce(f"user:{user_id}")
    except RateLimitExceededError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=e.to_detail(),
            headers={"Retry-After": str(limiter.window_seconds)},
        )
