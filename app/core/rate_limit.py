"""Per-IP rate limiting (SlowAPI) for the engine endpoints; proxy (X-Forwarded-For) aware."""
from fastapi import Request

from slowapi import Limiter

from .config import settings

DEFAULT_LIMIT = f"{settings.rate_limit_per_minute}/minute"
# Coupon lookup is the only endpoint that reveals whether a secret code exists
COUPON_LIMIT = f"{settings.rate_limit_coupon_per_minute}/minute"


def client_ip(request: Request) -> str:
    """Real client IP behind a proxy (first X-Forwarded-For hop)."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


limiter = Limiter(key_func=client_ip, default_limits=[DEFAULT_LIMIT])
