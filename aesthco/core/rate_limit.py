"""IP bazlı rate limiting (SlowAPI); proxy (X-Forwarded-For) destekli."""
from fastapi import Request
from slowapi import Limiter

from .config import settings


def client_ip(request: Request) -> str:
    """Proxy arkasında gerçek istemci IP (nginx)."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


limiter = Limiter(key_func=client_ip)


# Limit değerleri her istekte settings'ten okunur
def default_limit() -> str:
    return f"{settings.rate_limit_per_minute}/minute"


def checkout_limit() -> str:
    return f"{settings.rate_limit_checkout_per_minute}/minute"
