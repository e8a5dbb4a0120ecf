from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from configs.settings import get_settings


def rate_limit_key(request: Request) -> str:
    """Resolve the client address, trusting forwarded headers only from proxies."""

    client_host = request.client.host if request.client else None

    if client_host and client_host in get_settings().TRUSTED_PROXIES:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()

    return client_host or get_remote_address(request)


limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=get_settings().RATE_LIMITER_DEFAULT_LIMITS,
)
