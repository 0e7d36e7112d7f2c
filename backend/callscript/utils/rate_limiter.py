# /callscript/utils/rate_limiter.py

from fastapi import Request
from slowapi import Limiter
from callscript.config.settings import settings

# Single limiter instance shared by the app and the route modules.


def rate_limit_key(request: Request) -> str:
    """
    Operators share NAT'd call-center addresses, so operator routes are
    limited per operator id and everything else per client IP.
    """
    operator_id = request.path_params.get("operator_id")
    if operator_id:
        return f"operator:{operator_id}"
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    enabled=settings.environment != "test",
)
