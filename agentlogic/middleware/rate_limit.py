import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from agentlogic.core.config import DEFAULT_RATE_LIMIT
from agentlogic.core.prometheus_metrics import prometheus_collector

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[DEFAULT_RATE_LIMIT]  # Global default
    # storage_uri="redis://localhost:6379", # shared storage once more than one worker runs
)

RETRY_AFTER_SECONDS = 60


def custom_rate_limit_exceeded(request: Request, exc: RateLimitExceeded):
    prometheus_collector.record_rate_limit_exceeded(endpoint=request.url.path)
    logger.warning(
        "Rate limit reached",
        extra={"path": request.url.path, "client": get_remote_address(request), "limit": str(exc.detail)},
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "Too many requests. Please try again later.",
            "retry_after": RETRY_AFTER_SECONDS,
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )
