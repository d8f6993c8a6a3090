"""
Request logging middleware

One structured event per request. Subject ids and vote values stay out of
the route field (they are logged by the vote route itself), so the route
groups cleanly in log aggregation.
"""

import hashlib
import time
from fastapi import Request

from config import get_logger
from server.middleware.metrics import _normalize_endpoint
from server.middleware.request_id import get_request_id

logger = get_logger(__name__)

# Prometheus scraping noise
_UNLOGGED_PATHS = {"/metrics"}


def _client_hash(request: Request) -> str:
    """Short, non-reversible client identifier"""
    host = request.client.host if request.client else "unknown"
    return hashlib.sha256(host.encode()).hexdigest()[:7]


async def log_requests(request: Request, call_next):
    """Log each request with route, status, latency and request ID"""
    if request.url.path in _UNLOGGED_PATHS:
        return await call_next(request)

    start_time = time.time()
    fields = {
        "method": request.method,
        "route": _normalize_endpoint(request.url.path),
        "client": _client_hash(request),
    }

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            "request failed",
            request_id=get_request_id(request),
            duration_ms=round((time.time() - start_time) * 1000, 2),
            error=str(e),
            **fields,
        )
        raise

    # The request ID middleware runs inside this one and has already
    # cleared its contextvars, so read the ID from request state
    log = logger.warning if response.status_code >= 400 else logger.info
    log(
        "request handled",
        request_id=get_request_id(request),
        status=response.status_code,
        duration_ms=round((time.time() - start_time) * 1000, 2),
        **fields,
    )
    return response
