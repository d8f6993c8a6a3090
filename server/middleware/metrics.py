"""
Prometheus metrics middleware for API requests

Instruments all API requests with:
- Request count (by endpoint, method, status_code)
- Request duration (by endpoint, method)

Usage:
    from server.middleware.metrics import metrics_middleware
    app.middleware("http")(metrics_middleware)
"""

import time
from fastapi import Request

from server.metrics import metrics


async def metrics_middleware(request: Request, call_next):
    """Record Prometheus metrics for all API requests"""
    start_time = time.time()

    endpoint = _normalize_endpoint(request.url.path)
    method = request.method

    try:
        response = await call_next(request)
        duration = time.time() - start_time

        metrics.api_requests.labels(
            endpoint=endpoint,
            method=method,
            status_code=response.status_code
        ).inc()

        metrics.api_request_duration.labels(
            endpoint=endpoint,
            method=method
        ).observe(duration)

        return response

    except Exception:
        duration = time.time() - start_time

        # Record error as 500
        metrics.api_requests.labels(
            endpoint=endpoint,
            method=method,
            status_code=500
        ).inc()

        metrics.api_request_duration.labels(
            endpoint=endpoint,
            method=method
        ).observe(duration)

        raise


def _normalize_endpoint(path: str) -> str:
    """Normalize endpoint path for metrics cardinality control

    Subject ids and vote values are caller-chosen, so they are collapsed:
        /votar/p1/yes -> /votar/:id/:vote
        /query/p1     -> /query/:id

    Args:
        path: Raw URL path

    Returns:
        Normalized path with caller-chosen segments replaced
    """
    parts = [part for part in path.split('/') if part]

    if parts and parts[0] == 'votar':
        placeholders = [':id', ':vote']
        parts = ['votar'] + [
            placeholders[i] if i < len(placeholders) else ':extra'
            for i in range(len(parts) - 1)
        ]
    elif len(parts) > 1 and parts[0] == 'query':
        parts = ['query', ':id']

    return '/' + '/'.join(parts)
