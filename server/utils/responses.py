"""Standardized API response helpers.

Ensures consistent response structure across all endpoints.
All successful responses include {"success": True, ...}
"""


def success_response(data: dict, **extras) -> dict:
    """Standard success response wrapper.

    Usage:
        return success_response(receipt.to_dict())

    Returns:
        {"success": True, **data, **extras}
    """
    return {"success": True, **data, **extras}


def error_response(message: str, **extras) -> dict:
    """Standard error response wrapper.

    Usage:
        return JSONResponse(status_code=400, content=error_response(exc.message, field=exc.field))

    Returns:
        {"success": False, "message": message, **extras}
    """
    return {"success": False, "message": message, **extras}
