from typing import Any


# ─── Helper Functions ─────────────────────────────────────────────────────────
def success_response(message: str, data: Any = None, **extra: Any) -> dict:
    """
    Return a standardized success dict (used in route handlers).
    `extra` keys sit beside `data` (e.g. `needsProfileCompletion`).
    """
    body = {"success": True, "message": message, "data": data}
    body.update(extra)
    return body


def paginated_response(
    message: str,
    data: list,
    total: int,
    page: int,
    limit: int,
) -> dict:
    """Return a standardized paginated dict."""
    total_pages = (total + limit - 1) // limit if limit > 0 else 0
    return {
        "success": True,
        "message": message,
        "data": data,
        "meta": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages,
            "hasNext": page < total_pages,
            "hasPrev": page > 1,
        }
    }


def iso(value) -> str | None:
    """Serialize a date/datetime column, tolerating NULL."""
    return value.isoformat() if value is not None else None
