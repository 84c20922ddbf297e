"""
Translate PostgREST / storage errors into HTTP errors.
"""

from fastapi import HTTPException
from postgrest.exceptions import APIError
from typing import NoReturn, Optional
import logging

logger = logging.getLogger(__name__)

# PostgREST / Postgres error codes
NO_ROWS = "PGRST116"
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def is_not_found(exc: Exception) -> bool:
    return isinstance(exc, APIError) and exc.code == NO_ROWS


def raise_for_postgrest(
    exc: Exception,
    action: str,
    not_found: Optional[str] = None,
    conflict: Optional[str] = None,
) -> NoReturn:
    """Re-raise ``exc`` as an HTTPException.

    ``action`` prefixes the 500 message ("Failed to <action>: ..."). ``not_found``
    and ``conflict`` override the detail for missing rows and unique violations.
    """
    if isinstance(exc, HTTPException):
        raise exc
    if isinstance(exc, APIError):
        if exc.code == NO_ROWS:
            raise HTTPException(status_code=404, detail=not_found or "Not found")
        if exc.code == UNIQUE_VIOLATION:
            raise HTTPException(status_code=409, detail=conflict or "Record already exists")
        if exc.code == FOREIGN_KEY_VIOLATION:
            raise HTTPException(status_code=400, detail=exc.message or "Invalid reference")
        message = exc.message or str(exc)
    else:
        message = str(exc)
    logger.error("Failed to %s: %s", action, message)
    raise HTTPException(status_code=500, detail=f"Failed to {action}: {message}")
