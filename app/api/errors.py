"""
DomainError -> HTTPException translation shared by all routers.
"""

import logging

from fastapi import HTTPException

from app.domain.errors import DomainError, ErrorKind

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
}


def to_http_exception(exc: DomainError) -> HTTPException:
    status_code = _STATUS_BY_KIND.get(exc.kind)
    if status_code is None:
        logger.error("Unmapped domain error | %s | %s", exc.kind.value, exc.message)
        return HTTPException(status_code=500, detail="Internal server error")
    return HTTPException(status_code=status_code, detail=exc.to_dict())
