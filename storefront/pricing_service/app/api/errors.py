"""Translate pricing engine failures into HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException, status

from ..errors import Conflict, EmptyCategory, InvalidPercent, NoActiveRules, PricingError, RepositoryUnavailable

_STATUS_BY_ERROR: dict[type[PricingError], int] = {
    EmptyCategory: status.HTTP_404_NOT_FOUND,
    NoActiveRules: status.HTTP_409_CONFLICT,
    Conflict: status.HTTP_409_CONFLICT,
    InvalidPercent: 422,
    RepositoryUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(exc: PricingError) -> HTTPException:
    status_code = next(
        (code for error_type, code in _STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return HTTPException(
        status_code=status_code,
        detail={"message": exc.message, "updatedCount": exc.updated_count},
    )
