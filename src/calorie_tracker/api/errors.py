"""Mapping of domain errors to HTTP responses."""

from fastapi import HTTPException, status

from calorie_tracker.domain.errors import (
    AnalysisFailedError,
    AnalysisPendingError,
    GoalNotFoundError,
    InvalidInputError,
    SaveFailedError,
)


def to_http_error(exc: Exception) -> HTTPException:
    """Return the HTTP error for a domain exception."""
    if isinstance(exc, InvalidInputError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, GoalNotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found"
        )
    if isinstance(exc, AnalysisPendingError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, AnalysisFailedError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    if isinstance(exc, SaveFailedError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


DOMAIN_ERRORS = (
    InvalidInputError,
    GoalNotFoundError,
    AnalysisFailedError,
    SaveFailedError,
)
