"""Translate domain errors into HTTP responses."""

from fastapi import HTTPException, status

from staydesk.config import settings
from staydesk.errors import (
    BookingError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    TransientPersistenceError,
    ValidationError,
)


def http_error(exc: BookingError) -> HTTPException:
    """Map a domain error to the ``HTTPException`` a route should raise.

    Usage::

        try:
            ...
        except BookingError as e:
            raise http_error(e) from e
    """
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=exc.to_detail())
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.to_detail())
    if isinstance(exc, (ConflictError, InvalidTransitionError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.to_detail())
    if isinstance(exc, TransientPersistenceError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=exc.to_detail(),
            headers={"Retry-After": str(settings.transient_retry_after_seconds)},
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.to_detail())
