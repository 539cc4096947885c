from fastapi import HTTPException, status

from app.services.exceptions import (
    ConflictError,
    Forbidden,
    FormError,
    NotFound,
    Unauthenticated,
    ValidationError,
)

# Most specific first; the first isinstance match wins.
STATUS_BY_ERROR: list[tuple[type[FormError], int]] = [
    (Unauthenticated, status.HTTP_401_UNAUTHORIZED),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Forbidden, status.HTTP_403_FORBIDDEN),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ConflictError, status.HTTP_409_CONFLICT),
]


def to_http_exception(exc: FormError) -> HTTPException:
    """Translate a service-layer error into the HTTPException sent to the client."""
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
