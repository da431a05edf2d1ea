"""Translation of core errors into HTTP errors."""

import logging

from fastapi import HTTPException, status

from ..core.errors import (
    CollectionServiceError,
    ConflictError,
    NotFoundError,
    StoreError,
    TypeMismatchError,
)

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    TypeMismatchError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StoreError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def http_error(error: CollectionServiceError, action: str) -> HTTPException:
    """Build the HTTPException for a failed operation, logging it first."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in _STATUS_CODES.items():
        if isinstance(error, error_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error(f"Failed to {action}: {error}")
    else:
        logger.info(f"Rejected request to {action}: {error}")
    return HTTPException(status_code=status_code, detail=str(error))
