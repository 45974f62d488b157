"""
Shared API dependencies - tenant context and domain error translation.
"""
from fastapi import Header, HTTPException, status

from freight_planner.domain.exceptions import DomainError

ERROR_STATUS = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "LOCKED": status.HTTP_423_LOCKED,
    "DUPLICATE": status.HTTP_409_CONFLICT,
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
}


def get_organization_id(x_organization_id: int = Header(..., alias="X-Organization-Id")) -> int:
    """
    Organization of the current request.

    Set by the authentication layer in front of this API; every query
    below is scoped to it.
    """
    if x_organization_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "VALIDATION_ERROR", "message": "Invalid organization id"}
        )
    return x_organization_id


def http_error(error: DomainError) -> HTTPException:
    """Translate a domain error into a structured HTTP error."""
    return HTTPException(
        status_code=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail={"code": error.code, "message": error.message}
    )
