"""
Exception handling utilities.

Defines the domain error taxonomy. Every error carries a stable error code
and the HTTP status the transport layer maps it to.
"""


class InvestmentClubError(Exception):
    """Base class for all domain errors."""

    error_code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.__class__.__doc__ or self.error_code
        super().__init__(self.message)


class AuthenticationError(InvestmentClubError):
    """No verified identity."""

    error_code = "UNAUTHENTICATED"
    status_code = 401


class AuthorizationError(InvestmentClubError):
    """Access denied."""

    error_code = "FORBIDDEN"
    status_code = 403


class ValidationError(InvestmentClubError):
    """Invalid input."""

    error_code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(InvestmentClubError):
    """Record not found."""

    error_code = "NOT_FOUND"
    status_code = 404


class ConflictError(InvestmentClubError):
    """Operation conflicts with the current state of the record."""

    error_code = "CONFLICT"
    status_code = 409


class InternalError(InvestmentClubError):
    """Internal error."""

    error_code = "INTERNAL_ERROR"
    status_code = 500


# Error codes the transport layer knows how to map
ERROR_STATUS_CODES: dict[str, int] = {
    cls.error_code: cls.status_code
    for cls in (
        AuthenticationError,
        AuthorizationError,
        ValidationError,
        NotFoundError,
        ConflictError,
        InternalError,
    )
}


def status_for_error_code(error_code: str | None) -> int:
    """
    Map an error code to an HTTP status.

    Args:
        error_code: Error code from a ServiceResult

    Returns:
        HTTP status code (500 for unknown codes)
    """
    if error_code is None:
        return 500
    return ERROR_STATUS_CODES.get(error_code, 500)
