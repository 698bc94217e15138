"""Domain errors.

Services raise these; the HTTP layer maps `code` to a status and returns
`message` to the caller as-is, so messages must be user-facing.
"""

from __future__ import annotations


class DomainError(Exception):
    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    code = "NOT_FOUND"


class ConflictError(DomainError):
    code = "CONFLICT"


class BadRequestError(DomainError):
    code = "BAD_REQUEST"


class UnauthorizedError(DomainError):
    code = "UNAUTHORIZED"


class ForbiddenError(DomainError):
    code = "FORBIDDEN"


class DeliveryError(DomainError):
    """Raised when an outbound email could not be delivered."""

    code = "INTERNAL_SERVER_ERROR"


HTTP_STATUS_BY_CODE: dict[str, int] = {
    NotFoundError.code: 404,
    ConflictError.code: 409,
    BadRequestError.code: 400,
    UnauthorizedError.code: 401,
    ForbiddenError.code: 403,
    DomainError.code: 500,
}
