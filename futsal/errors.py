"""
Domain error taxonomy.

Every error is an HTTPException so it can be raised from CRUD code and reach
the client unchanged; `code` is a stable machine-readable name rendered next
to `detail` by the app-level handler.
"""

from fastapi import HTTPException, status


class DomainError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"

    def __init__(self, detail: str, headers: dict[str, str] | None = None) -> None:
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class BadRequest(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"


class InvalidSlot(BadRequest):
    code = "invalid_slot"


class NoPriceConfigured(BadRequest):
    code = "no_price_configured"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class SlotConflict(Conflict):
    code = "slot_conflict"


class AlreadyVerified(Conflict):
    code = "already_verified"


class Unauthorized(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"

    def __init__(self, detail: str = "Could not validate credentials") -> None:
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(Unauthorized):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"

    def __init__(self, detail: str = "Not allowed") -> None:
        DomainError.__init__(self, detail)
