from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .schemas import ConflictOut


class ServiceError(Exception):
    """Base for errors raised by the service layer and rendered as JSON by the app."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def payload(self) -> dict:
        return {"error": self.message}


class ValidationFailed(ServiceError):
    def __init__(self, errors: dict[str, str], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors

    def payload(self) -> dict:
        return {"error": self.message, "errors": self.errors}


class BookingConflict(ServiceError):
    """The requested dates overlap confirmed or checked-in reservations on the room."""

    def __init__(self, conflicts: list, message: str = "Room is already booked for the selected dates"):
        super().__init__(message)
        self.conflicts = conflicts
        # Serialized now: the session is rolled back before the handler renders this
        self.conflicting_reservations = [
            ConflictOut.model_validate(r).model_dump(mode="json", by_alias=True) for r in conflicts
        ]

    def payload(self) -> dict:
        return {"error": self.message, "conflictingReservations": self.conflicting_reservations}


class NotFound(ServiceError):
    status_code = 404


def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body/query validation failures as 400 with a field -> message map."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        errors.setdefault(field, err.get("msg", "Invalid value"))
    return JSONResponse(status_code=400, content={"error": "Validation failed", "errors": errors})


def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Auth failures and unknown routes use the same {"error": ...} body as service errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )
