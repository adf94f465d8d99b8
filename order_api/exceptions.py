"""Errors raised by request handlers and the handlers that turn them into responses."""
import logging
from typing import Dict, List

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

log = logging.getLogger(__name__)

VALIDATION_TITLE = "One or more validation errors occurred."


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN


class Unauthenticated(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, expired: bool = False):
        super().__init__("401 Not authorized")
        self.expired = expired


class ValidationFailed(ApiError):
    """Request data is well formed but refers to something that is not there."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: Dict[str, List[str]]):
        super().__init__(VALIDATION_TITLE)
        self.errors = errors


class StoreErrors(ApiError):
    """The user store refused an operation; carries its error descriptions."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


def validation_body(errors: Dict[str, List[str]]) -> dict:
    return {"title": VALIDATION_TITLE, "status": status.HTTP_400_BAD_REQUEST, "errors": errors}


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "path", "query")]
    return ".".join(parts) or "$"


async def api_error_handler(request: Request, exc: ApiError):
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
        if exc.expired:
            headers["Token-expired"] = "true"
        return JSONResponse(status_code=exc.status_code, content=str(exc), headers=headers)
    if isinstance(exc, ValidationFailed):
        return JSONResponse(status_code=exc.status_code, content=validation_body(exc.errors))
    if isinstance(exc, StoreErrors):
        return JSONResponse(status_code=exc.status_code, content=exc.errors)
    return Response(status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        field = _field_name(error.get("loc", ()))
        if error.get("type") == "missing":
            message = f"The {field} field is required."
        else:
            message = error.get("msg", "The value is invalid.")
        errors.setdefault(field, []).append(message)
    log.debug("Validation failed on %s: %s", request.url.path, errors)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=validation_body(errors))


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
