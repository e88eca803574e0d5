# medmitra_portal/exceptions.py
from typing import List, Optional, Union

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse
from pydantic import ValidationError


class BackendError(Exception):
    """Non-2xx answer from the MedMitra backend."""

    def __init__(self, status_code: int, message: str, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class BackendUnavailable(Exception):
    """The backend could not be reached (DNS, refused connection, timeout)."""


class SessionExpired(Exception):
    """Token refresh failed; the user has to sign in again on `login_path`."""

    def __init__(self, portal: str, login_path: str):
        super().__init__(f"{portal} session expired")
        self.portal = portal
        self.login_path = login_path


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def form_errors(exc: Union[ValidationError, RequestValidationError]) -> List[dict]:
    """Flatten pydantic errors into the backend's [{field, message}] shape."""
    out = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(_camel(p) for p in loc) or "form"
        msg = err.get("msg", "")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        out.append({"field": field, "message": msg})
    return out


def _error_body(message, errors=None) -> dict:
    return {"success": False, "message": message, "errors": errors or []}


async def backend_error_handler(request: Request, exc: BackendError):
    return JSONResponse(_error_body(exc.message, exc.errors), status_code=exc.status_code)


async def backend_unavailable_handler(request: Request, exc: BackendUnavailable):
    return JSONResponse(_error_body(str(exc) or "Backend unavailable"), status_code=502)


async def session_expired_handler(request: Request, exc: SessionExpired):
    body = _error_body("Session expired. Please sign in again.")
    body["redirect"] = exc.login_path
    return JSONResponse(body, status_code=401)


async def form_validation_handler(request: Request, exc: RequestValidationError):
    errors = form_errors(exc)
    message = errors[0]["message"] if errors else "Invalid form data"
    return JSONResponse(_error_body(message, errors), status_code=422)


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(_error_body(str(exc.detail)), status_code=exc.status_code, headers=exc.headers)
