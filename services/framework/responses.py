from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse as _JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.framework.logging import log_error

INVALID_PAYLOAD = "Invalid request payload"


class JSONResponse(_JSONResponse):
    """
    JSON response that always declares its charset.
    """

    media_type = "application/json; charset=utf-8"


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message}, headers=headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(
        exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(400, INVALID_PAYLOAD)


async def unhandled_exception_handler(request: Request, exc: Exception):
    log_error("unhandled_exception", path=request.url.path, error=repr(exc))
    return error_response(500, str(exc))


def install_error_handlers(app: FastAPI):
    """
    Render every framework and handler error as {"error": "<message>"}.
    """
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
