from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, HTMLResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from regserver.core.exceptions import RegServerError
from regserver.core.logging import get_logger
from regserver.schemas.response import ErrorResponse
from regserver.core.config import settings

logger = get_logger(__name__)


def wants_html(request: Request) -> bool:
    """
    True when the client asked for an HTML page (browsers submitting the form).
    """
    accept = request.headers.get("accept", "")
    return "text/html" in accept


def redact_validation_errors(errors):
    """
    Drops the submitted input from each validation error; it can carry
    the whole request body, plaintext password included.
    """
    return [{k: v for k, v in error.items() if k != "input"} for error in errors]


def error_response(request: Request, status_code: int, payload: ErrorResponse):
    """
    Renders an error as an HTML page or as the JSON ErrorResponse,
    depending on what the client accepts.
    """
    if wants_html(request):
        # Imported lazily: the pages module depends on the service layer
        from regserver.api.pages import render_error_page
        return HTMLResponse(
            content=render_error_page(payload.error, status_code),
            status_code=status_code
        )

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(payload.model_dump())
    )


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    """
    @app.exception_handler(RegServerError)
    async def regserver_exception_handler(request: Request, exc: RegServerError):
        if exc.status_code >= 500:
            logger.error(
                f"{exc.code}: {exc.message}",
                extra={"path": request.url.path},
                exc_info=exc
            )
            message = "An internal error occurred. Please try again later." if settings.is_production else exc.message
        else:
            logger.info(f"{exc.code}: {exc.message}", extra={"path": request.url.path})
            message = exc.message

        return error_response(
            request,
            exc.status_code,
            ErrorResponse(error=message, code=exc.code, details=exc.details)
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles standard HTTP exceptions (404, 405, etc.)
        """
        return error_response(
            request,
            exc.status_code,
            ErrorResponse(error=str(exc.detail), code="HTTP_ERROR", details=None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handles Pydantic validation errors (missing or blank form fields).
        """
        return error_response(
            request,
            422,
            ErrorResponse(
                error="Input validation failed",
                code="VALIDATION_ERROR",
                details=redact_validation_errors(exc.errors())
            )
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else "unknown"
            },
            exc_info=True
        )

        message = "An internal error occurred. Please try again later." if settings.is_production else str(exc)

        return error_response(
            request,
            500,
            ErrorResponse(error=message, code="INTERNAL_ERROR", details=None)
        )
