# ─────────────────────────────────────────────────────────────────────────────
# Custom Exceptions + FastAPI Exception Handlers
# ─────────────────────────────────────────────────────────────────────────────
# Every failure path ends in exactly one JSON response shaped {"message": str}.
# ─────────────────────────────────────────────────────────────────────────────


import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)


# ── Exception hierarchy ──────────────────────────────────────────────────────


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ClientInputError(GatewayError):
    """Raised for malformed or rejected client input (always 400)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class PromptRequiredError(ClientInputError):
    """Raised when a route requires a prompt and none was supplied."""

    def __init__(self) -> None:
        super().__init__("prompt is required")


class MalformedBodyError(ClientInputError):
    """Raised when a JSON body cannot be decoded into an object."""

    def __init__(self) -> None:
        super().__init__("Invalid request body")


class AttachmentRequiredError(ClientInputError):
    """Raised when a route's required attachment field carries no file."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"{field_name} file is required")


class UnsupportedMediaTypeError(ClientInputError):
    """Raised when the declared content type is not in the category allow-list."""


class FileTooLargeError(ClientInputError):
    """Raised when an attachment exceeds the upload ceiling."""

    def __init__(self, limit_mb: int):
        self.limit_mb = limit_mb
        super().__init__(f"File size exceeds {limit_mb}MB limit")


class UnexpectedFieldError(ClientInputError):
    """Raised when files arrive under an unexpected field, or more than one per field."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__("Unexpected field")


class UpstreamFailure(GatewayError):
    """Raised when the generation service call fails.

    The message is the collaborator's own, passed through unmodified.
    """

    def __init__(self, message: str, operation: str = "generation"):
        self.operation = operation
        super().__init__(message, status_code=500)


# ── Handler registration ────────────────────────────────────────────────────


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app.

    Endpoints and dependencies raise GatewayError subclasses; these handlers
    catch them and return {"message": ...} -- no inline try/except in endpoints.
    """

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "gateway_error",
                error=exc.message,
                error_type=type(exc).__name__,
                path=request.url.path,
            )
        else:
            logger.info(
                "client_input_rejected",
                error=exc.message,
                error_type=type(exc).__name__,
                path=request.url.path,
            )
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Framework errors (404, 405, unparsable multipart) in the same shape."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed JSON or a non-object body. Detail stays server-side."""
        logger.info("request_body_invalid", path=request.url.path, errors=str(exc.errors()))
        return JSONResponse(status_code=400, content={"message": "Invalid request body"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", error=str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})
