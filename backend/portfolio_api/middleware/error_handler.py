"""Global error handlers and the application exception taxonomy."""
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger()


class AppException(Exception):
    status_code = 500
    error_type = "internal_error"

    def __init__(self, detail: str, status_code: int | None = None, error_type: str | None = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        if error_type is not None:
            self.error_type = error_type

    def to_content(self) -> dict:
        return {
            "status": "error",
            "message": self.detail,
            "error": self.error_type,
            "detail": self.detail,
        }


class ValidationFailed(AppException):
    status_code = 400
    error_type = "validation_error"


class Unauthorized(AppException):
    status_code = 401
    error_type = "unauthorized"


class Forbidden(AppException):
    status_code = 403
    error_type = "forbidden"


class NotFound(AppException):
    status_code = 404
    error_type = "not_found"


class UpstreamError(AppException):
    """Base for failures talking to (or caused by) an external provider."""

    status_code = 503
    suggestion = "Please try again later."

    def to_content(self) -> dict:
        content = super().to_content()
        content["suggestion"] = self.suggestion
        return content


class UpstreamUnavailable(UpstreamError):
    """Network failure, timeout, 5xx or rate limiting."""

    error_type = "upstream_unavailable"


class UpstreamRejected(UpstreamError):
    """Credentials or permission refused, or another 4xx."""

    error_type = "upstream_rejected"
    suggestion = "Check the configured API token and username."


class NoDataAvailable(UpstreamError):
    """Upstream failed and nothing is stored to fall back on."""

    error_type = "no_data_available"

    def __init__(self, detail: str, reason: str | None = None):
        super().__init__(detail)
        self.reason = reason

    def to_content(self) -> dict:
        content = super().to_content()
        content["reason"] = self.reason
        return content


_HTTP_ERROR_TYPES = {
    400: "validation_error",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    429: "rate_limited",
}


def error_body(message: str, error_type: str, detail=None) -> dict:
    return {
        "status": "error",
        "message": message,
        "error": error_type,
        "detail": detail if detail is not None else message,
    }


def setup_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning(
                "app_exception",
                path=request.url.path,
                error=exc.error_type,
                detail=exc.detail,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        error_type = _HTTP_ERROR_TYPES.get(exc.status_code, "http_error")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), error_type),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
            for err in exc.errors()
        ]
        message = "; ".join(f"{e['field']}: {e['message']}" if e["field"] else e["message"] for e in errors)
        return JSONResponse(
            status_code=400,
            content=error_body(message or "Invalid request", "validation_error", errors),
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(_request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=error_body(str(exc), "validation_error"),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error", "internal_error", str(exc)),
        )
