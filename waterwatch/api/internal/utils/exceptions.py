# Third-party imports
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import sentry_sdk

# Local application imports
from waterwatch.core.monitoring import get_logger
from waterwatch.schemas.common import BaseResponse

logger = get_logger(__name__)

# Fallback error codes for HTTP exceptions raised without a service error code
ERROR_MAP = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    410: "gone",
    422: "unprocessable_entity",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}

MAX_VALIDATION_ERRORS = 5


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,  # noqa
        exc: HTTPException,
    ) -> JSONResponse:
        # ServiceHTTPException carries its own code
        error_code = getattr(exc, "code", None) or ERROR_MAP.get(exc.status_code, "error")
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        response = BaseResponse.failure(code=error_code, message=detail)
        return JSONResponse(status_code=exc.status_code, content=response.model_dump(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,  # noqa
        exc: RequestValidationError,
    ) -> JSONResponse:
        error_details = []
        for error in exc.errors():
            message = error.get("msg", "")

            # Strip pydantic's "Value error, " prefix
            for prefix in ("body: Value error, ", "Value error, "):
                if message.startswith(prefix):
                    message = message[len(prefix) :]
                    break

            field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            error_details.append(f"{field}: {message}" if field else message)

        shown = error_details[:MAX_VALIDATION_ERRORS]
        if len(error_details) > MAX_VALIDATION_ERRORS:
            shown.append("...and more errors")
        detail = "; ".join(shown) if shown else "Invalid request data"

        response = BaseResponse.failure(code="bad_request", message=detail, details=error_details or None)
        return JSONResponse(status_code=400, content=response.model_dump())

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        sentry_sdk.capture_exception(exc)
        response = BaseResponse.failure(
            code="internal_server_error",
            message="An unexpected error occurred. Please try again later.",
        )
        return JSONResponse(status_code=500, content=response.model_dump())
