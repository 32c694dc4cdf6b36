import logging
import fastapi
import fastapi.exceptions
import fastapi.responses
import tracker_auth.errors
import tracker_auth.utils.responses

logger = logging.getLogger(__name__)


async def handle_service_error(
    request: fastapi.Request,
    exc: tracker_auth.errors.ServiceError
) -> fastapi.responses.JSONResponse:
    if exc.reason:
        logger.info(f"{request.method} {request.url.path} -> {exc.code} ({exc.reason})")

    headers = None
    if isinstance(exc, tracker_auth.errors.Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}

    return tracker_auth.utils.responses.error_response(
        code=exc.code,
        message=exc.message,
        details=exc.details,
        status_code=exc.status_code,
        headers=headers
    )


async def handle_validation_error(
    request: fastapi.Request,
    exc: fastapi.exceptions.RequestValidationError
) -> fastapi.responses.JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value")
        }
        for error in exc.errors()
    ]
    message = "; ".join(error["message"] for error in errors) or "Invalid input"
    return tracker_auth.utils.responses.error_response(
        code=tracker_auth.errors.ValidationFailed.code,
        message=message,
        details={"errors": errors},
        status_code=tracker_auth.errors.ValidationFailed.status_code
    )


async def handle_unexpected_error(
    request: fastapi.Request,
    exc: Exception
) -> fastapi.responses.JSONResponse:
    logger.exception(f"Unhandled error during {request.method} {request.url.path}", exc_info=exc)

    details = None
    if request.app.state.settings.debug:
        details = {"type": exc.__class__.__name__, "message": str(exc)}

    return tracker_auth.utils.responses.error_response(
        code="internal_error",
        message="An unexpected error occurred",
        details=details,
        status_code=500
    )


def setup_error_handlers(app: fastapi.FastAPI):
    app.add_exception_handler(tracker_auth.errors.ServiceError, handle_service_error)
    app.add_exception_handler(fastapi.exceptions.RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
