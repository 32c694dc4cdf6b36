import time
import uuid
import logging
import fastapi
import starlette.middleware.base

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(starlette.middleware.base.BaseHTTPMiddleware):
    """Logs one line per request and tags the response with a request id.

    Headers and bodies are never logged: they carry bearer tokens, refresh
    cookies and passwords.
    """

    async def dispatch(self, request: fastapi.Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        client = request.client.host if request.client else "-"
        started = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - started
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"[{request_id}] {client} {request.method} {request.url.path} "
            f"-> {response.status_code} in {duration * 1000:.1f}ms"
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{duration:.6f}"
        return response


def setup_logging_middleware(app: fastapi.FastAPI):
    app.add_middleware(RequestLoggingMiddleware)
