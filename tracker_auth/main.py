import logging
import sys
import signal
import contextlib
import typing
import fastapi
import uvicorn
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import tracker_auth
import tracker_auth.config
import tracker_auth.database
import tracker_auth.routes.auth
import tracker_auth.routes.health
import tracker_auth.routes.users
import tracker_auth.middleware.cors as cors_middleware
import tracker_auth.middleware.errors as errors_middleware
import tracker_auth.middleware.logging as logging_middleware
import tracker_auth.middleware.rate_limit as rate_limit_middleware
import tracker_auth.security.passwords
import tracker_auth.security.tokens

settings = tracker_auth.config.settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    app_settings: tracker_auth.config.Settings = app.state.settings
    logger.info("Starting auth service...")

    if app_settings.run_migrations:
        logger.info("Running database migrations")
        await tracker_auth.database.run_migrations(app_settings)

    app.state.engine = tracker_auth.database.create_engine(app_settings)
    app.state.session_maker = tracker_auth.database.create_session_maker(app.state.engine)
    logger.info("Auth service started successfully")

    yield

    logger.info("Shutting down auth service...")
    await app.state.engine.dispose()
    logger.info("Auth service shut down successfully")


def create_app(app_settings: typing.Optional[tracker_auth.config.Settings] = None) -> fastapi.FastAPI:
    app_settings = app_settings or settings

    application = fastapi.FastAPI(
        title="Tracker Auth API",
        description="""
        ## Tracker Auth Service

        Accounts and sessions for the goal/progress tracker.

        ### Sessions

        - **Access token**: short-lived bearer JWT, send as `Authorization: Bearer <token>`
        - **Refresh token**: HTTP-only cookie, rotated on every `POST /api/v1/auth/refresh`
        - **Reuse detection**: a refresh token presented after it was rotated or revoked
          revokes every session of its owner
        """,
        version=tracker_auth.__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    application.state.settings = app_settings
    application.state.token_signer = tracker_auth.security.tokens.TokenSigner.from_settings(app_settings)
    application.state.password_hasher = tracker_auth.security.passwords.PasswordHasher.from_settings(app_settings)

    cors_middleware.setup_cors(application, app_settings)
    logging_middleware.setup_logging_middleware(application)
    errors_middleware.setup_error_handlers(application)

    application.state.limiter = rate_limit_middleware.configure_limiter(app_settings)
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    application.include_router(tracker_auth.routes.health.router)
    application.include_router(tracker_auth.routes.auth.router)
    application.include_router(tracker_auth.routes.users.router)

    return application


app = create_app()


def handle_shutdown(signum, frame):
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    sys.exit(0)


if __name__ == "__main__":
    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)

    uvicorn.run(
        "tracker_auth.main:app",
        host=settings.http_host,
        port=settings.http_port,
        workers=settings.http_workers,
        log_level=settings.log_level.lower(),
        access_log=True
    )
