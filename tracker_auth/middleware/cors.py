import fastapi
import fastapi.middleware.cors
import tracker_auth.config
import tracker_auth.middleware.logging


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def setup_cors(app: fastapi.FastAPI, settings: tracker_auth.config.Settings):
    # The refresh cookie only travels cross-origin with credentials enabled,
    # which browsers refuse together with a wildcard origin.
    app.add_middleware(
        fastapi.middleware.cors.CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_allow_credentials and "*" not in settings.cors_origins_list,
        allow_methods=_split(settings.cors_allow_methods),
        allow_headers=_split(settings.cors_allow_headers),
        expose_headers=[tracker_auth.middleware.logging.REQUEST_ID_HEADER],
    )
