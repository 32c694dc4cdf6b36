import datetime
import logging
import fastapi
import tracker_auth.database
import tracker_auth.middleware.rate_limit
import tracker_auth.schemas.responses

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/health", tags=["Health"])

limiter = tracker_auth.middleware.rate_limit.limiter


@router.get(
    "",
    response_model=tracker_auth.schemas.responses.HealthResponse,
    summary="Basic health check",
    description="Liveness only; does not touch the database."
)
@limiter.limit(tracker_auth.middleware.rate_limit.default_limit)
async def health(request: fastapi.Request):
    return tracker_auth.schemas.responses.HealthResponse(
        status="healthy",
        timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat()
    )


@router.get(
    "/deep",
    response_model=tracker_auth.schemas.responses.DeepHealthResponse,
    summary="Deep health check",
    description="Runs `SELECT 1` against the database. `degraded` when it is unreachable or not configured."
)
@limiter.limit(tracker_auth.middleware.rate_limit.default_limit)
async def deep_health(request: fastapi.Request):
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        database = "unavailable"
    else:
        try:
            await tracker_auth.database.check_connection(engine)
            database = "healthy"
        except Exception as e:
            logger.warning(f"Database health check failed: {e}")
            database = "unhealthy"

    return tracker_auth.schemas.responses.DeepHealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
        dependencies={"database": database}
    )
