import typing
import pydantic
import tracker_auth

SERVICE_NAME = "tracker-auth"

DependencyStatus = typing.Literal["healthy", "unhealthy", "unavailable"]


class ErrorDetail(pydantic.BaseModel):
    code: str = pydantic.Field(description="Stable machine-readable error code, e.g. `unauthorized`")
    message: str
    details: typing.Dict[str, typing.Any] = pydantic.Field(default_factory=dict)


class APIResponse(pydantic.BaseModel):
    """Envelope for every JSON response: exactly one of ``data``/``error`` is set."""

    success: bool
    data: typing.Optional[typing.Any] = None
    error: typing.Optional[ErrorDetail] = None

    model_config = pydantic.ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "success": True,
                    "data": {"message": "Logged out successfully"},
                    "error": None
                },
                {
                    "success": False,
                    "data": None,
                    "error": {
                        "code": "unauthorized",
                        "message": "Refresh token is invalid or expired",
                        "details": {}
                    }
                }
            ]
        }
    )


class HealthResponse(pydantic.BaseModel):
    status: typing.Literal["healthy", "degraded"]
    service: str = SERVICE_NAME
    version: str = tracker_auth.__version__
    timestamp: str


class DeepHealthResponse(HealthResponse):
    dependencies: typing.Dict[str, DependencyStatus]
