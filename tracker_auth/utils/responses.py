import typing
import fastapi
import fastapi.encoders
import fastapi.responses
import tracker_auth.schemas.responses


def success_response(data: typing.Any, status_code: int = 200) -> fastapi.responses.JSONResponse:
    response = tracker_auth.schemas.responses.APIResponse(
        success=True,
        data=data,
        error=None
    )
    return fastapi.responses.JSONResponse(
        status_code=status_code,
        content=fastapi.encoders.jsonable_encoder(response)
    )


def error_response(
    code: str,
    message: str,
    details: typing.Dict[str, typing.Any] = None,
    status_code: int = 400,
    headers: typing.Dict[str, str] = None
) -> fastapi.responses.JSONResponse:
    response = tracker_auth.schemas.responses.APIResponse(
        success=False,
        data=None,
        error=tracker_auth.schemas.responses.ErrorDetail(
            code=code,
            message=message,
            details=details or {}
        )
    )
    return fastapi.responses.JSONResponse(
        status_code=status_code,
        content=fastapi.encoders.jsonable_encoder(response),
        headers=headers
    )
