import datetime
import typing
import pydantic
import tracker_auth.schemas.responses


class UserSchema(pydantic.BaseModel):
    user_id: int
    username: str
    email: str
    role: str
    created_at: typing.Optional[datetime.datetime] = None

    model_config = pydantic.ConfigDict(from_attributes=True)


class SessionData(pydantic.BaseModel):
    access_token: str
    token_type: str = "Bearer"
    user: UserSchema


class AccessTokenData(pydantic.BaseModel):
    access_token: str
    token_type: str = "Bearer"


class SessionResponse(pydantic.BaseModel):
    success: bool = True
    data: SessionData
    error: typing.Optional[tracker_auth.schemas.responses.ErrorDetail] = None


class AccessTokenResponse(pydantic.BaseModel):
    success: bool = True
    data: AccessTokenData
    error: typing.Optional[tracker_auth.schemas.responses.ErrorDetail] = None


class UserData(pydantic.BaseModel):
    user: UserSchema


class UserResponse(pydantic.BaseModel):
    success: bool = True
    data: UserData
    error: typing.Optional[tracker_auth.schemas.responses.ErrorDetail] = None


class UserListData(pydantic.BaseModel):
    users: typing.List[UserSchema]
    total: int
    limit: int
    offset: int


class UserListResponse(pydantic.BaseModel):
    success: bool = True
    data: UserListData
    error: typing.Optional[tracker_auth.schemas.responses.ErrorDetail] = None


class RevokedSessionsData(pydantic.BaseModel):
    revoked: int


class RevokedSessionsResponse(pydantic.BaseModel):
    success: bool = True
    data: RevokedSessionsData
    error: typing.Optional[tracker_auth.schemas.responses.ErrorDetail] = None


class RegisterRequest(pydantic.BaseModel):
    username: str = pydantic.Field(
        min_length=3,
        max_length=30,
        pattern=r"^[a-zA-Z0-9_]+$",
        description="Latin letters, digits and underscore"
    )
    email: pydantic.EmailStr
    password: str = pydantic.Field(min_length=8, max_length=128)

    model_config = pydantic.ConfigDict(
        json_schema_extra={
            "example": {
                "username": "ivan",
                "email": "ivan@example.com",
                "password": "pw12345678"
            }
        }
    )


class LoginRequest(pydantic.BaseModel):
    email: pydantic.EmailStr
    password: str = pydantic.Field(min_length=8, max_length=128)

    model_config = pydantic.ConfigDict(
        json_schema_extra={
            "example": {
                "email": "ivan@example.com",
                "password": "pw12345678"
            }
        }
    )


def user_to_dict(user) -> typing.Dict[str, typing.Any]:
    return UserSchema.model_validate(user).model_dump(mode="json")


_email_adapter = pydantic.TypeAdapter(pydantic.EmailStr)


def normalize_email(email: str) -> str:
    """Normalize an address exactly as request bodies with ``EmailStr`` are."""
    return _email_adapter.validate_python(email)
