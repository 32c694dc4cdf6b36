import typing


class ServiceError(Exception):
    """Base for errors the service layer raises on purpose.

    ``code`` and ``status_code`` are what the HTTP layer puts on the wire.
    ``reason`` is for logs only and is never sent to the client.
    """

    code = "internal_error"
    status_code = 500

    def __init__(
        self,
        message: str,
        reason: typing.Optional[str] = None,
        details: typing.Optional[typing.Dict[str, typing.Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.details = details or {}


class ValidationFailed(ServiceError):
    code = "validation_error"
    status_code = 400


class Unauthorized(ServiceError):
    code = "unauthorized"
    status_code = 401


class Forbidden(ServiceError):
    code = "forbidden"
    status_code = 403


class NotFound(ServiceError):
    code = "not_found"
    status_code = 404


class Conflict(ServiceError):
    code = "conflict"
    status_code = 409
