"""
Application error taxonomy.

Every error carries an HTTP status and a stable machine code. The exception
handlers in app.main turn them into the shared failure shape:

    {"success": false, "message": ..., "code": ..., "error": ...}
"""

from typing import Optional


class AppError(Exception):
    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, error: Optional[str] = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message, "code": self.code}
        if self.error:
            body["error"] = self.error
        return body


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request data"


class InvalidIdentifier(ValidationError):
    code = "invalid_identifier"
    default_message = "Invalid record identifier"


class PayloadTooLarge(AppError):
    status_code = 400
    code = "payload_too_large"
    default_message = "File size exceeds 20MB limit"


class UnsupportedMediaType(AppError):
    status_code = 400
    code = "unsupported_media_type"
    default_message = "Only image and video files are allowed"


class Unauthenticated(AppError):
    status_code = 401
    code = "unauthenticated"
    default_message = "No token provided. Authorization denied."


class InvalidCredentials(Unauthenticated):
    code = "invalid_credentials"
    default_message = "Invalid email or password"


class TokenInvalid(Unauthenticated):
    code = "token_invalid"
    default_message = "Token is not valid."


class TokenExpired(Unauthenticated):
    code = "token_expired"
    default_message = "Token has expired."


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "Access denied."


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class DuplicateEmail(AppError):
    status_code = 409
    code = "duplicate_email"
    default_message = "User with this email already exists"


class UpstreamFailure(AppError):
    status_code = 500
    code = "upstream_failure"
    default_message = "Upstream service unavailable"


class InternalError(AppError):
    pass
