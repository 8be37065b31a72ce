"""
Domain errors

Services raise these; the handlers registered in ``app.main`` turn each
kind into its own HTTP status and a ``{"success": false, ...}`` body.
"""


class AppError(Exception):
    code = "internal"
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class ValidationFailed(AppError):
    code = "validation_failed"
    status_code = 400
    default_message = "Invalid request data"


class Unauthorized(AppError):
    code = "unauthorized"
    status_code = 401
    default_message = "Invalid or expired token"


class Forbidden(AppError):
    code = "forbidden"
    status_code = 403
    default_message = "You are not allowed to perform this action"


class NotFound(AppError):
    code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    code = "conflict"
    status_code = 409
    default_message = "The resource was modified by another request"


class InvalidState(AppError):
    code = "invalid_state"
    status_code = 422
    default_message = "The resource is not in a valid state for this action"


class Internal(AppError):
    pass
