"""Error types raised by services and routers.

Every subclass maps to one HTTP status; the handlers in
``dropx.utils.responses`` render them into the standard JSON envelope.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, data: dict | None = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class AuthError(AppError):
    status_code = 401
    default_message = "Authentication required"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class MethodNotAllowed(AppError):
    status_code = 405
    default_message = "Method not allowed"


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict"


class InternalError(AppError):
    status_code = 500
