from typing import Optional


class AppError(Exception):
    """Base for every error a handler turns into an error envelope."""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def category(self) -> str:
        return type(self).__name__


class ValidationError(AppError):
    status_code = 400


class ConflictError(ValidationError):
    # duplicate email is reported as a validation failure
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class InternalError(AppError):
    status_code = 500
