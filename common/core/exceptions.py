from typing import Optional


class AppException(Exception):
    """Base application exception."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFoundError(AppException):
    """Resource not found exception."""

    status_code = 404


class ValidationError(AppException):
    """Validation error exception."""

    status_code = 400


class PreconditionFailedError(AppException):
    """A required precondition for the operation is not met."""

    status_code = 400


class ProviderError(AppException):
    """
    Payment provider call failed.

    Keeps the provider's own status code and message so callers can log
    the detail while showing the user something safe.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        provider_status: Optional[int] = None,
        user_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.provider_status = provider_status
        self.user_message = user_message


class SignatureError(AppException):
    """Webhook signature missing or invalid."""

    status_code = 400


class UnattributableEventError(AppException):
    """Webhook event cannot be tied to a tenant."""

    pass
