from typing import Any, Dict, Optional


class AppError(Exception):
    """Base error carrying the HTTP status and the message shown to the caller."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None, status_code: Optional[int] = None):
        self.message = message or self.message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequest(AppError):
    status_code = 400
    message = "Invalid request"


class InvalidAmount(InvalidRequest):
    message = "Invalid amount"


class InvalidOrExpired(AppError):
    # Wrong, expired and already-used codes all look the same to the caller
    status_code = 400
    message = "Invalid or expired OTP"


class ConfigurationError(AppError):
    status_code = 500
    message = "Payment gateway not configured"


class DeliveryFailure(AppError):
    status_code = 500
    message = "Failed to send OTP email"


class GatewayError(AppError):
    message = "Failed to create order"

    def __init__(self, status_code: int, details: Any = None, message: Optional[str] = None):
        super().__init__(message=message, details=details, status_code=status_code)


class NotFound(AppError):
    status_code = 404
    message = "Not found"


class InternalError(AppError):
    status_code = 500
