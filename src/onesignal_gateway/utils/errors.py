"""Custom exception classes for the OneSignal Gateway service."""

from typing import Any, Dict, Iterable, List, Optional


class GatewayException(Exception):
    """Base exception for all gateway errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the response envelope."""
        return {
            "error": self.message,
            "code": self.code,
            **self.details,
            "success": False,
        }


class ConfigurationError(GatewayException):
    """Exception raised when required configuration is missing or invalid."""

    def __init__(
        self,
        message: str = "Invalid configuration",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=500,
            code="CONFIGURATION_ERROR",
            details=details,
        )


class InvalidRequestError(GatewayException):
    """Exception raised for caller input errors. Never reaches the provider."""

    def __init__(
        self,
        message: str = "Invalid request",
        code: str = "INVALID_REQUEST",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=400,
            code=code,
            details=details,
        )


class MissingFieldsError(InvalidRequestError):
    """Exception raised when required fields are absent or empty."""

    def __init__(self, fields: Iterable[str], message: Optional[str] = None):
        self.fields = list(fields)
        super().__init__(
            message=message or f"Missing required fields: {', '.join(self.fields)}",
            code="MISSING_FIELDS",
            details={"missingFields": self.fields},
        )


class InvalidEmailError(InvalidRequestError):
    """Exception raised when an email address fails the syntactic check."""

    def __init__(self, email: Optional[str] = None):
        details = {"email": email} if email is not None else None
        super().__init__(
            message="Invalid email format",
            code="INVALID_EMAIL",
            details=details,
        )


class InvalidDelayUnitError(InvalidRequestError):
    """Exception raised when a delay unit is not one of the recognized units."""

    def __init__(self, unit: Any, valid_units: Iterable[str]):
        self.unit = unit
        valid = ", ".join(valid_units)
        super().__init__(
            message=f"Invalid delay unit. Must be one of: {valid}",
            code="INVALID_DELAY_UNIT",
            details={"delayUnit": unit},
        )


class InvalidDelayAmountError(InvalidRequestError):
    """Exception raised when a delay amount cannot be used with its unit."""

    def __init__(self, amount: Any, reason: str):
        self.amount = amount
        super().__init__(
            message=f"Invalid delay amount: {reason}",
            code="INVALID_DELAY_AMOUNT",
            details={"delayAmount": amount},
        )


class ProviderError(GatewayException):
    """Exception raised when a provider call fails (non-2xx or transport failure).

    ``remote_status`` is the provider's HTTP status, or None when the request
    never got a response. ``errors`` is the provider's error detail array.
    """

    def __init__(
        self,
        message: str,
        remote_status: Optional[int] = None,
        errors: Optional[List[Any]] = None,
    ):
        self.remote_status = remote_status
        self.errors = errors or []
        details: Dict[str, Any] = {"remoteStatus": remote_status}
        if self.errors:
            details["errors"] = self.errors
        super().__init__(
            message=message,
            status_code=500,
            code="PROVIDER_ERROR",
            details=details,
        )


class DeliveryError(GatewayException):
    """Exception raised by services when a provider operation fails.

    The envelope names the failed action in ``error`` and carries the
    provider's first error detail (or the transport text) in ``message``.
    """

    def __init__(self, action: str, cause: ProviderError):
        self.action = action
        self.cause = cause
        super().__init__(
            message=action,
            status_code=500,
            code="DELIVERY_ERROR",
            details={"remoteStatus": cause.remote_status},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.action,
            "message": self.cause.message,
            "code": self.code,
            **self.details,
            "success": False,
        }
