from typing import List

class ServiceError(Exception):
    """
    Base class for expected failures of the identity and address services.

    Each subclass carries the HTTP status it is reported with and a short
    machine-readable kind.
    """
    status_code = 400
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ValidationFailed(ServiceError):
    kind = "validation_error"

    def __init__(self, message: str, errors: List[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []

class Conflict(ServiceError):
    status_code = 409
    kind = "conflict"

class NotFound(ServiceError):
    status_code = 404
    kind = "not_found"

class OtpNotFound(NotFound):
    # A missing code is a client error on the verify endpoints
    status_code = 400
    kind = "otp_not_found"

class InvalidOtp(ServiceError):
    kind = "invalid_otp"

class OtpExpired(ServiceError):
    kind = "otp_expired"

class Deactivated(ServiceError):
    status_code = 403
    kind = "deactivated"

class DeliveryFailed(ServiceError):
    status_code = 502
    kind = "delivery_failed"
