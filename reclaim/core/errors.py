"""Error taxonomy for the API.

Every error carries an HTTP status and a message that is safe to show to the
caller. Anything that is not a ``ReclaimError`` is treated as unexpected and
reported as ``InternalError``.
"""
from typing import Optional


class ReclaimError(Exception):
    status_code: int = 500
    default_message: str = "An error occurred. Please try again later."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ReclaimError):
    status_code = 400
    default_message = "Invalid request"


class InvalidOrExpiredOTP(ReclaimError):
    # Same message for a wrong code and for no code at all
    status_code = 400
    default_message = "Invalid or expired OTP"


class ExpiredOTP(ReclaimError):
    status_code = 400
    default_message = "OTP has expired. Please request a new one."


class NotFoundError(ReclaimError):
    status_code = 404
    default_message = "Not found"


class DispatchError(ReclaimError):
    status_code = 500
    default_message = "Failed to send OTP email. Please try again later."


class InternalError(ReclaimError):
    status_code = 500
