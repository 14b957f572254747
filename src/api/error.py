"""API error type and status mapping

Use cases return libs.result.Error; routes raise ClientError with it and the
app renders {"error": {"code", "message"}}.
"""

from typing import Optional
from fastapi import status
from libs.result import Error

STATUS_BY_CODE = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "INVALID_SIGNATURE": status.HTTP_400_BAD_REQUEST,
    "SEAT_LIMIT_REACHED": status.HTTP_400_BAD_REQUEST,
    "ALREADY_MEMBER": status.HTTP_409_CONFLICT,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "PAYMENT_NOT_CAPTURED": status.HTTP_402_PAYMENT_REQUIRED,
    "INSUFFICIENT_CREDITS": status.HTTP_402_PAYMENT_REQUIRED,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "GATEWAY_ERROR": status.HTTP_502_BAD_GATEWAY,
    "GATEWAY_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(error: Error) -> int:
    """HTTP status for an error code; *_NOT_FOUND is 404, anything unknown 500"""
    if error.code in STATUS_BY_CODE:
        return STATUS_BY_CODE[error.code]
    if error.code.endswith("_NOT_FOUND"):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_500_INTERNAL_SERVER_ERROR


class ClientError(Exception):
    def __init__(self, error: Error, status_code: Optional[int] = None):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code or status_for(error)

    def to_body(self) -> dict:
        return {"error": {"code": self.error.code, "message": self.error.message}}
