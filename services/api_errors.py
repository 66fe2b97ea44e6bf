from __future__ import annotations

from enum import Enum
from typing import Optional


class ApiErrorKind(str, Enum):
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    MALFORMED_RESPONSE = "malformed_response"
    NETWORK_FAILURE = "network_failure"


class ApiError(RuntimeError):
    """Raised when a ratings API call fails. `kind` tells callers which way."""

    kind: ApiErrorKind = ApiErrorKind.NETWORK_FAILURE

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.status_code = status_code
        self.body = body

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "url": self.url,
            "statusCode": self.status_code,
        }


class ApiTimeoutError(ApiError):
    kind = ApiErrorKind.TIMEOUT


class HttpStatusError(ApiError):
    kind = ApiErrorKind.HTTP_STATUS

    def __init__(self, status_code: int, body: str = "", *, url: Optional[str] = None) -> None:
        message = f"Error {status_code}"
        if body:
            message = f"{message}: {body[:200]}"
        super().__init__(message, url=url, status_code=status_code, body=body)


class MalformedResponseError(ApiError):
    kind = ApiErrorKind.MALFORMED_RESPONSE


class NetworkFailureError(ApiError):
    kind = ApiErrorKind.NETWORK_FAILURE
