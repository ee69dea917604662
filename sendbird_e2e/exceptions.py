"""
Custom exceptions for the Sendbird end-to-end suite.

This module defines a hierarchy of domain-specific exceptions that give
negative-path tests a single, typed thing to assert against.

Exception Hierarchy:
    SendbirdE2EError (base)
    ├── ConfigurationError - Missing or invalid settings
    ├── PlatformAPIError - Vendor rejected the request (HTTP >= 400)
    ├── PlatformConnectionError - Transport failure before a response
    │   └── PlatformTimeoutError - Request exceeded the configured timeout
    ├── ChatSessionError - SDK harness used before init/connect
    └── CallbackError - Failure callback fired with a non-exception payload

Safety:
    - The API token never appears in exception messages
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class SendbirdE2EError(Exception):
    """
    Base exception for all errors raised by this package.

    Example:
        try:
            await api.users.get(user_id)
        except SendbirdE2EError as e:
            logger.error(f"Sendbird error: {e}")
    """

    pass


class ConfigurationError(SendbirdE2EError):
    """
    Raised when settings are missing or invalid.

    Example:
        raise ConfigurationError("SENDBIRD_APP_ID is not set")
    """

    pass


class PlatformAPIError(SendbirdE2EError):
    """
    Raised when the Platform API answers with an error status.

    The vendor wraps every error in a JSON body of the form
    ``{"error": true, "code": 400201, "message": "..."}``. Tests assert on
    ``status_code`` and on ``code`` against an allow-list.

    Attributes:
        status_code: HTTP status of the response.
        code: Vendor numeric error code, None if the body carried none.
        message: Vendor error message.
        body: Parsed response body (dict) or raw text.
        method: HTTP method of the failed request.
        url: Request URL.

    Example:
        raise PlatformAPIError(status_code=400, code=400201, message="User not found")
    """

    def __init__(
        self,
        status_code: int,
        code: int | None = None,
        message: str = "",
        body: Any = None,
        method: str | None = None,
        url: str | None = None,
    ):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.body = body
        self.method = method
        self.url = url
        detail = f"HTTP {status_code}"
        if code is not None:
            detail += f" (code {code})"
        if message:
            detail += f": {message}"
        if method and url:
            detail = f"{method} {url} failed with {detail}"
        super().__init__(detail)

    @classmethod
    def from_response(cls, response: httpx.Response) -> PlatformAPIError:
        """Build the error from an httpx response carrying a vendor error body."""
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        code: int | None = None
        message = ""
        if isinstance(body, dict):
            raw_code = body.get("code")
            if isinstance(raw_code, int):
                code = raw_code
            elif isinstance(raw_code, str) and raw_code.isdigit():
                code = int(raw_code)
            message = str(body.get("message") or "")
        elif body:
            message = str(body)[:200]

        request = response.request
        return cls(
            status_code=response.status_code,
            code=code,
            message=message,
            body=body,
            method=request.method if request is not None else None,
            url=str(request.url) if request is not None else None,
        )

    def is_one_of(self, codes: Iterable[int]) -> bool:
        """Check the vendor code against an allow-list."""
        return self.code in set(codes)


class PlatformConnectionError(SendbirdE2EError):
    """
    Raised when the request never produced a response.

    This typically indicates DNS failure, refused connection, or TLS error.
    """

    pass


class PlatformTimeoutError(PlatformConnectionError):
    """
    Raised when a request exceeds the configured timeout.

    Attributes:
        timeout: The timeout value that was exceeded, in seconds.
    """

    def __init__(self, timeout: float | None = None, message: str | None = None):
        self.timeout = timeout
        if message:
            super().__init__(message)
        elif timeout is not None:
            super().__init__(f"Request timed out after {timeout}s")
        else:
            super().__init__("Request timed out")


class ChatSessionError(SendbirdE2EError):
    """
    Raised when the SDK harness is used in the wrong state.

    Example:
        raise ChatSessionError("Connection required. Call connect() first.")
    """

    pass


class CallbackError(SendbirdE2EError):
    """
    Raised when a failure callback reports a payload that is not an exception.

    Attributes:
        payload: Whatever the failure callback was invoked with.
    """

    def __init__(self, payload: Any):
        self.payload = payload
        super().__init__(f"Operation failed: {payload!r}")
