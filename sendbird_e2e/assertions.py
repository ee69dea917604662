"""Assertion helpers for negative-path tests.

The vendor does not return one canonical code per condition, so expected
errors are matched against an allow-list (see ``_constants``).
"""

from __future__ import annotations

from collections.abc import Awaitable, Iterable
from typing import Any

from .exceptions import PlatformAPIError


def assert_api_error(
    error: PlatformAPIError,
    codes: Iterable[int] | None = None,
    status: int | None = 400,
) -> PlatformAPIError:
    """Check status and vendor code of an error already caught."""
    if status is not None:
        assert error.status_code == status, (
            f"Expected HTTP {status}, got {error.status_code}: {error}"
        )
    if codes is not None:
        allowed = sorted(set(codes))
        assert error.is_one_of(allowed), (
            f"Expected vendor code in {allowed}, got {error.code}: {error}"
        )
    return error


async def expect_api_error(
    operation: Awaitable[Any],
    codes: Iterable[int] | None = None,
    status: int | None = 400,
) -> PlatformAPIError:
    """
    Await an operation that must be rejected by the Platform API.

    Args:
        operation: Awaitable expected to raise PlatformAPIError
        codes: Allow-list of acceptable vendor codes; None accepts any code
        status: Expected HTTP status; None accepts any status

    Returns:
        The caught PlatformAPIError, for further assertions

    Raises:
        AssertionError: If the operation succeeded, or status/code mismatch
    """
    try:
        result = await operation
    except PlatformAPIError as e:
        return assert_api_error(e, codes, status)
    raise AssertionError(f"Expected the Platform API to reject the request, got {result!r}")


def assert_has_fields(payload: dict[str, Any], fields: Iterable[str]) -> None:
    missing = [name for name in fields if name not in payload]
    assert not missing, f"Response is missing fields {missing}: {sorted(payload)}"
