"""
Fixture lifecycle: tracking and best-effort cleanup of remote resources.

Every remote resource a test creates (user, channel, connection) is
registered with a ResourceTracker together with the coroutine that removes
it. Teardown replays those cleanups in creation order and never fails the
test:

- Setup: ``tracker.track("user", user_id, lambda: api.users.delete(user_id))``
- Act: the test body asserts; its failures propagate normally
- Teardown: ``await tracker.teardown()`` attempts every cleanup once

Cleanup order does not follow remote dependencies (a channel may be deleted
after its member user). Identifiers are never reused within a run, so
leftovers cannot affect later tests.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from types import TracebackType
from typing import Any

logger = logging.getLogger(__name__)

Cleanup = Callable[[], Awaitable[Any]]


class ignore_errors:  # noqa: N801 - reads like contextlib.suppress at call sites
    """
    Scoped "this is advisory" execution.

    Swallows any Exception raised in the block, logs it at debug level and
    keeps it on ``.error``. BaseException (cancellation, KeyboardInterrupt)
    still propagates. Usable with both ``with`` and ``async with``.

    Example:
        async with ignore_errors(f"delete channel {url}"):
            await api.group_channels.delete(url)
    """

    __slots__ = ("description", "error")

    def __init__(self, description: str = "cleanup"):
        self.description = description
        self.error: Exception | None = None

    def __enter__(self) -> ignore_errors:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc is None or not isinstance(exc, Exception):
            return False
        self.error = exc
        logger.debug(f"[LIFECYCLE] Ignored error during {self.description}: {exc!r}")
        return True

    async def __aenter__(self) -> ignore_errors:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        return self.__exit__(exc_type, exc, tb)


async def best_effort(action: Cleanup, description: str = "cleanup") -> Exception | None:
    """Await ``action()`` under ignore_errors; return the swallowed error, if any."""
    async with ignore_errors(description) as guard:
        await action()
    return guard.error


@dataclass(frozen=True, slots=True)
class CleanupHandle:
    """
    A created remote resource and how to remove it.

    Attributes:
        kind: Resource kind, e.g. "user", "group_channel"
        identifier: Remote identifier (user id, channel url, ...)
        cleanup: Zero-argument coroutine function that removes the resource
    """

    kind: str
    identifier: str
    cleanup: Cleanup

    @property
    def label(self) -> str:
        return f"{self.kind} {self.identifier}"


@dataclass(frozen=True, slots=True)
class CleanupOutcome:
    """Result of one cleanup attempt."""

    handle: CleanupHandle
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class ResourceTracker:
    """
    Ordered collection of created-resource handles.

    Handles are kept in insertion order. teardown() attempts exactly one
    cleanup per handle, in that order, and swallows every failure.
    """

    def __init__(self, name: str = "resources"):
        self.name = name
        self._handles: list[CleanupHandle] = []

    def track(self, kind: str, identifier: str, cleanup: Cleanup) -> str:
        """Register a created resource; returns its identifier for chaining."""
        self._handles.append(CleanupHandle(kind=kind, identifier=identifier, cleanup=cleanup))
        logger.debug(f"[LIFECYCLE] {self.name}: tracking {kind} {identifier}")
        return identifier

    @property
    def handles(self) -> tuple[CleanupHandle, ...]:
        return tuple(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[CleanupHandle]:
        return iter(tuple(self._handles))

    async def teardown(self) -> list[CleanupOutcome]:
        """
        Attempt every cleanup in creation order.

        The tracker is emptied before the first attempt, so resources
        tracked during teardown are left for the next call and a repeated
        teardown does nothing. If an attempt is interrupted (cancellation),
        the handles not yet attempted are tracked again before the
        interruption propagates.

        Returns:
            One CleanupOutcome per handle, in the order attempted
        """
        handles, self._handles = self._handles, []
        outcomes: list[CleanupOutcome] = []
        try:
            for handle in handles:
                error = await best_effort(handle.cleanup, handle.label)
                outcomes.append(CleanupOutcome(handle=handle, error=error))
        finally:
            pending = handles[len(outcomes) + 1 :]
            if pending:
                self._handles[:0] = pending
                logger.debug(
                    f"[LIFECYCLE] {self.name}: teardown interrupted, {len(pending)} cleanup(s) kept"
                )

        failed = sum(1 for outcome in outcomes if not outcome.succeeded)
        if outcomes:
            logger.debug(
                f"[LIFECYCLE] {self.name}: teardown attempted {len(outcomes)} cleanup(s), "
                f"{failed} ignored failure(s)"
            )
        return outcomes
