"""
Tests for the fixture lifecycle helpers.

Covers the teardown guarantees the suites rely on:
- N tracked handles -> exactly N cleanup attempts, in creation order
- A failing cleanup never prevents the next one
- Cleanup errors are swallowed, cancellation is not
"""

import asyncio
import logging

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from sendbird_e2e.lifecycle import (
    CleanupHandle,
    CleanupOutcome,
    ResourceTracker,
    best_effort,
    ignore_errors,
)


class TestIgnoreErrors:
    """Tests for the ignore_errors scoped helper."""

    def test_sync_swallows_exception(self):
        with ignore_errors("delete user") as guard:
            raise RuntimeError("already gone")
        assert isinstance(guard.error, RuntimeError)

    def test_no_error_recorded_on_success(self):
        with ignore_errors() as guard:
            pass
        assert guard.error is None

    @pytest.mark.asyncio
    async def test_async_swallows_exception(self):
        async with ignore_errors("delete channel") as guard:
            raise ValueError("boom")
        assert isinstance(guard.error, ValueError)

    def test_base_exception_propagates(self):
        """KeyboardInterrupt and friends must never be swallowed."""
        with pytest.raises(KeyboardInterrupt):
            with ignore_errors():
                raise KeyboardInterrupt

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        with pytest.raises(asyncio.CancelledError):
            async with ignore_errors():
                raise asyncio.CancelledError

    def test_logs_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="sendbird_e2e.lifecycle"):
            with ignore_errors("delete user bob"):
                raise RuntimeError("gone")
        assert "[LIFECYCLE] Ignored error during delete user bob" in caplog.text


class TestBestEffort:
    @pytest.mark.asyncio
    async def test_returns_none_on_success(self):
        async def action():
            return "ok"

        assert await best_effort(action) is None

    @pytest.mark.asyncio
    async def test_returns_swallowed_error(self):
        async def action():
            raise LookupError("missing")

        error = await best_effort(action, "lookup")
        assert isinstance(error, LookupError)


class TestResourceTracker:
    """Tests for ResourceTracker."""

    @pytest.mark.asyncio
    async def test_track_returns_identifier(self):
        tracker = ResourceTracker()

        async def cleanup():
            pass

        assert tracker.track("user", "alice", cleanup) == "alice"
        assert len(tracker) == 1
        assert tracker.handles[0].label == "user alice"

    @pytest.mark.asyncio
    async def test_teardown_runs_in_insertion_order(self):
        calls = []
        tracker = ResourceTracker()
        for name in ["a", "b", "c"]:
            tracker.track("user", name, lambda name=name: _record(calls, name))

        outcomes = await tracker.teardown()

        assert calls == ["a", "b", "c"]
        assert [o.handle.identifier for o in outcomes] == ["a", "b", "c"]
        assert all(o.succeeded for o in outcomes)

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_later_cleanups(self):
        calls = []
        tracker = ResourceTracker()
        tracker.track("channel", "c1", lambda: _record(calls, "c1"))
        tracker.track("channel", "c2", lambda: _fail(calls, "c2"))
        tracker.track("user", "u1", lambda: _record(calls, "u1"))

        outcomes = await tracker.teardown()

        assert calls == ["c1", "c2", "u1"]
        assert [o.succeeded for o in outcomes] == [True, False, True]
        assert isinstance(outcomes[1].error, RuntimeError)

    @pytest.mark.asyncio
    async def test_teardown_empties_tracker(self):
        calls = []
        tracker = ResourceTracker()
        tracker.track("user", "a", lambda: _record(calls, "a"))

        await tracker.teardown()
        second = await tracker.teardown()

        assert len(tracker) == 0
        assert second == []
        assert calls == ["a"]

    @pytest.mark.asyncio
    async def test_handles_tracked_during_teardown_are_kept(self):
        """A cleanup that tracks something new leaves it for the next teardown."""
        tracker = ResourceTracker()

        async def spawn():
            tracker.track("user", "late", _noop)

        tracker.track("user", "first", spawn)
        await tracker.teardown()
        assert [h.identifier for h in tracker] == ["late"]

    @pytest.mark.asyncio
    async def test_teardown_runs_after_test_failure(self):
        """Teardown must still run every cleanup when the body raised."""
        calls = []
        tracker = ResourceTracker()
        tracker.track("user", "a", lambda: _record(calls, "a"))
        with pytest.raises(AssertionError):
            try:
                raise AssertionError("test body failed")
            finally:
                await tracker.teardown()
        assert calls == ["a"]

    @pytest.mark.asyncio
    async def test_cancelled_teardown_keeps_unattempted_handles(self):
        """Handles after an interrupted cleanup stay tracked for the next teardown."""
        calls = []
        tracker = ResourceTracker()

        async def cancelled():
            calls.append("a")
            raise asyncio.CancelledError()

        tracker.track("user", "a", cancelled)
        tracker.track("user", "b", lambda: _record(calls, "b"))
        tracker.track("user", "c", lambda: _record(calls, "c"))

        with pytest.raises(asyncio.CancelledError):
            await tracker.teardown()

        assert calls == ["a"]
        assert [h.identifier for h in tracker] == ["b", "c"]

        outcomes = await tracker.teardown()

        assert calls == ["a", "b", "c"]
        assert [o.handle.identifier for o in outcomes] == ["b", "c"]
        assert len(tracker) == 0


class TestTeardownProperties:
    """Property tests for teardown over arbitrary failure patterns."""

    @settings(max_examples=50, deadline=None)
    @given(st.lists(st.booleans(), max_size=25))
    def test_exactly_n_attempts_in_order(self, failures):
        """For N handles, teardown attempts N cleanups in creation order, whatever fails."""
        calls: list[int] = []
        tracker = ResourceTracker()
        for index, should_fail in enumerate(failures):
            action = _fail if should_fail else _record
            tracker.track("user", f"u{index}", lambda a=action, i=index: a(calls, i))

        outcomes = asyncio.run(tracker.teardown())

        assert calls == list(range(len(failures)))
        assert len(outcomes) == len(failures)
        assert [not o.succeeded for o in outcomes] == failures


class TestCleanupRecords:
    def test_outcome_succeeded(self):
        handle = CleanupHandle(kind="user", identifier="a", cleanup=_noop)
        assert CleanupOutcome(handle).succeeded
        assert not CleanupOutcome(handle, RuntimeError()).succeeded


async def _noop():
    pass


async def _record(calls, value):
    calls.append(value)


async def _fail(calls, value):
    calls.append(value)
    raise RuntimeError(f"cleanup {value} failed")
