"""
Callback-to-awaitable bridging.

Some SDK operations report their outcome through registered callbacks
instead of returning an awaitable. ``await_callbacks`` is the single adapter
used for all of them:

    message = await await_callbacks(
        lambda resolve, reject: channel.send_user_message(params)
        .on_succeeded(resolve)
        .on_failed(reject)
    )

Contract:
- ``start`` receives the success and failure channels and kicks off the
  operation; its return value is ignored
- The first channel invoked settles the awaitable; later invocations are
  logged and dropped, so the result settles exactly once
- No timeout is imposed here; the test runner bounds the wait
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from .exceptions import CallbackError

logger = logging.getLogger(__name__)

Resolve = Callable[[Any], None]
Reject = Callable[[Any], None]


class CallbackBridge:
    """
    One-shot bridge between a pair of callbacks and an asyncio future.

    Attributes:
        future: Future settled by the first of resolve()/reject()
        settle_count: How many times either callback was invoked
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop or asyncio.get_running_loop()
        self.future: asyncio.Future[Any] = self._loop.create_future()
        self.settle_count = 0

    @property
    def settled(self) -> bool:
        return self.future.done()

    def resolve(self, result: Any = None) -> None:
        self.settle_count += 1
        if self.future.done():
            logger.warning("[CALLBACK] Success callback fired after settlement, ignoring")
            return
        self.future.set_result(result)

    def reject(self, error: Any = None) -> None:
        self.settle_count += 1
        if self.future.done():
            logger.warning(f"[CALLBACK] Failure callback fired after settlement, ignoring: {error}")
            return
        if not isinstance(error, BaseException):
            error = CallbackError(error)
        self.future.set_exception(error)


async def await_callbacks(start: Callable[[Resolve, Reject], Any]) -> Any:
    """
    Run a callback-style operation and await its outcome.

    Args:
        start: Called once with (resolve, reject). It must start the
            operation and register resolve as the success callback and
            reject as the failure callback.

    Returns:
        The value passed to the success callback

    Raises:
        Exception: Whatever the failure callback was invoked with. A
            non-exception payload is wrapped in CallbackError. If start
            itself raises, that error propagates unchanged.
    """
    bridge = CallbackBridge()
    start(bridge.resolve, bridge.reject)
    return await bridge.future
