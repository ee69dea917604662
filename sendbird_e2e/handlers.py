"""
Event handler objects and their registries.

Handlers mirror the vendor SDK's handler classes: every callback is
optional, and a handler is registered under a caller-chosen id.

- Adding an id that already exists replaces the previous handler
- Removing an unknown id is a no-op
- A callback that raises is logged; it never breaks the operation that
  triggered the event
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

Callback = Callable[..., Any]


@dataclass
class ConnectionHandler:
    """Connection lifecycle callbacks."""

    on_connected: Callback | None = None  # (user_id)
    on_disconnected: Callback | None = None  # (user_id)
    on_reconnect_started: Callback | None = None  # ()
    on_reconnect_succeeded: Callback | None = None  # ()
    on_reconnect_failed: Callback | None = None  # ()


@dataclass
class ChannelHandler:
    """Callbacks shared by open and group channels."""

    on_message_received: Callback | None = None  # (channel, message)
    on_message_updated: Callback | None = None  # (channel, message)
    on_message_deleted: Callback | None = None  # (channel, message_id)
    on_channel_changed: Callback | None = None  # (channel)
    on_channel_deleted: Callback | None = None  # (channel_url, channel_type)


@dataclass
class OpenChannelHandler(ChannelHandler):
    """Open channel callbacks."""

    on_user_entered: Callback | None = None  # (channel, user)
    on_user_exited: Callback | None = None  # (channel, user)


@dataclass
class GroupChannelHandler(ChannelHandler):
    """Group channel callbacks."""

    on_user_joined: Callback | None = None  # (channel, user)
    on_user_left: Callback | None = None  # (channel, user)
    on_typing_status_updated: Callback | None = None  # (channel)
    on_unread_member_status_updated: Callback | None = None  # (channel)
    on_undelivered_member_status_updated: Callback | None = None  # (channel)


H = TypeVar("H")


class HandlerRegistry(Generic[H]):
    """Handlers keyed by id, dispatched in registration order."""

    def __init__(self, kind: str):
        self.kind = kind
        self._handlers: dict[str, H] = {}

    def add(self, handler_id: str, handler: H) -> None:
        if not handler_id:
            raise ValueError("handler_id must be a non-empty string")
        if handler_id in self._handlers:
            logger.debug(f"[SDK] Replacing {self.kind} handler '{handler_id}'")
        self._handlers[handler_id] = handler

    def remove(self, handler_id: str) -> None:
        self._handlers.pop(handler_id, None)

    def clear(self) -> None:
        self._handlers.clear()

    def __contains__(self, handler_id: object) -> bool:
        return handler_id in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def get(self, handler_id: str) -> H | None:
        return self._handlers.get(handler_id)

    def dispatch(self, event: str, *args: Any) -> int:
        """
        Invoke ``event`` on every handler that defines it.

        Returns:
            Number of callbacks invoked (including ones that raised)
        """
        invoked = 0
        for handler_id, handler in list(self._handlers.items()):
            callback = getattr(handler, event, None)
            if callback is None:
                continue
            invoked += 1
            try:
                callback(*args)
            except Exception as e:
                logger.warning(
                    f"[SDK] {self.kind} handler '{handler_id}' raised in {event}: "
                    f"{type(e).__name__}: {e}"
                )
        return invoked
