"""
Suite context: the explicit session handle threaded through a test.

A SuiteContext bundles everything one suite (or one test) needs against
the remote service and owns the cleanup of what it creates:

- settings: connection settings
- api: PlatformAPI used for REST fixtures
- resources: ResourceTracker, torn down when the context exits
- chat: connected SendbirdChat, once connect() was called

There is no module-level session. Fixtures create a context with
``suite_context()`` and pass it to tests, so suites never share state.

Example:
    >>> async with suite_context(settings) as ctx:
    ...     user_id = await ctx.create_user("owner")
    ...     channel = await ctx.create_group_channel("Room", [user_id])
    ...     # teardown deletes the channel, then the user
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import httpx

from .api import ApiResponse, PlatformAPI
from .callbacks import await_callbacks
from .channels import GroupChannel, OpenChannel, UserMessageCreateParams
from .config import Settings
from .exceptions import ChatSessionError
from .identifiers import generate_test_id
from .lifecycle import ResourceTracker, ignore_errors
from .models import User, UserMessage
from .sdk import SendbirdChat

logger = logging.getLogger(__name__)


@dataclass
class SuiteContext:
    """Per-suite state and fixture helpers. Build it with ``suite_context()``."""

    settings: Settings
    api: PlatformAPI
    resources: ResourceTracker = field(default_factory=ResourceTracker)
    transport: httpx.AsyncBaseTransport | None = None
    chat: SendbirdChat | None = None

    # -- REST fixtures ----------------------------------------------------------

    async def create_user(
        self,
        prefix: str = "user",
        nickname: str | None = None,
        profile_url: str | None = None,
        user_id: str | None = None,
    ) -> str:
        """Create a user via the Platform API and track its deletion."""
        user_id = user_id or generate_test_id(prefix)
        await self.api.users.create(user_id, nickname or prefix, profile_url)
        return self.track_user(user_id)

    def track_user(self, user_id: str) -> str:
        api = self.api
        return self.resources.track("user", user_id, lambda: api.users.delete(user_id))

    async def create_group_channel(
        self,
        name: str,
        user_ids: list[str],
        is_distinct: bool = False,
        **kwargs: Any,
    ) -> ApiResponse:
        """Create a group channel via the Platform API and track its deletion."""
        response = await self.api.group_channels.create(name, user_ids, is_distinct, **kwargs)
        self.track_group_channel(response.data["channel_url"])
        return response

    def track_group_channel(self, channel_url: str) -> str:
        api = self.api
        return self.resources.track(
            "group_channel", channel_url, lambda: api.group_channels.delete(channel_url)
        )

    async def create_open_channel(self, name: str, **kwargs: Any) -> ApiResponse:
        """Create an open channel via the Platform API and track its deletion."""
        response = await self.api.open_channels.create(name, **kwargs)
        self.track_open_channel(response.data["channel_url"])
        return response

    def track_open_channel(self, channel_url: str) -> str:
        api = self.api
        return self.resources.track(
            "open_channel", channel_url, lambda: api.open_channels.delete(channel_url)
        )

    # -- SDK session ------------------------------------------------------------

    async def connect(self, user_id: str | None = None, prefix: str = "sdk_user") -> User:
        """
        Initialize the SDK (once) and connect a user.

        The user is auto-created on first connect and its deletion is
        tracked. The session itself is closed when the context exits, after
        teardown, so tracked cleanups never depend on it.
        """
        if self.chat is None:
            self.chat = SendbirdChat.init(self.settings, transport=self.transport)
        user_id = user_id or generate_test_id(prefix)
        user = await self.chat.connect(user_id)
        self.track_user(user_id)
        return user

    def require_chat(self) -> SendbirdChat:
        if self.chat is None:
            raise ChatSessionError("No SDK session. Call connect() first.")
        return self.chat

    def track_sdk_open_channel(self, channel: OpenChannel) -> OpenChannel:
        """Track an SDK-created open channel for deletion."""
        self.track_open_channel(channel.url)
        return channel

    def track_sdk_group_channel(self, channel: GroupChannel) -> GroupChannel:
        """Track an SDK-created group channel for deletion."""
        self.track_group_channel(channel.url)
        return channel

    async def send_user_message(
        self,
        channel: OpenChannel | GroupChannel,
        message: str,
        **kwargs: Any,
    ) -> UserMessage:
        """Send through the callback-style SDK call and await the outcome."""
        params = UserMessageCreateParams(message=message, **kwargs)
        return await await_callbacks(
            lambda resolve, reject: channel.send_user_message(params)
            .on_succeeded(resolve)
            .on_failed(reject)
        )

    async def teardown(self) -> None:
        await self.resources.teardown()


@asynccontextmanager
async def suite_context(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
    name: str = "suite",
) -> AsyncIterator[SuiteContext]:
    """
    Yield a SuiteContext and always tear it down.

    Teardown runs after the body regardless of outcome: tracked resources
    are cleaned up best-effort (in creation order), then the SDK session
    and the HTTP client are closed. A failure closing the SDK session is
    logged and ignored. Errors from the body pass through unchanged.
    """
    api = PlatformAPI(settings, transport=transport)
    context = SuiteContext(
        settings=settings,
        api=api,
        resources=ResourceTracker(name),
        transport=transport,
    )
    try:
        yield context
    finally:
        await context.teardown()
        if context.chat is not None:
            async with ignore_errors("close SDK session"):
                await context.chat.close()
        await api.close()
        logger.debug(f"[HARNESS] {name}: context closed")
