"""
SDK session harness.

SendbirdChat is a client shaped like the vendor's chat SDK (init, connect,
disconnect, channel modules, handlers) built on the Platform API, because
the vendor ships no Python chat SDK. An instance is an explicit session
handle: there is no module-level "current instance", so suites can run
side by side without sharing state.

Connection model:
- ``connect(user_id)`` fetches the user and auto-creates it when the
  vendor reports it unknown, as the vendor SDK does
- There is no websocket. Handlers receive the events caused by this
  session's own operations; server pushes are not delivered

Example:
    >>> sb = SendbirdChat.init(Settings.from_env())
    >>> user = await sb.connect("alice")
    >>> channel = await sb.open_channel.create_channel(name="Lobby")
    >>> await channel.enter()
    >>> await sb.close()
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from ._constants import DEFAULT_LIST_LIMIT, USER_NOT_FOUND_CODES, ConnectionState
from .api import PlatformAPI
from .channels import (
    GroupChannel,
    GroupChannelCreateParams,
    OpenChannel,
    OpenChannelCreateParams,
)
from .config import Settings
from .exceptions import ChatSessionError, PlatformAPIError, SendbirdE2EError
from .handlers import ConnectionHandler, GroupChannelHandler, HandlerRegistry, OpenChannelHandler
from .models import User

logger = logging.getLogger(__name__)


class SendbirdChat:
    """
    One SDK session: a connection state, a current user and two modules.

    Attributes:
        open_channel: OpenChannelModule
        group_channel: GroupChannelModule
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._api = PlatformAPI(settings, transport=transport)
        self._state = ConnectionState.CLOSED
        self._current_user: User | None = None
        self._entered_urls: set[str] = set()
        self._connection_handlers: HandlerRegistry[ConnectionHandler] = HandlerRegistry(
            "connection"
        )
        self.open_channel = OpenChannelModule(self)
        self.group_channel = GroupChannelModule(self)

    @classmethod
    def init(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> SendbirdChat:
        """
        Create an SDK instance. Performs no I/O and never validates the app id;
        an unknown app id only surfaces when connecting.
        """
        instance = cls(settings, transport=transport)
        logger.debug(f"[SDK] Initialized for app {settings.app_id or '<unset>'}")
        return instance

    @property
    def app_id(self) -> str:
        return self._settings.app_id

    @property
    def api(self) -> PlatformAPI:
        return self._api

    @property
    def connection_state(self) -> ConnectionState:
        return self._state

    @property
    def current_user(self) -> User | None:
        return self._current_user

    def require_user(self) -> User:
        """
        Return the connected user.

        Raises:
            ChatSessionError: If not connected
        """
        if self._state is not ConnectionState.OPEN or self._current_user is None:
            raise ChatSessionError("Connection required. Call connect() first.")
        return self._current_user

    # -- connection -------------------------------------------------------------

    async def connect(
        self,
        user_id: str,
        access_token: str | None = None,
        nickname: str | None = None,
    ) -> User:
        """
        Connect as ``user_id``, creating the user if it does not exist.

        Args:
            user_id: User to connect as (must be non-empty)
            access_token: Checked against the user's issued token, if any
            nickname: Nickname used when the user has to be created

        Returns:
            The connected User

        Raises:
            ValueError: If user_id is empty
            ChatSessionError: If the user could not be fetched or created,
                or the access token does not match
        """
        if not user_id or not user_id.strip():
            raise ValueError("user_id must be a non-empty string")

        if self._state is ConnectionState.OPEN:
            if self._current_user is not None and self._current_user.user_id == user_id:
                return self._current_user
            await self.disconnect()

        self._state = ConnectionState.CONNECTING
        logger.debug(f"[SDK] Connecting as {user_id}...")
        try:
            payload = await self._fetch_or_create_user(user_id, nickname)
        except SendbirdE2EError as e:
            self._state = ConnectionState.CLOSED
            raise ChatSessionError(f"Failed to connect as {user_id}: {e}") from e

        issued_token = payload.get("access_token")
        if access_token is not None and issued_token and issued_token != access_token:
            self._state = ConnectionState.CLOSED
            raise ChatSessionError(f"Invalid access token for user {user_id}")

        self._current_user = User.from_payload(payload)
        self._state = ConnectionState.OPEN
        logger.info(f"[SDK] Connected as {user_id}")
        self._connection_handlers.dispatch("on_connected", user_id)
        return self._current_user

    async def _fetch_or_create_user(self, user_id: str, nickname: str | None) -> dict[str, Any]:
        try:
            return (await self._api.users.get(user_id)).data
        except PlatformAPIError as e:
            if not e.is_one_of(USER_NOT_FOUND_CODES):
                raise
        logger.debug(f"[SDK] User {user_id} not found, creating it")
        return (await self._api.users.create(user_id, nickname or "")).data

    async def disconnect(self) -> None:
        """Close the session. Safe to call when already closed."""
        if self._state is ConnectionState.CLOSED:
            return
        user = self._current_user
        self._state = ConnectionState.CLOSED
        self._current_user = None
        self._entered_urls.clear()
        if user is not None:
            logger.info(f"[SDK] Disconnected {user.user_id}")
            self._connection_handlers.dispatch("on_disconnected", user.user_id)

    async def reconnect(self) -> bool:
        """
        Re-establish the session for the last connected user.

        Returns:
            True on success, False if there is no user to reconnect or the
            user could not be fetched (the session is then CLOSED)
        """
        user = self._current_user
        if user is None:
            return False

        self._connection_handlers.dispatch("on_reconnect_started")
        self._state = ConnectionState.CONNECTING
        try:
            payload = (await self._api.users.get(user.user_id)).data
        except SendbirdE2EError as e:
            logger.warning(f"[SDK] Reconnect failed for {user.user_id}: {e}")
            self._state = ConnectionState.CLOSED
            self._current_user = None
            self._entered_urls.clear()
            self._connection_handlers.dispatch("on_reconnect_failed")
            return False

        self._current_user = User.from_payload(payload)
        self._state = ConnectionState.OPEN
        self._connection_handlers.dispatch("on_reconnect_succeeded")
        return True

    def add_connection_handler(self, handler_id: str, handler: ConnectionHandler) -> None:
        self._connection_handlers.add(handler_id, handler)

    def remove_connection_handler(self, handler_id: str) -> None:
        self._connection_handlers.remove(handler_id)

    def remove_all_connection_handlers(self) -> None:
        self._connection_handlers.clear()

    # -- open channel participation ---------------------------------------------

    def has_entered(self, channel_url: str) -> bool:
        return channel_url in self._entered_urls

    def mark_entered(self, channel_url: str, entered: bool) -> None:
        if entered:
            self._entered_urls.add(channel_url)
        else:
            self._entered_urls.discard(channel_url)

    # -- teardown ---------------------------------------------------------------

    async def close(self) -> None:
        """Disconnect and release the HTTP client."""
        await self.disconnect()
        await self._api.close()

    async def __aenter__(self) -> SendbirdChat:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class OpenChannelModule:
    """Open channel operations and handlers of one SDK instance."""

    def __init__(self, client: SendbirdChat):
        self._client = client
        self.handlers: HandlerRegistry[OpenChannelHandler] = HandlerRegistry("open channel")

    async def create_channel(
        self,
        params: OpenChannelCreateParams | None = None,
        **kwargs: Any,
    ) -> OpenChannel:
        """Create an open channel; the connected user becomes its operator by default."""
        if params is None:
            params = OpenChannelCreateParams(**kwargs)
        user = self._client.require_user()
        operator_ids = params.operator_user_ids
        if operator_ids is None:
            operator_ids = [user.user_id]
        response = await self._client.api.open_channels.create(
            name=params.name,
            custom_type=params.custom_type,
            channel_url=params.channel_url,
            data=params.data,
            cover_url=params.cover_url,
            operator_ids=operator_ids,
        )
        channel = OpenChannel(self._client, response.data)
        logger.debug(f"[SDK] Created open channel {channel.url}")
        return channel

    async def get_channel(self, channel_url: str) -> OpenChannel:
        self._client.require_user()
        response = await self._client.api.open_channels.get(channel_url)
        return OpenChannel(self._client, response.data)

    def create_open_channel_list_query(
        self,
        limit: int = DEFAULT_LIST_LIMIT,
        custom_types: list[str] | None = None,
        name_keyword: str | None = None,
    ) -> OpenChannelListQuery:
        return OpenChannelListQuery(self._client, limit, custom_types, name_keyword)

    def add_open_channel_handler(self, handler_id: str, handler: OpenChannelHandler) -> None:
        self.handlers.add(handler_id, handler)

    def remove_open_channel_handler(self, handler_id: str) -> None:
        self.handlers.remove(handler_id)

    def remove_all_open_channel_handlers(self) -> None:
        self.handlers.clear()


class GroupChannelModule:
    """Group channel operations and handlers of one SDK instance."""

    def __init__(self, client: SendbirdChat):
        self._client = client
        self.handlers: HandlerRegistry[GroupChannelHandler] = HandlerRegistry("group channel")

    async def create_channel(
        self,
        params: GroupChannelCreateParams | None = None,
        **kwargs: Any,
    ) -> GroupChannel:
        """
        Create a group channel with the connected user as a member.

        For a distinct channel the vendor returns the existing channel when
        one with the same member set already exists.
        """
        if params is None:
            params = GroupChannelCreateParams(**kwargs)
        user = self._client.require_user()
        user_ids = [user.user_id]
        user_ids.extend(uid for uid in params.invited_user_ids if uid not in user_ids)
        response = await self._client.api.group_channels.create(
            params.name,
            user_ids,
            is_distinct=params.is_distinct,
            custom_type=params.custom_type,
            data=params.data,
            operator_ids=params.operator_user_ids,
        )
        channel = GroupChannel(self._client, response.data)
        logger.debug(f"[SDK] Created group channel {channel.url}")
        return channel

    async def get_channel(self, channel_url: str) -> GroupChannel:
        self._client.require_user()
        response = await self._client.api.group_channels.get(channel_url, show_member=True)
        return GroupChannel(self._client, response.data)

    def create_my_group_channel_list_query(
        self,
        limit: int = DEFAULT_LIST_LIMIT,
        include_empty: bool = False,
        custom_types_filter: list[str] | None = None,
    ) -> GroupChannelListQuery:
        return GroupChannelListQuery(self._client, limit, include_empty, custom_types_filter)

    def add_group_channel_handler(self, handler_id: str, handler: GroupChannelHandler) -> None:
        self.handlers.add(handler_id, handler)

    def remove_group_channel_handler(self, handler_id: str) -> None:
        self.handlers.remove(handler_id)

    def remove_all_group_channel_handlers(self) -> None:
        self.handlers.clear()


class _ListQuery(ABC):
    """Token-paged query; ``next()`` returns the following page."""

    def __init__(self, client: SendbirdChat, limit: int):
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        self._client = client
        self.limit = limit
        self._token: str | None = None
        self.has_next = True
        self.is_loading = False

    @abstractmethod
    async def _page(self) -> dict[str, Any]: ...

    async def _load(self) -> list[dict[str, Any]]:
        if not self.has_next:
            return []
        self._client.require_user()
        self.is_loading = True
        try:
            data = await self._page()
        finally:
            self.is_loading = False
        self._token = data.get("next") or None
        self.has_next = self._token is not None
        return data.get("channels", [])


class OpenChannelListQuery(_ListQuery):
    def __init__(
        self,
        client: SendbirdChat,
        limit: int,
        custom_types: list[str] | None,
        name_keyword: str | None,
    ):
        super().__init__(client, limit)
        self.custom_types = custom_types
        self.name_keyword = name_keyword

    async def _page(self) -> dict[str, Any]:
        response = await self._client.api.open_channels.list(
            limit=self.limit,
            custom_types=self.custom_types,
            name_contains=self.name_keyword,
            token=self._token,
        )
        return response.data

    async def next(self) -> list[OpenChannel]:
        return [OpenChannel(self._client, item) for item in await self._load()]


class GroupChannelListQuery(_ListQuery):
    def __init__(
        self,
        client: SendbirdChat,
        limit: int,
        include_empty: bool,
        custom_types_filter: list[str] | None,
    ):
        super().__init__(client, limit)
        self.include_empty = include_empty
        self.custom_types_filter = custom_types_filter

    async def _page(self) -> dict[str, Any]:
        user = self._client.require_user()
        response = await self._client.api.users.my_group_channels(
            user.user_id,
            limit=self.limit,
            show_empty=self.include_empty,
            custom_types=self.custom_types_filter,
            token=self._token,
        )
        return response.data

    async def next(self) -> list[GroupChannel]:
        return [GroupChannel(self._client, item) for item in await self._load()]
