"""
Channel objects and message requests for the SDK harness.

Channel objects are bound to the SendbirdChat instance that fetched them
and act as the connected user. Their shape follows the vendor SDK:

- ``send_user_message`` is callback-style and returns a MessageRequest
  with chainable ``on_succeeded`` / ``on_failed``; bridge it with
  ``callbacks.await_callbacks``
- Every other operation returns an awaitable
- Operations performed through a channel dispatch the matching event to
  the handlers registered on the channel's module
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from ._constants import ChannelType
from .handlers import HandlerRegistry
from .models import User, UserMessage

if TYPE_CHECKING:
    from .sdk import SendbirdChat

logger = logging.getLogger(__name__)


@dataclass
class UserMessageCreateParams:
    message: str
    custom_type: str | None = None
    data: str | None = None


@dataclass
class UserMessageUpdateParams:
    message: str | None = None
    custom_type: str | None = None
    data: str | None = None


@dataclass
class MessageListParams:
    """Window around a timestamp; is_inclusive keeps messages at exactly that time."""

    prev_result_size: int = 20
    next_result_size: int = 0
    is_inclusive: bool = True


@dataclass
class OpenChannelCreateParams:
    name: str | None = None
    custom_type: str | None = None
    channel_url: str | None = None
    data: str | None = None
    cover_url: str | None = None
    operator_user_ids: list[str] | None = None


@dataclass
class GroupChannelCreateParams:
    invited_user_ids: list[str] = field(default_factory=list)
    name: str | None = None
    is_distinct: bool = False
    custom_type: str | None = None
    data: str | None = None
    operator_user_ids: list[str] | None = None


class MessageRequest:
    """
    Pending send of a user message.

    The send starts as soon as the request is created. Callbacks may be
    registered before or after completion; each registered callback of the
    matching kind fires exactly once, and only one kind ever fires.
    """

    def __init__(self, operation: Awaitable[UserMessage]):
        self._succeeded: list[Callable[[UserMessage], Any]] = []
        self._failed: list[Callable[[BaseException], Any]] = []
        self._task: asyncio.Future[UserMessage] = asyncio.ensure_future(operation)
        self._task.add_done_callback(self._on_done)

    def on_succeeded(self, callback: Callable[[UserMessage], Any]) -> MessageRequest:
        if self._task.done():
            if not self._task.cancelled() and self._task.exception() is None:
                asyncio.get_running_loop().call_soon(self._invoke, callback, self._task.result())
        else:
            self._succeeded.append(callback)
        return self

    def on_failed(self, callback: Callable[[BaseException], Any]) -> MessageRequest:
        if self._task.done():
            error = self._error()
            if error is not None:
                asyncio.get_running_loop().call_soon(self._invoke, callback, error)
        else:
            self._failed.append(callback)
        return self

    @property
    def done(self) -> bool:
        return self._task.done()

    def _error(self) -> BaseException | None:
        if self._task.cancelled():
            return asyncio.CancelledError()
        return self._task.exception()

    def _on_done(self, task: asyncio.Future[UserMessage]) -> None:
        error = self._error()
        callbacks: list[Callable[..., Any]]
        if error is None:
            callbacks, argument = self._succeeded, task.result()
        else:
            logger.debug(f"[SDK] Message send failed: {error!r}")
            callbacks, argument = self._failed, error
        self._succeeded, self._failed = [], []
        for callback in callbacks:
            self._invoke(callback, argument)

    @staticmethod
    def _invoke(callback: Callable[[Any], Any], argument: Any) -> None:
        try:
            callback(argument)
        except Exception as e:
            logger.warning(f"[SDK] Message request callback raised: {type(e).__name__}: {e}")

    def __await__(self):
        return self._task.__await__()


class BaseChannel(ABC):
    """Behaviour shared by open and group channels."""

    channel_type: ClassVar[ChannelType]

    def __init__(self, client: SendbirdChat, payload: dict[str, Any]):
        self._client = client
        self.url: str = payload["channel_url"]
        self._apply(payload)

    def _apply(self, payload: dict[str, Any]) -> None:
        self.name: str = payload.get("name") or ""
        self.custom_type: str = payload.get("custom_type") or ""
        self.data: str = payload.get("data") or ""
        self.cover_url: str = payload.get("cover_url") or ""
        self.created_at: int = payload.get("created_at", 0)
        self.is_frozen: bool = bool(payload.get("freeze", False))

    @property
    @abstractmethod
    def _handlers(self) -> HandlerRegistry[Any]: ...

    @abstractmethod
    async def _fetch(self) -> dict[str, Any]: ...

    def _dispatch(self, event: str, *args: Any) -> None:
        self._handlers.dispatch(event, *args)

    # -- messages ---------------------------------------------------------------

    def send_user_message(
        self,
        params: UserMessageCreateParams | None = None,
        **kwargs: Any,
    ) -> MessageRequest:
        """
        Start sending a text message as the connected user.

        Accepts either a params object or its fields as keyword arguments.
        Must be called from a running event loop.
        """
        if params is None:
            params = UserMessageCreateParams(**kwargs)
        return MessageRequest(self._send(params))

    async def _send(self, params: UserMessageCreateParams) -> UserMessage:
        user = self._client.require_user()
        response = await self._client.api.messages.send(
            self.url,
            user.user_id,
            params.message,
            custom_type=params.custom_type,
            data=params.data,
            channel_type=self.channel_type,
        )
        return UserMessage.from_payload(response.data, self.channel_type)

    async def update_user_message(
        self,
        message_id: int,
        params: UserMessageUpdateParams | None = None,
        **kwargs: Any,
    ) -> UserMessage:
        if params is None:
            params = UserMessageUpdateParams(**kwargs)
        self._client.require_user()
        response = await self._client.api.messages.update(
            self.url,
            message_id,
            message=params.message,
            custom_type=params.custom_type,
            data=params.data,
            channel_type=self.channel_type,
        )
        message = UserMessage.from_payload(response.data, self.channel_type)
        self._dispatch("on_message_updated", self, message)
        return message

    async def delete_message(self, message: UserMessage | int) -> None:
        message_id = message.message_id if isinstance(message, UserMessage) else int(message)
        self._client.require_user()
        await self._client.api.messages.delete(
            self.url, message_id, channel_type=self.channel_type
        )
        self._dispatch("on_message_deleted", self, message_id)

    async def get_messages_by_timestamp(
        self,
        timestamp: int,
        params: MessageListParams | None = None,
        **kwargs: Any,
    ) -> list[UserMessage]:
        if params is None:
            params = MessageListParams(**kwargs)
        self._client.require_user()
        response = await self._client.api.messages.list(
            self.url,
            limit=params.prev_result_size,
            message_ts=timestamp,
            next_limit=params.next_result_size,
            include=params.is_inclusive,
            channel_type=self.channel_type,
        )
        return [
            UserMessage.from_payload(item, self.channel_type)
            for item in response.data.get("messages", [])
        ]

    # -- channel ----------------------------------------------------------------

    async def refresh(self) -> BaseChannel:
        self._apply(await self._fetch())
        return self

    async def update_channel(
        self,
        name: str | None = None,
        custom_type: str | None = None,
        data: str | None = None,
    ) -> BaseChannel:
        self._client.require_user()
        namespace = (
            self._client.api.open_channels
            if self.channel_type is ChannelType.OPEN
            else self._client.api.group_channels
        )
        response = await namespace.update(self.url, name=name, custom_type=custom_type, data=data)
        self._apply(response.data)
        self._dispatch("on_channel_changed", self)
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}(url={self.url!r}, name={self.name!r})"


class OpenChannel(BaseChannel):
    """A public channel; users enter and exit rather than join."""

    channel_type = ChannelType.OPEN

    def _apply(self, payload: dict[str, Any]) -> None:
        super()._apply(payload)
        self.participant_count: int = payload.get("participant_count", 0)
        self.operators: list[User] = [
            User.from_payload(item) for item in payload.get("operators") or []
        ]

    @property
    def _handlers(self) -> HandlerRegistry[Any]:
        return self._client.open_channel.handlers

    async def _fetch(self) -> dict[str, Any]:
        return (await self._client.api.open_channels.get(self.url)).data

    @property
    def is_entered(self) -> bool:
        return self._client.has_entered(self.url)

    def is_operator(self, user: User | str | None) -> bool:
        if user is None:
            return False
        user_id = user.user_id if isinstance(user, User) else user
        return any(operator.user_id == user_id for operator in self.operators)

    async def enter(self) -> None:
        """
        Enter the channel as the connected user.

        The Platform API has no participant endpoint; entry is tracked on the
        client session and cleared on disconnect.
        """
        user = self._client.require_user()
        await self.refresh()
        self._client.mark_entered(self.url, True)
        self._dispatch("on_user_entered", self, user)

    async def exit(self) -> None:
        user = self._client.require_user()
        self._client.mark_entered(self.url, False)
        self._dispatch("on_user_exited", self, user)

    async def delete(self) -> None:
        self._client.require_user()
        await self._client.api.open_channels.delete(self.url)
        self._client.mark_entered(self.url, False)
        self._dispatch("on_channel_deleted", self.url, self.channel_type)


class GroupChannel(BaseChannel):
    """A private channel with an explicit member list."""

    channel_type = ChannelType.GROUP

    def __init__(self, client: SendbirdChat, payload: dict[str, Any]):
        self._typing_user_ids: set[str] = set()
        super().__init__(client, payload)

    def _apply(self, payload: dict[str, Any]) -> None:
        super()._apply(payload)
        self.members: list[User] = [
            User.from_payload(item) for item in payload.get("members") or []
        ]
        self.member_count: int = payload.get("member_count", len(self.members))
        self.joined_member_count: int = payload.get("joined_member_count", self.member_count)
        self.is_distinct: bool = bool(payload.get("is_distinct", False))
        self.is_public: bool = bool(payload.get("is_public", False))

    @property
    def _handlers(self) -> HandlerRegistry[Any]:
        return self._client.group_channel.handlers

    async def _fetch(self) -> dict[str, Any]:
        return (await self._client.api.group_channels.get(self.url, show_member=True)).data

    def has_member(self, user_id: str) -> bool:
        return any(member.user_id == user_id for member in self.members)

    async def invite_with_user_ids(self, user_ids: list[str]) -> None:
        self._client.require_user()
        response = await self._client.api.group_channels.invite(self.url, user_ids)
        self._apply(response.data)
        if not self.members:
            await self.refresh()
        for member in self.members:
            if member.user_id in user_ids:
                self._dispatch("on_user_joined", self, member)

    async def leave(self) -> None:
        user = self._client.require_user()
        await self._client.api.group_channels.leave(self.url, [user.user_id])
        self.members = [member for member in self.members if member.user_id != user.user_id]
        self.member_count = max(0, self.member_count - 1)
        self._dispatch("on_user_left", self, user)

    async def delete(self) -> None:
        self._client.require_user()
        await self._client.api.group_channels.delete(self.url)
        self._dispatch("on_channel_deleted", self.url, self.channel_type)

    async def start_typing(self) -> None:
        user = self._client.require_user()
        await self._client.api.group_channels.start_typing(self.url, [user.user_id])
        self._typing_user_ids.add(user.user_id)
        self._dispatch("on_typing_status_updated", self)

    async def end_typing(self) -> None:
        user = self._client.require_user()
        await self._client.api.group_channels.end_typing(self.url, [user.user_id])
        self._typing_user_ids.discard(user.user_id)
        self._dispatch("on_typing_status_updated", self)

    def get_typing_users(self) -> list[User]:
        return [member for member in self.members if member.user_id in self._typing_user_ids]

    @property
    def is_typing(self) -> bool:
        return bool(self._typing_user_ids)

    async def mark_as_read(self) -> None:
        user = self._client.require_user()
        await self._client.api.group_channels.mark_as_read(self.url, user.user_id)
        self._dispatch("on_unread_member_status_updated", self)
