"""
Sendbird Platform API wrapper.

This module maps the REST endpoints exercised by the suites (users, group
and open channels, messages, moderation) to typed async call signatures.
It is a pure pass-through to httpx:

- No retries, no backoff, no caching
- Request bodies follow the vendor JSON schema; fields set to None are
  omitted, matching how the vendor treats absent fields
- Any HTTP status >= 400 raises PlatformAPIError carrying the vendor code

Example:
    >>> async with PlatformAPI(Settings.from_env()) as api:
    ...     response = await api.users.create("alice", "Alice")
    ...     assert response.data["user_id"] == "alice"
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from ._constants import (
    API_TOKEN_HEADER,
    DEFAULT_LIST_LIMIT,
    MESSAGE_TYPE_USER,
    ChannelType,
)
from .config import Settings
from .exceptions import PlatformAPIError, PlatformConnectionError, PlatformTimeoutError
from .identifiers import current_millis

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """
    Successful Platform API response.

    Attributes:
        status: HTTP status code
        data: Decoded JSON body ({} for an empty body)
        headers: Response headers
    """

    status: int
    data: Any
    headers: Mapping[str, str] = field(default_factory=dict)


def _segment(value: str | int) -> str:
    """Percent-encode one path segment (same as encodeURIComponent)."""
    return quote(str(value), safe="")


def _compact(body: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in body.items() if value is not None}


class PlatformAPI:
    """
    Async client for the Sendbird Platform API.

    Owns a single httpx.AsyncClient authenticated with the static
    ``Api-Token`` header and exposes one namespace per resource:

    - users: UserAPI
    - group_channels: GroupChannelAPI
    - open_channels: OpenChannelAPI
    - messages: MessageAPI
    - moderation: ModerationAPI

    Args:
        settings: Connection settings
        transport: Optional httpx transport (tests mount a fake server here)
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._http = httpx.AsyncClient(
            base_url=settings.base_url,
            headers={
                "Content-Type": "application/json; charset=utf8",
                API_TOKEN_HEADER: settings.api_token,
            },
            timeout=settings.timeout,
            transport=transport,
        )
        self.users = UserAPI(self)
        self.group_channels = GroupChannelAPI(self)
        self.open_channels = OpenChannelAPI(self)
        self.messages = MessageAPI(self)
        self.moderation = ModerationAPI(self)

        logger.debug(f"[API] PlatformAPI initialized, base_url={settings.base_url}")

    @property
    def settings(self) -> Settings:
        return self._settings

    async def request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """
        Send one request and decode the response.

        Raises:
            PlatformAPIError: If the response status is >= 400
            PlatformTimeoutError: If the request timed out
            PlatformConnectionError: If no response was received
        """
        if params is not None:
            params = _compact(params)
        logger.debug(f"[API] {method} {path} params={params} body={json}")

        try:
            response = await self._http.request(method, path, json=json, params=params)
        except httpx.TimeoutException as e:
            raise PlatformTimeoutError(
                timeout=self._settings.timeout,
                message=f"{method} {path} timed out after {self._settings.timeout}s",
            ) from e
        except httpx.HTTPError as e:
            raise PlatformConnectionError(
                f"{method} {path} failed: {type(e).__name__}: {e}"
            ) from e

        if response.status_code >= 400:
            error = PlatformAPIError.from_response(response)
            logger.debug(f"[API] {method} {path} -> {error}")
            raise error

        data: Any = response.json() if response.content else {}
        logger.debug(f"[API] {method} {path} -> {response.status_code}")
        return ApiResponse(status=response.status_code, data=data, headers=response.headers)

    async def close(self) -> None:
        """Close the underlying HTTP client. Safe to call multiple times."""
        if not self._http.is_closed:
            await self._http.aclose()
            logger.debug("[API] HTTP client closed")

    @property
    def is_closed(self) -> bool:
        return self._http.is_closed

    async def __aenter__(self) -> PlatformAPI:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class _Namespace:
    __slots__ = ("_api",)

    def __init__(self, api: PlatformAPI):
        self._api = api


class UserAPI(_Namespace):
    """``/users`` endpoints."""

    async def create(
        self,
        user_id: str,
        nickname: str,
        profile_url: str | None = None,
        issue_access_token: bool | None = None,
        metadata: dict[str, str] | None = None,
    ) -> ApiResponse:
        return await self._api.request(
            "POST",
            "/users",
            json=_compact(
                {
                    "user_id": user_id,
                    "nickname": nickname,
                    "profile_url": profile_url or "",
                    "issue_access_token": issue_access_token,
                    "metadata": metadata,
                }
            ),
        )

    async def get(self, user_id: str) -> ApiResponse:
        return await self._api.request("GET", f"/users/{_segment(user_id)}")

    async def update(
        self,
        user_id: str,
        nickname: str | None = None,
        profile_url: str | None = None,
        is_active: bool | None = None,
    ) -> ApiResponse:
        return await self._api.request(
            "PUT",
            f"/users/{_segment(user_id)}",
            json=_compact(
                {"nickname": nickname, "profile_url": profile_url, "is_active": is_active}
            ),
        )

    async def delete(self, user_id: str) -> ApiResponse:
        return await self._api.request("DELETE", f"/users/{_segment(user_id)}")

    async def list(self, limit: int = DEFAULT_LIST_LIMIT, token: str | None = None) -> ApiResponse:
        return await self._api.request("GET", "/users", params={"limit": limit, "token": token})

    async def my_group_channels(
        self,
        user_id: str,
        limit: int = DEFAULT_LIST_LIMIT,
        show_empty: bool = False,
        custom_types: Iterable[str] | None = None,
        token: str | None = None,
    ) -> ApiResponse:
        params: dict[str, Any] = {
            "limit": limit,
            "show_empty": str(show_empty).lower(),
            "show_member": "true",
            "token": token,
        }
        if custom_types:
            params["custom_types"] = ",".join(custom_types)
        return await self._api.request(
            "GET", f"/users/{_segment(user_id)}/my_group_channels", params=params
        )


class GroupChannelAPI(_Namespace):
    """``/group_channels`` endpoints."""

    async def create(
        self,
        name: str | None,
        user_ids: list[str],
        is_distinct: bool = False,
        custom_type: str | None = None,
        data: str | None = None,
        operator_ids: list[str] | None = None,
    ) -> ApiResponse:
        return await self._api.request(
            "POST",
            "/group_channels",
            json=_compact(
                {
                    "name": name,
                    "user_ids": user_ids,
                    "is_distinct": is_distinct,
                    "custom_type": custom_type,
                    "data": data,
                    "operator_ids": operator_ids,
                }
            ),
        )

    async def get(self, channel_url: str, show_member: bool = False) -> ApiResponse:
        params = {"show_member": "true"} if show_member else None
        return await self._api.request(
            "GET", f"/group_channels/{_segment(channel_url)}", params=params
        )

    async def update(
        self,
        channel_url: str,
        name: str | None = None,
        custom_type: str | None = None,
        data: str | None = None,
    ) -> ApiResponse:
        return await self._api.request(
            "PUT",
            f"/group_channels/{_segment(channel_url)}",
            json=_compact({"name": name, "custom_type": custom_type, "data": data}),
        )

    async def delete(self, channel_url: str) -> ApiResponse:
        return await self._api.request("DELETE", f"/group_channels/{_segment(channel_url)}")

    async def list(self, limit: int = DEFAULT_LIST_LIMIT, token: str | None = None) -> ApiResponse:
        return await self._api.request(
            "GET", "/group_channels", params={"limit": limit, "token": token}
        )

    async def invite(self, channel_url: str, user_ids: list[str]) -> ApiResponse:
        return await self._api.request(
            "POST",
            f"/group_channels/{_segment(channel_url)}/invite",
            json={"user_ids": user_ids},
        )

    async def leave(self, channel_url: str, user_ids: list[str]) -> ApiResponse:
        return await self._api.request(
            "PUT",
            f"/group_channels/{_segment(channel_url)}/leave",
            json={"user_ids": user_ids},
        )

    async def list_members(self, channel_url: str, limit: int = DEFAULT_LIST_LIMIT) -> ApiResponse:
        return await self._api.request(
            "GET", f"/group_channels/{_segment(channel_url)}/members", params={"limit": limit}
        )

    async def is_member(self, channel_url: str, user_id: str) -> ApiResponse:
        return await self._api.request(
            "GET", f"/group_channels/{_segment(channel_url)}/members/{_segment(user_id)}"
        )

    async def start_typing(self, channel_url: str, user_ids: list[str]) -> ApiResponse:
        return await self._api.request(
            "POST",
            f"/group_channels/{_segment(channel_url)}/typing",
            json={"user_ids": user_ids},
        )

    async def end_typing(self, channel_url: str, user_ids: list[str]) -> ApiResponse:
        return await self._api.request(
            "DELETE",
            f"/group_channels/{_segment(channel_url)}/typing",
            json={"user_ids": user_ids},
        )

    async def mark_as_read(self, channel_url: str, user_id: str) -> ApiResponse:
        return await self._api.request(
            "PUT",
            f"/group_channels/{_segment(channel_url)}/messages/mark_as_read",
            json={"user_id": user_id},
        )


class OpenChannelAPI(_Namespace):
    """``/open_channels`` endpoints."""

    async def create(
        self,
        name: str | None = None,
        custom_type: str | None = None,
        channel_url: str | None = None,
        data: str | None = None,
        cover_url: str | None = None,
        operator_ids: list[str] | None = None,
    ) -> ApiResponse:
        return await self._api.request(
            "POST",
            "/open_channels",
            json=_compact(
                {
                    "name": name,
                    "custom_type": custom_type,
                    "channel_url": channel_url,
                    "data": data,
                    "cover_url": cover_url,
                    "operator_ids": operator_ids,
                }
            ),
        )

    async def get(self, channel_url: str) -> ApiResponse:
        return await self._api.request("GET", f"/open_channels/{_segment(channel_url)}")

    async def update(
        self,
        channel_url: str,
        name: str | None = None,
        custom_type: str | None = None,
        data: str | None = None,
    ) -> ApiResponse:
        return await self._api.request(
            "PUT",
            f"/open_channels/{_segment(channel_url)}",
            json=_compact({"name": name, "custom_type": custom_type, "data": data}),
        )

    async def delete(self, channel_url: str) -> ApiResponse:
        return await self._api.request("DELETE", f"/open_channels/{_segment(channel_url)}")

    async def list(
        self,
        limit: int = DEFAULT_LIST_LIMIT,
        custom_types: Iterable[str] | None = None,
        name_contains: str | None = None,
        token: str | None = None,
    ) -> ApiResponse:
        params: dict[str, Any] = {"limit": limit, "name_contains": name_contains, "token": token}
        if custom_types:
            params["custom_types"] = ",".join(custom_types)
        return await self._api.request("GET", "/open_channels", params=params)


class MessageAPI(_Namespace):
    """``/{channel_type}/{channel_url}/messages`` endpoints."""

    def _path(self, channel_type: ChannelType, channel_url: str) -> str:
        return f"/{ChannelType(channel_type).value}/{_segment(channel_url)}/messages"

    async def send(
        self,
        channel_url: str,
        user_id: str,
        message: str,
        custom_type: str | None = None,
        data: str | None = None,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "POST",
            self._path(channel_type, channel_url),
            json=_compact(
                {
                    "message_type": MESSAGE_TYPE_USER,
                    "user_id": user_id,
                    "message": message,
                    "custom_type": custom_type,
                    "data": data,
                }
            ),
        )

    async def get(
        self,
        channel_url: str,
        message_id: int,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "GET", f"{self._path(channel_type, channel_url)}/{message_id}"
        )

    async def update(
        self,
        channel_url: str,
        message_id: int,
        message: str | None = None,
        custom_type: str | None = None,
        data: str | None = None,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "PUT",
            f"{self._path(channel_type, channel_url)}/{message_id}",
            json=_compact(
                {
                    "message_type": MESSAGE_TYPE_USER,
                    "message": message,
                    "custom_type": custom_type,
                    "data": data,
                }
            ),
        )

    async def delete(
        self,
        channel_url: str,
        message_id: int,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "DELETE", f"{self._path(channel_type, channel_url)}/{message_id}"
        )

    async def list(
        self,
        channel_url: str,
        limit: int = DEFAULT_LIST_LIMIT,
        message_ts: int | None = None,
        next_limit: int = 0,
        include: bool = True,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "GET",
            self._path(channel_type, channel_url),
            params={
                "message_ts": message_ts if message_ts is not None else current_millis(),
                "prev_limit": limit,
                "next_limit": next_limit,
                "include": str(include).lower(),
            },
        )


class ModerationAPI(_Namespace):
    """Ban, mute and freeze endpoints, for either channel type."""

    def _path(self, channel_type: ChannelType, channel_url: str, action: str) -> str:
        return f"/{ChannelType(channel_type).value}/{_segment(channel_url)}/{action}"

    async def ban(
        self,
        channel_url: str,
        user_id: str,
        seconds: int = -1,
        description: str | None = None,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "POST",
            self._path(channel_type, channel_url, "ban"),
            json=_compact({"user_id": user_id, "seconds": seconds, "description": description}),
        )

    async def unban(
        self,
        channel_url: str,
        user_id: str,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "DELETE", f"{self._path(channel_type, channel_url, 'ban')}/{_segment(user_id)}"
        )

    async def list_bans(
        self,
        channel_url: str,
        limit: int = DEFAULT_LIST_LIMIT,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "GET", self._path(channel_type, channel_url, "ban"), params={"limit": limit}
        )

    async def mute(
        self,
        channel_url: str,
        user_id: str,
        seconds: int = -1,
        description: str | None = None,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "POST",
            self._path(channel_type, channel_url, "mute"),
            json=_compact({"user_id": user_id, "seconds": seconds, "description": description}),
        )

    async def unmute(
        self,
        channel_url: str,
        user_id: str,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "DELETE", f"{self._path(channel_type, channel_url, 'mute')}/{_segment(user_id)}"
        )

    async def get_mute(
        self,
        channel_url: str,
        user_id: str,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "GET", f"{self._path(channel_type, channel_url, 'mute')}/{_segment(user_id)}"
        )

    async def list_mutes(
        self,
        channel_url: str,
        limit: int = DEFAULT_LIST_LIMIT,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "GET", self._path(channel_type, channel_url, "mute"), params={"limit": limit}
        )

    async def freeze(
        self,
        channel_url: str,
        freeze: bool = True,
        channel_type: ChannelType = ChannelType.GROUP,
    ) -> ApiResponse:
        return await self._api.request(
            "PUT",
            self._path(channel_type, channel_url, "freeze"),
            json={"freeze": freeze},
        )
