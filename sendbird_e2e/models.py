"""
Vendor records used by the SDK harness.

This module converts Platform API JSON payloads (snake_case) into the
immutable records the SDK harness hands back to tests.

All entities are opaque from this codebase's point of view:
- Identifiers are issued and deduplicated by the remote service
- Relationships (membership, ownership) are enforced remotely
- No local invariants beyond what the payload carries
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ._constants import ChannelType


@dataclass(frozen=True, slots=True)
class User:
    """
    A chat user as returned by the Platform API.

    Attributes:
        user_id: Unique user identifier (enforced remotely)
        nickname: Display name
        profile_url: Avatar URL, empty string when unset
        is_active: False once deactivated
        is_online: Presence flag at fetch time
        last_seen_at: Epoch millis of last activity, 0 or None if unknown
        metadata: Free-form string map
    """

    user_id: str
    nickname: str = ""
    profile_url: str = ""
    is_active: bool = True
    is_online: bool = False
    last_seen_at: int | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> User:
        return cls(
            user_id=payload["user_id"],
            nickname=payload.get("nickname") or "",
            profile_url=payload.get("profile_url") or "",
            is_active=payload.get("is_active", True),
            is_online=payload.get("is_online", False),
            last_seen_at=payload.get("last_seen_at"),
            metadata=dict(payload.get("metadata") or {}),
        )


@dataclass(frozen=True, slots=True)
class UserMessage:
    """
    A text message (vendor type ``MESG``).

    Attributes:
        message_id: Vendor-issued numeric id
        message: Message text
        custom_type: Optional application-defined type
        data: Optional application payload (usually a JSON string)
        channel_url: URL of the channel the message belongs to
        channel_type: Variant of that channel
        created_at: Epoch millis
        updated_at: Epoch millis of last edit, 0 if never edited
        sender: Author, None for admin messages
    """

    message_id: int
    message: str
    channel_url: str
    channel_type: ChannelType
    custom_type: str = ""
    data: str = ""
    created_at: int = 0
    updated_at: int = 0
    sender: User | None = None

    @classmethod
    def from_payload(
        cls,
        payload: dict[str, Any],
        channel_type: ChannelType | None = None,
    ) -> UserMessage:
        raw_type = payload.get("channel_type")
        if channel_type is None:
            channel_type = ChannelType.OPEN if raw_type == "open" else ChannelType.GROUP
        sender_payload = payload.get("user")
        return cls(
            message_id=int(payload["message_id"]),
            message=payload.get("message", ""),
            channel_url=payload.get("channel_url", ""),
            channel_type=channel_type,
            custom_type=payload.get("custom_type") or "",
            data=payload.get("data") or "",
            created_at=payload.get("created_at", 0),
            updated_at=payload.get("updated_at", 0),
            sender=User.from_payload(sender_payload) if sender_payload else None,
        )
