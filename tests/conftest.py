"""
Shared test fixtures for the Sendbird end-to-end package.

This module provides the offline doubles every test builds on:

- fake_platform: an in-memory Platform API (see fake_platform.py)
- settings: Settings pointing at that fake
- api / chat: clients mounted on the fake through httpx.MockTransport

Nothing here reads the real environment, so unit tests never depend on
credentials or on a local .env file.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from fake_platform import API_TOKEN, FakePlatform

from sendbird_e2e.api import PlatformAPI
from sendbird_e2e.config import Settings
from sendbird_e2e.sdk import SendbirdChat

TEST_APP_ID = "TEST-APP-ID"


@pytest.fixture
def fake_platform() -> FakePlatform:
    """Fresh fake service per test; state never leaks between tests."""
    return FakePlatform()


@pytest.fixture
def settings() -> Settings:
    return Settings(app_id=TEST_APP_ID, api_token=API_TOKEN, timeout=5.0)


@pytest.fixture
async def api(settings, fake_platform) -> AsyncIterator[PlatformAPI]:
    client = PlatformAPI(settings, transport=fake_platform.transport())
    yield client
    await client.close()


@pytest.fixture
async def chat(settings, fake_platform) -> AsyncIterator[SendbirdChat]:
    sb = SendbirdChat.init(settings, transport=fake_platform.transport())
    yield sb
    await sb.close()


@pytest.fixture
async def connected_chat(chat) -> SendbirdChat:
    """SDK session already connected as ``alice``."""
    await chat.connect("alice")
    return chat
