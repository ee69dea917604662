"""
Fixtures for the end-to-end suites.

The suites run against the in-memory fake platform by default. With
RUN_LIVE_TESTS=1 (and SENDBIRD_APP_ID / SENDBIRD_API_TOKEN set, or present
in a .env file) the same tests hit the real Sendbird service:

    RUN_LIVE_TESTS=1 pytest tests/e2e -v

WARNING: live runs create and delete real users and channels in the
configured application.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest

from sendbird_e2e.config import Settings
from sendbird_e2e.harness import SuiteContext, suite_context

_E2E_DIR = Path(__file__).parent


def pytest_collection_modifyitems(items):
    for item in items:
        if _E2E_DIR in item.path.parents:
            item.add_marker(pytest.mark.e2e)


@pytest.fixture(scope="session")
def env_settings() -> Settings:
    """Settings from the environment, read once per run."""
    return Settings.from_env()


@pytest.fixture
def e2e_settings(env_settings, settings) -> Settings:
    if env_settings.run_live:
        return env_settings.require_credentials()
    return settings


@pytest.fixture
def platform_transport(e2e_settings, fake_platform) -> httpx.AsyncBaseTransport | None:
    """None for live runs, so httpx uses its real network transport."""
    if e2e_settings.run_live:
        return None
    return fake_platform.transport()


@pytest.fixture
async def ctx(request, e2e_settings, platform_transport) -> AsyncIterator[SuiteContext]:
    """Per-test suite context; everything it tracked is deleted afterwards."""
    async with suite_context(e2e_settings, platform_transport, name=request.node.name) as context:
        yield context


@pytest.fixture
def is_live(e2e_settings) -> bool:
    return e2e_settings.run_live
