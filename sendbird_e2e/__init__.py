"""
Sendbird end-to-end test automation.

This package holds the reusable half of the suite: a thin async wrapper
around the Sendbird Platform API, an SDK-shaped session harness built on
top of it, and the fixture lifecycle that keeps test runs from leaking
remote resources.

Pattern: Explicit session handles
- Every suite gets its own SuiteContext (API client, tracker, SDK session)
- Everything a test creates is tracked and removed best-effort afterwards
- Cleanup failures are logged at debug level, never raised

Usage:
    ```python
    from sendbird_e2e import Settings, suite_context

    async with suite_context(Settings.from_env().require_credentials()) as ctx:
        owner = await ctx.create_user("owner")
        await ctx.create_group_channel("Room", [owner])
    ```

Prerequisites:
    - SENDBIRD_APP_ID and SENDBIRD_API_TOKEN in the environment or a .env file
    - RUN_LIVE_TESTS=1 to run the e2e suites against the real service
"""

from __future__ import annotations

from ._constants import ChannelType, ConnectionState
from .api import ApiResponse, PlatformAPI
from .assertions import assert_api_error, assert_has_fields, expect_api_error
from .callbacks import CallbackBridge, await_callbacks
from .channels import (
    GroupChannel,
    GroupChannelCreateParams,
    MessageListParams,
    MessageRequest,
    OpenChannel,
    OpenChannelCreateParams,
    UserMessageCreateParams,
    UserMessageUpdateParams,
)
from .config import Settings
from .exceptions import (
    CallbackError,
    ChatSessionError,
    ConfigurationError,
    PlatformAPIError,
    PlatformConnectionError,
    PlatformTimeoutError,
    SendbirdE2EError,
)
from .handlers import (
    ChannelHandler,
    ConnectionHandler,
    GroupChannelHandler,
    HandlerRegistry,
    OpenChannelHandler,
)
from .harness import SuiteContext, suite_context
from .identifiers import generate_test_id, unique_name
from .lifecycle import CleanupHandle, CleanupOutcome, ResourceTracker, best_effort, ignore_errors
from .models import User, UserMessage
from .sdk import SendbirdChat

__version__ = "1.0.0"

__all__ = [
    # Platform API
    "ApiResponse",
    "PlatformAPI",
    # SDK harness
    "SendbirdChat",
    "OpenChannel",
    "GroupChannel",
    "MessageRequest",
    "OpenChannelCreateParams",
    "GroupChannelCreateParams",
    "UserMessageCreateParams",
    "UserMessageUpdateParams",
    "MessageListParams",
    "ConnectionHandler",
    "ChannelHandler",
    "OpenChannelHandler",
    "GroupChannelHandler",
    "HandlerRegistry",
    # Records
    "User",
    "UserMessage",
    "ChannelType",
    "ConnectionState",
    # Lifecycle
    "SuiteContext",
    "suite_context",
    "ResourceTracker",
    "CleanupHandle",
    "CleanupOutcome",
    "ignore_errors",
    "best_effort",
    "CallbackBridge",
    "await_callbacks",
    "generate_test_id",
    "unique_name",
    # Assertions
    "assert_api_error",
    "assert_has_fields",
    "expect_api_error",
    # Configuration
    "Settings",
    # Exceptions
    "SendbirdE2EError",
    "ConfigurationError",
    "PlatformAPIError",
    "PlatformConnectionError",
    "PlatformTimeoutError",
    "ChatSessionError",
    "CallbackError",
]
