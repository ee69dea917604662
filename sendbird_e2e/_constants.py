"""Constants for the Sendbird end-to-end suite.

This module defines constants used across the API wrapper, the SDK harness
and the test suites, following the principle of single source of truth.

Error Code Philosophy:
- The vendor's error taxonomy is not stable across API versions; the same
  logical condition (e.g. "user not found") has been observed with more than
  one numeric code.
- Negative tests therefore assert against an ALLOW-LIST of acceptable codes
  rather than a single canonical value. Keep these sets in sync with
  https://sendbird.com/docs/chat/platform-api/v3/error-codes

"""

from enum import Enum

# ═══════════════════════════════════════════════════════════════════════════════
# Environment
# ═══════════════════════════════════════════════════════════════════════════════

ENV_APP_ID = "SENDBIRD_APP_ID"
ENV_API_TOKEN = "SENDBIRD_API_TOKEN"
ENV_API_BASE_URL = "SENDBIRD_API_BASE_URL"
ENV_TIMEOUT = "SENDBIRD_TIMEOUT"
ENV_RUN_LIVE = "RUN_LIVE_TESTS"

# Platform API endpoint template; {app_id} is the application identifier
API_BASE_URL_TEMPLATE = "https://api-{app_id}.sendbird.com/v3"
API_TOKEN_HEADER = "Api-Token"

# Request timeout in seconds. The runner's own timeout is the outer bound.
DEFAULT_TIMEOUT = 30.0

# ═══════════════════════════════════════════════════════════════════════════════
# Vendor field limits (Platform API v3 documentation)
# ═══════════════════════════════════════════════════════════════════════════════

MAX_USER_ID_LENGTH = 80
MAX_NICKNAME_LENGTH = 80
MAX_PROFILE_URL_LENGTH = 2048
MAX_CHANNEL_NAME_LENGTH = 191

DEFAULT_LIST_LIMIT = 10
MESSAGE_TYPE_USER = "MESG"

# ═══════════════════════════════════════════════════════════════════════════════
# Vendor error codes
# ═══════════════════════════════════════════════════════════════════════════════

RESOURCE_NOT_FOUND = 400201
RESOURCE_ALREADY_EXISTS = 400202
USER_NOT_FOUND = 400301
INVALID_API_TOKEN = 400401

# "user/resource not found": 400201 ResourceNotFound, 400301 UserNotFound
USER_NOT_FOUND_CODES: frozenset[int] = frozenset({RESOURCE_NOT_FOUND, USER_NOT_FOUND})

# user_id longer than MAX_USER_ID_LENGTH
USER_ID_TOO_LONG_CODES: frozenset[int] = frozenset({400305, 400110})

# empty user_id
EMPTY_USER_ID_CODES: frozenset[int] = frozenset({400105, 400151, 400111})

# ═══════════════════════════════════════════════════════════════════════════════
# Performance thresholds (milliseconds)
# ═══════════════════════════════════════════════════════════════════════════════

CONNECT_TIME_LIMIT_MS = 3000
SDK_MESSAGE_SEND_LIMIT_MS = 2000
SDK_SEQUENTIAL_SEND_AVG_LIMIT_MS = 1000
API_MESSAGE_SEND_LIMIT_MS = 3000
API_SEQUENTIAL_SEND_AVG_LIMIT_MS = 2000


class ChannelType(str, Enum):
    """Channel variants, valued by their Platform API path segment."""

    OPEN = "open_channels"
    GROUP = "group_channels"


class ConnectionState(str, Enum):
    """Connection states reported by the SDK harness."""

    OPEN = "OPEN"
    CONNECTING = "CONNECTING"
    CLOSED = "CLOSED"
