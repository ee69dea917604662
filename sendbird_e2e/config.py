"""Settings for the Sendbird end-to-end suite.

Values come from the process environment, optionally seeded from a ``.env``
file. Nothing here talks to the network.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import load_dotenv

from ._constants import (
    API_BASE_URL_TEMPLATE,
    DEFAULT_TIMEOUT,
    ENV_API_BASE_URL,
    ENV_API_TOKEN,
    ENV_APP_ID,
    ENV_RUN_LIVE,
    ENV_TIMEOUT,
)
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Connection settings for the Platform API and the SDK harness.

    Attributes:
        app_id: Sendbird application identifier
        api_token: Master or secondary API token sent as ``Api-Token``
        api_base_url: Explicit base URL; derived from app_id when None
        timeout: Per-request timeout in seconds
        run_live: True when the suites should hit the real service
    """

    app_id: str
    api_token: str
    api_base_url: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    run_live: bool = False

    @property
    def base_url(self) -> str:
        if self.api_base_url:
            return self.api_base_url.rstrip("/")
        return API_BASE_URL_TEMPLATE.format(app_id=self.app_id)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        load_env_file: bool = True,
    ) -> Settings:
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``
            load_env_file: Load a ``.env`` file into ``os.environ`` first.
                Existing variables are never overridden.

        Raises:
            ConfigurationError: If SENDBIRD_TIMEOUT is not a positive number
        """
        if load_env_file and environ is None:
            load_dotenv(override=False)
        env = os.environ if environ is None else environ

        raw_timeout = env.get(ENV_TIMEOUT, "").strip()
        timeout = DEFAULT_TIMEOUT
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"{ENV_TIMEOUT} must be a number, got '{raw_timeout}'"
                ) from e
        if timeout <= 0:
            raise ConfigurationError(f"{ENV_TIMEOUT} must be positive, got {timeout}")

        settings = cls(
            app_id=env.get(ENV_APP_ID, "").strip(),
            api_token=env.get(ENV_API_TOKEN, "").strip(),
            api_base_url=env.get(ENV_API_BASE_URL, "").strip() or None,
            timeout=timeout,
            run_live=env.get(ENV_RUN_LIVE, "").strip().lower() in _TRUTHY,
        )
        logger.debug(
            f"[CONFIG] Loaded settings: app_id={settings.app_id or '<unset>'}, "
            f"token={'set' if settings.api_token else 'unset'}, "
            f"timeout={settings.timeout}s, live={settings.run_live}"
        )
        return settings

    def require_credentials(self) -> Settings:
        """
        Ensure both the app id and the API token are present.

        Returns:
            self, for chaining

        Raises:
            ConfigurationError: If either value is missing
        """
        missing = [
            name
            for name, value in ((ENV_APP_ID, self.app_id), (ENV_API_TOKEN, self.api_token))
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing Sendbird credentials: {', '.join(missing)}")
        return self

    def __repr__(self) -> str:
        return (
            f"Settings(app_id={self.app_id!r}, api_token='***', "
            f"api_base_url={self.api_base_url!r}, timeout={self.timeout}, "
            f"run_live={self.run_live})"
        )
