"""Client configuration loaded once at startup."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://console.jumpcloud.com"
DEFAULT_TIMEOUT = 30.0

ENV_API_KEY = "RECONCILIK_API_KEY"
ENV_ORG_ID = "RECONCILIK_ORG_ID"
ENV_API_URL = "RECONCILIK_API_URL"
ENV_TIMEOUT = "RECONCILIK_TIMEOUT"


class ClientConfig(BaseModel):
    """Credential, tenant scope and endpoint settings for a client.

    Instances are frozen; a client holds one for its whole lifetime.
    """

    model_config = ConfigDict(frozen=True)

    api_key: SecretStr
    org_id: str = ""
    base_url: str = DEFAULT_API_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)

    @field_validator("api_key")
    @classmethod
    def _require_api_key(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("api_key must not be empty")
        return value

    @field_validator("org_id")
    @classmethod
    def _strip_org_id(cls, value: str) -> str:
        return value.strip()

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        # versioned prefixes carry /api, so accept overrides that include it
        url = value.strip().rstrip("/") or DEFAULT_API_URL
        if url.endswith("/api"):
            url = url[: -len("/api")]
        return url

    @property
    def tenant_scoped(self) -> bool:
        return bool(self.org_id)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Load configuration from environment variables."""
        env = os.environ if environ is None else environ

        api_key = env.get(ENV_API_KEY, "")
        if not api_key.strip():
            raise ValueError(f"{ENV_API_KEY} environment variable must be set")

        raw_timeout = env.get(ENV_TIMEOUT, "")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ValueError(f"{ENV_TIMEOUT} must be a number, got '{raw_timeout}'") from None
        if timeout <= 0:
            raise ValueError(f"{ENV_TIMEOUT} must be positive, got '{raw_timeout}'")

        config = cls(
            api_key=SecretStr(api_key),
            org_id=env.get(ENV_ORG_ID, ""),
            base_url=env.get(ENV_API_URL, "") or DEFAULT_API_URL,
            timeout=timeout,
        )
        logger.debug(
            "Loaded client config for %s (tenant scoped: %s)",
            config.base_url,
            config.tenant_scoped,
        )
        return config
