"""
Telephony provider and outcome-normalization configuration.

Both objects are built once at application startup and passed to the
components that need them; missing provider credentials fail fast there.
"""

from enum import Enum

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderType(str, Enum):
    """Supported telephony provider types."""

    RETELL = "retell"
    MOCK = "mock"


class TelephonyConfig(BaseSettings):
    """Telephony provider configuration from environment."""

    model_config = SettingsConfigDict(
        env_prefix="TELEPHONY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Provider selection
    provider_type: ProviderType = Field(default=ProviderType.RETELL)

    # Provider credentials
    retell_api_key: str = Field(default="")
    retell_agent_id: str = Field(default="")
    retell_from_number: str = Field(default="")
    retell_base_url: str = Field(default="https://api.retellai.com")

    request_timeout_seconds: float = Field(default=30.0, gt=0, le=300)

    @model_validator(mode="after")
    def require_retell_credentials(self) -> "TelephonyConfig":
        """Reject a Retell provider selection without its credentials."""
        if self.provider_type == ProviderType.RETELL:
            missing = [
                name
                for name in ("retell_api_key", "retell_agent_id", "retell_from_number")
                if not getattr(self, name)
            ]
            if missing:
                env_names = ", ".join(f"TELEPHONY_{name.upper()}" for name in missing)
                raise ValueError(f"Retell provider not configured; set {env_names}")
        return self

    def get_api_url(self, path: str = "/v2/create-phone-call") -> str:
        base = self.retell_base_url.rstrip("/")
        return f"{base}{path}"


class OutcomeConfig(BaseSettings):
    """Policy values used when normalizing call outcomes."""

    model_config = SettingsConfigDict(
        env_prefix="OUTCOME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Conversation-occurred heuristic: strictly greater than these values.
    min_transcript_chars: int = Field(default=10, ge=0)
    min_duration_seconds: int = Field(default=10, ge=0)

    no_transcript_marker: str = Field(default="No transcript available", min_length=1)


def get_telephony_config() -> TelephonyConfig:
    return TelephonyConfig()


def get_outcome_config() -> OutcomeConfig:
    return OutcomeConfig()
