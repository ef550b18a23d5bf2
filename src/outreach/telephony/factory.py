"""
Telephony provider factory.

Single source of truth for configuration: ``TelephonyConfig`` (Pydantic
Settings), loaded from OS env + .env.
"""

from __future__ import annotations

import logging

from outreach.telephony.adapters.mock import MockTelephonyProvider
from outreach.telephony.adapters.retell import RetellAdapter
from outreach.telephony.config import ProviderType, TelephonyConfig
from outreach.telephony.interface import TelephonyProvider

logger = logging.getLogger(__name__)


def _mask(s: str, keep: int = 6) -> str:
    if not s:
        return ""
    if len(s) <= keep:
        return "*" * len(s)
    return f"{s[:keep]}***"


def create_telephony_provider(config: TelephonyConfig) -> TelephonyProvider:
    """Create the telephony provider selected by ``config.provider_type``."""
    logger.info(
        "Telephony config resolved",
        extra={
            "provider_type": config.provider_type.value,
            "retell_api_key": _mask(config.retell_api_key),
            "retell_agent_id": config.retell_agent_id,
            "retell_from_number": config.retell_from_number,
        },
    )

    if config.provider_type == ProviderType.RETELL:
        return RetellAdapter(config)

    if config.provider_type == ProviderType.MOCK:
        return MockTelephonyProvider(config)

    raise ValueError(f"Unsupported telephony provider_type: {config.provider_type}")
