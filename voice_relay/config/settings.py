"""
Environment-driven settings for the relay and the recording pipeline.

Values are read from the process environment (optionally populated from a
``.env`` file by ``voice_relay.main``) into a single pydantic model so that
handlers can receive them through FastAPI dependency injection and tests can
build them directly.
"""

import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel

from voice_relay.config.constants import DEFAULT_REALTIME_MODEL, DEFAULT_VOICE

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env(*names: str) -> Optional[str]:
    """Return the first non-empty environment variable among ``names``."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


class Settings(BaseModel):
    """Runtime configuration for a relay process."""

    openai_api_key: Optional[str] = None
    realtime_model: str = DEFAULT_REALTIME_MODEL
    voice: str = DEFAULT_VOICE

    owner_name: str = "Allen"
    business_name: str = "AI Phone Agent"

    # Barge in on every caller frame while a response is playing, not only on
    # provider speech_started events
    barge_in_on_media: bool = True

    public_base_url: Optional[str] = None
    recording_webhook_secret: Optional[str] = None
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None

    resend_api_key: Optional[str] = None
    email_from: Optional[str] = None
    email_to: Optional[str] = None

    @property
    def email_configured(self) -> bool:
        return bool(self.resend_api_key and self.email_from and self.email_to)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        values = {
            "openai_api_key": _env("OPENAI_API_KEY", "OPENAI_KEY"),
            "realtime_model": _env("OPENAI_REALTIME_MODEL", "VOICE_MODEL"),
            "voice": _env("OPENAI_VOICE"),
            "owner_name": _env("OWNER_NAME"),
            "business_name": _env("BUSINESS_NAME"),
            "public_base_url": _env("PUBLIC_BASE_URL"),
            "recording_webhook_secret": _env("RECORDING_WEBHOOK_SECRET"),
            "twilio_account_sid": _env("TWILIO_ACCOUNT_SID"),
            "twilio_auth_token": _env("TWILIO_AUTH_TOKEN"),
            "resend_api_key": _env("RESEND_API_KEY"),
            "email_from": _env("EMAIL_FROM"),
            "email_to": _env("EMAIL_TO"),
        }
        barge_in = _env("BARGE_IN_ON_MEDIA")
        if barge_in is not None:
            values["barge_in_on_media"] = barge_in.strip().lower() in _TRUE_VALUES

        # Unset variables fall back to the model defaults
        return cls(**{key: value for key, value in values.items() if value is not None})


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, read once from the environment."""
    return Settings.from_env()
