"""
Configuration module for the telephony-to-realtime voice relay.

This module provides centralized configuration management for the entire application,
including constants, logging setup, and environment-based settings.

Key components:
- constants: Defines application-wide constants used across modules, including
  telephony and Realtime API event names, audio timing and buffer limits.
- logging_config: Provides a consistent logging infrastructure with support for
  console and file-based logging with rotation capabilities.
- settings: Environment-driven settings (API keys, webhook secret, email sender)
  collected into a pydantic model.

Usage examples:
```python
from voice_relay.config.constants import LOGGER_NAME, FRAME_DURATION_MS
from voice_relay.config.logging_config import configure_logging
from voice_relay.config.settings import get_settings

logger = configure_logging()
settings = get_settings()
logger.info(f"Realtime model: {settings.realtime_model}")
```
"""
