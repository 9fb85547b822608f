import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.websockets import WebSocketState

from voice_relay.config.settings import Settings
from voice_relay.models.call_session import CallSession


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


@pytest.fixture
def settings():
    """Settings with every integration configured."""
    return Settings(
        openai_api_key="test-api-key",
        realtime_model="gpt-4o-realtime-preview-test",
        public_base_url="https://relay.example.com",
        recording_webhook_secret="s3cret",
        twilio_account_sid="AC123",
        twilio_auth_token="twilio-token",
        resend_api_key="re_test",
        email_from="calls@example.com",
        email_to="owner@example.com",
    )


@pytest.fixture
def call_session():
    return CallSession(call_id="test-call")


@pytest.fixture
def mock_websocket():
    """An accepted FastAPI WebSocket."""
    websocket = MagicMock()
    websocket.client_state = WebSocketState.CONNECTED
    websocket.application_state = WebSocketState.CONNECTED
    websocket.accept = AsyncMock()
    websocket.send_text = AsyncMock()
    websocket.receive_text = AsyncMock()
    websocket.close = AsyncMock()
    return websocket
