from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from voice_relay.config.settings import Settings, get_settings
from voice_relay.main import app, get_recording_store, media_stream_manager
from voice_relay.services.recording_store import RecordingStore

client = TestClient(app)


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture(autouse=True)
def overrides(settings, store):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_recording_store] = lambda: store
    yield
    app.dependency_overrides.clear()


def test_health_check():
    """Test the health check endpoint returns correct response"""
    response = client.get("/health")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["status"] == "healthy"
    assert response_json["openai_api_key_configured"] is True
    assert response_json["active_calls"] == 0


def test_health_check_without_api_key():
    app.dependency_overrides[get_settings] = lambda: Settings()

    response = client.get("/health")

    assert response.json()["openai_api_key_configured"] is False


def test_root_endpoint():
    """Test the root endpoint returns the correct API information"""
    response = client.get("/")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["name"] == "Voice Relay"
    assert response_json["version"] == "1.0.0"
    assert "/media" in response_json["endpoints"]
    assert "/voice" in response_json["endpoints"]
    assert "/health" in response_json["endpoints"]


def test_voice_webhook_returns_twiml():
    response = client.post("/voice", headers={"host": "relay.example.com"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/xml")
    assert '<Stream url="wss://relay.example.com/media"/>' in response.text
    assert "recording-status?secret=s3cret" in response.text


def test_voice_webhook_requires_public_base_url(settings):
    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"public_base_url": None})

    response = client.post("/voice")

    assert response.status_code == 500
    assert "PUBLIC_BASE_URL" in response.text


def test_voice_webhook_requires_webhook_secret(settings):
    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"recording_webhook_secret": None})

    response = client.post("/voice")

    assert response.status_code == 500
    assert "RECORDING_WEBHOOK_SECRET" in response.text


@patch("voice_relay.main.process_recording")
def test_recording_status_rejects_bad_secret(mock_process):
    response = client.post("/recording-status?secret=wrong", data={"RecordingStatus": "completed"})

    assert response.status_code == 403
    mock_process.assert_not_called()


@patch("voice_relay.main.process_recording")
def test_recording_status_rejects_missing_secret(mock_process):
    response = client.post("/recording-status", data={"RecordingStatus": "completed"})

    assert response.status_code == 403
    mock_process.assert_not_called()


@patch("voice_relay.main.process_recording")
def test_recording_status_rejects_partial_and_non_ascii_secret(mock_process):
    for secret in ["s3cre", "s3cret2", "s%C3%A9cret"]:
        response = client.post(f"/recording-status?secret={secret}", data={"RecordingStatus": "completed"})
        assert response.status_code == 403

    mock_process.assert_not_called()


@patch("voice_relay.main.process_recording")
def test_recording_status_rejects_when_secret_not_configured(mock_process, settings):
    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"recording_webhook_secret": None})

    response = client.post("/recording-status?secret=", data={"RecordingStatus": "completed"})

    assert response.status_code == 403
    mock_process.assert_not_called()


@patch("voice_relay.main.process_recording")
def test_recording_status_schedules_processing(mock_process, settings, store):
    form = {
        "AccountSid": "AC123",
        "CallSid": "CA1",
        "RecordingSid": "RE1",
        "RecordingUrl": "https://api.twilio.com/rec/RE1",
        "RecordingStatus": "completed",
        "RecordingDuration": "42",
    }

    response = client.post("/recording-status?secret=s3cret", data=form)

    assert response.status_code == 200
    assert response.text == "OK"
    callback, called_settings, called_store = mock_process.call_args.args
    assert callback.RecordingSid == "RE1"
    assert callback.is_complete
    assert called_settings is settings
    assert called_store is store


def test_listen_serves_stored_recording(store):
    token = store.put(b"ID3-mp3-bytes")

    response = client.get(f"/listen/{token}")

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.headers["content-disposition"] == 'inline; filename="call.mp3"'
    assert response.content == b"ID3-mp3-bytes"


def test_listen_unknown_token():
    response = client.get("/listen/does-not-exist")

    assert response.status_code == 404
    assert response.text == "Not found (expired or invalid)."


def test_websocket_endpoint_initialization():
    """Test that media_stream_manager is properly initialized"""
    assert media_stream_manager is not None
    assert media_stream_manager.active_calls == {}


@pytest.mark.asyncio
async def test_websocket_endpoint():
    """Test that websocket endpoint calls the handle_websocket method"""
    with patch("voice_relay.main.media_stream_manager.handle_websocket") as mock_handle:
        mock_handle.return_value = None
        websocket_route = next(route for route in app.routes if route.path == "/media")

        await websocket_route.endpoint("websocket")

        mock_handle.assert_called_once_with("websocket")
