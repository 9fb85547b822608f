import json
from unittest.mock import AsyncMock

import pytest
from fastapi import WebSocketDisconnect
from starlette.websockets import WebSocketState

from voice_relay.handlers.stream_handlers import TelephonyStream


def start_message(stream_sid="MZ123", call_sid="CA456"):
    return json.dumps({
        "event": "start",
        "streamSid": stream_sid,
        "start": {"streamSid": stream_sid, "callSid": call_sid},
    })


def media_message(payload):
    return json.dumps({"event": "media", "streamSid": "MZ123", "media": {"payload": payload}})


def sent_messages(websocket):
    return [json.loads(c.args[0]) for c in websocket.send_text.await_args_list]


@pytest.fixture
def telephony(call_session, mock_websocket):
    return TelephonyStream(call_session, mock_websocket)


@pytest.mark.asyncio
class TestTelephonyStream:

    async def test_start_records_stream_identity(self, telephony, call_session):
        await telephony.handle_message(start_message())

        assert call_session.stream_sid == "MZ123"
        assert call_session.call_sid == "CA456"

    async def test_media_payload_goes_to_audio_handler(self, telephony):
        audio_handler = AsyncMock()
        telephony.set_event_handlers(audio_handler=audio_handler)

        await telephony.handle_message(media_message("//79/Q=="))

        audio_handler.assert_awaited_once_with("//79/Q==")

    async def test_media_without_payload_is_ignored(self, telephony):
        audio_handler = AsyncMock()
        telephony.set_event_handlers(audio_handler=audio_handler)

        await telephony.handle_message(media_message(""))
        await telephony.handle_message(json.dumps({"event": "media"}))

        audio_handler.assert_not_awaited()

    async def test_stop_calls_stop_handler(self, telephony):
        stop_handler = AsyncMock()
        telephony.set_event_handlers(stop_handler=stop_handler)

        await telephony.handle_message(json.dumps({"event": "stop", "streamSid": "MZ123"}))

        stop_handler.assert_awaited_once()

    async def test_unknown_and_malformed_messages_are_ignored(self, telephony, mock_websocket, call_session):
        audio_handler = AsyncMock()
        stop_handler = AsyncMock()
        telephony.set_event_handlers(audio_handler=audio_handler, stop_handler=stop_handler)

        await telephony.handle_message(json.dumps({"event": "connected", "protocol": "Call"}))
        await telephony.handle_message(json.dumps({"event": "mark", "mark": {"name": "m"}}))
        await telephony.handle_message("{not json")

        audio_handler.assert_not_awaited()
        stop_handler.assert_not_awaited()
        mock_websocket.send_text.assert_not_awaited()
        assert call_session.stream_sid is None

    async def test_audio_before_start_is_queued_then_flushed_in_order(self, telephony, call_session, mock_websocket):
        await telephony.send_audio("a1")
        await telephony.send_audio("a2")
        mock_websocket.send_text.assert_not_awaited()
        assert len(call_session.pending_outbound) == 2

        await telephony.handle_message(start_message())
        await telephony.send_audio("a3")

        assert sent_messages(mock_websocket) == [
            {"event": "media", "streamSid": "MZ123", "media": {"payload": "a1"}},
            {"event": "media", "streamSid": "MZ123", "media": {"payload": "a2"}},
            {"event": "media", "streamSid": "MZ123", "media": {"payload": "a3"}},
        ]
        assert len(call_session.pending_outbound) == 0

    async def test_audio_arriving_during_flush_stays_behind_backlog(self, telephony, call_session, mock_websocket):
        await telephony.send_audio("a1")
        await telephony.send_audio("a2")

        async def send_and_receive_more(text):
            if json.loads(text)["media"]["payload"] == "a1":
                await telephony.send_audio("late")

        mock_websocket.send_text.side_effect = send_and_receive_more

        await telephony.handle_message(start_message())

        assert [m["media"]["payload"] for m in sent_messages(mock_websocket)] == ["a1", "a2", "late"]

    async def test_clear_playback_sends_clear(self, telephony, mock_websocket):
        await telephony.handle_message(start_message())

        await telephony.clear_playback()

        assert sent_messages(mock_websocket) == [{"event": "clear", "streamSid": "MZ123"}]

    async def test_clear_playback_before_start_sends_nothing(self, telephony, mock_websocket):
        await telephony.clear_playback()
        mock_websocket.send_text.assert_not_awaited()

    async def test_send_on_disconnected_socket_is_dropped(self, telephony, mock_websocket):
        await telephony.handle_message(start_message())
        mock_websocket.client_state = WebSocketState.DISCONNECTED

        await telephony.send_audio("a1")

        mock_websocket.send_text.assert_not_awaited()

    async def test_send_failure_is_swallowed(self, telephony, mock_websocket):
        await telephony.handle_message(start_message())
        mock_websocket.send_text.side_effect = WebSocketDisconnect()

        await telephony.send_audio("a1")
        await telephony.clear_playback()

    async def test_close_is_idempotent(self, telephony, mock_websocket):
        await telephony.close()
        await telephony.close()

        mock_websocket.close.assert_awaited_once()
        assert telephony.is_open is False

    async def test_close_skips_already_disconnected_socket(self, telephony, mock_websocket):
        mock_websocket.application_state = WebSocketState.DISCONNECTED

        await telephony.close()

        mock_websocket.close.assert_not_awaited()

    async def test_close_swallows_errors(self, telephony, mock_websocket):
        mock_websocket.close.side_effect = RuntimeError("already closed")

        await telephony.close()

        mock_websocket.close.assert_awaited_once()
