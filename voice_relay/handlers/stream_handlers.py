"""
Handles the telephony side of a relayed call over Twilio Media Streams.

This module processes the start, media and stop messages Twilio sends on the relay
WebSocket and streams synthesized audio back to the caller. Audio for the caller is
held back until Twilio has named the stream, since every outbound media message
must carry the stream SID.
"""

import logging
from typing import Awaitable, Callable, Optional

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel
from starlette.websockets import WebSocketState

from voice_relay.config.constants import LOGGER_NAME
from voice_relay.models.call_session import CallSession
from voice_relay.models.message_schemas import (
    ClearMessage,
    MediaMessage,
    OutboundMedia,
    OutboundMediaMessage,
    StartMessage,
    StopMessage,
    parse_telephony_message,
)

logger = logging.getLogger(LOGGER_NAME)

AudioHandler = Callable[[str], Awaitable[None]]
StopHandler = Callable[[], Awaitable[None]]


class TelephonyStream:
    """
    The Twilio Media Streams connection of one call.

    Args:
        session: State of the call this stream belongs to
        websocket: The accepted FastAPI WebSocket connection
    """

    def __init__(self, session: CallSession, websocket: WebSocket):
        self.session = session
        self.websocket = websocket
        self._audio_handler: Optional[AudioHandler] = None
        self._stop_handler: Optional[StopHandler] = None
        self._flushing = False
        self._closed = False

    def set_event_handlers(
        self,
        audio_handler: Optional[AudioHandler] = None,
        stop_handler: Optional[StopHandler] = None,
    ) -> None:
        """
        Register the callbacks invoked for telephony events.

        Args:
            audio_handler: Called with the base64 payload of every caller frame
            stop_handler: Called when Twilio ends the stream
        """
        self._audio_handler = audio_handler
        self._stop_handler = stop_handler

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def handle_message(self, raw: str) -> None:
        """Route one Media Streams message; anything unrecognized is ignored."""
        message = parse_telephony_message(raw)
        if message is None:
            return

        if isinstance(message, StartMessage):
            await self.handle_start(message)
        elif isinstance(message, MediaMessage):
            await self.handle_media(message)
        elif isinstance(message, StopMessage):
            await self.handle_stop(message)

    async def handle_start(self, message: StartMessage) -> None:
        """Record the stream identity and flush audio that was waiting for it."""
        stream_sid = message.stream_sid
        if not stream_sid:
            logger.warning(f"Start message without streamSid for call {self.session.label}")
            return

        self.session.stream_sid = stream_sid
        self.session.call_sid = message.call_sid
        logger.info(f"Stream started: {stream_sid} (call {message.call_sid})")

        # New deltas queue behind the backlog until it is flushed
        self._flushing = True
        try:
            flushed = await self.session.pending_outbound.drain_to(self._send_media)
        finally:
            self._flushing = False
        if flushed:
            logger.debug(f"Flushed {flushed} queued frames to stream {stream_sid}")

    async def handle_media(self, message: MediaMessage) -> None:
        payload = message.payload
        if not payload:
            return
        if self._audio_handler:
            await self._audio_handler(payload)

    async def handle_stop(self, message: StopMessage) -> None:
        logger.info(f"Stream stop received for call {self.session.label}")
        if self._stop_handler:
            await self._stop_handler()

    async def send_audio(self, payload: str) -> None:
        """Send a synthesized frame to the caller, or queue it until the stream is known."""
        if self.session.stream_sid is None or self._flushing:
            self.session.pending_outbound.enqueue(payload)
            return
        await self._send_media(payload)

    async def clear_playback(self) -> None:
        """Ask Twilio to drop audio it has buffered but not yet played."""
        if self.session.stream_sid is None:
            return
        await self._send_model(ClearMessage(streamSid=self.session.stream_sid))

    async def _send_media(self, payload: str) -> None:
        await self._send_model(
            OutboundMediaMessage(
                streamSid=self.session.stream_sid,
                media=OutboundMedia(payload=payload),
            )
        )

    async def _send_model(self, message: BaseModel) -> bool:
        """Best-effort send; a closed connection discards the message."""
        if not self.is_open:
            return False
        try:
            await self.websocket.send_text(message.model_dump_json())
            return True
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug(f"Telephony send failed for call {self.session.label}: {e}")
            return False

    async def close(self) -> None:
        """Close the telephony connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self.websocket.application_state == WebSocketState.DISCONNECTED:
            return
        try:
            await self.websocket.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing telephony connection: {e}")
