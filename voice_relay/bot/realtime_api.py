"""
Provider side of a relayed call: the OpenAI Realtime API WebSocket session.

A RealtimeSession connects, pushes the session configuration, forwards caller
audio once configured, and turns provider events into calls on the handlers
registered by the CallBridge. It never decides on its own to commit audio,
create a response or cancel one; those directives are sent on behalf of the
TurnTakingController.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import quote

import websockets
from pydantic import BaseModel
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException
from websockets.protocol import State

from voice_relay.bot.prompts import build_assistant_instructions
from voice_relay.config.constants import LOGGER_NAME, REALTIME_API_URL
from voice_relay.config.settings import Settings
from voice_relay.models.call_session import CallSession
from voice_relay.models.openai_schemas import (
    AudioDeltaEvent,
    ErrorEvent,
    InputAudioAppend,
    InputAudioCommit,
    ResponseCancel,
    ResponseCreate,
    ResponseCreatedEvent,
    ResponseDoneEvent,
    ResponseOptions,
    SessionConfig,
    SessionUpdate,
    SpeechStartedEvent,
    SpeechStoppedEvent,
    parse_realtime_event,
)

logger = logging.getLogger(LOGGER_NAME)

# WebSocket configuration
WS_MAX_SIZE = 16 * 1024 * 1024  # 16MB - large enough for audio chunks
WS_PING_INTERVAL = 20
WS_PING_TIMEOUT = 20

EventHandler = Callable[[], Awaitable[None]]
AudioHandler = Callable[[str], Awaitable[None]]


class RealtimeSession:
    """
    Client for one OpenAI Realtime API conversation, bound to a CallSession.
    """

    def __init__(self, session: CallSession, settings: Settings):
        self.session = session
        self.settings = settings
        self.ws = None
        self._recv_task: Optional[asyncio.Task] = None
        self._closed = False

        self._ready_handler: Optional[EventHandler] = None
        self._audio_handler: Optional[AudioHandler] = None
        self._speech_started_handler: Optional[EventHandler] = None
        self._speech_stopped_handler: Optional[EventHandler] = None
        self._closed_handler: Optional[EventHandler] = None

    @property
    def url(self) -> str:
        return f"{REALTIME_API_URL}?model={quote(self.settings.realtime_model)}"

    @property
    def is_open(self) -> bool:
        return self.ws is not None and self.ws.state is State.OPEN

    def set_event_handlers(
        self,
        ready_handler: Optional[EventHandler] = None,
        audio_handler: Optional[AudioHandler] = None,
        speech_started_handler: Optional[EventHandler] = None,
        speech_stopped_handler: Optional[EventHandler] = None,
        closed_handler: Optional[EventHandler] = None,
    ) -> None:
        """
        Register the callbacks invoked for provider events.

        Args:
            ready_handler: Called once the session is configured and the inbound backlog sent
            audio_handler: Called with each base64 audio delta
            speech_started_handler: Called on input_audio_buffer.speech_started
            speech_stopped_handler: Called on input_audio_buffer.speech_stopped
            closed_handler: Called when the connection fails, closes or cannot be opened
        """
        self._ready_handler = ready_handler
        self._audio_handler = audio_handler
        self._speech_started_handler = speech_started_handler
        self._speech_stopped_handler = speech_stopped_handler
        self._closed_handler = closed_handler

    async def connect(self) -> bool:
        """
        Open the provider connection, configure the session and start receiving.

        Returns:
            bool: True if the session is up, False if the handshake failed or the
            call was torn down while connecting
        """
        headers = {
            "Authorization": f"Bearer {self.settings.openai_api_key}",
            "OpenAI-Beta": "realtime=v1",
        }
        logger.info(
            f"Connecting to OpenAI Realtime API with model {self.settings.realtime_model} "
            f"for call {self.session.label}"
        )

        try:
            self.ws = await websockets.connect(
                self.url,
                additional_headers=headers,
                max_size=WS_MAX_SIZE,
                ping_interval=WS_PING_INTERVAL,
                ping_timeout=WS_PING_TIMEOUT,
                compression=None,
            )
        except (OSError, WebSocketException, asyncio.TimeoutError) as e:
            logger.error(f"Failed to connect to OpenAI Realtime API: {e}")
            await self._notify_closed()
            return False

        if self._closed:
            # Call ended while the handshake was in flight
            await self._close_ws()
            return False

        logger.info(f"OpenAI Realtime API connected for call {self.session.label}")
        self._recv_task = asyncio.create_task(self._recv_loop())
        await self._configure()
        return True

    async def _configure(self) -> None:
        """Push the session configuration, flush queued caller audio, then report ready."""
        await self.send_directive(
            SessionUpdate(
                session=SessionConfig(
                    voice=self.settings.voice,
                    instructions=build_assistant_instructions(self.settings.owner_name),
                )
            )
        )

        drained = await self.session.pending_inbound.drain_to(self._append_audio)
        if drained:
            logger.debug(f"Forwarded {drained} queued caller frames for call {self.session.label}")
        self.session.upstream_ready = True

        if self._ready_handler:
            await self._ready_handler()

    async def send_audio(self, payload: str) -> None:
        """Forward a caller frame, or queue it until the session is configured."""
        if not self.session.upstream_ready:
            self.session.pending_inbound.enqueue(payload)
            return
        await self._append_audio(payload)

    async def _append_audio(self, payload: str) -> None:
        await self.send_directive(InputAudioAppend(audio=payload))

    async def commit_audio(self) -> bool:
        return await self.send_directive(InputAudioCommit())

    async def create_response(self, instructions: Optional[str] = None) -> bool:
        return await self.send_directive(
            ResponseCreate(response=ResponseOptions(instructions=instructions))
        )

    async def cancel_response(self) -> bool:
        return await self.send_directive(ResponseCancel())

    async def send_directive(self, directive: BaseModel) -> bool:
        return await self._send_json(directive.model_dump(exclude_none=True))

    async def _send_json(self, payload: Dict[str, Any]) -> bool:
        """
        Best-effort send; a connection that is missing or not open discards the message.

        Returns:
            bool: True if the message was handed to the connection
        """
        if not self.is_open:
            logger.debug(f"Dropping {payload.get('type')}: Realtime connection not open")
            return False
        try:
            await self.ws.send(json.dumps(payload))
            return True
        except ConnectionClosed as e:
            logger.debug(f"Realtime connection closed while sending {payload.get('type')}: {e}")
            return False

    async def handle_message(self, message) -> None:
        """Interpret one provider message; unknown and malformed messages are ignored."""
        event = parse_realtime_event(message)
        if event is None:
            return

        if isinstance(event, AudioDeltaEvent):
            payload = event.payload
            if payload and self._audio_handler:
                await self._audio_handler(payload)

        elif isinstance(event, ResponseCreatedEvent):
            self.session.response_in_progress = True
            logger.debug(f"Response created for call {self.session.label}")

        elif isinstance(event, ResponseDoneEvent):
            self.session.response_in_progress = False
            logger.debug(f"Response done ({event.status}) for call {self.session.label}")

        elif isinstance(event, SpeechStartedEvent):
            if self._speech_started_handler:
                await self._speech_started_handler()

        elif isinstance(event, SpeechStoppedEvent):
            if self._speech_stopped_handler:
                await self._speech_stopped_handler()

        elif isinstance(event, ErrorEvent):
            # Recoverable: the provider keeps the session open after an error event
            logger.error(
                f"OpenAI Realtime error for call {self.session.label}: "
                f"{event.error.code or event.error.type} - {event.error.message}"
            )

    async def _recv_loop(self) -> None:
        """Receive provider messages until the connection closes or fails."""
        try:
            async for message in self.ws:
                await self.handle_message(message)
            logger.info(f"OpenAI Realtime connection closed for call {self.session.label}")
        except asyncio.CancelledError:
            logger.debug(f"Realtime receive loop cancelled for call {self.session.label}")
            raise
        except ConnectionClosedError as e:
            logger.warning(f"OpenAI Realtime connection lost for call {self.session.label}: {e}")
        except Exception as e:
            logger.error(f"Error in Realtime receive loop: {e}", exc_info=True)

        await self._notify_closed()

    async def _notify_closed(self) -> None:
        if self._closed or not self._closed_handler:
            return
        await self._closed_handler()

    async def close(self) -> None:
        """Close the provider connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        task = self._recv_task
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()

        await self._close_ws()
        logger.info(f"OpenAI Realtime session closed for call {self.session.label}")

    async def _close_ws(self) -> None:
        if self.ws is None:
            return
        try:
            await self.ws.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing Realtime connection: {e}")
