"""
Bridge module connecting a Twilio media stream with the OpenAI Realtime API.

A CallBridge is created for every accepted telephony connection. It owns the
call's state, builds the provider session and the turn-taking controller, wires
their callbacks together and guarantees that both connections are closed exactly
once when the call ends, whichever side ends it.
"""

import asyncio
import logging
from typing import Optional

from fastapi import WebSocket

from voice_relay.bot.realtime_api import RealtimeSession
from voice_relay.bot.turn_taking import TurnTakingController
from voice_relay.config.constants import LOGGER_NAME
from voice_relay.config.settings import Settings
from voice_relay.handlers.stream_handlers import TelephonyStream
from voice_relay.models.call_session import CallSession

logger = logging.getLogger(LOGGER_NAME)


class CallBridge:
    """
    Per-call orchestrator between the telephony stream and the Realtime API.

    This class handles:
    - Refusing the call when no OpenAI API key is configured
    - Creating and wiring the RealtimeSession, TelephonyStream and TurnTakingController
    - Tearing both connections down on stop, close or error of either side
    """

    def __init__(self, websocket: WebSocket, settings: Settings):
        self.settings = settings
        self.session = CallSession()
        self.telephony = TelephonyStream(self.session, websocket)
        self.realtime: Optional[RealtimeSession] = None
        self.controller: Optional[TurnTakingController] = None
        self._connect_task: Optional[asyncio.Task] = None
        self._cleaned_up = False

    @property
    def closed(self) -> bool:
        return self._cleaned_up

    async def start(self) -> bool:
        """
        Set up the provider side of the call and start connecting to it.

        Returns:
            bool: False if the call was refused and the telephony connection closed
        """
        if not self.settings.openai_api_key:
            logger.error("OPENAI_API_KEY not set; closing telephony stream")
            await self.cleanup()
            return False

        self.realtime = RealtimeSession(self.session, self.settings)
        self.controller = TurnTakingController(
            self.session,
            self.realtime,
            self.telephony,
            barge_in_on_media=self.settings.barge_in_on_media,
        )

        self.realtime.set_event_handlers(
            ready_handler=self.controller.greet,
            audio_handler=self.controller.on_audio_delta,
            speech_started_handler=self.controller.on_speech_started,
            speech_stopped_handler=self.controller.on_speech_stopped,
            closed_handler=self.cleanup,
        )
        self.telephony.set_event_handlers(
            audio_handler=self._handle_caller_audio,
            stop_handler=self.cleanup,
        )

        # Caller audio queues in the session until the provider is ready
        self._connect_task = asyncio.create_task(self.realtime.connect())
        logger.info(f"Bridge started for call {self.session.call_id}")
        return True

    async def handle_telephony_message(self, raw: str) -> None:
        if self._cleaned_up:
            return
        await self.telephony.handle_message(raw)

    async def _handle_caller_audio(self, payload: str) -> None:
        await self.realtime.send_audio(payload)
        await self.controller.on_caller_audio()

    async def cleanup(self) -> None:
        """Close both connections. Only the first call has any effect."""
        if self._cleaned_up:
            return
        self._cleaned_up = True
        self.session.closed = True
        logger.info(f"Tearing down call {self.session.label}")

        task = self._connect_task
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()

        if self.realtime:
            try:
                await self.realtime.close()
            except Exception as e:
                logger.warning(f"Error closing Realtime session: {e}")

        try:
            await self.telephony.close()
        except Exception as e:
            logger.warning(f"Error closing telephony stream: {e}")
