"""
Turn-taking for a relayed call.

The TurnTakingController is the only component that sends commit,
response.create and response.cancel directives. It reacts to caller audio,
provider voice-activity boundaries and synthesized audio, and gates what
reaches the caller after an interruption.
"""

import logging
import time
from typing import Callable

from voice_relay.bot.prompts import GREETING_INSTRUCTIONS
from voice_relay.config.constants import (
    FRAME_DURATION_MS,
    LOGGER_NAME,
    MIN_COMMIT_AUDIO_MS,
    SPEECH_STOP_DEBOUNCE_SECONDS,
)
from voice_relay.models.call_session import CallSession

logger = logging.getLogger(LOGGER_NAME)


class TurnTakingController:
    """
    Decides when to greet, commit caller audio, request a response or cancel one.

    Args:
        session: State of the call being controlled
        realtime: The RealtimeSession directives are sent through
        telephony: The TelephonyStream synthesized audio is forwarded to
        barge_in_on_media: Also treat every caller frame during a response as an interruption
        clock: Monotonic time source, in seconds
    """

    def __init__(
        self,
        session: CallSession,
        realtime,
        telephony,
        barge_in_on_media: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.realtime = realtime
        self.telephony = telephony
        self.barge_in_on_media = barge_in_on_media
        self._clock = clock

    async def greet(self) -> None:
        """Have the assistant speak first, before any caller input."""
        if self.session.response_in_progress:
            # The caller already took the first turn while the session was being configured
            logger.debug(f"Skipping greeting for call {self.session.label}: response in progress")
            return
        self.session.response_in_progress = True
        logger.info(f"Requesting greeting for call {self.session.label}")
        await self.realtime.create_response(instructions=GREETING_INSTRUCTIONS)

    async def on_caller_audio(self) -> None:
        """Account for one caller frame; the caller talking over a response interrupts it."""
        self.session.buffered_audio_ms += FRAME_DURATION_MS
        if self.barge_in_on_media and self.session.response_in_progress:
            await self._barge_in("caller audio")

    async def on_speech_started(self) -> None:
        if self.session.response_in_progress:
            await self._barge_in("speech started")

    async def on_speech_stopped(self) -> None:
        """Commit the caller's turn and ask for a reply, when that is allowed."""
        now = self._clock()
        previous = self.session.last_speech_stopped_at
        self.session.last_speech_stopped_at = now

        if previous is not None and now - previous < SPEECH_STOP_DEBOUNCE_SECONDS:
            logger.debug(f"Ignoring duplicate speech_stopped for call {self.session.label}")
            return
        if self.session.response_in_progress:
            return
        if self.session.buffered_audio_ms < MIN_COMMIT_AUDIO_MS:
            logger.debug(
                f"Not committing {self.session.buffered_audio_ms}ms of audio "
                f"for call {self.session.label}"
            )
            return

        self.session.buffered_audio_ms = 0
        self.session.response_in_progress = True
        await self.realtime.commit_audio()
        await self.realtime.create_response()

    async def on_audio_delta(self, payload: str) -> None:
        """Forward synthesized audio unless the response it belongs to was interrupted."""
        if not self.session.response_in_progress:
            logger.debug(f"Dropping audio delta after interruption for call {self.session.label}")
            return
        await self.telephony.send_audio(payload)

    async def _barge_in(self, reason: str) -> None:
        self.session.response_in_progress = False
        dropped = self.session.pending_outbound.clear()
        logger.info(
            f"Barge-in ({reason}) for call {self.session.label}; "
            f"discarded {dropped} queued frames"
        )
        await self.telephony.clear_playback()
        await self.realtime.cancel_response()
