"""
Pydantic models for OpenAI Realtime API message structures.

This module provides type-safe models for the messages exchanged with the OpenAI Realtime API,
including the client directives the relay sends and the server events it acts on.
Server events are decoded by their ``type`` tag; tags the relay does not know decode
to None so that additions to the provider protocol are ignored rather than fatal.
"""

import json
import logging
from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from voice_relay.config.constants import (
    AUDIO_FORMAT_G711_ULAW,
    DEFAULT_VOICE,
    LOGGER_NAME,
    REALTIME_AUDIO_DELTA,
    REALTIME_ERROR,
    REALTIME_INPUT_AUDIO_APPEND,
    REALTIME_INPUT_AUDIO_COMMIT,
    REALTIME_OUTPUT_AUDIO_DELTA,
    REALTIME_RESPONSE_CANCEL,
    REALTIME_RESPONSE_CREATE,
    REALTIME_RESPONSE_CREATED,
    REALTIME_RESPONSE_DONE,
    REALTIME_SESSION_UPDATE,
    REALTIME_SPEECH_STARTED,
    REALTIME_SPEECH_STOPPED,
)

logger = logging.getLogger(LOGGER_NAME)


# Client directives
class TurnDetection(BaseModel):
    """Voice activity detection settings."""
    type: str = "server_vad"


class SessionConfig(BaseModel):
    """Session settings pushed with session.update."""
    input_audio_format: str = AUDIO_FORMAT_G711_ULAW
    output_audio_format: str = AUDIO_FORMAT_G711_ULAW
    voice: str = DEFAULT_VOICE
    instructions: Optional[str] = None
    turn_detection: TurnDetection = Field(default_factory=TurnDetection)


class SessionUpdate(BaseModel):
    type: Literal["session.update"] = REALTIME_SESSION_UPDATE
    session: SessionConfig


class ResponseOptions(BaseModel):
    modalities: List[str] = Field(default_factory=lambda: ["audio", "text"])
    instructions: Optional[str] = None


class ResponseCreate(BaseModel):
    type: Literal["response.create"] = REALTIME_RESPONSE_CREATE
    response: Optional[ResponseOptions] = None


class ResponseCancel(BaseModel):
    type: Literal["response.cancel"] = REALTIME_RESPONSE_CANCEL


class InputAudioAppend(BaseModel):
    type: Literal["input_audio_buffer.append"] = REALTIME_INPUT_AUDIO_APPEND
    audio: str


class InputAudioCommit(BaseModel):
    type: Literal["input_audio_buffer.commit"] = REALTIME_INPUT_AUDIO_COMMIT


# Server events
class RealtimeServerEvent(BaseModel):
    """Base model for server events."""

    model_config = ConfigDict(extra="allow")

    type: str
    event_id: Optional[str] = None


class AudioDeltaEvent(RealtimeServerEvent):
    """
    Partial synthesized audio.

    Protocol revisions disagree on both the event name and the field carrying the
    audio, so either name and either field is accepted.
    """

    type: Literal["response.audio.delta", "response.output_audio.delta"]
    response_id: Optional[str] = None
    item_id: Optional[str] = None
    delta: Optional[str] = None
    audio: Optional[str] = None

    @property
    def payload(self) -> Optional[str]:
        return self.delta or self.audio


class ResponseCreatedEvent(RealtimeServerEvent):
    type: Literal["response.created"]
    response: Optional[Dict[str, Any]] = None


class ResponseDoneEvent(RealtimeServerEvent):
    type: Literal["response.done"]
    response: Optional[Dict[str, Any]] = None

    @property
    def status(self) -> Optional[str]:
        return (self.response or {}).get("status")


class SpeechStartedEvent(RealtimeServerEvent):
    type: Literal["input_audio_buffer.speech_started"]
    audio_start_ms: Optional[int] = None
    item_id: Optional[str] = None


class SpeechStoppedEvent(RealtimeServerEvent):
    type: Literal["input_audio_buffer.speech_stopped"]
    audio_end_ms: Optional[int] = None
    item_id: Optional[str] = None


class RealtimeErrorDetail(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    code: Optional[str] = None
    message: Optional[str] = None
    param: Optional[str] = None
    event_id: Optional[str] = None


class ErrorEvent(RealtimeServerEvent):
    """Application-level error reported by the provider; the session stays open."""

    type: Literal["error"]
    error: RealtimeErrorDetail = Field(default_factory=RealtimeErrorDetail)


RealtimeEvent = Union[
    AudioDeltaEvent,
    ResponseCreatedEvent,
    ResponseDoneEvent,
    SpeechStartedEvent,
    SpeechStoppedEvent,
    ErrorEvent,
]

_EVENT_MODELS: Dict[str, Type[RealtimeServerEvent]] = {
    REALTIME_AUDIO_DELTA: AudioDeltaEvent,
    REALTIME_OUTPUT_AUDIO_DELTA: AudioDeltaEvent,
    REALTIME_RESPONSE_CREATED: ResponseCreatedEvent,
    REALTIME_RESPONSE_DONE: ResponseDoneEvent,
    REALTIME_SPEECH_STARTED: SpeechStartedEvent,
    REALTIME_SPEECH_STOPPED: SpeechStoppedEvent,
    REALTIME_ERROR: ErrorEvent,
}


def parse_realtime_event(raw: Union[str, bytes]) -> Optional[RealtimeEvent]:
    """
    Decode a raw Realtime API message into a typed event.

    Args:
        raw: Text (or bytes) received on the provider WebSocket

    Returns:
        The typed event, or None if the message is malformed or of a type the
        relay does not act on
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
        logger.debug("Ignoring malformed Realtime API message")
        return None

    if not isinstance(data, dict):
        return None

    model = _EVENT_MODELS.get(data.get("type"))
    if model is None:
        return None

    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Invalid {data.get('type')} event: {e}")
        return None
