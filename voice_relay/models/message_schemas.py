"""
Pydantic models for Twilio Media Streams and recording webhook messages.

This module defines structured data models for the messages exchanged with the
telephony platform over the relay WebSocket, plus the form payload of the
recording status callback, providing type validation and documentation.
"""

import json
import logging
from typing import Dict, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from voice_relay.config.constants import (
    LOGGER_NAME,
    TELEPHONY_EVENT_CLEAR,
    TELEPHONY_EVENT_MEDIA,
    TELEPHONY_EVENT_START,
    TELEPHONY_EVENT_STOP,
)

logger = logging.getLogger(LOGGER_NAME)


# Base Models
class TelephonyMessage(BaseModel):
    """Base model for all Media Streams messages."""

    model_config = ConfigDict(extra="allow")

    event: str = Field(..., description="Event name")
    streamSid: Optional[str] = Field(None, description="Stream identifier")


# Incoming Messages
class StartMetadata(BaseModel):
    """The ``start`` block of a Media Streams start message."""

    model_config = ConfigDict(extra="allow")

    streamSid: Optional[str] = Field(None, description="Stream identifier")
    callSid: Optional[str] = Field(None, description="Call identifier")
    accountSid: Optional[str] = None
    tracks: Optional[list] = None
    mediaFormat: Optional[Dict[str, object]] = None


class StartMessage(TelephonyMessage):
    """Model for the start message, sent once when the stream begins."""

    event: Literal["start"]
    start: StartMetadata = Field(default_factory=StartMetadata)

    @property
    def stream_sid(self) -> Optional[str]:
        return self.start.streamSid or self.streamSid

    @property
    def call_sid(self) -> Optional[str]:
        return self.start.callSid


class MediaPayload(BaseModel):
    """The ``media`` block of a Media Streams media message."""

    model_config = ConfigDict(extra="allow")

    payload: Optional[str] = Field(None, description="Base64-encoded mu-law audio")
    track: Optional[str] = None
    chunk: Optional[str] = None
    timestamp: Optional[str] = None


class MediaMessage(TelephonyMessage):
    """Model for a caller audio frame."""

    event: Literal["media"]
    media: Optional[MediaPayload] = None

    @property
    def payload(self) -> Optional[str]:
        return self.media.payload if self.media else None


class StopMessage(TelephonyMessage):
    """Model for the stop message, sent when the stream ends."""

    event: Literal["stop"]


# Outgoing Messages
class OutboundMedia(BaseModel):
    payload: str = Field(..., description="Base64-encoded mu-law audio")


class OutboundMediaMessage(BaseModel):
    """Model for synthesized audio sent back to the caller."""

    event: Literal["media"] = TELEPHONY_EVENT_MEDIA
    streamSid: str
    media: OutboundMedia


class ClearMessage(BaseModel):
    """Model for the clear message that flushes audio Twilio has not played yet."""

    event: Literal["clear"] = TELEPHONY_EVENT_CLEAR
    streamSid: str


IncomingTelephonyMessage = Union[StartMessage, MediaMessage, StopMessage]

_INCOMING_MODELS: Dict[str, Type[TelephonyMessage]] = {
    TELEPHONY_EVENT_START: StartMessage,
    TELEPHONY_EVENT_MEDIA: MediaMessage,
    TELEPHONY_EVENT_STOP: StopMessage,
}


def parse_telephony_message(raw: Union[str, bytes]) -> Optional[IncomingTelephonyMessage]:
    """
    Decode a raw Media Streams frame into a typed message.

    Args:
        raw: The text received on the telephony WebSocket

    Returns:
        The typed message, or None for malformed JSON, invalid payloads and
        events the relay does not act on (connected, mark, dtmf, ...)
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
        logger.debug("Ignoring malformed telephony message")
        return None

    if not isinstance(data, dict):
        return None

    model = _INCOMING_MODELS.get(data.get("event"))
    if model is None:
        logger.debug(f"Ignoring telephony event: {data.get('event')}")
        return None

    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Invalid {data.get('event')} message: {e}")
        return None


# Recording webhook
class RecordingStatusCallback(BaseModel):
    """Form fields posted by Twilio when a call recording changes state."""

    model_config = ConfigDict(extra="ignore")

    CallSid: Optional[str] = None
    RecordingSid: Optional[str] = None
    RecordingUrl: Optional[str] = None
    RecordingStatus: Optional[str] = None
    RecordingDuration: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return (
            self.RecordingStatus == "completed"
            and bool(self.RecordingSid)
            and bool(self.RecordingUrl)
        )
