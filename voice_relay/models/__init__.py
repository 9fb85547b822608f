"""
Models module for data structures and state management in the voice relay.

Key components:
- message_schemas: Pydantic models for Twilio Media Streams events and the
  recording status callback.
- openai_schemas: Pydantic models for OpenAI Realtime API directives and events.
- call_session: Per-call state shared by both sides of the relay.
- frame_buffer: Bounded FIFO buffers holding audio frames until a side is ready.

Usage examples:
```python
from voice_relay.models import CallSession, parse_telephony_message

session = CallSession()
message = parse_telephony_message('{"event": "start", "start": {"streamSid": "MZ1"}}')
```
"""

from voice_relay.models.call_session import CallSession
from voice_relay.models.frame_buffer import FrameRelayBuffer
from voice_relay.models.message_schemas import (
    ClearMessage,
    MediaMessage,
    OutboundMediaMessage,
    RecordingStatusCallback,
    StartMessage,
    StopMessage,
    TelephonyMessage,
    parse_telephony_message,
)
from voice_relay.models.openai_schemas import (
    AudioDeltaEvent,
    ErrorEvent,
    InputAudioAppend,
    InputAudioCommit,
    ResponseCancel,
    ResponseCreate,
    ResponseCreatedEvent,
    ResponseDoneEvent,
    SessionUpdate,
    SpeechStartedEvent,
    SpeechStoppedEvent,
    parse_realtime_event,
)
