"""
Per-call state shared by the telephony stream, the Realtime session and the
turn-taking controller.

One CallSession is created for every accepted Twilio media stream and is owned
by the CallBridge for that call. The other components keep a reference to it
so they can read and update the fields below, but never tear it down.
"""

import uuid
from typing import Optional

from voice_relay.config.constants import MAX_INBOUND_FRAMES, MAX_OUTBOUND_FRAMES
from voice_relay.models.frame_buffer import FrameRelayBuffer


class CallSession:
    """
    Mutable state of a single relayed call.

    Attributes:
        call_id: Locally generated identifier used in logs before Twilio names the stream
        stream_sid: Twilio stream SID, known once the start event arrives
        call_sid: Twilio call SID from the start event, if provided
        upstream_ready: True once the Realtime session is configured and its backlog drained
        pending_inbound: Caller frames waiting for the Realtime session
        pending_outbound: Synthesized frames waiting for the stream SID
        response_in_progress: True between response creation and its completion or cancellation
        buffered_audio_ms: Caller audio appended since the last commit
        last_speech_stopped_at: Monotonic time of the last speech_stopped event
        closed: True once teardown has started
    """

    def __init__(self, call_id: Optional[str] = None):
        self.call_id = call_id or uuid.uuid4().hex
        self.stream_sid: Optional[str] = None
        self.call_sid: Optional[str] = None
        self.upstream_ready = False
        self.pending_inbound = FrameRelayBuffer(MAX_INBOUND_FRAMES)
        self.pending_outbound = FrameRelayBuffer(MAX_OUTBOUND_FRAMES)
        self.response_in_progress = False
        self.buffered_audio_ms = 0
        self.last_speech_stopped_at: Optional[float] = None
        self.closed = False

    @property
    def label(self) -> str:
        """Identifier to use in log lines: the stream SID when known."""
        return self.stream_sid or self.call_id

    def __repr__(self) -> str:
        return (
            f"CallSession(call_id={self.call_id!r}, stream_sid={self.stream_sid!r}, "
            f"upstream_ready={self.upstream_ready}, "
            f"response_in_progress={self.response_in_progress})"
        )
