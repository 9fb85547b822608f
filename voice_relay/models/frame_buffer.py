"""
Bounded FIFO for audio frames waiting on a peer that is not ready yet.

Used in both directions of a call: caller audio waits here until the Realtime
API session is configured, and synthesized audio waits here until Twilio has
announced the stream SID. The buffer never blocks and never grows past its
capacity; when full, the oldest frame is evicted.
"""

from collections import deque
from typing import Awaitable, Callable, Deque


class FrameRelayBuffer:
    """Drop-oldest bounded queue of base64 audio frames."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._frames: Deque[str] = deque(maxlen=capacity)
        self.dropped = 0

    @property
    def capacity(self) -> int:
        return self._frames.maxlen

    def __len__(self) -> int:
        return len(self._frames)

    def enqueue(self, frame: str) -> None:
        """Append a frame, evicting the oldest one if the buffer is full."""
        if len(self._frames) == self._frames.maxlen:
            self.dropped += 1
        self._frames.append(frame)

    async def drain_to(self, sink: Callable[[str], Awaitable[object]]) -> int:
        """
        Flush every queued frame to ``sink`` in arrival order.

        Frames enqueued while the sink is awaited are flushed by the same call,
        so the buffer is empty when this returns.

        Returns:
            int: Number of frames handed to the sink
        """
        count = 0
        while self._frames:
            await sink(self._frames.popleft())
            count += 1
        return count

    def clear(self) -> int:
        """Discard all queued frames and return how many were discarded."""
        count = len(self._frames)
        self._frames.clear()
        return count
