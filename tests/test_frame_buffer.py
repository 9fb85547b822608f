import pytest

from voice_relay.models.frame_buffer import FrameRelayBuffer


def test_rejects_non_positive_capacity():
    with pytest.raises(ValueError):
        FrameRelayBuffer(0)


def test_enqueue_keeps_arrival_order():
    buffer = FrameRelayBuffer(5)
    for frame in ["a", "b", "c"]:
        buffer.enqueue(frame)

    assert len(buffer) == 3
    assert buffer.capacity == 5
    assert buffer.dropped == 0


def test_full_buffer_evicts_oldest():
    buffer = FrameRelayBuffer(3)
    for frame in ["a", "b", "c", "d", "e"]:
        buffer.enqueue(frame)

    assert len(buffer) == 3
    assert buffer.dropped == 2


def test_clear_returns_discarded_count():
    buffer = FrameRelayBuffer(3)
    buffer.enqueue("a")
    buffer.enqueue("b")

    assert buffer.clear() == 2
    assert len(buffer) == 0
    assert buffer.clear() == 0


@pytest.mark.asyncio
class TestDrain:

    async def test_drain_delivers_in_order_and_empties(self):
        buffer = FrameRelayBuffer(5)
        for frame in ["a", "b", "c", "d", "e", "f"]:
            buffer.enqueue(frame)
        received = []

        async def sink(frame):
            received.append(frame)

        count = await buffer.drain_to(sink)

        assert count == 5
        assert received == ["b", "c", "d", "e", "f"]
        assert len(buffer) == 0

    async def test_frames_enqueued_during_drain_follow_backlog(self):
        buffer = FrameRelayBuffer(10)
        buffer.enqueue("a")
        buffer.enqueue("b")
        received = []

        async def sink(frame):
            received.append(frame)
            if frame == "a":
                buffer.enqueue("c")

        count = await buffer.drain_to(sink)

        assert count == 3
        assert received == ["a", "b", "c"]

    async def test_drain_empty_buffer(self):
        buffer = FrameRelayBuffer(2)
        received = []

        async def sink(frame):
            received.append(frame)

        assert await buffer.drain_to(sink) == 0
        assert received == []
