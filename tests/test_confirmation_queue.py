"""
Tests for the Confirmation Queue

FIFO ordering, head-only resolution and topic eviction.
"""

import pytest

from walletbridge.queue import ConfirmationQueue, DuplicateRequestError, PendingRequest


def pending(request_id: str, topic: str = "topic-1", method: str = "chia_send") -> PendingRequest:
    return PendingRequest(id=request_id, topic=topic, method=method, params=None)


@pytest.fixture
def queue():
    return ConfirmationQueue()


class TestConfirmationQueue:

    def test_empty_queue(self, queue):
        assert queue.peek() is None
        assert queue.is_empty
        assert len(queue) == 0

    def test_fifo_order(self, queue):
        queue.enqueue(pending("a"))
        queue.enqueue(pending("b"))

        assert queue.peek().id == "a"
        assert queue.resolve_head("a").id == "a"
        assert queue.peek().id == "b"
        assert queue.resolve_head("b").id == "b"
        assert queue.is_empty

    def test_arrival_index_is_monotonic(self, queue):
        first = queue.enqueue(pending("a"))
        second = queue.enqueue(pending("b"))
        assert first.arrival_index < second.arrival_index

    def test_non_head_resolution_is_noop(self, queue):
        queue.enqueue(pending("a"))
        queue.enqueue(pending("b"))

        assert queue.resolve_head("b") is None
        assert [item.id for item in queue.pending()] == ["a", "b"]

    def test_resolution_on_empty_queue_is_noop(self, queue):
        assert queue.resolve_head("missing") is None

    def test_duplicate_ids_rejected(self, queue):
        queue.enqueue(pending("a"))
        with pytest.raises(DuplicateRequestError):
            queue.enqueue(pending("a"))
        assert len(queue) == 1

    def test_head_listener(self, queue):
        heads = []
        queue.add_listener(lambda head: heads.append(head.id if head else None))

        queue.enqueue(pending("a"))
        queue.enqueue(pending("b"))
        queue.resolve_head("a")
        queue.resolve_head("b")

        # Only head changes are reported
        assert heads == ["a", "b", None]

    def test_failing_listener_does_not_break_queue(self, queue):
        def broken(head):
            raise RuntimeError("listener bug")

        queue.add_listener(broken)
        queue.enqueue(pending("a"))
        assert queue.resolve_head("a") is not None

    def test_evict_topic(self, queue):
        queue.enqueue(pending("a", topic="t1"))
        queue.enqueue(pending("b", topic="t2"))
        queue.enqueue(pending("c", topic="t1"))

        evicted = queue.evict_topic("t1")

        assert [item.id for item in evicted] == ["a", "c"]
        assert [item.id for item in queue.pending()] == ["b"]
        assert queue.evict_topic("t1") == []

    def test_discard_matches_identity(self, queue):
        original = queue.enqueue(pending("a"))
        queue.resolve_head("a")
        replacement = queue.enqueue(pending("a"))

        assert queue.discard(original) is False
        assert queue.peek() is replacement
        assert queue.discard(replacement) is True
        assert queue.is_empty
