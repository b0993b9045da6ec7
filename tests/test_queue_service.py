"""Tests for the per-user manual queue."""

import pytest

from music_api.models.enums import ContextType
from music_api.services.queue_service import QueueService

USER = "user-1"
OTHER_USER = "user-2"


@pytest.fixture
def queue(db, catalog):
    return QueueService(db)


def test_enqueue_assigns_increasing_positions(queue, db):
    items = [queue.enqueue(USER, track_id) for track_id in ("track-1", "track-2", "track-3")]
    db.commit()

    assert [item.position for item in items] == [1, 2, 3]


def test_dequeue_is_fifo(queue, db):
    for track_id in ("track-1", "track-2", "track-3"):
        queue.enqueue(USER, track_id)
    db.commit()

    delivered = []
    while True:
        item = queue.dequeue(USER)
        if item is None:
            break
        delivered.append(item.track_id)
    db.commit()

    assert delivered == ["track-1", "track-2", "track-3"]
    assert queue.count(USER) == 0


def test_dequeue_empty_queue_returns_none(queue):
    assert queue.dequeue(USER) is None


def test_positions_are_not_reused_after_queue_drains(queue, db):
    queue.enqueue(USER, "track-1")
    queue.enqueue(USER, "track-2")
    db.commit()
    queue.dequeue(USER)
    queue.dequeue(USER)
    db.commit()

    item = queue.enqueue(USER, "track-3")
    db.commit()

    assert item.position == 3


def test_queues_are_per_user(queue, db):
    queue.enqueue(USER, "track-1")
    other = queue.enqueue(OTHER_USER, "track-2")
    db.commit()

    assert other.position == 1
    assert [item.track_id for item in queue.list(OTHER_USER)] == ["track-2"]
    assert queue.dequeue(USER).track_id == "track-1"


def test_dequeued_item_keeps_its_context(queue, db):
    queue.enqueue(USER, "track-b", ContextType.ALBUM, "album-abc")
    db.commit()

    item = queue.dequeue(USER)
    db.commit()

    assert item.track_id == "track-b"
    assert item.context_type is ContextType.ALBUM
    assert item.context_id == "album-abc"


def test_remove_only_touches_own_items(queue, db):
    item = queue.enqueue(USER, "track-1")
    db.commit()

    assert queue.remove(OTHER_USER, item.id) is False
    assert queue.remove(USER, "missing-id") is False
    assert queue.remove(USER, item.id) is True
    db.commit()

    assert queue.count(USER) == 0


def test_list_respects_limit_and_order(queue, db):
    for number in range(1, 6):
        queue.enqueue(USER, f"track-{number}")
    db.commit()

    items = queue.list(USER, limit=2)

    assert [item.track_id for item in items] == ["track-1", "track-2"]


def test_clear_returns_removed_count(queue, db):
    queue.enqueue(USER, "track-1")
    queue.enqueue(USER, "track-2")
    queue.enqueue(OTHER_USER, "track-3")
    db.commit()

    assert queue.clear(USER) == 2
    db.commit()

    assert queue.count(USER) == 0
    assert queue.count(OTHER_USER) == 1


def test_item_is_claimed_once(queue, db, session_factory):
    """Two sessions racing for the same head: only the first delete wins."""
    item = queue.enqueue(USER, "track-1")
    db.commit()

    first = session_factory()
    second = session_factory()
    try:
        assert QueueService(first).claim(item.id) is True
        first.commit()
        assert QueueService(second).claim(item.id) is False
        second.commit()
    finally:
        first.close()
        second.close()


def test_peek_does_not_remove(queue, db):
    queue.enqueue(USER, "track-1")
    db.commit()

    assert queue.peek(USER).track_id == "track-1"
    assert queue.count(USER) == 1
