"""Tests for the playback session store."""

from datetime import timedelta

import pytest

from music_api.models.enums import ContextType, RepeatState, TransportState
from music_api.services.session_store import SessionStore

USER = "user-1"


@pytest.fixture
def store(db, catalog):
    return SessionStore(db)


def test_get_absent_user_returns_none(store):
    assert store.get(USER) is None


def test_upsert_creates_session_with_defaults(store, db):
    state = store.upsert(USER, {"track_id": "track-a", "is_playing": True})
    db.commit()

    assert state.user_id == USER
    assert state.track_id == "track-a"
    assert state.is_playing is True
    assert state.volume_percent == 80
    assert state.device_name == "Web Player"
    assert state.shuffle_state is False
    assert state.repeat_state is RepeatState.OFF
    assert state.position_ms == 0
    assert state.context_type is None
    assert state.transport_state is TransportState.PLAYING


def test_upsert_merges_partial_fields(store, db):
    store.upsert(USER, {
        "track_id": "track-a",
        "context_type": ContextType.ALBUM,
        "context_id": "album-abc",
        "is_playing": True,
    })
    db.commit()

    state = store.upsert(USER, {"volume_percent": 35})
    db.commit()

    assert state.volume_percent == 35
    assert state.track_id == "track-a"
    assert state.context_type is ContextType.ALBUM
    assert state.context_id == "album-abc"
    assert state.is_playing is True


def test_one_row_per_user(store, db):
    first = store.upsert(USER, {"track_id": "track-a"})
    db.commit()
    second = store.upsert(USER, {"track_id": "track-b"})
    db.commit()

    assert first.id == second.id
    assert store.get(USER).track_id == "track-b"


def test_null_track_forces_not_playing(store, db):
    store.upsert(USER, {"track_id": "track-a", "is_playing": True, "shuffle_state": True})
    db.commit()

    state = store.upsert(USER, {"track_id": None, "is_playing": True})
    db.commit()

    assert state.is_playing is False
    assert state.shuffle_state is True
    assert state.transport_state is TransportState.STOPPED


def test_updated_at_never_moves_backwards(store, db):
    state = store.upsert(USER, {"track_id": "track-a"})
    db.commit()

    future = state.updated_at + timedelta(hours=1)
    state.updated_at = future
    db.commit()

    state = store.upsert(USER, {"position_ms": 1000})
    db.commit()
    assert state.updated_at == future


def test_every_write_bumps_version(store, db):
    state = store.upsert(USER, {"track_id": "track-a"})
    db.commit()
    assert state.version == 1

    state = store.upsert(USER, {"is_playing": True})
    db.commit()
    assert state.version == 2


def test_unknown_field_is_rejected(store):
    with pytest.raises(ValueError, match="version"):
        store.upsert(USER, {"version": 99})


def test_delete_removes_session(store, db):
    store.upsert(USER, {"track_id": "track-a"})
    db.commit()

    assert store.delete(USER) is True
    db.commit()

    assert store.get(USER) is None
    assert store.delete(USER) is False


def test_track_deletion_leaves_stopped_session(store, db):
    from music_api.models import Track

    store.upsert(USER, {"track_id": "track-5", "is_playing": True, "volume_percent": 42})
    db.commit()

    db.delete(db.query(Track).filter(Track.id == "track-5").one())
    db.commit()

    state = store.get(USER)
    assert state.track_id is None
    assert state.volume_percent == 42
    assert state.transport_state is TransportState.STOPPED
