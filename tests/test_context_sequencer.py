"""Tests for album and playlist sequencing."""

import pytest

from music_api.models.enums import ContextType
from music_api.services.catalog_service import CatalogService
from music_api.services.context_sequencer import ContextSequencer


@pytest.fixture
def sequencer(db, catalog):
    return ContextSequencer(CatalogService(db))


def test_album_order_follows_track_number(sequencer):
    tracks = sequencer.resolve_ordered_tracks(ContextType.ALBUM, "album-abc")
    assert tracks == ["track-a", "track-b", "track-c"]


def test_playlist_order_follows_position(sequencer):
    tracks = sequencer.resolve_ordered_tracks(ContextType.PLAYLIST, "playlist-1")
    assert tracks == ["track-c", "track-a", "track-1"]


@pytest.mark.parametrize("context_type, context_id", [
    (ContextType.ARTIST, "artist-1"),
    (ContextType.SEARCH, "q=numbers"),
    (None, None),
])
def test_unordered_contexts_resolve_empty(sequencer, context_type, context_id):
    assert sequencer.resolve_ordered_tracks(context_type, context_id) == []


def test_unknown_album_resolves_empty(sequencer):
    assert sequencer.resolve_ordered_tracks(ContextType.ALBUM, "album-missing") == []


def test_next_in_album(sequencer):
    assert sequencer.next_track("track-b", ContextType.ALBUM, "album-abc") == "track-c"


def test_next_at_end_of_album(sequencer):
    assert sequencer.next_track("track-c", ContextType.ALBUM, "album-abc") is None


def test_next_wraps_with_repeat_context(sequencer):
    assert sequencer.next_track("track-c", ContextType.ALBUM, "album-abc", repeat_context=True) == "track-a"


def test_next_in_playlist(sequencer):
    assert sequencer.next_track("track-a", ContextType.PLAYLIST, "playlist-1") == "track-1"


def test_next_when_current_track_not_in_context(sequencer):
    assert sequencer.next_track("track-4", ContextType.ALBUM, "album-abc") is None
    assert sequencer.next_track(None, ContextType.ALBUM, "album-abc") is None


def test_next_for_artist_context(sequencer):
    assert sequencer.next_track("track-a", ContextType.ARTIST, "artist-1") is None


def test_shuffle_picks_from_whole_context(db, catalog, fixed_choice):
    rng = fixed_choice(0)
    sequencer = ContextSequencer(CatalogService(db), rng=rng)

    assert sequencer.next_track("track-b", ContextType.ALBUM, "album-abc", shuffle=True) == "track-a"
    assert rng.calls == 1


def test_shuffle_may_pick_current_track(db, catalog, fixed_choice):
    sequencer = ContextSequencer(CatalogService(db), rng=fixed_choice(1))

    assert sequencer.next_track("track-b", ContextType.ALBUM, "album-abc", shuffle=True) == "track-b"


def test_shuffle_ignores_end_of_context(db, catalog, fixed_choice):
    sequencer = ContextSequencer(CatalogService(db), rng=fixed_choice(0))

    assert sequencer.next_track("track-c", ContextType.ALBUM, "album-abc", shuffle=True) == "track-a"


def test_previous_in_album(sequencer):
    assert sequencer.previous_track("track-b", ContextType.ALBUM, "album-abc") == "track-a"
    assert sequencer.previous_track("track-a", ContextType.ALBUM, "album-abc") is None
    assert sequencer.previous_track("track-4", ContextType.ALBUM, "album-abc") is None
