import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from music_api.database import build_engine, get_db, init_db
from music_api.main import app
from music_api.models import Album, Artist, Playlist, PlaylistTrack, Track
from music_api.services.history_service import HistoryService
from music_api.services.playback_service import PlaybackService
from music_api.services.user_locks import UserLockRegistry

USER = "user-1"
OTHER_USER = "user-2"

# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite database so several threads can open sessions."""
    engine = build_engine(f"sqlite:///{tmp_path / 'player.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# ============================================================================
# Catalog Fixtures
# ============================================================================


@pytest.fixture
def catalog(db):
    """
    Seed a small catalog.

    album-abc holds track-a, track-b, track-c as track numbers 1-3, inserted
    out of order. album-misc holds track-1 .. track-5. playlist-1 orders
    track-c, track-a, track-1.
    """
    db.add(Artist(id="artist-1", name="The Fixtures", image_url="https://img.test/artist-1.jpg"))
    db.add(Album(id="album-abc", artist_id="artist-1", title="Alphabet", cover_image_url="https://img.test/abc.jpg"))
    db.add(Album(id="album-misc", artist_id="artist-1", title="Numbers"))
    db.flush()

    for track_id, number in [("track-c", 3), ("track-a", 1), ("track-b", 2)]:
        db.add(Track(
            id=track_id,
            album_id="album-abc",
            artist_id="artist-1",
            title=f"Song {track_id[-1].upper()}",
            duration_ms=180000,
            track_number=number,
        ))
    for number in range(1, 6):
        db.add(Track(
            id=f"track-{number}",
            album_id="album-misc",
            artist_id="artist-1",
            title=f"Number {number}",
            duration_ms=200000,
            track_number=number,
        ))
    db.flush()

    db.add(Playlist(id="playlist-1", name="Mixtape", owner_id=USER))
    db.flush()
    for position, track_id in enumerate(["track-c", "track-a", "track-1"], start=1):
        db.add(PlaylistTrack(playlist_id="playlist-1", track_id=track_id, position=position))
    db.commit()
    return db


# ============================================================================
# Service Fixtures
# ============================================================================


class FixedChoice:
    """Stand-in random source that always picks the element at ``index``."""

    def __init__(self, index: int):
        self.index = index
        self.calls = 0

    def choice(self, seq):
        self.calls += 1
        return seq[self.index]


@pytest.fixture
def fixed_choice():
    return FixedChoice


@pytest.fixture
def locks():
    return UserLockRegistry()


@pytest.fixture
def service(db, catalog, locks):
    return PlaybackService(db, locks=locks)


@pytest.fixture
def record_play(db, catalog):
    history = HistoryService(db)

    def record(track_id: str, user_id: str = USER):
        return history.record_play(user_id, track_id)

    return record


# ============================================================================
# API Fixtures
# ============================================================================


@pytest.fixture
def client(session_factory, catalog):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {"X-User-Id": USER}
