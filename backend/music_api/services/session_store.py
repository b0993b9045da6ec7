"""Session store: the one authoritative playback record per user"""
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional
import logging

from music_api.config import settings
from music_api.database import utcnow
from music_api.models.enums import RepeatState
from music_api.models.playback_session import PlaybackSession

logger = logging.getLogger(__name__)

# Columns a caller may write; everything else is managed here
WRITABLE_FIELDS = frozenset({
    "track_id",
    "context_type",
    "context_id",
    "is_playing",
    "position_ms",
    "volume_percent",
    "device_name",
    "shuffle_state",
    "repeat_state",
})


class SessionStore:
    """
    Store for PlaybackSession rows.

    Like the queue service, the store flushes but leaves the commit to the
    playback controller.
    """

    def __init__(self, db: Session):
        """
        Initialize session store

        Args:
            db: Database session
        """
        self.db = db

    def get(self, user_id: str, for_update: bool = False) -> Optional[PlaybackSession]:
        """
        Get the playback session of a user

        Args:
            user_id: Opaque user identifier
            for_update: Lock the row until the transaction ends (ignored by SQLite)

        Returns:
            PlaybackSession instance, or None if the user has no active session
        """
        query = self.db.query(PlaybackSession).filter(PlaybackSession.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def upsert(self, user_id: str, fields: Dict[str, Any], existing: Optional[PlaybackSession] = None) -> PlaybackSession:
        """
        Merge fields into a user's session, creating it if needed.

        New sessions get the configured defaults for every field not given.
        A null track always leaves the session not playing.

        Args:
            user_id: Opaque user identifier
            fields: Partial set of writable columns
            existing: Session already loaded by the caller, to skip a lookup

        Returns:
            The written PlaybackSession
        """
        unknown = set(fields) - WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown playback session fields: {', '.join(sorted(unknown))}")

        state = existing if existing is not None else self.get(user_id)
        now = utcnow()

        if state is None:
            state = PlaybackSession(
                user_id=user_id,
                track_id=None,
                context_type=None,
                context_id=None,
                is_playing=False,
                position_ms=0,
                volume_percent=settings.default_volume_percent,
                device_name=settings.default_device_name,
                shuffle_state=False,
                repeat_state=RepeatState.OFF,
                created_at=now,
                updated_at=now
            )
            self.db.add(state)
            logger.info(f"Created playback session for user {user_id}")

        for key, value in fields.items():
            setattr(state, key, value)

        if state.track_id is None:
            state.is_playing = False

        # Never move updated_at backwards, even if the clock does
        if state.updated_at is None or now > state.updated_at:
            state.updated_at = now

        self.db.flush()
        return state

    def delete(self, user_id: str) -> bool:
        """
        Tear down a user's session

        Args:
            user_id: Opaque user identifier

        Returns:
            True if a session was deleted
        """
        deleted = self.db.query(PlaybackSession).filter(
            PlaybackSession.user_id == user_id
        ).delete(synchronize_session=False)
        if deleted:
            logger.info(f"Deleted playback session for user {user_id}")
        return deleted > 0
