"""History service for the append-only play log"""
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
import logging

from music_api.database import utcnow
from music_api.exceptions import InvalidArgumentError
from music_api.models.play_history import PlayHistoryEntry
from music_api.models.track import Track
from music_api.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


class HistoryService:
    """Service for play history operations"""

    def __init__(self, db: Session, catalog: CatalogService = None):
        """
        Initialize history service

        Args:
            db: Database session
            catalog: Catalog accessor (created from db if omitted)
        """
        self.db = db
        self.catalog = catalog or CatalogService(db)

    def record_play(self, user_id: str, track_id: str, play_duration: Optional[int] = None) -> PlayHistoryEntry:
        """
        Append a play event and bump the track's play counter.

        Both writes land in one transaction.

        Args:
            user_id: Opaque user identifier
            track_id: Track UUID
            play_duration: Milliseconds listened, if known

        Returns:
            Created PlayHistoryEntry

        Raises:
            NotFoundError: If the track does not exist
            InvalidArgumentError: If play_duration is negative
        """
        if play_duration is not None and (isinstance(play_duration, bool) or not isinstance(play_duration, int) or play_duration < 0):
            raise InvalidArgumentError("play_duration", "play_duration must be an integer >= 0")

        self.catalog.require_track(track_id)

        entry = PlayHistoryEntry(
            user_id=user_id,
            track_id=track_id,
            played_at=utcnow(),
            play_duration=play_duration
        )
        try:
            self.db.add(entry)
            self.catalog.increment_play_count(track_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Recorded play of track {track_id} for user {user_id}")
        return entry

    def get_previous_track_id(self, user_id: str) -> Optional[str]:
        """
        Resolve "previous" from the play log.

        The most recent entry is the track currently playing, so the
        previous track is the second most recent entry.

        Args:
            user_id: Opaque user identifier

        Returns:
            Track UUID, or None if fewer than two plays are recorded
        """
        entries = self.db.query(PlayHistoryEntry).filter(
            PlayHistoryEntry.user_id == user_id
        ).order_by(
            PlayHistoryEntry.played_at.desc(),
            PlayHistoryEntry.id.desc()
        ).limit(2).all()

        if len(entries) < 2:
            return None
        return entries[1].track_id

    def get_recently_played(self, user_id: str, limit: int = 20, offset: int = 0) -> List[PlayHistoryEntry]:
        """
        Get play history for a user, newest first

        Args:
            user_id: Opaque user identifier
            limit: Maximum number of entries
            offset: Number of entries to skip

        Returns:
            List of PlayHistoryEntry instances with their tracks loaded
        """
        return self.db.query(PlayHistoryEntry).options(
            joinedload(PlayHistoryEntry.track).joinedload(Track.album),
            joinedload(PlayHistoryEntry.track).joinedload(Track.artist),
        ).filter(
            PlayHistoryEntry.user_id == user_id
        ).order_by(
            PlayHistoryEntry.played_at.desc(),
            PlayHistoryEntry.id.desc()
        ).limit(limit).offset(offset).all()

    def count(self, user_id: str) -> int:
        return self.db.query(func.count(PlayHistoryEntry.id)).filter(PlayHistoryEntry.user_id == user_id).scalar()
