"""Catalog service: read-only track, album, playlist and artist lookups for the player"""
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from music_api.exceptions import NotFoundError
from music_api.models.album import Album
from music_api.models.artist import Artist
from music_api.models.enums import ContextType
from music_api.models.playlist import Playlist, PlaylistTrack
from music_api.models.track import Track

logger = logging.getLogger(__name__)


class CatalogService:
    """Service for catalog lookups needed by playback"""

    def __init__(self, db: Session):
        """
        Initialize catalog service

        Args:
            db: Database session
        """
        self.db = db

    def get_track(self, track_id: str) -> Optional[Track]:
        """
        Get track by ID

        Args:
            track_id: Track UUID

        Returns:
            Track instance or None
        """
        return self.db.query(Track).filter(Track.id == track_id).first()

    def track_exists(self, track_id: str) -> bool:
        return self.db.query(Track.id).filter(Track.id == track_id).first() is not None

    def require_track(self, track_id: str) -> Track:
        """
        Get a track or raise NotFoundError

        Args:
            track_id: Track UUID

        Returns:
            Track instance
        """
        track = self.get_track(track_id)
        if not track:
            raise NotFoundError("Track", track_id)
        return track

    def context_exists(self, context_type: ContextType, context_id: str) -> bool:
        """
        Check that the entity behind a playback context exists.

        Search contexts name a result set, not a stored entity, so they
        always exist.

        Args:
            context_type: Kind of context
            context_id: Context identifier

        Returns:
            True if the context can be referenced
        """
        model = {
            ContextType.ALBUM: Album,
            ContextType.PLAYLIST: Playlist,
            ContextType.ARTIST: Artist,
        }.get(context_type)
        if model is None:
            return True
        return self.db.query(model.id).filter(model.id == context_id).first() is not None

    def require_context(self, context_type: ContextType, context_id: str) -> None:
        if not self.context_exists(context_type, context_id):
            raise NotFoundError(context_type.value.capitalize(), context_id)

    def album_tracks_ordered(self, album_id: str) -> List[str]:
        """
        Get the track IDs of an album in play order

        Args:
            album_id: Album UUID

        Returns:
            Track IDs ordered by disc and track number
        """
        rows = self.db.query(Track.id).filter(
            Track.album_id == album_id
        ).order_by(Track.disc_number, Track.track_number).all()
        return [row.id for row in rows]

    def playlist_tracks_ordered(self, playlist_id: str) -> List[str]:
        """
        Get the track IDs of a playlist in play order

        Args:
            playlist_id: Playlist UUID

        Returns:
            Track IDs ordered by playlist position
        """
        rows = self.db.query(PlaylistTrack.track_id).filter(
            PlaylistTrack.playlist_id == playlist_id
        ).order_by(PlaylistTrack.position).all()
        return [row.track_id for row in rows]

    def increment_play_count(self, track_id: str) -> None:
        """Bump the aggregate play counter of a track (flushed, not committed)"""
        self.db.query(Track).filter(Track.id == track_id).update(
            {Track.play_count: Track.play_count + 1},
            synchronize_session=False
        )

    def describe_track(self, track_id: Optional[str]) -> Optional[dict]:
        """
        Build the display fields of a track for API responses

        Args:
            track_id: Track UUID or None

        Returns:
            Dictionary of display fields, or None if there is no such track
        """
        if not track_id:
            return None
        track = self.get_track(track_id)
        if not track:
            return None
        album = track.album
        artist = track.artist
        return {
            "id": track.id,
            "title": track.title,
            "duration_ms": track.duration_ms,
            "track_number": track.track_number,
            "artist_id": track.artist_id,
            "artist_name": artist.name if artist else None,
            "artist_image_url": artist.image_url if artist else None,
            "album_id": track.album_id,
            "album_title": album.title if album else None,
            "album_cover_image_url": album.cover_image_url if album else None,
        }

    def describe_context(self, context_type: Optional[ContextType], context_id: Optional[str]) -> Optional[dict]:
        """
        Build the display fields of a playback context

        Args:
            context_type: Kind of context, or None
            context_id: Context identifier, or None

        Returns:
            Dictionary with type, id, title and image_url, or None
        """
        if context_type is None or context_id is None:
            return None

        if context_type is ContextType.ALBUM:
            album = self.db.query(Album).filter(Album.id == context_id).first()
            if album:
                return {"type": "album", "id": album.id, "title": album.title, "image_url": album.cover_image_url}
        elif context_type is ContextType.PLAYLIST:
            playlist = self.db.query(Playlist).filter(Playlist.id == context_id).first()
            if playlist:
                return {"type": "playlist", "id": playlist.id, "title": playlist.name, "image_url": playlist.image_url}
        elif context_type is ContextType.ARTIST:
            artist = self.db.query(Artist).filter(Artist.id == context_id).first()
            if artist:
                return {"type": "artist", "id": artist.id, "title": artist.name, "image_url": artist.image_url}
        elif context_type is ContextType.SEARCH:
            return {"type": "search", "id": context_id, "title": None, "image_url": None}

        logger.debug(f"Context {context_type.value}:{context_id} no longer exists")
        return None
