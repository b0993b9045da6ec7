"""Database models"""
from music_api.models.enums import ContextType, RepeatState, TransportState
from music_api.models.artist import Artist
from music_api.models.album import Album
from music_api.models.track import Track
from music_api.models.playlist import Playlist, PlaylistTrack
from music_api.models.playback_session import PlaybackSession
from music_api.models.queue import QueueItem, QueueCursor
from music_api.models.play_history import PlayHistoryEntry

__all__ = [
    "ContextType",
    "RepeatState",
    "TransportState",
    "Artist",
    "Album",
    "Track",
    "Playlist",
    "PlaylistTrack",
    "PlaybackSession",
    "QueueItem",
    "QueueCursor",
    "PlayHistoryEntry",
]
