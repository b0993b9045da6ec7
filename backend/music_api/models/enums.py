"""Enumerations shared by the player models"""
import enum


class ContextType(str, enum.Enum):
    """Browsing entity that frames sequential playback"""
    NONE = "none"
    ALBUM = "album"
    PLAYLIST = "playlist"
    ARTIST = "artist"
    SEARCH = "search"

    @property
    def supports_sequencing(self) -> bool:
        """Only albums and playlists have an intrinsic track order."""
        return self in (ContextType.ALBUM, ContextType.PLAYLIST)


class RepeatState(str, enum.Enum):
    """Repeat modifier applied when resolving the next track"""
    OFF = "off"
    CONTEXT = "context"
    TRACK = "track"


class TransportState(str, enum.Enum):
    """Stopped/paused/playing classification derived from session fields"""
    STOPPED = "stopped"
    PAUSED = "paused"
    PLAYING = "playing"
