"""Context sequencer: next/previous track inside an album or playlist"""
from typing import Callable, Dict, List, Optional
import logging
import random

from music_api.models.enums import ContextType
from music_api.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


class ContextSequencer:
    """Resolve neighbouring tracks within a playback context"""

    def __init__(self, catalog: CatalogService, rng: random.Random = None):
        """
        Initialize context sequencer

        Args:
            catalog: Catalog accessor used to read track order
            rng: Random source for shuffle (a fresh random.Random if omitted)
        """
        self.catalog = catalog
        self.rng = rng or random.Random()
        self._resolvers: Dict[ContextType, Callable[[str], List[str]]] = {
            ContextType.ALBUM: catalog.album_tracks_ordered,
            ContextType.PLAYLIST: catalog.playlist_tracks_ordered,
        }

    def resolve_ordered_tracks(self, context_type: Optional[ContextType], context_id: Optional[str]) -> List[str]:
        """
        Get the track order of a context.

        Artist and search contexts have no intrinsic order and resolve to an
        empty sequence, which callers treat as context-less playback.

        Args:
            context_type: Kind of context
            context_id: Context identifier

        Returns:
            Ordered track IDs
        """
        if context_type is None or context_id is None or not context_type.supports_sequencing:
            return []
        return self._resolvers[context_type](context_id)

    def next_track(
        self,
        current_track_id: Optional[str],
        context_type: Optional[ContextType],
        context_id: Optional[str],
        shuffle: bool = False,
        repeat_context: bool = False
    ) -> Optional[str]:
        """
        Resolve the track after the current one.

        With shuffle on, any track of the context may come next, the
        current one included.

        Args:
            current_track_id: Track playing now
            context_type: Kind of context
            context_id: Context identifier
            shuffle: Pick uniformly at random from the context
            repeat_context: Wrap to the first track after the last

        Returns:
            Track UUID, or None at the end of the context or when the
            current track is not part of it
        """
        tracks = self.resolve_ordered_tracks(context_type, context_id)
        if not tracks or current_track_id not in tracks:
            if tracks:
                logger.debug(f"Track {current_track_id} is not part of {context_type.value} {context_id}")
            return None

        if shuffle:
            return self.rng.choice(tracks)

        next_index = tracks.index(current_track_id) + 1
        if next_index < len(tracks):
            return tracks[next_index]
        if repeat_context:
            return tracks[0]
        return None

    def previous_track(
        self,
        current_track_id: Optional[str],
        context_type: Optional[ContextType],
        context_id: Optional[str]
    ) -> Optional[str]:
        """
        Resolve the track before the current one

        Args:
            current_track_id: Track playing now
            context_type: Kind of context
            context_id: Context identifier

        Returns:
            Track UUID, or None at the first track or when the current track
            is not part of the context
        """
        tracks = self.resolve_ordered_tracks(context_type, context_id)
        if not tracks or current_track_id not in tracks:
            return None

        previous_index = tracks.index(current_track_id) - 1
        if previous_index >= 0:
            return tracks[previous_index]
        return None
