"""Playback service: the per-user player state machine"""
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from typing import Any, Callable, Dict, List, Optional
import logging
import random

from music_api.config import settings
from music_api.exceptions import ConflictError, InvalidArgumentError, StorageUnavailableError
from music_api.models.enums import ContextType, RepeatState, TransportState
from music_api.models.playback_session import PlaybackSession
from music_api.models.queue import QueueItem
from music_api.services.catalog_service import CatalogService
from music_api.services.context_sequencer import ContextSequencer
from music_api.services.history_service import HistoryService
from music_api.services.queue_service import QueueService
from music_api.services.session_store import SessionStore
from music_api.services.user_locks import UserLockRegistry, user_locks
from music_api.utils.validation import (
    validate_context,
    validate_device_name,
    validate_position_ms,
    validate_repeat_state,
    validate_shuffle_state,
    validate_volume_percent,
)

logger = logging.getLogger(__name__)

# A lost update is retried once with fresh state before it surfaces
MAX_ATTEMPTS = 2


class PlaybackService:
    """
    Service for playback control.

    Every mutating command runs under the user's lock as a single
    transaction. Commands other than ``start`` and ``stop`` return None
    when the user has no session instead of creating one.
    """

    def __init__(
        self,
        db: Session,
        catalog: CatalogService = None,
        locks: UserLockRegistry = None,
        rng: random.Random = None
    ):
        """
        Initialize playback service

        Args:
            db: Database session
            catalog: Catalog accessor (created from db if omitted)
            locks: Per-user lock registry (process-wide registry if omitted)
            rng: Random source for shuffle
        """
        self.db = db
        self.catalog = catalog or CatalogService(db)
        self.store = SessionStore(db)
        self.queue_service = QueueService(db)
        self.history_service = HistoryService(db, self.catalog)
        self.sequencer = ContextSequencer(self.catalog, rng=rng)
        self.locks = locks or user_locks
        self.lock_timeout = settings.player_lock_timeout_seconds

    # ------------------------------------------------------------------
    # Command plumbing
    # ------------------------------------------------------------------

    def _run_command(self, user_id: str, command: str, mutate: Callable[[], Any]) -> Any:
        """
        Run ``mutate`` under the user's lock and commit it as one write.

        A stale version or a duplicate session insert means another process
        wrote first; the command is replayed once against fresh state.
        """
        with self.locks.hold(user_id, self.lock_timeout):
            for attempt in range(1, MAX_ATTEMPTS + 1):
                try:
                    result = mutate()
                    self.db.commit()
                    return result
                except (StaleDataError, IntegrityError) as e:
                    self.db.rollback()
                    if attempt == MAX_ATTEMPTS:
                        logger.warning(f"'{command}' for user {user_id} lost the update twice: {e}")
                        raise ConflictError(
                            f"Playback state of user '{user_id}' changed concurrently, '{command}' was not applied"
                        ) from e
                    logger.info(f"'{command}' for user {user_id} hit a concurrent update, retrying")
                except OperationalError as e:
                    self.db.rollback()
                    logger.error(f"Storage failure during '{command}' for user {user_id}: {e}")
                    raise StorageUnavailableError(f"Storage unavailable, '{command}' was not applied") from e
                except Exception:
                    self.db.rollback()
                    raise

    def _update_session(self, user_id: str, command: str, fields: Dict[str, Any]) -> Optional[PlaybackSession]:
        """Apply a field change to an existing session, or do nothing if there is none"""

        def mutate():
            state = self.store.get(user_id, for_update=True)
            if state is None:
                logger.info(f"No active session for user {user_id}, '{command}' ignored")
                return None
            state = self.store.upsert(user_id, fields, existing=state)
            logger.info(f"'{command}' applied for user {user_id}")
            return state

        return self._run_command(user_id, command, mutate)

    def _play_track(
        self,
        user_id: str,
        state: PlaybackSession,
        track_id: str,
        context: Optional[tuple] = None
    ) -> PlaybackSession:
        fields = {"track_id": track_id, "position_ms": 0, "is_playing": True}
        if context is not None:
            fields["context_type"], fields["context_id"] = context
        return self.store.upsert(user_id, fields, existing=state)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_current_playback(self, user_id: str) -> Optional[PlaybackSession]:
        """
        Get the playback session of a user

        Args:
            user_id: Opaque user identifier

        Returns:
            PlaybackSession instance, or None if there is no active session
        """
        return self.store.get(user_id)

    def describe(self, state: Optional[PlaybackSession]) -> Dict[str, Any]:
        """
        Build the API view of a session, joined with catalog display fields.

        A missing session renders as the idle player.

        Args:
            state: PlaybackSession or None

        Returns:
            Dictionary matching the playback response schema
        """
        if state is None:
            return {
                "is_active": False,
                "transport_state": "stopped",
                "track_id": None,
                "context_type": None,
                "context_id": None,
                "is_playing": False,
                "position_ms": 0,
                "volume_percent": settings.default_volume_percent,
                "device_name": None,
                "shuffle_state": False,
                "repeat_state": RepeatState.OFF.value,
                "updated_at": None,
                "track": None,
                "context": None,
            }

        return {
            "is_active": True,
            "transport_state": state.transport_state.value,
            "track_id": state.track_id,
            "context_type": state.context_type.value if state.context_type else None,
            "context_id": state.context_id,
            # A track deleted from the catalog nulls track_id without touching is_playing
            "is_playing": state.transport_state is TransportState.PLAYING,
            "position_ms": state.position_ms,
            "volume_percent": state.volume_percent,
            "device_name": state.device_name,
            "shuffle_state": state.shuffle_state,
            "repeat_state": state.repeat_state.value,
            "updated_at": state.updated_at,
            "track": self.catalog.describe_track(state.track_id),
            "context": self.catalog.describe_context(state.context_type, state.context_id),
        }

    # ------------------------------------------------------------------
    # Transport commands
    # ------------------------------------------------------------------

    def start(
        self,
        user_id: str,
        track_id: str,
        context_type: Optional[ContextType] = None,
        context_id: Optional[str] = None,
        position_ms: int = 0
    ) -> PlaybackSession:
        """
        Start playing a track, creating the session on first use

        Args:
            user_id: Opaque user identifier
            track_id: Track UUID
            context_type: Context framing the playback, if any
            context_id: Context identifier, if any
            position_ms: Offset to start from

        Returns:
            Updated PlaybackSession

        Raises:
            NotFoundError: If the track or the context does not exist
            InvalidArgumentError: If the position or context pair is invalid
        """
        position_ms = validate_position_ms(position_ms)
        kind, context_id = validate_context(context_type, context_id)

        def mutate():
            self.catalog.require_track(track_id)
            if kind is not None:
                self.catalog.require_context(kind, context_id)

            state = self.store.get(user_id, for_update=True)
            state = self.store.upsert(user_id, {
                "track_id": track_id,
                "context_type": kind,
                "context_id": context_id,
                "is_playing": True,
                "position_ms": position_ms,
            }, existing=state)
            logger.info(f"Started track {track_id} for user {user_id}")
            return state

        return self._run_command(user_id, "start", mutate)

    def resume(self, user_id: str) -> Optional[PlaybackSession]:
        """Resume playback; a session without a track stays stopped"""
        return self._update_session(user_id, "resume", {"is_playing": True})

    def pause(self, user_id: str) -> Optional[PlaybackSession]:
        """Pause playback"""
        return self._update_session(user_id, "pause", {"is_playing": False})

    def seek(self, user_id: str, position_ms: int) -> Optional[PlaybackSession]:
        """
        Move the playback offset

        Args:
            user_id: Opaque user identifier
            position_ms: New offset in milliseconds

        Returns:
            Updated PlaybackSession or None
        """
        position_ms = validate_position_ms(position_ms)
        return self._update_session(user_id, "seek", {"position_ms": position_ms})

    def set_volume(self, user_id: str, volume_percent: int) -> Optional[PlaybackSession]:
        """
        Set playback volume

        Args:
            user_id: Opaque user identifier
            volume_percent: Volume level (0-100)

        Returns:
            Updated PlaybackSession or None

        Raises:
            InvalidArgumentError: If the volume is outside 0-100
        """
        volume_percent = validate_volume_percent(volume_percent)
        return self._update_session(user_id, "volume", {"volume_percent": volume_percent})

    def set_shuffle(self, user_id: str, shuffle_state: bool) -> Optional[PlaybackSession]:
        shuffle_state = validate_shuffle_state(shuffle_state)
        return self._update_session(user_id, "shuffle", {"shuffle_state": shuffle_state})

    def set_repeat(self, user_id: str, repeat_state) -> Optional[PlaybackSession]:
        repeat_state = validate_repeat_state(repeat_state)
        return self._update_session(user_id, "repeat", {"repeat_state": repeat_state})

    def transfer_device(self, user_id: str, device_name: str) -> Optional[PlaybackSession]:
        """Move playback to another named device"""
        device_name = validate_device_name(device_name)
        return self._update_session(user_id, "transfer", {"device_name": device_name})

    def next_track(self, user_id: str) -> Optional[PlaybackSession]:
        """
        Advance to the next track.

        Sources are tried in order: repeat-track, the manual queue, then the
        session's album or playlist context. When none yields a track the
        session is left unchanged; callers read that as "playback would stop".

        Args:
            user_id: Opaque user identifier

        Returns:
            Updated (or unchanged) PlaybackSession, or None without a session
        """

        def mutate():
            state = self.store.get(user_id, for_update=True)
            if state is None:
                logger.info(f"No active session for user {user_id}, 'next' ignored")
                return None

            if state.repeat_state is RepeatState.TRACK and state.track_id:
                logger.info(f"Repeating track {state.track_id} for user {user_id}")
                return self.store.upsert(user_id, {"is_playing": True}, existing=state)

            queued = self.queue_service.dequeue(user_id)
            if queued is not None:
                context = None
                if queued.context_type is not None:
                    context = (queued.context_type, queued.context_id)
                logger.info(f"Playing queued track {queued.track_id} for user {user_id}")
                return self._play_track(user_id, state, queued.track_id, context)

            if state.context_type is not None and state.context_type.supports_sequencing:
                next_id = self.sequencer.next_track(
                    state.track_id,
                    state.context_type,
                    state.context_id,
                    shuffle=state.shuffle_state,
                    repeat_context=state.repeat_state is RepeatState.CONTEXT
                )
                if next_id is not None:
                    logger.info(f"Playing track {next_id} from {state.context_type.value} {state.context_id} for user {user_id}")
                    return self._play_track(user_id, state, next_id)

            logger.info(f"No next track for user {user_id}, session unchanged")
            return state

        return self._run_command(user_id, "next", mutate)

    def previous_track(self, user_id: str) -> Optional[PlaybackSession]:
        """
        Go back to the track played before the current one.

        The play log decides, not the context order.

        Args:
            user_id: Opaque user identifier

        Returns:
            Updated (or unchanged) PlaybackSession, or None without a session
        """

        def mutate():
            state = self.store.get(user_id, for_update=True)
            if state is None:
                logger.info(f"No active session for user {user_id}, 'previous' ignored")
                return None

            previous_id = self.history_service.get_previous_track_id(user_id)
            if previous_id is None:
                logger.info(f"No previous track in history for user {user_id}, session unchanged")
                return state

            logger.info(f"Returning to track {previous_id} for user {user_id}")
            return self._play_track(user_id, state, previous_id)

        return self._run_command(user_id, "previous", mutate)

    def stop(self, user_id: str) -> None:
        """Tear down the user's session; a no-op when there is none"""
        self._run_command(user_id, "stop", lambda: self.store.delete(user_id))

    # ------------------------------------------------------------------
    # Manual queue
    # ------------------------------------------------------------------

    def add_to_queue(
        self,
        user_id: str,
        track_id: str,
        context_type: Optional[ContextType] = None,
        context_id: Optional[str] = None
    ) -> QueueItem:
        """
        Append a track to the user's manual queue

        Args:
            user_id: Opaque user identifier
            track_id: Track UUID
            context_type: Context the track was picked from, if any
            context_id: Context identifier, if any

        Returns:
            Created QueueItem

        Raises:
            NotFoundError: If the track or the context does not exist
        """
        kind, context_id = validate_context(context_type, context_id)

        def mutate():
            self.catalog.require_track(track_id)
            if kind is not None:
                self.catalog.require_context(kind, context_id)
            return self.queue_service.enqueue(user_id, track_id, kind, context_id)

        return self._run_command(user_id, "enqueue", mutate)

    def list_queue(self, user_id: str, limit: Optional[int] = None) -> List[QueueItem]:
        """
        Get the user's manual queue in play order

        Args:
            user_id: Opaque user identifier
            limit: Maximum number of items (configured default if omitted)

        Returns:
            List of QueueItem instances
        """
        if limit is None:
            limit = settings.queue_default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= settings.queue_max_limit:
            raise InvalidArgumentError("limit", f"limit must be between 1 and {settings.queue_max_limit}")
        return self.queue_service.list(user_id, limit)

    def remove_from_queue(self, user_id: str, item_id: str) -> bool:
        """Remove one queue item owned by the user; False if there is none"""
        return self._run_command(user_id, "dequeue-item", lambda: self.queue_service.remove(user_id, item_id))

    def clear_queue(self, user_id: str) -> int:
        """Drop the user's whole manual queue and return how many items went"""
        return self._run_command(user_id, "clear-queue", lambda: self.queue_service.clear(user_id))
