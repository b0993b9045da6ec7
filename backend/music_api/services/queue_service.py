"""Queue service for managing the per-user manual queue"""
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from music_api.models.enums import ContextType
from music_api.models.queue import QueueItem, QueueCursor

logger = logging.getLogger(__name__)


class QueueService:
    """
    Service for manual queue operations.

    Methods flush but never commit: the playback controller commits the
    queue change together with the session write it belongs to.
    """

    def __init__(self, db: Session):
        """
        Initialize queue service

        Args:
            db: Database session
        """
        self.db = db

    def enqueue(
        self,
        user_id: str,
        track_id: str,
        context_type: Optional[ContextType] = None,
        context_id: Optional[str] = None
    ) -> QueueItem:
        """
        Append a track to the end of a user's queue.

        The new position is one past both the current tail and the highest
        position ever issued, so positions keep increasing after the queue
        drains.

        Args:
            user_id: Opaque user identifier
            track_id: Track UUID
            context_type: Context carried with the item, if any
            context_id: Context identifier, if any

        Returns:
            Created QueueItem
        """
        cursor = self.db.query(QueueCursor).filter(QueueCursor.user_id == user_id).first()
        if not cursor:
            cursor = QueueCursor(user_id=user_id, last_position=0)
            self.db.add(cursor)

        max_position_result = self.db.query(func.max(QueueItem.position)).filter(
            QueueItem.user_id == user_id
        ).scalar()
        max_position = max(max_position_result or 0, cursor.last_position or 0)

        queue_item = QueueItem(
            user_id=user_id,
            track_id=track_id,
            context_type=context_type,
            context_id=context_id,
            position=max_position + 1
        )
        cursor.last_position = queue_item.position

        self.db.add(queue_item)
        self.db.flush()

        logger.info(f"Queued track {track_id} for user {user_id} at position {queue_item.position}")
        return queue_item

    def peek(self, user_id: str) -> Optional[QueueItem]:
        """Get the head of the queue without removing it"""
        return self.db.query(QueueItem).filter(
            QueueItem.user_id == user_id
        ).order_by(QueueItem.position).first()

    def dequeue(self, user_id: str) -> Optional[QueueItem]:
        """
        Atomically remove and return the head of a user's queue.

        The head is claimed with a conditional DELETE on its id. If another
        worker deleted it first the row count is zero and the claim moves on
        to the new head, so one queued item is never handed out twice.

        Args:
            user_id: Opaque user identifier

        Returns:
            The removed QueueItem (detached), or None if the queue is empty
        """
        while True:
            head = self.peek(user_id)
            if head is None:
                return None

            claimed = self.claim(head.id)
            # The row is gone either way; keep the loaded values on a detached copy
            self.db.expunge(head)
            if claimed:
                logger.debug(f"Dequeued item {head.id} (track {head.track_id}) for user {user_id}")
                return head

            logger.info(f"Queue item {head.id} was claimed concurrently, retrying for user {user_id}")

    def claim(self, item_id: str) -> bool:
        """
        Delete a queue item if it still exists

        Args:
            item_id: QueueItem UUID

        Returns:
            True if this call deleted the row
        """
        deleted = self.db.query(QueueItem).filter(
            QueueItem.id == item_id
        ).delete(synchronize_session=False)
        return deleted == 1

    def list(self, user_id: str, limit: int = 20) -> List[QueueItem]:
        """
        Get a user's queue in play order

        Args:
            user_id: Opaque user identifier
            limit: Maximum number of items

        Returns:
            List of QueueItem instances ordered by position
        """
        return self.db.query(QueueItem).filter(
            QueueItem.user_id == user_id
        ).order_by(QueueItem.position).limit(limit).all()

    def count(self, user_id: str) -> int:
        return self.db.query(func.count(QueueItem.id)).filter(QueueItem.user_id == user_id).scalar()

    def remove(self, user_id: str, item_id: str) -> bool:
        """
        Remove one item from a user's queue

        Args:
            user_id: Opaque user identifier
            item_id: QueueItem UUID

        Returns:
            True if removed, False if not found or owned by another user
        """
        deleted = self.db.query(QueueItem).filter(
            QueueItem.id == item_id,
            QueueItem.user_id == user_id
        ).delete(synchronize_session=False)
        if deleted:
            logger.info(f"Removed queue item {item_id} for user {user_id}")
        return deleted == 1

    def clear(self, user_id: str) -> int:
        """
        Remove every item from a user's queue

        Args:
            user_id: Opaque user identifier

        Returns:
            Number of items removed
        """
        count = self.db.query(QueueItem).filter(
            QueueItem.user_id == user_id
        ).delete(synchronize_session=False)
        logger.info(f"Cleared {count} items from queue for user {user_id}")
        return count
