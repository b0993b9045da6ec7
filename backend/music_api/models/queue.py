"""Manual queue models"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from music_api.database import Base, utcnow
from music_api.models.enums import ContextType


class QueueItem(Base):
    """Track explicitly enqueued by a user, consumed FIFO by position"""

    __tablename__ = "queue_items"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    track_id = Column(String, ForeignKey("tracks.id", ondelete="CASCADE"), nullable=False, index=True)
    context_type = Column(SQLEnum(ContextType), nullable=True)  # Context carried from the enqueue request
    context_id = Column(String, nullable=True)
    position = Column(Integer, nullable=False)  # Strictly increasing per user, gaps allowed
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    # Relationships
    track = relationship("Track")

    __table_args__ = (
        UniqueConstraint('user_id', 'position', name='unique_user_queue_position'),
    )

    def __repr__(self):
        return f"<QueueItem(id={self.id}, track_id={self.track_id}, position={self.position})>"


class QueueCursor(Base):
    """Highest queue position ever handed out per user, so positions are never reused"""

    __tablename__ = "queue_cursors"

    user_id = Column(String, primary_key=True)
    last_position = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<QueueCursor(user_id={self.user_id}, last_position={self.last_position})>"
