"""Play history model"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from music_api.database import Base, utcnow


class PlayHistoryEntry(Base):
    """Append-only record of a track played by a user"""

    __tablename__ = "play_history"

    id = Column(Integer, primary_key=True, autoincrement=True)  # Tiebreaker for equal played_at
    user_id = Column(String, nullable=False)
    track_id = Column(String, ForeignKey("tracks.id", ondelete="CASCADE"), nullable=False)
    played_at = Column(DateTime, default=utcnow, nullable=False)
    play_duration = Column(Integer, nullable=True)  # Milliseconds listened, when reported

    # Relationships
    track = relationship("Track")

    __table_args__ = (
        Index('ix_play_history_user_played_at', 'user_id', 'played_at'),
    )

    def __repr__(self):
        return f"<PlayHistoryEntry(id={self.id}, user_id={self.user_id}, track_id={self.track_id})>"
