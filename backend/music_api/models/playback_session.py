"""Playback Session model"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from music_api.database import Base, utcnow
from music_api.models.enums import ContextType, RepeatState, TransportState


class PlaybackSession(Base):
    """Current playback state of one user, upserted by every player command"""

    __tablename__ = "playback_sessions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, unique=True, index=True)
    track_id = Column(String, ForeignKey("tracks.id", ondelete="SET NULL"), nullable=True)
    context_type = Column(SQLEnum(ContextType), nullable=True)  # Null means no context
    context_id = Column(String, nullable=True)
    is_playing = Column(Boolean, default=False, nullable=False)
    position_ms = Column(Integer, default=0, nullable=False)
    volume_percent = Column(Integer, default=80, nullable=False)
    device_name = Column(String, default="Web Player", nullable=False)
    shuffle_state = Column(Boolean, default=False, nullable=False)
    repeat_state = Column(SQLEnum(RepeatState), default=RepeatState.OFF, nullable=False)
    version = Column(Integer, nullable=False)  # Optimistic concurrency counter
    created_at = Column(DateTime, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    track = relationship("Track", foreign_keys=[track_id])

    # UPDATEs are issued as "... WHERE version = :old"; zero matched rows raises StaleDataError
    __mapper_args__ = {"version_id_col": version}

    @property
    def transport_state(self) -> TransportState:
        if not self.track_id:
            return TransportState.STOPPED
        return TransportState.PLAYING if self.is_playing else TransportState.PAUSED

    def __repr__(self):
        return f"<PlaybackSession(user_id={self.user_id}, track_id={self.track_id}, is_playing={self.is_playing})>"
