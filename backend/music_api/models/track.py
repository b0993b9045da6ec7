"""Track model"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from music_api.database import Base, utcnow


class Track(Base):
    """Track model representing a music track/song"""

    __tablename__ = "tracks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    album_id = Column(String, ForeignKey("albums.id", ondelete="CASCADE"), nullable=False, index=True)
    artist_id = Column(String, ForeignKey("artists.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    duration_ms = Column(Integer, default=0)
    disc_number = Column(Integer, default=1)
    track_number = Column(Integer, nullable=False)
    audio_url = Column(String, nullable=True)
    play_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    # Relationships
    album = relationship("Album", back_populates="tracks")
    artist = relationship("Artist", back_populates="tracks")

    def __repr__(self):
        return f"<Track(id={self.id}, title='{self.title}', track_number={self.track_number})>"
