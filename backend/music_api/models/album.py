"""Album model"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from music_api.database import Base, utcnow


class Album(Base):
    """Album model representing a music album"""

    __tablename__ = "albums"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    artist_id = Column(String, ForeignKey("artists.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    cover_image_url = Column(String, nullable=True)
    release_year = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    # Relationships
    artist = relationship("Artist", back_populates="albums")
    tracks = relationship("Track", back_populates="album", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Album(id={self.id}, title='{self.title}')>"
