"""Artist model"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from music_api.database import Base, utcnow


class Artist(Base):
    """Artist model, read by the catalog accessor"""

    __tablename__ = "artists"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False, index=True)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, server_default=func.now())

    # Relationships
    albums = relationship("Album", back_populates="artist")
    tracks = relationship("Track", back_populates="artist")

    def __repr__(self):
        return f"<Artist(id={self.id}, name='{self.name}')>"
