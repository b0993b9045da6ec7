"""Shared API dependencies"""
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from music_api.config import settings
from music_api.database import get_db
from music_api.services.playback_service import PlaybackService


def get_current_user_id(request: Request) -> str:
    """
    Read the caller's user id.

    Authentication happens upstream; the player trusts the opaque id the
    gateway forwards in the configured header.
    """
    user_id = (request.headers.get(settings.user_id_header) or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail=f"Missing {settings.user_id_header} header")
    return user_id


def get_playback_service(db: Session = Depends(get_db)) -> PlaybackService:
    return PlaybackService(db)
