"""Play history API endpoints"""
from datetime import datetime
from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from typing import List, Optional

from music_api.api.deps import get_current_user_id
from music_api.api.player import TrackInfo
from music_api.config import settings
from music_api.database import get_db
from music_api.models.play_history import PlayHistoryEntry
from music_api.services.catalog_service import CatalogService
from music_api.services.history_service import HistoryService

router = APIRouter(tags=["history"])


class HistoryEntryResponse(BaseModel):
    id: int
    track_id: str
    played_at: datetime
    play_duration: int | None
    track: TrackInfo | None = None


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int


class RecentlyPlayedResponse(BaseModel):
    items: List[HistoryEntryResponse]
    pagination: Pagination


class RecordPlayRequest(BaseModel):
    play_duration: int | None = Field(None, ge=0)  # Milliseconds listened


def _history_entry_response(catalog: CatalogService, entry: PlayHistoryEntry) -> dict:
    return {
        "id": entry.id,
        "track_id": entry.track_id,
        "played_at": entry.played_at,
        "play_duration": entry.play_duration,
        "track": catalog.describe_track(entry.track_id),
    }


@router.get("/api/me/player/recently-played", response_model=RecentlyPlayedResponse)
def get_recently_played(
    limit: int = Query(settings.history_default_limit, ge=1, le=50),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """List the caller's play history, newest first"""
    catalog = CatalogService(db)
    history_service = HistoryService(db, catalog)
    entries = history_service.get_recently_played(user_id, limit=limit, offset=offset)
    return {
        "items": [_history_entry_response(catalog, entry) for entry in entries],
        "pagination": {"limit": limit, "offset": offset, "total": history_service.count(user_id)},
    }


@router.post("/api/tracks/{track_id}/play", response_model=HistoryEntryResponse, status_code=201)
def record_play(
    track_id: str,
    request: Optional[RecordPlayRequest] = Body(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Record that the caller played a track"""
    catalog = CatalogService(db)
    history_service = HistoryService(db, catalog)
    entry = history_service.record_play(
        user_id,
        track_id,
        play_duration=request.play_duration if request else None
    )
    return _history_entry_response(catalog, entry)
