"""Queue API endpoints"""
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field
from typing import List, Optional

from music_api.api.deps import get_current_user_id, get_playback_service
from music_api.api.player import TrackInfo
from music_api.config import settings
from music_api.models.enums import ContextType
from music_api.models.queue import QueueItem
from music_api.services.playback_service import PlaybackService

router = APIRouter(prefix="/api/me/player/queue", tags=["queue"])


class QueueItemResponse(BaseModel):
    id: str
    track_id: str
    position: int
    context_type: Optional[ContextType] = None
    context_id: str | None = None
    created_at: datetime | None
    track: TrackInfo | None = None


class QueueResponse(BaseModel):
    items: List[QueueItemResponse]
    total: int


class AddToQueueRequest(BaseModel):
    track_id: str = Field(..., min_length=1, max_length=255)
    context_type: Optional[ContextType] = None
    context_id: str | None = Field(None, min_length=1, max_length=255)


def _queue_item_response(service: PlaybackService, item: QueueItem) -> dict:
    return {
        "id": item.id,
        "track_id": item.track_id,
        "position": item.position,
        "context_type": item.context_type,
        "context_id": item.context_id,
        "created_at": item.created_at,
        "track": service.catalog.describe_track(item.track_id),
    }


@router.get("", response_model=QueueResponse)
def get_queue(
    limit: int = Query(settings.queue_default_limit, ge=1, le=settings.queue_max_limit),
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Get the manual queue in play order"""
    items = service.list_queue(user_id, limit)
    return {
        "items": [_queue_item_response(service, item) for item in items],
        "total": service.queue_service.count(user_id),
    }


@router.post("", response_model=QueueItemResponse, status_code=201)
def add_to_queue(
    request: AddToQueueRequest,
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Append a track to the manual queue"""
    item = service.add_to_queue(
        user_id,
        request.track_id,
        context_type=request.context_type,
        context_id=request.context_id
    )
    return _queue_item_response(service, item)


@router.delete("/{queue_item_id}", status_code=204)
def remove_from_queue(
    queue_item_id: str,
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Remove a track from the queue"""
    if not service.remove_from_queue(user_id, queue_item_id):
        raise HTTPException(status_code=404, detail=f"Queue item '{queue_item_id}' not found")
    return Response(status_code=204)


@router.delete("")
def clear_queue(
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Clear the manual queue"""
    count = service.clear_queue(user_id)
    return {"message": f"Cleared {count} items from queue", "count": count}
