"""Player API endpoints"""
from datetime import datetime
from fastapi import APIRouter, Body, Depends, Response
from pydantic import BaseModel, Field
from typing import Optional

from music_api.api.deps import get_current_user_id, get_playback_service
from music_api.models.enums import ContextType, RepeatState
from music_api.services.playback_service import PlaybackService

router = APIRouter(prefix="/api/me/player", tags=["player"])


class TrackInfo(BaseModel):
    id: str
    title: str
    duration_ms: int | None
    track_number: int | None
    artist_id: str
    artist_name: str | None
    artist_image_url: str | None
    album_id: str
    album_title: str | None
    album_cover_image_url: str | None


class ContextInfo(BaseModel):
    type: str
    id: str
    title: str | None
    image_url: str | None


class PlaybackStateResponse(BaseModel):
    is_active: bool
    transport_state: str
    track_id: str | None
    context_type: str | None
    context_id: str | None
    is_playing: bool
    position_ms: int
    volume_percent: int
    device_name: str | None
    shuffle_state: bool
    repeat_state: str
    updated_at: datetime | None
    track: TrackInfo | None = None
    context: ContextInfo | None = None


class StartPlaybackRequest(BaseModel):
    track_id: str | None = None  # Absent means resume
    context_type: Optional[ContextType] = None
    context_id: str | None = Field(None, min_length=1, max_length=255)
    position_ms: int = Field(0, ge=0)


class SeekRequest(BaseModel):
    position_ms: int = Field(..., ge=0)


class VolumeRequest(BaseModel):
    volume_percent: int = Field(..., ge=0, le=100)


class ShuffleRequest(BaseModel):
    state: bool


class RepeatRequest(BaseModel):
    state: RepeatState


class TransferDeviceRequest(BaseModel):
    device_name: str = Field(..., min_length=1, max_length=255)


@router.get("", response_model=PlaybackStateResponse)
def get_current_playback(
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Get the current playback state (idle player when there is no session)"""
    return service.describe(service.get_current_playback(user_id))


@router.put("/play", response_model=PlaybackStateResponse)
def play(
    request: Optional[StartPlaybackRequest] = Body(None),
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Start a track when the body names one, otherwise resume"""
    if request is None or request.track_id is None:
        state = service.resume(user_id)
    else:
        state = service.start(
            user_id,
            request.track_id,
            context_type=request.context_type,
            context_id=request.context_id,
            position_ms=request.position_ms
        )
    return service.describe(state)


@router.put("/pause", response_model=PlaybackStateResponse)
def pause(
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Pause playback"""
    return service.describe(service.pause(user_id))


@router.post("/next", response_model=PlaybackStateResponse)
def next_track(
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Skip to next track"""
    return service.describe(service.next_track(user_id))


@router.post("/previous", response_model=PlaybackStateResponse)
def previous_track(
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Go back to the previously played track"""
    return service.describe(service.previous_track(user_id))


@router.put("/seek", response_model=PlaybackStateResponse)
def seek(
    request: SeekRequest,
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Update current playback position"""
    return service.describe(service.seek(user_id, request.position_ms))


@router.put("/volume", response_model=PlaybackStateResponse)
def set_volume(
    request: VolumeRequest,
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Set playback volume"""
    return service.describe(service.set_volume(user_id, request.volume_percent))


@router.put("/shuffle", response_model=PlaybackStateResponse)
def set_shuffle(
    request: ShuffleRequest,
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Turn shuffle on or off"""
    return service.describe(service.set_shuffle(user_id, request.state))


@router.put("/repeat", response_model=PlaybackStateResponse)
def set_repeat(
    request: RepeatRequest,
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Set repeat mode (off, context or track)"""
    return service.describe(service.set_repeat(user_id, request.state))


@router.put("/device", response_model=PlaybackStateResponse)
def transfer_device(
    request: TransferDeviceRequest,
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Transfer playback to another device"""
    return service.describe(service.transfer_device(user_id, request.device_name))


@router.delete("", status_code=204)
def stop(
    user_id: str = Depends(get_current_user_id),
    service: PlaybackService = Depends(get_playback_service)
):
    """Stop playback and drop the session"""
    service.stop(user_id)
    return Response(status_code=204)
