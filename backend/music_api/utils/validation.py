"""Argument checks the playback core runs before it writes anything.

The HTTP layer validates request bodies with pydantic already; these helpers
repeat the range checks for callers that reach the services directly.
"""
from typing import Optional, Tuple

from music_api.exceptions import InvalidArgumentError
from music_api.models.enums import ContextType, RepeatState


def _require_int(value, field: str) -> int:
    # bool is an int subclass; True must not pass as volume 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(field, f"{field} must be an integer")
    return value


def validate_position_ms(value) -> int:
    """
    Validate a playback offset.

    Args:
        value: Offset in milliseconds

    Returns:
        The offset

    Raises:
        InvalidArgumentError: If the value is not an integer >= 0
    """
    position_ms = _require_int(value, "position_ms")
    if position_ms < 0:
        raise InvalidArgumentError("position_ms", "position_ms must be >= 0")
    return position_ms


def validate_volume_percent(value) -> int:
    """
    Validate a volume level.

    Args:
        value: Volume 0-100

    Returns:
        The volume

    Raises:
        InvalidArgumentError: If the value is outside 0-100
    """
    volume = _require_int(value, "volume_percent")
    if not 0 <= volume <= 100:
        raise InvalidArgumentError("volume_percent", "volume_percent must be between 0 and 100")
    return volume


def validate_repeat_state(value) -> RepeatState:
    """Coerce ``value`` to a RepeatState or raise InvalidArgumentError."""
    try:
        return RepeatState(value)
    except ValueError:
        allowed = ", ".join(state.value for state in RepeatState)
        raise InvalidArgumentError("repeat_state", f"repeat_state must be one of: {allowed}")


def validate_shuffle_state(value) -> bool:
    if not isinstance(value, bool):
        raise InvalidArgumentError("shuffle_state", "shuffle_state must be a boolean")
    return value


def validate_device_name(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError("device_name", "device_name must be a non-empty string")
    name = value.strip()
    if len(name) > 255:
        raise InvalidArgumentError("device_name", "device_name must be at most 255 characters")
    return name


def validate_context(context_type, context_id) -> Tuple[Optional[ContextType], Optional[str]]:
    """
    Normalize a (context_type, context_id) pair.

    ``none`` and a missing type both mean "no context". A context type
    without an id, or an id without a type, is rejected so that the stored
    pair is always both null or both set.

    Args:
        context_type: ContextType, its string value, or None
        context_id: Context identifier or None

    Returns:
        Tuple of (ContextType or None, context_id or None)

    Raises:
        InvalidArgumentError: If the pair is inconsistent or the type unknown
    """
    if context_type is None:
        kind = ContextType.NONE
    else:
        try:
            kind = ContextType(context_type)
        except ValueError:
            allowed = ", ".join(member.value for member in ContextType)
            raise InvalidArgumentError("context_type", f"context_type must be one of: {allowed}")

    if isinstance(context_id, str):
        context_id = context_id.strip() or None

    if kind is ContextType.NONE:
        if context_id is not None:
            raise InvalidArgumentError("context_id", "context_id requires a context_type")
        return None, None

    if context_id is None:
        raise InvalidArgumentError("context_id", f"context_id is required for context_type '{kind.value}'")
    if len(context_id) > 255:
        raise InvalidArgumentError("context_id", "context_id must be at most 255 characters")
    return kind, context_id
