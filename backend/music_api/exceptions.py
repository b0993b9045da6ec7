"""Errors raised by the playback engine.

Each error carries a machine-readable ``code`` and the HTTP status the API
layer answers with. "No active session" is deliberately not an error: the
controller returns ``None`` and callers render the idle session.
"""


class PlayerError(Exception):
    """Base class for playback engine errors."""

    status_code = 500
    default_code = "player_error"

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class NotFoundError(PlayerError):
    """A referenced track or context does not exist in the catalog."""

    status_code = 404
    default_code = "not_found"

    def __init__(self, entity_type: str, identifier: str, message: str = None):
        super().__init__(message or f"{entity_type} '{identifier}' not found")
        self.entity_type = entity_type
        self.identifier = identifier


class InvalidArgumentError(PlayerError):
    """A command argument is out of range or malformed."""

    status_code = 400
    default_code = "invalid_argument"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class ConflictError(PlayerError):
    """The session row changed underneath a command and the retry failed too."""

    status_code = 409
    default_code = "conflict"


class PlayerBusyError(PlayerError):
    """Another command for the same user held the lock past the timeout."""

    status_code = 503
    default_code = "player_busy"


class StorageUnavailableError(PlayerError):
    """The database failed transiently; nothing was written."""

    status_code = 503
    default_code = "storage_unavailable"
