"""Room presence protocol over a broadcast-only peer transport."""

__version__ = "0.1.0"

from .config import PresenceConfig
from .errors import NotConnected, RoomcastError, TransportError, UnknownMethod
from .messages import (
    Position,
    PresenceMessage,
    UserChat,
    UserEnter,
    UserLeave,
    UserMoved,
    UsersOnline,
    from_payload,
    to_payload,
)
from .service import PresenceService
from .session import SessionIdentity

__all__ = [
    "__version__",
    "NotConnected",
    "Position",
    "PresenceConfig",
    "PresenceMessage",
    "PresenceService",
    "RoomcastError",
    "SessionIdentity",
    "TransportError",
    "UnknownMethod",
    "UserChat",
    "UserEnter",
    "UserLeave",
    "UserMoved",
    "UsersOnline",
    "from_payload",
    "to_payload",
]
