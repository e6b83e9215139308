from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from .constants import (
    DEFAULT_NETWORK_TYPE,
    PROTOCOL_VERSION,
    S_ROOM_ID,
    S_TYPE,
    S_USER_ID,
    S_VERSION,
)
from .errors import NotConnected

if TYPE_CHECKING:
    from .service import PresenceService


@dataclass(frozen=True)
class SessionIdentity:
    """Who this participant is and where it is.

    Instances are never mutated; every change produces a new value that
    replaces the old one as a whole.
    """

    network_type: str = DEFAULT_NETWORK_TYPE
    user_id: str | None = None
    room_id: str | None = None
    version: str = PROTOCOL_VERSION

    def to_session_data(self) -> dict[str, Any]:
        return {
            S_TYPE: self.network_type,
            S_USER_ID: self.user_id,
            S_ROOM_ID: self.room_id,
            S_VERSION: self.version,
        }


def session_type(session_data: Any) -> str | None:
    """Return the advertised network type of a peer, or None."""
    if not isinstance(session_data, dict):
        return None
    t = session_data.get(S_TYPE)
    return t if isinstance(t, str) else None


class SessionAdvertiser:
    """
    Keeps the transport's session metadata in sync with the local identity.

    This class is responsible for:
    - Holding the current SessionIdentity
    - Republishing it in full on every change (logon)
    - Registering/deregistering transport listeners on connect/disconnect
    """

    def __init__(self, service: PresenceService, identity: SessionIdentity) -> None:
        self.service = service
        self.log = logging.getLogger("roomcast.session")
        self.identity = identity
        self.connected = False
        self._registered: list[tuple[str, Any]] = []

    def update(self, **changes: Any) -> SessionIdentity:
        """Replace the identity with a copy carrying `changes`."""
        with self.service._state_lock:
            self.identity = replace(self.identity, **changes)
            return self.identity

    def logon(self) -> None:
        """Publish the full current identity as this peer's session data."""
        if not self.connected:
            raise NotConnected("cannot log on while disconnected")

        with self.service._state_lock:
            data = self.identity.to_session_data()

        self.service.transport_call("set_session_data", data)
        self.service.stats_manager.inc("logons")
        self.log.debug(
            "Logon type=%r user=%r room=%r version=%r",
            data[S_TYPE],
            data[S_USER_ID],
            data[S_ROOM_ID],
            data[S_VERSION],
        )

    def set_user_id(self, user_id: str) -> None:
        if not isinstance(user_id, str):
            raise ValueError("user id must be a string")
        old = self.identity.user_id
        self.update(user_id=user_id)
        self.log.info("User id changed old=%r new=%r", old, user_id)
        if self.connected:
            self.logon()

    def connect(self) -> None:
        if self.connected:
            self.logon()
            return

        if not isinstance(self.identity.user_id, str):
            raise ValueError("a user id must be set before connecting")

        try:
            for event, callback in self.service.listeners():
                self.service.transport_call("add_listener", event, callback)
                self._registered.append((event, callback))
        except Exception:
            self._unregister()
            raise

        self.connected = True
        self.log.info(
            "Connected type=%r user=%r",
            self.identity.network_type,
            self.identity.user_id,
        )
        self.logon()

    def reconnect(self) -> None:
        self.log.info("Reconnect; republishing session data")
        self.logon()

    def disconnect(self) -> None:
        if not self.connected:
            self.log.debug("Disconnect while already disconnected; ignoring")
            return

        # Listeners go first so nothing is classified against a cleared identity.
        try:
            self._unregister()
        finally:
            with self.service._state_lock:
                self.connected = False
                self.update(room_id=None)
                dropped = self.service.rooms.clear()
        if dropped:
            self.log.debug("Cleared subscriptions rooms=%s", dropped)

        self.service.transport_call("set_session_data", {})
        self.log.info("Disconnected user=%r", self.identity.user_id)

    def _unregister(self) -> None:
        registered, self._registered = self._registered, []
        for event, callback in registered:
            self.service.transport_call("remove_listener", event, callback)
