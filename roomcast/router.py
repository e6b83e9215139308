from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .constants import K_DATA, K_TYPE, S_USER_ID
from .envelope import validate_envelope
from .session import session_type

if TYPE_CHECKING:
    from .service import PresenceService
    from .transport import Peer


class MessageRouter:
    """
    Classifies inbound broadcasts for a single participant.

    This class is responsible for:
    - Dropping envelopes addressed to another network type
    - Dropping envelopes from peers with no session data
    - Dropping envelopes from peers logged on to another network type
    - Handing the untouched payload of everything else to the local handler

    It never interprets the presence method; that is left to the consumer.
    Drops are silent apart from debug logging and counters.
    """

    def __init__(self, service: PresenceService) -> None:
        self.service = service
        self.log = logging.getLogger("roomcast.router")

    def on_inbound_broadcast(self, peer: Peer, message: Any) -> None:
        """Transport callback for the "message" event."""
        stats = self.service.stats_manager
        stats.inc("msgs_in")

        if not self.service.connected:
            stats.inc("dropped_disconnected")
            self._debug_drop(peer, "not connected")
            return

        network_type = self.service.network_type

        try:
            validate_envelope(message)
        except (TypeError, ValueError) as e:
            stats.inc("dropped_bad")
            self._debug_drop(peer, "bad envelope: %s" % e)
            return

        if message[K_TYPE] != network_type:
            stats.inc("dropped_type")
            self._debug_drop(peer, "envelope type %r" % message[K_TYPE])
            return

        session_data = getattr(peer, "session_data", None)
        if not session_data:
            stats.inc("dropped_no_session")
            self._debug_drop(peer, "peer has no session data")
            return

        peer_type = session_type(session_data)
        if peer_type != network_type:
            stats.inc("dropped_peer_type")
            self._debug_drop(peer, "peer logged on as %r" % peer_type)
            return

        if self.log.isEnabledFor(logging.DEBUG):
            self.log.debug(
                "RX user=%r type=%r payload_type=%s",
                session_data.get(S_USER_ID),
                network_type,
                type(message[K_DATA]).__name__,
            )

        self.service.dispatch_message(message[K_DATA])

    def _debug_drop(self, peer: Any, reason: str) -> None:
        if self.log.isEnabledFor(logging.DEBUG):
            self.log.debug(
                "Dropped inbound from peer=%s: %s",
                getattr(peer, "id", "-"),
                reason,
            )
