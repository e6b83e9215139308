from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from .config import PresenceConfig
from .constants import (
    D_MESSAGE,
    D_POSITION,
    D_ROOM_ID,
    D_USER_ID,
    D_USERS,
    EV_CONNECT,
    EV_DISCONNECT,
    EV_MESSAGE,
    M_USER_CHAT,
    M_USER_ENTER,
    M_USER_LEAVE,
    M_USER_MOVED,
    M_USERS_ONLINE,
    S_ROOM_ID,
    S_USER_ID,
)
from .envelope import make_envelope, make_presence
from .errors import NotConnected, TransportError
from .messages import Position
from .rooms import RoomSubscriptionSet
from .router import MessageRouter
from .session import SessionAdvertiser, SessionIdentity, session_type
from .stats import StatsManager
from .transport import Peer, Transport

MessageHandler = Callable[[Any], None]


class PresenceService:
    """One participant in the room presence protocol.

    Outbound, each room operation is encoded as a ``{method, data}``
    presence payload and broadcast inside a ``{type, data}`` envelope.
    Inbound, the router filters transport traffic down to this network
    type and hands the raw payload to the single local message handler.
    """

    def __init__(
        self,
        transport: Transport,
        config: PresenceConfig | None = None,
        *,
        on_message: MessageHandler | None = None,
    ) -> None:
        self.config = config or PresenceConfig()
        self.transport = transport
        self.log = logging.getLogger("roomcast.service")

        # Transport callbacks and local calls may interleave and may re-enter
        # (a handler calling enter_room). Guard shared state with one RLock.
        self._state_lock = threading.RLock()

        self._handler = on_message

        self.stats_manager = StatsManager(self)
        self.rooms = RoomSubscriptionSet()
        self.router = MessageRouter(self)
        self.advertiser = SessionAdvertiser(
            self,
            SessionIdentity(
                network_type=self.config.network_type,
                user_id=self.config.user_id,
                version=self.config.version,
            ),
        )

    # -- state -------------------------------------------------------------

    @property
    def identity(self) -> SessionIdentity:
        return self.advertiser.identity

    @property
    def network_type(self) -> str:
        return self.advertiser.identity.network_type

    @property
    def user_id(self) -> str | None:
        return self.advertiser.identity.user_id

    @property
    def room_id(self) -> str | None:
        return self.advertiser.identity.room_id

    @property
    def connected(self) -> bool:
        return self.advertiser.connected

    def set_message_handler(self, handler: MessageHandler | None) -> None:
        self._handler = handler

    # -- plumbing ----------------------------------------------------------

    def listeners(self) -> list[tuple[str, Callable[..., None]]]:
        """Transport subscriptions registered on connect."""
        out: list[tuple[str, Callable[..., None]]] = [
            (EV_MESSAGE, self.router.on_inbound_broadcast)
        ]
        if self.config.replay_presence:
            out.append((EV_CONNECT, self._on_peer_connect))
            out.append((EV_DISCONNECT, self._on_peer_disconnect))
        return out

    def transport_call(self, name: str, *args: Any) -> Any:
        """Invoke a transport method, wrapping failures as TransportError."""
        try:
            return getattr(self.transport, name)(*args)
        except TransportError:
            raise
        except Exception as e:
            self.log.warning("Transport %s failed: %s", name, e)
            raise TransportError(f"{name} failed: {e}") from e

    def dispatch_message(self, payload: Any) -> None:
        """Deliver a payload to the local handler within the current turn."""
        self.stats_manager.inc("msgs_dispatched")
        handler = self._handler
        if handler is None:
            return
        try:
            handler(payload)
        except Exception:
            self.stats_manager.inc("handler_errors")
            self.log.exception("Local message handler raised")

    def send(self, payload: Any) -> None:
        """Broadcast a payload to every peer on this network type."""
        self._require_connected("send")
        self.transport_call("broadcast", make_envelope(self.network_type, payload))
        self.stats_manager.inc("msgs_out")
        if self.log.isEnabledFor(logging.DEBUG):
            method = payload.get("method") if isinstance(payload, dict) else None
            self.log.debug("TX type=%r method=%r", self.network_type, method)

    def _require_connected(self, op: str) -> None:
        if not self.connected:
            raise NotConnected(f"{op} requires a connected session")

    # -- session -----------------------------------------------------------

    def connect(self) -> None:
        self.advertiser.connect()
        if self.stats_manager.started_monotonic is None:
            self.stats_manager.set_start_time()

    def reconnect(self) -> None:
        self.advertiser.reconnect()

    def disconnect(self) -> None:
        if not self.connected:
            return
        self.advertiser.disconnect()

    def logon(self) -> None:
        self.advertiser.logon()

    def set_user_id(self, user_id: str) -> None:
        self.advertiser.set_user_id(user_id)

    # -- rooms -------------------------------------------------------------

    def subscribe(self, room_id: str) -> None:
        self.rooms.subscribe(room_id)

    def unsubscribe(self, room_id: str) -> None:
        self.rooms.unsubscribe(room_id)

    def enter_room(self, room_id: str) -> None:
        self._require_connected("enter_room")
        if not isinstance(room_id, str) or not room_id:
            raise ValueError("room id must be a non-empty string")

        with self._state_lock:
            self.subscribe(room_id)
            ident = self.advertiser.update(room_id=room_id)

        self.logon()
        self.log.info("Entered room=%r user=%r", room_id, ident.user_id)
        self.send(
            make_presence(
                M_USER_ENTER, {D_USER_ID: ident.user_id, D_ROOM_ID: room_id}
            )
        )

    def leave_room(self, room_id: str) -> None:
        self._require_connected("leave_room")

        with self._state_lock:
            self.unsubscribe(room_id)
            was_active = self.room_id == room_id
            ident = (
                self.advertiser.update(room_id=None) if was_active else self.identity
            )

        if was_active:
            self.logon()
            self.log.info("Left room=%r user=%r", room_id, ident.user_id)

        self.send(
            make_presence(
                M_USER_LEAVE, {D_USER_ID: ident.user_id, D_ROOM_ID: room_id}
            )
        )

    def move(self, position: Position | dict) -> None:
        self._require_connected("move")
        if isinstance(position, Position):
            position = position.to_dict()

        ident = self.identity
        self.send(
            make_presence(
                M_USER_MOVED,
                {
                    D_USER_ID: ident.user_id,
                    D_ROOM_ID: ident.room_id,
                    D_POSITION: position,
                },
            )
        )

    def chat(self, message: Any) -> None:
        self._require_connected("chat")
        ident = self.identity
        self.send(
            make_presence(
                M_USER_CHAT,
                {
                    D_USER_ID: ident.user_id,
                    D_ROOM_ID: ident.room_id,
                    D_MESSAGE: message,
                },
            )
        )

    def list_users(self) -> list[str]:
        """Emit a local ``users_online`` snapshot and return its user list.

        Nothing is broadcast.
        """
        self._require_connected("list_users")
        peers = self.transport_call("list_peers")

        users = [
            peer.session_data.get(S_USER_ID)
            for peer in peers
            if session_type(peer.session_data) == self.network_type
        ]

        self.dispatch_message(make_presence(M_USERS_ONLINE, {D_USERS: users}))
        return users

    # -- presence replay ---------------------------------------------------

    def _on_peer_connect(self, peer: Peer) -> None:
        """Tell a newly connected peer which room we are in."""
        ident = self.identity
        if not self.connected or not ident.room_id:
            return

        env = make_envelope(
            self.network_type,
            make_presence(
                M_USER_ENTER, {D_USER_ID: ident.user_id, D_ROOM_ID: ident.room_id}
            ),
        )
        try:
            peer.send(env)
        except Exception as e:
            # Runs inside the transport's event dispatch.
            self.stats_manager.inc("replay_errors")
            self.log.warning("Presence replay to new peer failed: %s", e)
            return

        self.stats_manager.inc("replays_sent")
        self.log.debug("Replayed user_enter room=%r to new peer", ident.room_id)

    def _on_peer_disconnect(self, peer: Peer) -> None:
        """Surface a departed peer's implicit leave to the local handler."""
        if not self.connected:
            return

        session_data = peer.session_data
        if session_type(session_data) != self.network_type:
            return

        room_id = session_data.get(S_ROOM_ID)
        if not room_id:
            return

        user_id = session_data.get(S_USER_ID)
        self.stats_manager.inc("leaves_synthesized")
        self.log.debug("Peer user=%r dropped from room=%r", user_id, room_id)
        self.dispatch_message(
            make_presence(M_USER_LEAVE, {D_USER_ID: user_id, D_ROOM_ID: room_id})
        )
