"""In-process broadcast transport.

Every endpoint attached to a MemoryNetwork sees every other endpoint as a
peer. Messages and session metadata pass through the cbor codec, so
receivers never share objects with the sender, and session metadata is
replace-only exactly like a real transport slot. Delivery is synchronous
and in attach order.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .codec import decode, encode, wire_copy
from .constants import EV_CONNECT, EV_DISCONNECT, EV_MESSAGE

_EVENTS = (EV_MESSAGE, EV_CONNECT, EV_DISCONNECT)


class MemoryPeer:
    """How `viewer` sees `endpoint`."""

    def __init__(
        self,
        endpoint: MemoryTransport,
        viewer: MemoryTransport,
        session: bytes | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._viewer = viewer
        # Frozen snapshot for departed peers; live lookup otherwise.
        self._session = session
        self._frozen = session is not None

    @property
    def id(self) -> str:
        return self._endpoint.peer_id

    @property
    def session_data(self) -> dict[str, Any] | None:
        raw = self._session if self._frozen else self._endpoint._session
        return None if raw is None else decode(raw)

    def send(self, message: dict) -> None:
        if not self._endpoint.attached:
            raise ConnectionError(f"peer {self.id} is not connected")
        self._endpoint._deliver(self._viewer, message)

    def __repr__(self) -> str:
        return f"MemoryPeer({self.id!r})"


class MemoryNetwork:
    def __init__(self) -> None:
        self.log = logging.getLogger("roomcast.memory")
        self.endpoints: list[MemoryTransport] = []

    def transport(self, peer_id: str, *, attach: bool = True) -> MemoryTransport:
        t = MemoryTransport(self, peer_id)
        if attach:
            t.attach()
        return t

    def _attach(self, endpoint: MemoryTransport) -> None:
        existing = list(self.endpoints)
        self.endpoints.append(endpoint)
        self.log.debug("Attached peer=%s peers=%d", endpoint.peer_id, len(existing))
        for other in existing:
            other._emit(EV_CONNECT, MemoryPeer(endpoint, other))
            endpoint._emit(EV_CONNECT, MemoryPeer(other, endpoint))

    def _detach(self, endpoint: MemoryTransport) -> None:
        self.endpoints.remove(endpoint)
        self.log.debug("Detached peer=%s", endpoint.peer_id)
        last = endpoint._session if endpoint._session is not None else encode(None)
        for other in list(self.endpoints):
            other._emit(EV_DISCONNECT, MemoryPeer(endpoint, other, session=last))

    def others(self, endpoint: MemoryTransport) -> list[MemoryTransport]:
        return [e for e in self.endpoints if e is not endpoint]


class MemoryTransport:
    def __init__(self, network: MemoryNetwork, peer_id: str) -> None:
        self.network = network
        self.peer_id = peer_id
        self._session: bytes | None = None
        self._listeners: dict[str, list[Callable[..., None]]] = {e: [] for e in _EVENTS}

    @property
    def attached(self) -> bool:
        return self in self.network.endpoints

    def attach(self) -> None:
        if not self.attached:
            self.network._attach(self)

    def detach(self) -> None:
        if self.attached:
            self.network._detach(self)

    # -- Transport ---------------------------------------------------------

    def broadcast(self, message: dict) -> None:
        self._require_attached()
        for other in self.network.others(self):
            other._deliver(self, message)

    def set_session_data(self, data: dict[str, Any]) -> None:
        self._session = encode(data)

    def list_peers(self) -> list[MemoryPeer]:
        self._require_attached()
        return [MemoryPeer(other, self) for other in self.network.others(self)]

    def add_listener(self, event: str, callback: Callable[..., None]) -> None:
        if event not in self._listeners:
            raise ValueError(f"unknown transport event {event!r}")
        self._listeners[event].append(callback)

    def remove_listener(self, event: str, callback: Callable[..., None]) -> None:
        callbacks = self._listeners.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    # -- internals ---------------------------------------------------------

    def _require_attached(self) -> None:
        if not self.attached:
            raise ConnectionError(f"transport {self.peer_id} is not attached")

    def _deliver(self, sender: MemoryTransport, message: dict) -> None:
        self._emit(EV_MESSAGE, MemoryPeer(sender, self), wire_copy(message))

    def _emit(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners[event]):
            callback(*args)
