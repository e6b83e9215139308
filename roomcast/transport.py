"""Interface of the broadcast transport roomcast runs on.

The transport is supplied by the host. It has no addressing beyond
"everyone" and "this peer", no ordering and no delivery guarantee. Each
connected peer carries a replace-only session metadata blob.

Event callbacks are invoked as::

    on_message(peer, message)
    on_connect(peer)
    on_disconnect(peer)
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, Sequence


class Peer(Protocol):
    @property
    def session_data(self) -> dict[str, Any] | None: ...

    def send(self, message: dict) -> None: ...


class Transport(Protocol):
    def broadcast(self, message: dict) -> None: ...

    def set_session_data(self, data: dict[str, Any]) -> None: ...

    def list_peers(self) -> Sequence[Peer]: ...

    def add_listener(self, event: str, callback: Callable[..., None]) -> None: ...

    def remove_listener(self, event: str, callback: Callable[..., None]) -> None: ...
