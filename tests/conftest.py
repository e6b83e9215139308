from __future__ import annotations

from typing import Any, Callable

import pytest

from roomcast.config import PresenceConfig
from roomcast.service import PresenceService


class FakePeer:
    def __init__(self, session_data: dict | None = None, peer_id: str = "peer") -> None:
        self.id = peer_id
        self.session_data = session_data
        self.sent: list[dict] = []

    def send(self, message: dict) -> None:
        self.sent.append(message)


class RecordingTransport:
    """Transport stand-in that records every call."""

    def __init__(self) -> None:
        self.broadcasts: list[dict] = []
        self.session_history: list[dict] = []
        self.calls: list[str] = []
        self.peers: list[Any] = []
        self.listeners: dict[str, list[Callable[..., None]]] = {}

    def broadcast(self, message: dict) -> None:
        self.calls.append("broadcast")
        self.broadcasts.append(message)

    def set_session_data(self, data: dict) -> None:
        self.calls.append("set_session_data")
        self.session_history.append(dict(data))

    def list_peers(self) -> list[Any]:
        self.calls.append("list_peers")
        return list(self.peers)

    def add_listener(self, event: str, callback: Callable[..., None]) -> None:
        self.listeners.setdefault(event, []).append(callback)

    def remove_listener(self, event: str, callback: Callable[..., None]) -> None:
        callbacks = self.listeners.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event: str, *args: Any) -> None:
        for callback in list(self.listeners.get(event, [])):
            callback(*args)

    @property
    def session_data(self) -> dict | None:
        return self.session_history[-1] if self.session_history else None


class Inbox(list):
    def __call__(self, payload: Any) -> None:
        self.append(payload)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def inbox() -> Inbox:
    return Inbox()


@pytest.fixture
def make_service(transport: RecordingTransport, inbox: Inbox):
    def _make(**overrides: Any) -> PresenceService:
        cfg = PresenceConfig(user_id="me", **overrides)
        return PresenceService(transport, cfg, on_message=inbox)

    return _make


@pytest.fixture
def service(make_service) -> PresenceService:
    svc = make_service()
    svc.connect()
    return svc


@pytest.fixture
def peer_factory():
    return FakePeer
