from __future__ import annotations


class RoomcastError(Exception):
    """Base class for roomcast errors."""


class NotConnected(RoomcastError):
    """A presence operation was attempted while disconnected."""


class TransportError(RoomcastError):
    """The underlying transport rejected or failed a call."""


class UnknownMethod(RoomcastError, ValueError):
    """A presence payload named a method outside the known set."""
