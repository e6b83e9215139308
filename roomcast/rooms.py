"""Local room subscription bookkeeping.

Subscriptions never gate inbound filtering; they only record which rooms
this participant considers itself part of.
"""

from __future__ import annotations

import logging
from typing import Iterator


class RoomSubscriptionSet:
    def __init__(self) -> None:
        self.log = logging.getLogger("roomcast.rooms")
        self._rooms: set[str] = set()

    def subscribe(self, room: str) -> bool:
        """Add a room. Returns True if it was not already subscribed."""
        if room in self._rooms:
            return False
        self._rooms.add(room)
        self.log.debug("Subscribed room=%r", room)
        return True

    def unsubscribe(self, room: str) -> bool:
        """Remove a room. Returns True if it was subscribed."""
        if room not in self._rooms:
            return False
        self._rooms.discard(room)
        self.log.debug("Unsubscribed room=%r", room)
        return True

    def clear(self) -> list[str]:
        """Drop all subscriptions, returning the rooms that were held."""
        rooms = sorted(self._rooms)
        self._rooms.clear()
        return rooms

    def __contains__(self, room: object) -> bool:
        return room in self._rooms

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._rooms))

    def __len__(self) -> int:
        return len(self._rooms)
