"""Local protocol counters for a presence participant."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .service import PresenceService


class StatsManager:
    """
    Tracks counters for one participant.

    Tracks counters for:
    - Inbound envelopes, split by drop reason
    - Payloads handed to the local handler
    - Outbound broadcasts and logons
    - Presence replay activity
    """

    def __init__(self, service: PresenceService) -> None:
        self.service = service
        self.started_monotonic: float | None = None

        self._counters: dict[str, int] = {
            "msgs_in": 0,
            "dropped_disconnected": 0,
            "dropped_bad": 0,
            "dropped_type": 0,
            "dropped_no_session": 0,
            "dropped_peer_type": 0,
            "msgs_dispatched": 0,
            "handler_errors": 0,
            "msgs_out": 0,
            "logons": 0,
            "replays_sent": 0,
            "replay_errors": 0,
            "leaves_synthesized": 0,
        }

    def set_start_time(self) -> None:
        self.started_monotonic = time.monotonic()

    def inc(self, key: str, delta: int = 1) -> None:
        """Increment a counter by the given delta."""
        with self.service._state_lock:
            self._counters[key] = int(self._counters.get(key, 0)) + int(delta)

    def get(self, key: str) -> int:
        with self.service._state_lock:
            return int(self._counters.get(key, 0))

    def snapshot(self) -> dict[str, int]:
        with self.service._state_lock:
            return dict(self._counters)

    def format_stats(self) -> str:
        """Format current statistics as a human-readable string."""
        from . import __version__

        started = self.started_monotonic
        uptime_s = (time.monotonic() - started) if started is not None else 0.0

        ident = self.service.identity
        c = self.snapshot()
        dropped = sum(v for k, v in c.items() if k.startswith("dropped_"))

        lines: list[str] = []
        lines.append(f"roomcast {__version__} stats user={ident.user_id!r}")
        lines.append(f"uptime_s={uptime_s:.1f}")
        lines.append(
            f"session: type={ident.network_type} room={ident.room_id!r} "
            f"subscriptions={len(self.service.rooms)} "
            f"connected={self.service.connected}"
        )
        lines.append(
            "in: msgs={} dispatched={} dropped={} handler_errors={}".format(
                c.get("msgs_in", 0),
                c.get("msgs_dispatched", 0),
                dropped,
                c.get("handler_errors", 0),
            )
        )
        lines.append(
            "drops: disconnected={} bad={} type={} no_session={} peer_type={}".format(
                c.get("dropped_disconnected", 0),
                c.get("dropped_bad", 0),
                c.get("dropped_type", 0),
                c.get("dropped_no_session", 0),
                c.get("dropped_peer_type", 0),
            )
        )
        lines.append(
            "out: msgs={} logons={} replays={} replay_errors={} leaves_synthesized={}".format(
                c.get("msgs_out", 0),
                c.get("logons", 0),
                c.get("replays_sent", 0),
                c.get("replay_errors", 0),
                c.get("leaves_synthesized", 0),
            )
        )

        return "\n".join(lines)
