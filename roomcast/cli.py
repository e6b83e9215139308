from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import replace
from typing import Any, Callable

from .config import PresenceConfig, load_config
from .logging_config import configure_logging
from .memory import MemoryNetwork
from .messages import Position, from_payload
from .paths import default_config_path
from .service import PresenceService

log = logging.getLogger("roomcast.cli")


def _printer(user: str) -> Callable[[Any], None]:
    def on_message(payload: Any) -> None:
        try:
            msg = from_payload(payload)
        except (TypeError, ValueError) as e:
            log.warning("[%s] undecodable payload %r: %s", user, payload, e)
            return
        log.info("[%s] <- %r", user, msg)

    return on_message


def run_demo(cfg: PresenceConfig, users: list[str], room: str) -> list[PresenceService]:
    """Drive a scripted session between `users` over an in-memory network."""
    network = MemoryNetwork()
    services: list[PresenceService] = []

    for user in users:
        transport = network.transport(user, attach=False)
        svc = PresenceService(
            transport,
            replace(cfg, user_id=user),
            on_message=_printer(user),
        )
        # Listen before joining so replays from existing peers arrive.
        svc.connect()
        transport.attach()
        svc.enter_room(room)
        services.append(svc)

    first, last = services[0], services[-1]

    first.chat(f"hello from {first.user_id}")
    if len(services) > 1:
        services[1].move(Position(pos=(1.0, 2.0, 3.0), dir=(0.0, 0.0, 0.0)))
    last.list_users()

    if len(services) > 2:
        services[1].leave_room(room)

    # The last participant drops off without saying goodbye.
    if len(services) > 1:
        last.transport.detach()

    for svc in services:
        svc.disconnect()

    return services


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="roomcast",
        description="Run a local room presence session over an in-memory network",
    )

    p.add_argument(
        "--config",
        default=str(default_config_path()),
        help="Path to a TOML config file (used only if it exists)",
    )
    p.add_argument("--network-type", default=None, help="Network type namespace")
    p.add_argument("--room", default="lobby", help="Room every participant enters")
    p.add_argument(
        "--users",
        default="alice,bob,carol",
        help="Comma separated participant names",
    )
    p.add_argument(
        "--no-replay",
        action="store_true",
        help="Disable connect/disconnect presence replay",
    )
    p.add_argument(
        "--log-level",
        default=None,
        help="Logging level override (DEBUG, INFO, WARNING, ERROR). Default comes from config.",
    )
    p.add_argument(
        "--log-file",
        default=None,
        help="Log file path override (empty disables file logging). Default comes from config.",
    )

    return p


def main(argv: list[str] | None = None) -> None:
    args = _build_arg_parser().parse_args(sys.argv[1:] if argv is None else argv)

    cfg = PresenceConfig()
    config_path = str(args.config)
    if config_path and os.path.exists(config_path):
        cfg = load_config(config_path, cfg)

    if args.network_type is not None:
        cfg = replace(cfg, network_type=str(args.network_type))
    if args.no_replay:
        cfg = replace(cfg, replay_presence=False)
    if args.log_level is not None:
        cfg = replace(cfg, log_level=str(args.log_level))
    if args.log_file is not None:
        cfg = replace(cfg, log_file=str(args.log_file) if str(args.log_file) else None)

    users = [u.strip() for u in str(args.users).split(",") if u.strip()]
    if not users:
        print("roomcast: --users must name at least one participant", file=sys.stderr)
        raise SystemExit(2)

    configure_logging(cfg, override_level=args.log_level, override_file=args.log_file)

    for svc in run_demo(cfg, users, str(args.room)):
        print(svc.stats_manager.format_stats())
        print()


if __name__ == "__main__":
    main()
