import logging

import pytest

from roomcast.cli import main, run_demo
from roomcast.config import PresenceConfig


def test_run_demo_three_users() -> None:
    alice, bob, carol = run_demo(PresenceConfig(), ["alice", "bob", "carol"], "lobby")

    assert not alice.connected and not bob.connected and not carol.connected
    # bob moved, left, and disconnected; carol crashed out of the room.
    assert alice.stats_manager.get("leaves_synthesized") == 1
    assert bob.stats_manager.get("replays_sent") == 1
    assert carol.stats_manager.get("msgs_dispatched") >= 3


def test_run_demo_single_user() -> None:
    (solo,) = run_demo(PresenceConfig(), ["solo"], "lobby")
    assert solo.stats_manager.get("msgs_out") == 2


def test_main_prints_stats(tmp_path, capsys) -> None:
    root = logging.getLogger()
    level = root.level
    try:
        main(
            [
                "--config",
                str(tmp_path / "missing.toml"),
                "--users",
                "a,b",
                "--room",
                "hall",
                "--no-replay",
                "--log-level",
                "WARNING",
            ]
        )
    finally:
        for h in list(root.handlers):
            if getattr(h, "_roomcast_handler", False):
                root.removeHandler(h)
        root.setLevel(level)
        logging.getLogger("roomcast").setLevel(logging.NOTSET)
        logging.captureWarnings(False)

    out = capsys.readouterr().out
    assert "stats user='a'" in out
    assert "stats user='b'" in out
    assert "replays=0" in out


def test_main_requires_users(tmp_path) -> None:
    with pytest.raises(SystemExit):
        main(["--config", str(tmp_path / "missing.toml"), "--users", " , "])
