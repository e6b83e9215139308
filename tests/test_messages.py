import pytest

from roomcast.errors import UnknownMethod
from roomcast.messages import (
    Position,
    UserChat,
    UserEnter,
    UserLeave,
    UserMoved,
    UsersOnline,
    from_payload,
    method_of,
    to_payload,
)

WIRE_PAYLOADS = [
    {"method": "user_enter", "data": {"userId": "a", "roomId": "lobby"}},
    {"method": "user_leave", "data": {"userId": "a", "roomId": "lobby"}},
    {
        "method": "user_moved",
        "data": {
            "userId": "a",
            "roomId": None,
            "position": {"pos": [1, 2, 3], "dir": [0, 0, 0]},
        },
    },
    {"method": "user_chat", "data": {"userId": "a", "roomId": "lobby", "message": "hi"}},
    {"method": "users_online", "data": {"users": ["a", "b"]}},
]


@pytest.mark.parametrize("payload", WIRE_PAYLOADS, ids=lambda p: p["method"])
def test_payload_survives_decode_and_encode(payload) -> None:
    msg = from_payload(payload)
    assert method_of(msg) == payload["method"]
    assert to_payload(msg) == payload


def test_decoded_types() -> None:
    assert from_payload(WIRE_PAYLOADS[0]) == UserEnter("a", "lobby")
    assert from_payload(WIRE_PAYLOADS[1]) == UserLeave("a", "lobby")
    assert from_payload(WIRE_PAYLOADS[2]) == UserMoved(
        "a", None, Position(pos=(1, 2, 3), dir=(0, 0, 0))
    )
    assert from_payload(WIRE_PAYLOADS[3]) == UserChat("a", "lobby", "hi")
    assert from_payload(WIRE_PAYLOADS[4]) == UsersOnline(("a", "b"))


def test_position_keeps_view_dir() -> None:
    d = {"pos": [0.5, 1, 2], "dir": [0, 1.5, 0], "view_dir": [0, 1.5, 0]}
    p = Position.from_dict(d)
    assert p.view_dir == (0, 1.5, 0)
    assert p.to_dict() == d


def test_position_omits_absent_view_dir() -> None:
    p = Position(pos=(1, 2, 3), dir=(0, 0, 0))
    assert p.to_dict() == {"pos": [1, 2, 3], "dir": [0, 0, 0]}


def test_position_rejects_bad_vectors() -> None:
    with pytest.raises(ValueError):
        Position.from_dict({"pos": [1, 2], "dir": [0, 0, 0]})
    with pytest.raises(TypeError):
        Position.from_dict({"pos": [1, 2, "3"], "dir": [0, 0, 0]})
    with pytest.raises(TypeError):
        Position.from_dict({"pos": [1, 2, 3]})
    with pytest.raises(TypeError):
        Position.from_dict("1 2 3")


def test_unknown_method_is_rejected() -> None:
    with pytest.raises(UnknownMethod):
        from_payload({"method": "user_danced", "data": {}})

    # UnknownMethod is also a ValueError so callers can catch both at once.
    with pytest.raises(ValueError):
        from_payload({"method": None, "data": {}})


def test_malformed_data_is_rejected() -> None:
    with pytest.raises(TypeError):
        from_payload("user_enter")
    with pytest.raises(TypeError):
        from_payload({"method": "user_enter", "data": None})
    with pytest.raises(TypeError):
        from_payload({"method": "user_enter", "data": {"userId": 5, "roomId": "x"}})
    with pytest.raises(TypeError):
        from_payload({"method": "user_leave", "data": {"userId": "a", "roomId": 5}})
    with pytest.raises(TypeError):
        from_payload({"method": "users_online", "data": {"users": "a,b"}})


def test_method_of_rejects_foreign_objects() -> None:
    with pytest.raises(TypeError):
        method_of({"method": "user_enter"})


def test_position_accepts_euler_array_with_order() -> None:
    p = Position.from_dict({"pos": [1, 2, 3], "dir": [0, 1.5, 0, "XYZ"]})
    assert p.dir == (0, 1.5, 0)

    msg = from_payload(
        {
            "method": "user_moved",
            "data": {
                "userId": "a",
                "roomId": "lobby",
                "position": {"pos": [1, 2, 3], "dir": [0, 0, 0, "XYZ"], "view_dir": [0, 0, 0, "XYZ"]},
            },
        }
    )
    assert msg.position.view_dir == (0, 0, 0)


def test_position_rejects_four_numbers() -> None:
    with pytest.raises(ValueError):
        Position.from_dict({"pos": [1, 2, 3, 4], "dir": [0, 0, 0]})
