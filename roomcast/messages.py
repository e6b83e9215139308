"""Typed presence messages.

Every presence payload on the wire has the shape ``{method, data}``. This
module maps those payloads onto a closed set of frozen dataclasses so that
consumers can branch on the message class instead of on a method string.
Unknown methods are rejected with :class:`~roomcast.errors.UnknownMethod`
rather than being passed through.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from .constants import (
    D_MESSAGE,
    D_POSITION,
    D_ROOM_ID,
    D_USER_ID,
    D_USERS,
    K_DATA,
    K_METHOD,
    M_USER_CHAT,
    M_USER_ENTER,
    M_USER_LEAVE,
    M_USER_MOVED,
    M_USERS_ONLINE,
    P_DIR,
    P_POS,
    P_VIEW_DIR,
)
from .envelope import make_presence
from .errors import UnknownMethod


def _triple(value: Any, name: str) -> tuple[float, float, float]:
    if not isinstance(value, (list, tuple)):
        raise TypeError(f"{name} must be a sequence of 3 numbers")
    # Euler arrays from scene runtimes carry a trailing rotation order ("XYZ").
    if len(value) == 4 and isinstance(value[3], str):
        value = value[:3]
    if len(value) != 3:
        raise ValueError(f"{name} must have exactly 3 components")
    for v in value:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise TypeError(f"{name} components must be numbers")
    return (value[0], value[1], value[2])


@dataclass(frozen=True)
class Position:
    pos: tuple[float, float, float]
    dir: tuple[float, float, float]
    view_dir: tuple[float, float, float] | None = None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {P_POS: list(self.pos), P_DIR: list(self.dir)}
        if self.view_dir is not None:
            d[P_VIEW_DIR] = list(self.view_dir)
        return d

    @classmethod
    def from_dict(cls, d: Any) -> Position:
        if not isinstance(d, dict):
            raise TypeError("position must be a map (dict)")
        view_dir = d.get(P_VIEW_DIR)
        return cls(
            pos=_triple(d.get(P_POS), P_POS),
            dir=_triple(d.get(P_DIR), P_DIR),
            view_dir=_triple(view_dir, P_VIEW_DIR) if view_dir is not None else None,
        )


@dataclass(frozen=True)
class UserEnter:
    user_id: str
    room_id: str | None


@dataclass(frozen=True)
class UserLeave:
    user_id: str
    room_id: str | None


@dataclass(frozen=True)
class UserMoved:
    user_id: str
    room_id: str | None
    position: Position


@dataclass(frozen=True)
class UserChat:
    user_id: str
    room_id: str | None
    message: Any


@dataclass(frozen=True)
class UsersOnline:
    users: tuple[str, ...]


PresenceMessage = Union[UserEnter, UserLeave, UserMoved, UserChat, UsersOnline]


def method_of(msg: PresenceMessage) -> str:
    if isinstance(msg, UserEnter):
        return M_USER_ENTER
    if isinstance(msg, UserLeave):
        return M_USER_LEAVE
    if isinstance(msg, UserMoved):
        return M_USER_MOVED
    if isinstance(msg, UserChat):
        return M_USER_CHAT
    if isinstance(msg, UsersOnline):
        return M_USERS_ONLINE
    raise TypeError(f"not a presence message: {type(msg).__name__}")


def to_payload(msg: PresenceMessage) -> dict:
    """Encode a typed message as a ``{method, data}`` payload."""
    method = method_of(msg)

    if isinstance(msg, UsersOnline):
        data: dict[str, Any] = {D_USERS: list(msg.users)}
    else:
        data = {D_USER_ID: msg.user_id, D_ROOM_ID: msg.room_id}
        if isinstance(msg, UserMoved):
            data[D_POSITION] = msg.position.to_dict()
        elif isinstance(msg, UserChat):
            data[D_MESSAGE] = msg.message

    return make_presence(method, data)


def _user_id(data: dict) -> str:
    uid = data.get(D_USER_ID)
    if not isinstance(uid, str):
        raise TypeError("userId must be a string")
    return uid


def _room_id(data: dict) -> str | None:
    room = data.get(D_ROOM_ID)
    if room is not None and not isinstance(room, str):
        raise TypeError("roomId must be a string or absent")
    return room


def from_payload(payload: Any) -> PresenceMessage:
    """Decode a ``{method, data}`` payload into its typed message.

    Raises UnknownMethod for methods outside the presence set, and
    TypeError/ValueError for malformed data.
    """
    if not isinstance(payload, dict):
        raise TypeError("presence payload must be a map (dict)")

    method = payload.get(K_METHOD)
    data = payload.get(K_DATA)
    if not isinstance(data, dict):
        raise TypeError("presence data must be a map (dict)")

    if method == M_USER_ENTER:
        return UserEnter(_user_id(data), _room_id(data))
    if method == M_USER_LEAVE:
        return UserLeave(_user_id(data), _room_id(data))
    if method == M_USER_MOVED:
        return UserMoved(
            _user_id(data), _room_id(data), Position.from_dict(data.get(D_POSITION))
        )
    if method == M_USER_CHAT:
        return UserChat(_user_id(data), _room_id(data), data.get(D_MESSAGE))
    if method == M_USERS_ONLINE:
        users = data.get(D_USERS)
        if not isinstance(users, (list, tuple)):
            raise TypeError("users must be a list")
        return UsersOnline(tuple(users))

    raise UnknownMethod(f"unknown presence method {method!r}")
