from __future__ import annotations

from typing import Any

from .constants import K_DATA, K_METHOD, K_TYPE, PRESENCE_METHODS


def make_envelope(network_type: str, data: Any) -> dict:
    return {K_TYPE: network_type, K_DATA: data}


def make_presence(method: str, data: dict) -> dict:
    return {K_METHOD: method, K_DATA: data}


def validate_envelope(env: Any) -> None:
    if not isinstance(env, dict):
        raise TypeError("envelope must be a map (dict)")

    for k in (K_TYPE, K_DATA):
        if k not in env:
            raise ValueError(f"missing envelope key {k!r}")

    t = env[K_TYPE]
    if not isinstance(t, str):
        raise TypeError("network type must be a string")
    if t == "":
        raise ValueError("network type must not be empty")


def validate_presence(payload: Any) -> None:
    if not isinstance(payload, dict):
        raise TypeError("presence payload must be a map (dict)")

    method = payload.get(K_METHOD)
    if not isinstance(method, str):
        raise TypeError("presence method must be a string")
    if method not in PRESENCE_METHODS:
        raise ValueError(f"unknown presence method {method!r}")

    data = payload.get(K_DATA)
    if not isinstance(data, dict):
        raise TypeError("presence data must be a map (dict)")
