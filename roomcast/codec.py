from __future__ import annotations

from typing import Any

import cbor2


def encode(obj: Any) -> bytes:
    # Canonical form keeps session metadata byte-stable across republishes.
    return cbor2.dumps(obj, canonical=True)


def decode(b: bytes) -> Any:
    return cbor2.loads(b)


def wire_copy(obj: Any) -> Any:
    """Return what a peer would see after `obj` crossed the wire."""
    return decode(encode(obj))
