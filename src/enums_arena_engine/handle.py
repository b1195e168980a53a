from __future__ import annotations

from enum import Enum, IntEnum
from typing import Hashable, NamedTuple


class Handle(NamedTuple):
    """Opaque arena id: (variant tag, logical offset, generation stamp).

    Immutable and compared structurally. Only EnumArena issues handles.
    """

    tag: IntEnum
    offset: int
    generation: Hashable


class HandleState(str, Enum):
    FRESH = "fresh"
    STALE = "stale"
    OUT_OF_RANGE = "out_of_range"
    TAG_MISMATCH = "tag_mismatch"


__all__ = ["Handle", "HandleState"]
