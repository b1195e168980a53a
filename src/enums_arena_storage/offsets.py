from __future__ import annotations

from typing import NamedTuple

import numpy as np

from enums_arena_core.errors import ArenaCapacityError
from enums_arena_storage.column import Column
from enums_arena_storage.config import DEFAULT_STORAGE_CONFIG, StorageConfig

# Real-index entry recorded for unit variants; never dereferenced.
UNIT_SENTINEL = 0


class OffsetEntry(NamedTuple):
    tag: int
    real: int


class OffsetTable:
    """Logical allocation order -> (recorded tag, real pool index).

    The real column uses the arena's index dtype and the tag column the
    variant set's tag dtype.
    """

    __slots__ = ("_real", "_tag")

    def __init__(
        self,
        index_dtype,
        tag_dtype,
        *,
        cfg: StorageConfig = DEFAULT_STORAGE_CONFIG,
    ):
        self._real = Column(index_dtype, cfg=cfg)
        self._tag = Column(tag_dtype, cfg=cfg)

    def __len__(self) -> int:
        return len(self._real)

    def push(self, tag: int, real: int) -> int:
        """Append one row; on error neither column changes."""
        logical = len(self._real)
        info = np.iinfo(self._real.dtype)
        if real < info.min or real > info.max:
            raise ArenaCapacityError(
                index=real, policy=str(self._real.dtype), context="real index"
            )
        self._real.push(real)
        try:
            self._tag.push(int(tag))
        except Exception:
            self._real.truncate(logical)
            raise
        return logical

    def entry(self, logical: int) -> OffsetEntry | None:
        """Entry at `logical`, or None when it lies outside the table."""
        if logical < 0 or logical >= len(self._real):
            return None
        return OffsetEntry(self._tag.get(logical), self._real.get(logical))

    def clear(self) -> None:
        self._real.clear()
        self._tag.clear()

    def real_view(self) -> np.ndarray:
        return self._real.view()

    def tag_view(self) -> np.ndarray:
        return self._tag.view()


__all__ = ["UNIT_SENTINEL", "OffsetEntry", "OffsetTable"]
