from __future__ import annotations

import math
import operator

import numpy as np

from enums_arena_core.errors import ArenaPayloadRangeError, ArenaPayloadTypeError
from enums_arena_storage.config import DEFAULT_STORAGE_CONFIG, StorageConfig


def _scalar(value):
    """Unwrap numpy/jax 0-d values to the matching Python scalar."""
    if isinstance(value, (bool, int, float)):
        return value
    if hasattr(value, "__array__"):
        arr = np.asarray(value)
        if arr.shape == ():
            return arr.item()
    return value


class Column:
    """Append-only, dtype-backed growable array.

    Capacity grows geometrically so push is O(1) amortized. clear() only
    resets the length; stale cells past len() are never read.

    Writes are exact: a value is stored only if it is of the column's kind
    (bool, integer or real) and representable in its dtype. numpy's own
    assignment would truncate floats and parse strings.
    """

    __slots__ = ("_buf", "_len", "_growth")

    def __init__(self, dtype, *, cfg: StorageConfig = DEFAULT_STORAGE_CONFIG):
        self._buf = np.zeros(cfg.initial_capacity, dtype=np.dtype(dtype))
        self._len = 0
        self._growth = cfg.growth_factor

    def __len__(self) -> int:
        return self._len

    @property
    def dtype(self) -> np.dtype:
        return self._buf.dtype

    @property
    def capacity(self) -> int:
        return int(self._buf.shape[0])

    def _reserve(self, size: int) -> None:
        cap = self.capacity
        if size <= cap:
            return
        new_cap = max(size, cap * self._growth)
        buf = np.zeros(new_cap, dtype=self._buf.dtype)
        buf[: self._len] = self._buf[: self._len]
        self._buf = buf

    def _checked(self, value):
        dt = self._buf.dtype
        v = _scalar(value)
        if dt.kind == "b":
            if not isinstance(v, bool):
                raise ArenaPayloadTypeError(value=value, dtype=dt)
            return v
        if isinstance(v, bool):
            raise ArenaPayloadTypeError(value=value, dtype=dt)
        if dt.kind in "iu":
            if not isinstance(v, int):
                raise ArenaPayloadTypeError(value=value, dtype=dt)
            info = np.iinfo(dt)
            if v < info.min or v > info.max:
                raise ArenaPayloadRangeError(value=value, dtype=dt)
            return operator.index(v)
        if not isinstance(v, (int, float)):
            raise ArenaPayloadTypeError(value=value, dtype=dt)
        try:
            f = float(v)
        except OverflowError:
            raise ArenaPayloadRangeError(value=value, dtype=dt) from None
        # Rounding to the column's precision is accepted; overflow to inf is not.
        if math.isfinite(f) and abs(f) > float(np.finfo(dt).max):
            raise ArenaPayloadRangeError(value=value, dtype=dt)
        return f

    def push(self, value) -> int:
        v = self._checked(value)
        index = self._len
        self._reserve(index + 1)
        self._buf[index] = v
        self._len = index + 1
        return index

    def get(self, index: int):
        if index < 0 or index >= self._len:
            raise IndexError(index)
        return self._buf[index].item()

    def set(self, index: int, value) -> None:
        if index < 0 or index >= self._len:
            raise IndexError(index)
        self._buf[index] = self._checked(value)

    def truncate(self, length: int) -> None:
        """Drop every row at or past `length`."""
        if 0 <= length < self._len:
            self._len = length

    def clear(self) -> None:
        self._len = 0

    def view(self) -> np.ndarray:
        out = self._buf[: self._len]
        out.flags.writeable = False
        return out


__all__ = ["Column"]
