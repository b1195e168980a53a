from __future__ import annotations

from enums_arena_core.protocols import PayloadPool
from enums_arena_schema.variants import VariantDescriptor
from enums_arena_storage.column import Column
from enums_arena_storage.config import DEFAULT_STORAGE_CONFIG, StorageConfig


class ObjectPool:
    """Append-only list of arbitrary payload objects for one variant."""

    __slots__ = ("_items",)

    def __init__(self):
        self._items: list = []

    def __len__(self) -> int:
        return len(self._items)

    def push(self, value) -> int:
        index = len(self._items)
        self._items.append(value)
        return index

    def get(self, index: int):
        if index < 0 or index >= len(self._items):
            raise IndexError(index)
        return self._items[index]

    def set(self, index: int, value) -> None:
        if index < 0 or index >= len(self._items):
            raise IndexError(index)
        self._items[index] = value

    def truncate(self, length: int) -> None:
        del self._items[max(length, 0):]

    def clear(self) -> None:
        # Drops the references so payloads can be collected.
        self._items.clear()


class ArrayPool(Column):
    """Numeric payloads packed into a single dtype-backed column."""

    __slots__ = ()


def make_pool(
    descriptor: VariantDescriptor, *, cfg: StorageConfig = DEFAULT_STORAGE_CONFIG
) -> PayloadPool:
    if not descriptor.has_payload:
        raise ValueError(f"unit variant {descriptor.name} has no pool")
    dtype = descriptor.array_dtype
    if dtype is None:
        return ObjectPool()
    return ArrayPool(dtype, cfg=cfg)


__all__ = ["ObjectPool", "ArrayPool", "make_pool"]
