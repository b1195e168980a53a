from __future__ import annotations

from typing import Hashable, Protocol, runtime_checkable


@runtime_checkable
class IndexPolicyLike(Protocol):
    """Integer width for logical offsets and pool indices."""

    name: str
    dtype: object

    def from_index(self, index: int) -> int:
        ...

    def to_index(self, value) -> int:
        ...


@runtime_checkable
class GenerationPolicyLike(Protocol):
    """Generation counter; `advance` must never return a prior value
    unless the policy is the no-op generation."""

    name: str

    @property
    def advancing(self) -> bool:
        ...

    def initial(self) -> Hashable:
        ...

    def advance(self, generation, *, overflow=None) -> Hashable:
        ...


@runtime_checkable
class PayloadPool(Protocol):
    def __len__(self) -> int:
        ...

    def push(self, value) -> int:
        ...

    def get(self, index: int):
        ...

    def set(self, index: int, value) -> None:
        ...

    def truncate(self, length: int) -> None:
        ...

    def clear(self) -> None:
        ...


@runtime_checkable
class CopyFn(Protocol):
    def __call__(self, value):
        ...


__all__ = [
    "IndexPolicyLike",
    "GenerationPolicyLike",
    "PayloadPool",
    "CopyFn",
]
