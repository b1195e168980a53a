"""Variant descriptor sets.

A VariantSet is the closed, ordered list of cases a tagged union may take.
Each case is a unit variant or carries exactly one payload. Tags are
assigned ordinally in declaration order; the tag width is the narrowest
unsigned width whose maximum value is at least the variant count.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, Sequence

import jax.numpy as jnp
import numpy as np

from enums_arena_core.errors import ArenaPayloadError, ArenaSchemaError
from enums_arena_schema.naming import alloc_name, get_mut_name, get_name, snake_case

_PY_SCALARS = (int, float, bool, complex, str, bytes)

# (max variant count, tag bytes, tag dtype)
TAG_WIDTHS = (
    (0xFF, 1, jnp.uint8),
    (0xFFFF, 2, jnp.uint16),
    (0xFFFF_FFFF, 4, jnp.uint32),
    (0xFFFF_FFFF_FFFF_FFFF, 8, jnp.uint64),
)


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


MISSING = _Missing()


def tag_width_for(count: int) -> int:
    """Tag size in bytes for a set of `count` variants."""
    for limit, width, _ in TAG_WIDTHS:
        if count <= limit:
            return width
    raise ArenaSchemaError(f"too many variants: {count}")


def tag_dtype_for(count: int):
    for limit, _, dtype in TAG_WIDTHS:
        if count <= limit:
            return dtype
    raise ArenaSchemaError(f"too many variants: {count}")


def _array_dtype(payload) -> np.dtype | None:
    if payload is None or any(payload is t for t in _PY_SCALARS):
        return None
    try:
        dt = np.dtype(payload)
    except (TypeError, ValueError):
        return None
    if dt.kind in "biuf":
        return dt
    return None


@dataclass(frozen=True, slots=True)
class VariantDescriptor:
    """One case of the union: a name and an optional payload type."""

    name: str
    payload: object | None = None

    @property
    def has_payload(self) -> bool:
        return self.payload is not None

    @property
    def snake(self) -> str:
        return snake_case(self.name)

    @property
    def array_dtype(self) -> np.dtype | None:
        """Numeric dtype for column storage, or None for object storage."""
        return _array_dtype(self.payload)


@dataclass(frozen=True, slots=True)
class Variant:
    """A value of the union: tag plus payload (None for unit variants)."""

    tag: IntEnum
    payload: object = None

    def __repr__(self) -> str:
        if self.payload is None:
            return self.tag.name
        return f"{self.tag.name}({self.payload!r})"


def _coerce_descriptor(item) -> VariantDescriptor:
    if isinstance(item, VariantDescriptor):
        return item
    if isinstance(item, str):
        return VariantDescriptor(item)
    if isinstance(item, tuple) and len(item) == 2 and isinstance(item[0], str):
        return VariantDescriptor(item[0], item[1])
    raise ArenaSchemaError(f"cannot read variant descriptor from {item!r}")


@dataclass(frozen=True, eq=False)
class VariantSet:
    """Closed, ordered set of variants. Compared by identity: two
    declarations with the same names still mint distinct tag enums."""

    name: str
    descriptors: tuple[VariantDescriptor, ...]
    tag_enum: type[IntEnum] = field(init=False, repr=False)
    tag_width: int = field(init=False)
    tag_dtype: object = field(init=False, repr=False)
    # Classes derived from this declaration (make_arena_class); they live and
    # die with the set.
    derived: dict = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        descriptors = tuple(_coerce_descriptor(d) for d in self.descriptors)
        object.__setattr__(self, "descriptors", descriptors)
        if not self.name.isidentifier():
            raise ArenaSchemaError(f"invalid union name {self.name!r}")
        if not descriptors:
            raise ArenaSchemaError("a variant set needs at least one variant")
        seen: set[str] = set()
        seen_snake: dict[str, str] = {}
        for d in descriptors:
            if not d.name.isidentifier() or d.name.startswith("_"):
                raise ArenaSchemaError("invalid variant name", variant=d.name)
            if d.name in seen:
                raise ArenaSchemaError("duplicate variant", variant=d.name)
            seen.add(d.name)
            other = seen_snake.get(d.snake)
            if other is not None:
                raise ArenaSchemaError(
                    f"accessor name {d.snake!r} also used by {other}",
                    variant=d.name,
                )
            seen_snake[d.snake] = d.name
        tag_enum = IntEnum(
            f"{self.name}Tag", [(d.name, i) for i, d in enumerate(descriptors)]
        )
        object.__setattr__(self, "tag_enum", tag_enum)
        object.__setattr__(self, "tag_width", tag_width_for(len(descriptors)))
        object.__setattr__(self, "tag_dtype", tag_dtype_for(len(descriptors)))

    def __len__(self) -> int:
        return len(self.descriptors)

    def __iter__(self):
        return iter(self.descriptors)

    @property
    def tags(self) -> tuple[IntEnum, ...]:
        return tuple(self.tag_enum)

    @property
    def payload_descriptors(self) -> tuple[VariantDescriptor, ...]:
        return tuple(d for d in self.descriptors if d.has_payload)

    def tag(self, key) -> IntEnum:
        """Resolve a variant name, ordinal or tag member to its tag."""
        if isinstance(key, self.tag_enum):
            return key
        if isinstance(key, str):
            try:
                return self.tag_enum[key]
            except KeyError:
                raise ArenaSchemaError("unknown variant", variant=key) from None
        if isinstance(key, int) and 0 <= key < len(self.descriptors):
            return self.tag_enum(key)
        raise ArenaSchemaError(f"unknown variant {key!r} for {self.name}")

    def descriptor(self, key) -> VariantDescriptor:
        return self.descriptors[int(self.tag(key))]

    def make(self, key, payload=MISSING) -> Variant:
        tag = self.tag(key)
        desc = self.descriptors[int(tag)]
        if desc.has_payload:
            if payload is MISSING:
                raise ArenaPayloadError(variant=desc.name, expects_payload=True)
            return Variant(tag, payload)
        if payload is not MISSING:
            raise ArenaPayloadError(variant=desc.name, expects_payload=False)
        return Variant(tag)

    def accessor_names(self) -> dict[str, tuple[str, ...]]:
        """Generated method names per variant, in declaration order."""
        out = {}
        for d in self.descriptors:
            if d.has_payload:
                out[d.name] = (alloc_name(d.name), get_name(d.name), get_mut_name(d.name))
            else:
                out[d.name] = (alloc_name(d.name),)
        return out


def variant_set(
    name: str, variants: Iterable[VariantDescriptor | str | tuple] | Sequence
) -> VariantSet:
    """Declare a VariantSet from descriptors, bare names (unit variants) or
    (name, payload_type) pairs."""
    return VariantSet(name, tuple(variants))


__all__ = [
    "TAG_WIDTHS",
    "MISSING",
    "tag_width_for",
    "tag_dtype_for",
    "VariantDescriptor",
    "Variant",
    "VariantSet",
    "variant_set",
]
