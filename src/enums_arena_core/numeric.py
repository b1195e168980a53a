from __future__ import annotations

import operator
from dataclasses import dataclass
from enum import Enum

import jax.numpy as jnp
import numpy as np

from enums_arena_core.errors import (
    ArenaCapacityError,
    ArenaGenerationExhaustedError,
    ArenaModeError,
    ArenaPolicyError,
    _allowed_tuple,
)
from enums_arena_core.protocols import GenerationPolicyLike, IndexPolicyLike


class OverflowMode(str, Enum):
    RAISE = "raise"
    WRAP = "wrap"


def coerce_overflow_mode(
    mode: OverflowMode | str | None, *, context: str | None = None
) -> OverflowMode:
    if mode is None:
        return OverflowMode.RAISE
    if isinstance(mode, OverflowMode):
        return mode
    if isinstance(mode, str):
        if mode == OverflowMode.RAISE.value:
            return OverflowMode.RAISE
        if mode == OverflowMode.WRAP.value:
            return OverflowMode.WRAP
    raise ArenaModeError(
        mode=mode,
        allowed=(OverflowMode.RAISE.value, OverflowMode.WRAP.value),
        context=context or "generation_overflow",
    )


def _np_dtype(dtype) -> np.dtype:
    dt = np.dtype(dtype)
    if dt.kind != "u":
        raise ArenaPolicyError(policy=dtype, kind="unsigned dtype")
    return dt


@dataclass(frozen=True, slots=True)
class IndexPolicy:
    """Unsigned width for logical offsets and real pool indices.

    Conversions are checked: an index that does not fit the width raises
    ArenaCapacityError instead of truncating.
    """

    name: str
    dtype: object

    @property
    def np_dtype(self) -> np.dtype:
        return _np_dtype(self.dtype)

    @property
    def bits(self) -> int:
        return self.np_dtype.itemsize * 8

    @property
    def max_value(self) -> int:
        return int(np.iinfo(self.np_dtype).max)

    def from_index(self, index: int) -> int:
        i = operator.index(index)
        if i < 0 or i > self.max_value:
            raise ArenaCapacityError(index=i, policy=self.name)
        return i

    def to_index(self, value) -> int:
        return operator.index(value)


@dataclass(frozen=True, slots=True)
class GenerationPolicy:
    """Generation counter policy.

    dtype=None is the no-op generation: its single value (None) never
    advances, so clear() never invalidates handles.
    """

    name: str
    dtype: object | None = None
    start: int | None = 0

    @property
    def advancing(self) -> bool:
        return self.dtype is not None

    @property
    def bits(self) -> int:
        if self.dtype is None:
            return 0
        return _np_dtype(self.dtype).itemsize * 8

    @property
    def max_value(self) -> int:
        if self.dtype is None:
            return 0
        return int(np.iinfo(_np_dtype(self.dtype)).max)

    def initial(self):
        if self.dtype is None:
            return None
        return self.start

    def advance(self, generation, *, overflow: OverflowMode | str | None = None):
        if self.dtype is None:
            return generation
        nxt = operator.index(generation) + 1
        if nxt <= self.max_value:
            return nxt
        if coerce_overflow_mode(overflow) == OverflowMode.RAISE:
            raise ArenaGenerationExhaustedError(
                generation=operator.index(generation), policy=self.name
            )
        return 0


U8 = IndexPolicy("u8", jnp.uint8)
U16 = IndexPolicy("u16", jnp.uint16)
U32 = IndexPolicy("u32", jnp.uint32)
U64 = IndexPolicy("u64", jnp.uint64)

GEN_U8 = GenerationPolicy("u8", jnp.uint8)
GEN_U16 = GenerationPolicy("u16", jnp.uint16)
GEN_U32 = GenerationPolicy("u32", jnp.uint32)
GEN_U64 = GenerationPolicy("u64", jnp.uint64)
NOOP_GENERATION = GenerationPolicy("noop", None, None)

INDEX_POLICIES = {p.name: p for p in (U8, U16, U32, U64)}
GENERATION_POLICIES = {p.name: p for p in (GEN_U8, GEN_U16, GEN_U32, GEN_U64)}
GENERATION_POLICIES["noop"] = NOOP_GENERATION
GENERATION_POLICIES["()"] = NOOP_GENERATION

DEFAULT_INDEX_POLICY = U32
DEFAULT_GENERATION_POLICY = GEN_U32


def coerce_index_policy(policy: IndexPolicyLike | str | None) -> IndexPolicyLike:
    if policy is None:
        return DEFAULT_INDEX_POLICY
    if isinstance(policy, str):
        found = INDEX_POLICIES.get(policy)
        if found is None:
            raise ArenaPolicyError(
                policy=policy, kind="index", allowed=_allowed_tuple(INDEX_POLICIES)
            )
        return found
    if isinstance(policy, IndexPolicyLike):
        return policy
    raise ArenaPolicyError(
        policy=policy, kind="index", allowed=_allowed_tuple(INDEX_POLICIES)
    )


def coerce_generation_policy(
    policy: GenerationPolicyLike | str | None,
) -> GenerationPolicyLike:
    if policy is None:
        return DEFAULT_GENERATION_POLICY
    if isinstance(policy, str):
        found = GENERATION_POLICIES.get(policy)
        if found is None:
            raise ArenaPolicyError(
                policy=policy,
                kind="generation",
                allowed=_allowed_tuple(GENERATION_POLICIES),
            )
        return found
    if isinstance(policy, GenerationPolicyLike):
        return policy
    raise ArenaPolicyError(
        policy=policy, kind="generation", allowed=_allowed_tuple(GENERATION_POLICIES)
    )


__all__ = [
    "OverflowMode",
    "coerce_overflow_mode",
    "IndexPolicy",
    "GenerationPolicy",
    "U8",
    "U16",
    "U32",
    "U64",
    "GEN_U8",
    "GEN_U16",
    "GEN_U32",
    "GEN_U64",
    "NOOP_GENERATION",
    "INDEX_POLICIES",
    "GENERATION_POLICIES",
    "DEFAULT_INDEX_POLICY",
    "DEFAULT_GENERATION_POLICY",
    "coerce_index_policy",
    "coerce_generation_policy",
]
