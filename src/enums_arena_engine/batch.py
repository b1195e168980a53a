"""Batched handle resolution on device.

Resolves many handles in one pass: generation and tag comparisons plus
the offset-table gather run as jax array ops over snapshots of the live
table. Useful when a caller walks large handle sets (entity systems, AST
passes) and wants the surviving real indices as arrays.
"""

from __future__ import annotations

from typing import NamedTuple, Sequence

import jax
import jax.numpy as jnp
import numpy as np

from enums_arena_core.compact import LaneCompaction, compact_lanes, take_live
from enums_arena_core.errors import ArenaCapacityError, ArenaCorruptHandleError
from enums_arena_core.jax_safe import masked_take

from enums_arena_engine.engine import EnumArena

_INT32_MAX = int(np.iinfo(np.int32).max)


class BatchResolution(NamedTuple):
    tag: jnp.ndarray
    real_index: jnp.ndarray
    valid: jnp.ndarray
    count: jnp.ndarray


def _handle_columns(arena: EnumArena, ids: Sequence):
    n = len(ids)
    tags = np.zeros(n, dtype=np.int32)
    offsets = np.zeros(n, dtype=np.int32)
    gen_ok = np.zeros(n, dtype=np.bool_)
    current = arena.generation
    to_index = arena.index_policy.to_index
    for i, (tag, offset, generation) in enumerate(ids):
        logical = to_index(offset)
        tags[i] = int(tag)
        # Offsets past int32 can never be live in a table addressed here.
        offsets[i] = logical if 0 <= logical <= _INT32_MAX else -1
        gen_ok[i] = generation == current
    return tags, offsets, gen_ok


def resolve_many(arena: EnumArena, ids: Sequence, *, compact: bool = False):
    """Validate `ids` against `arena` in one vectorized pass.

    Returns BatchResolution(tag, real_index, valid, count); invalid lanes
    carry real_index 0. With compact=True also returns the LaneCompaction
    of the lanes whose handles are valid.
    """
    size = len(arena)
    if size > _INT32_MAX:
        raise ArenaCapacityError(index=size, policy="int32", context="batch table")
    tags_np, offsets_np, gen_ok_np = _handle_columns(arena, ids)
    tags = jnp.asarray(tags_np)
    gen_ok = jnp.asarray(gen_ok_np)
    if size == 0 or len(ids) == 0:
        valid = jnp.zeros(len(ids), dtype=jnp.bool_)
        real = jnp.zeros(len(ids), dtype=jnp.int32)
        _check_forged(arena, ids, gen_ok_np)
    else:
        table_tags, table_real = arena.offset_table_views()
        # Stale lanes are parked on row 0 so only live lanes can leave the table;
        # those are classified by _check_forged, so the host guard stays off.
        lanes = jnp.where(gen_ok, jnp.asarray(offsets_np), jnp.int32(0))
        rec_tag, in_range = masked_take(
            jnp.asarray(table_tags.astype(np.int32)),
            lanes,
            "resolve_many.tag",
            guard=False,
        )
        real, _ = masked_take(
            jnp.asarray(table_real.astype(np.int64).clip(0, _INT32_MAX).astype(np.int32)),
            lanes,
            "resolve_many.real",
            guard=False,
        )
        valid = gen_ok & in_range & (rec_tag == tags)
        real = jnp.where(valid, real, jnp.int32(0))
        _check_forged(arena, ids, np.asarray(jax.device_get(gen_ok & ~in_range)))
    count = jnp.sum(valid).astype(jnp.int32)
    result = BatchResolution(tag=tags, real_index=real, valid=valid, count=count)
    if compact:
        return result, compact_lanes(valid)
    return result


def _check_forged(arena: EnumArena, ids: Sequence, live_oob: np.ndarray) -> None:
    if not arena._offset_oob_forged or not arena.safety_policy.strict:
        return
    bad = np.nonzero(live_oob)[0]
    if bad.size:
        lane = int(bad[0])
        raise ArenaCorruptHandleError(
            handle=ids[lane],
            label="resolve_many",
            index=arena.index_policy.to_index(ids[lane][1]),
            size=len(arena),
        )


def get_many(arena: EnumArena, ids: Sequence) -> list:
    """`arena.get` for each id, validated in a single batch."""
    result = resolve_many(arena, ids)
    valid = np.asarray(jax.device_get(result.valid))
    return [arena.get(h) if ok else None for h, ok in zip(ids, valid)]


def compacted_handles(ids: Sequence, compacted: LaneCompaction) -> list:
    """Handles at the valid lanes of a compact resolve, in input order."""
    count = int(jax.device_get(compacted.count))
    lanes = np.asarray(jax.device_get(compacted.lanes))[:count]
    return [ids[int(i)] for i in lanes]


def live_columns(result: BatchResolution, compacted: LaneCompaction):
    """(tag, real_index) of the valid lanes packed to the front."""
    return take_live(result.tag, compacted), take_live(result.real_index, compacted)


__all__ = [
    "BatchResolution",
    "resolve_many",
    "get_many",
    "compacted_handles",
    "live_columns",
]
