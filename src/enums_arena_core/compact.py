from dataclasses import dataclass
from typing import NamedTuple

import jax.numpy as jnp


class LaneCompaction(NamedTuple):
    """Positions of live lanes moved to the front of a fixed-size buffer.

    lanes[:count] are the live lane positions in input order; the rest is
    padding (lane 0) flagged False in `live`.
    """

    lanes: jnp.ndarray
    live: jnp.ndarray
    count: jnp.ndarray


@dataclass(frozen=True, slots=True)
class CompactConfig:
    lane_dtype: jnp.dtype = jnp.int32
    count_dtype: jnp.dtype = jnp.int32


DEFAULT_COMPACT_CONFIG = CompactConfig()


def compact_lanes(valid, *, cfg: CompactConfig = DEFAULT_COMPACT_CONFIG):
    n = valid.shape[0]
    count = jnp.sum(valid).astype(cfg.count_dtype)
    lanes = jnp.nonzero(valid, size=n, fill_value=0)[0].astype(cfg.lane_dtype)
    live = jnp.arange(n, dtype=cfg.lane_dtype) < count.astype(cfg.lane_dtype)
    return LaneCompaction(lanes=lanes, live=live, count=count)


def take_live(values, compaction: LaneCompaction):
    """`values` at the compacted lanes; padding lanes read as zero."""
    taken = jnp.take(values, compaction.lanes, axis=0)
    return jnp.where(compaction.live, taken, jnp.zeros_like(taken))


__all__ = [
    "LaneCompaction",
    "CompactConfig",
    "DEFAULT_COMPACT_CONFIG",
    "compact_lanes",
    "take_live",
]
