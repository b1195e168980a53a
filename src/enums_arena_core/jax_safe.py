"""Bounds-masked column reads for batched handle resolution.

Lanes outside a column read as zero with in_range=False. When the handle
guard is on, an out-of-range lane also trips a host callback that raises,
which works under jit as well.
"""

import jax
import jax.numpy as jnp

from enums_arena_core.safety import handle_guard_enabled

# dataflow-bundle: lanes, size, label

HAS_DEBUG_CALLBACK = hasattr(jax, "debug") and hasattr(jax.debug, "callback")


def _lane_bounds_error(label):
    def _check(tripped, lo, hi, size):
        if tripped:
            raise RuntimeError(
                f"lane index out of bounds in {label} "
                f"(lo={int(lo)}, hi={int(hi)}, size={int(size)})"
            )

    return _check


def check_lane_bounds(lanes, size, label, guard=None):
    if guard is None:
        guard = handle_guard_enabled()
    if not guard or not HAS_DEBUG_CALLBACK or lanes.size == 0:
        return
    lo = jnp.min(lanes)
    hi = jnp.max(lanes)
    jax.debug.callback(
        _lane_bounds_error(label), (lo < 0) | (hi >= size), lo, hi, size
    )


def masked_take(column, lanes, label="masked_take", guard=None):
    """(column[lanes], in_range) with out-of-range lanes zeroed.

    guard=None follows the handle guard environment flags.
    """
    size = jnp.int32(column.shape[0])
    lanes = jnp.asarray(lanes, dtype=jnp.int32)
    check_lane_bounds(lanes, size, label, guard=guard)
    in_range = (lanes >= 0) & (lanes < size)
    values = column[jnp.where(in_range, lanes, 0)]
    return jnp.where(in_range, values, jnp.zeros_like(values)), in_range


__all__ = ["HAS_DEBUG_CALLBACK", "check_lane_bounds", "masked_take"]
