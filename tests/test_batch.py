import jax
import jax.numpy as jnp
import numpy as np
import pytest

import enums_arena as ea
from enums_arena_core.compact import compact_lanes
from enums_arena_core.jax_safe import HAS_DEBUG_CALLBACK, masked_take

pytestmark = pytest.mark.batch


@pytest.fixture
def populated(sample_variants, sample_arena):
    V = sample_variants
    h0 = sample_arena.alloc_b(1)
    h1 = sample_arena.alloc_none()
    h2 = sample_arena.alloc_c((1, 2))
    h3 = sample_arena.alloc_b(2)
    wrong_tag = ea.Handle(V.tag("B"), h1.offset, h1.generation)
    stale = ea.Handle(V.tag("B"), 0, 7)
    ids = [h0, wrong_tag, h3, stale, h2]
    return sample_arena, ids


def test_resolve_many(populated):
    arena, ids = populated
    res = ea.resolve_many(arena, ids)
    assert np.asarray(res.valid).tolist() == [True, False, True, False, True]
    assert np.asarray(res.real_index).tolist() == [0, 0, 1, 0, 0]
    assert np.asarray(res.tag).tolist() == [1, 1, 1, 1, 2]
    assert int(res.count) == 3


def test_resolve_many_compact(populated):
    arena, ids = populated
    res, compacted = ea.resolve_many(arena, ids, compact=True)
    assert int(compacted.count) == int(res.count)
    assert ea.compacted_handles(ids, compacted) == [ids[0], ids[2], ids[4]]
    tags, real = ea.live_columns(res, compacted)
    assert np.asarray(tags).tolist() == [1, 1, 2, 0, 0]
    assert np.asarray(real).tolist() == [0, 1, 0, 0, 0]


def test_get_many_matches_get(sample_variants, populated):
    V = sample_variants
    arena, ids = populated
    assert ea.get_many(arena, ids) == [
        V.make("B", 1),
        None,
        V.make("B", 2),
        None,
        V.make("C", (1, 2)),
    ]


def test_resolve_many_after_clear(sample_arena):
    h = sample_arena.alloc_b(1)
    sample_arena.clear()
    res = ea.resolve_many(sample_arena, [h])
    assert int(res.count) == 0
    assert np.asarray(res.valid).tolist() == [False]
    assert int(ea.resolve_many(sample_arena, []).count) == 0


def test_resolve_many_forged_lane(sample_variants):
    V = sample_variants
    strict = ea.arena_for(V)
    strict.alloc_b(1)
    forged = ea.Handle(V.tag("B"), 50, strict.generation)
    with pytest.raises(ea.ArenaCorruptHandleError, match="resolve_many"):
        ea.resolve_many(strict, [forged])

    lenient = ea.arena_for(
        V, cfg=ea.ArenaConfig(safety_policy=ea.DROP_SAFETY_POLICY)
    )
    lenient.alloc_b(1)
    forged = ea.Handle(V.tag("B"), 50, lenient.generation)
    assert int(ea.resolve_many(lenient, [forged]).count) == 0


def test_compact_lanes_moves_valid_lanes_first():
    mask = jnp.array([False, True, False, True])
    result = compact_lanes(mask)
    assert int(result.count) == 2
    assert np.asarray(result.lanes)[:2].tolist() == [1, 3]
    assert np.asarray(result.live).tolist() == [True, True, False, False]


def test_masked_take_zeroes_out_of_range_lanes():
    x = jnp.arange(5, dtype=jnp.int32) + 10
    values, ok = masked_take(x, jnp.array([0, 4, 5, -1]), "test.mask", guard=False)
    assert np.asarray(values).tolist() == [10, 14, 0, 0]
    assert np.asarray(ok).tolist() == [True, True, False, False]


@jax.jit
def _take_bad_oob(x):
    return masked_take(x, jnp.int32(x.shape[0]), "test.oob")


@jax.jit
def _take_ok(x):
    return masked_take(x, jnp.int32(2), "test.ok")


def _skip_if_no_debug_callback():
    if not HAS_DEBUG_CALLBACK:
        pytest.skip("jax.debug.callback not available")


def test_lane_guard_oob_raises_under_jit():
    _skip_if_no_debug_callback()
    x = jnp.arange(5, dtype=jnp.int32)
    with pytest.raises(RuntimeError, match=r"lane index out of bounds"):
        values, _ = _take_bad_oob(x)
        values.block_until_ready()


def test_lane_guard_valid_lanes_noop():
    _skip_if_no_debug_callback()
    x = jnp.arange(5, dtype=jnp.int32)
    values, ok = _take_ok(x)
    assert int(values.block_until_ready()) == 2
    assert bool(ok)


def test_masked_take_guard_follows_env(monkeypatch):
    monkeypatch.delenv("ENUMS_ARENA_TEST_GUARDS", raising=False)
    monkeypatch.delenv("ENUMS_ARENA_HANDLE_GUARD", raising=False)
    x = jnp.arange(3, dtype=jnp.int32)
    values, ok = masked_take(x, jnp.array([1, 5]))
    assert np.asarray(values).tolist() == [1, 0]
    assert np.asarray(ok).tolist() == [True, False]


def test_resolve_many_keeps_host_guard_off_for_legit_out_of_range(sample_variants):
    # Guards are on, but a wrapped generation makes past-the-table offsets legitimate.
    arena = ea.arena_for(
        sample_variants,
        generation="u8",
        cfg=ea.ArenaConfig(generation_overflow="wrap"),
    )
    assert arena.safety_policy.strict
    live = arena.alloc_b(1)
    beyond = ea.Handle(sample_variants.tag("B"), 9, arena.generation)
    res = ea.resolve_many(arena, [live, beyond])
    assert np.asarray(res.valid).tolist() == [True, False]
