import gc
import weakref
from dataclasses import dataclass

import jax.numpy as jnp
import numpy as np
import pytest

import enums_arena as ea

pytestmark = pytest.mark.engine


@dataclass
class Detail:
    a: int
    b: int


@pytest.fixture
def enum_variants():
    return ea.variant_set(
        "Enum",
        [("Value", int), "None", ("ListAB", tuple), ("Detail", Detail)],
    )


def test_enum_arena_u8_noop(enum_variants):
    V = enum_variants
    arena = ea.arena_for(V, index="u8", generation="noop")

    h = arena.alloc_none()
    assert arena.get(h) == V.make("None")

    h = arena.alloc_list_ab((0, 1))
    assert arena.get(h) == V.make("ListAB", (0, 1))

    h = arena.alloc_detail(Detail(a=1, b=0))
    assert arena.get(h) == V.make("Detail", Detail(a=1, b=0))

    assert arena.len() == 3

    h = arena.alloc_value(5)
    assert arena.get(h) == V.make("Value", 5)
    assert arena.update(h, V.make("Value", 4)) is True
    with arena.get_value_mut(h) as ref:
        assert ref.value == 4
        ref.value = 3
    assert arena.get_value(h) == 3


def test_string_payloads_cleared_with_generation():
    Node = ea.variant_set("Node", [("Name", str), ("Parent", tuple), "None"])
    arena = ea.arena_for(Node, index="u32", generation="u8")
    h = arena.alloc_name("s")
    assert arena.get(h) == Node.make("Name", "s")
    arena.clear()
    assert arena.get(h) is None
    assert arena.update(h, Node.make("Name", "name1")) is False


def test_generic_payload_tuple():
    NodeV2 = ea.variant_set("NodeV2", [("Name", str), ("Parent", tuple), "None"])
    arena = ea.arena_for(NodeV2, index="u32", generation="u8")
    h = arena.alloc_parent(("s", 1))
    assert arena.get(h) == NodeV2.make("Parent", ("s", 1))


def test_specialized_class_shape(enum_variants):
    cls = ea.make_arena_class(enum_variants)
    assert cls.__name__ == "EnumIdArena"
    assert issubclass(cls, ea.EnumArena)
    assert cls is ea.make_arena_class(enum_variants)
    for name in ("alloc_value", "get_value", "get_value_mut", "alloc_none"):
        assert hasattr(cls, name)
    # Unit variants get an allocator only.
    assert not hasattr(cls, "get_none")
    assert not hasattr(cls, "get_none_mut")


def test_generated_name_collision_rejected():
    V = ea.variant_set("Clash", [("Variant", int)])
    with pytest.raises(ea.ArenaSchemaError):
        ea.make_arena_class(V)


def test_generic_accessors_match_typed(enum_variants):
    arena = ea.arena_for(enum_variants)
    h = arena.alloc_variant("Value", 7)
    assert arena.get_variant(h, "Value") == arena.get_value(h) == 7
    assert arena.get_variant(h, "ListAB") is None
    with pytest.raises(ea.ArenaPayloadError):
        arena.get_variant(h, "None")


def test_plain_engine_without_specialization(enum_variants):
    arena = ea.EnumArena(enum_variants, index="u16", generation="u16")
    h = arena.alloc(enum_variants.make("ListAB", (2, 3)))
    assert arena.get_variant(h, "ListAB") == (2, 3)
    assert not hasattr(arena, "alloc_list_ab")


def test_array_backed_variant():
    Sample = ea.variant_set(
        "Packed", ["None", ("B", jnp.int32), ("Tick", jnp.float32)]
    )
    arena = ea.arena_for(Sample)
    h = arena.alloc_b(5)
    t = arena.alloc_tick(0.5)
    assert arena.get(h) == Sample.make("B", 5)
    assert arena.get_tick(t) == 0.5
    with arena.get_b_mut(h) as ref:
        ref.value = ref.value + 4
    assert arena.get_b(h) == 9
    with pytest.raises(ea.ArenaPayloadRangeError):
        arena.alloc_b(2**40)
    assert len(arena) == 2
    assert arena.pool_len("B") == 1


def test_engine_requires_variant_set():
    with pytest.raises(ea.ArenaSchemaError):
        ea.EnumArena()
    with pytest.raises(ea.ArenaSchemaError):
        ea.EnumArena(["A", "B"])


def test_array_backed_variant_keeps_exact_payloads():
    Sample = ea.variant_set("Exact", ["None", ("B", jnp.int32)])
    arena = ea.arena_for(Sample)
    h = arena.alloc_b(5)
    for bad in (5.7, "7"):
        with pytest.raises(ea.ArenaPayloadTypeError):
            arena.alloc_b(bad)
        with pytest.raises(ea.ArenaPayloadTypeError):
            arena.update(h, Sample.make("B", bad))
    with arena.get_b_mut(h) as ref:
        with pytest.raises(ea.ArenaPayloadTypeError):
            ref.value = 1.5
    assert len(arena) == 1
    assert arena.pool_len("B") == 1
    assert arena.get(h) == Sample.make("B", 5)


class _ShiftedU8:
    """Index policy whose real indices never fit its own dtype."""

    name = "shifted_u8"
    dtype = np.uint8

    def from_index(self, index):
        return index + 300

    def to_index(self, value):
        return int(value)


def test_failed_alloc_leaves_tables_consistent(sample_variants):
    arena = ea.arena_for(sample_variants, index=_ShiftedU8())
    with pytest.raises(ea.ArenaCapacityError):
        arena.alloc_variant("B", 1)
    tags, real = arena.offset_table_views()
    assert len(arena) == 0
    assert len(tags) == len(real) == 0
    assert arena.pool_len("B") == 0
    arena.alloc_none()
    tags, real = arena.offset_table_views()
    assert tags.tolist() == [0]
    assert real.tolist() == [0]


def test_specialized_class_released_with_variant_set():
    V = ea.variant_set("Transient", [("A", int)])
    cls = ea.make_arena_class(V)
    assert V.derived["arena_class"] is cls
    set_ref = weakref.ref(V)
    cls_ref = weakref.ref(cls)
    del V, cls
    gc.collect()
    assert set_ref() is None
    assert cls_ref() is None
