import jax.numpy as jnp
import numpy as np
import pytest

import enums_arena as ea

pytestmark = pytest.mark.schema


def _n_variants(n):
    return ea.variant_set("Wide", [f"V{i}" for i in range(n)])


def test_tag_width_boundary():
    assert _n_variants(255).tag_width == 1
    assert _n_variants(256).tag_width == 2
    assert _n_variants(256).tag_width > _n_variants(255).tag_width
    assert ea.tag_width_for(65535) == 2
    assert ea.tag_width_for(65536) == 4
    assert ea.tag_width_for(2**32) == 8


def test_tag_dtype_follows_width():
    assert np.dtype(_n_variants(3).tag_dtype) == np.uint8
    assert np.dtype(_n_variants(300).tag_dtype) == np.uint16


def test_tags_are_ordinal_in_declaration_order():
    V = ea.variant_set("Event", [("Click", tuple), ("Tick", float), "Close"])
    assert [int(t) for t in V.tags] == [0, 1, 2]
    assert V.tag("Tick").name == "Tick"
    assert V.tag(2) is V.tag("Close")
    assert V.descriptor("Close").has_payload is False
    assert [d.name for d in V.payload_descriptors] == ["Click", "Tick"]


@pytest.mark.parametrize(
    "name,expected",
    [
        ("ListAB", "list_ab"),
        ("HTTPServer", "http_server"),
        ("Mock1", "mock1"),
        ("None", "none"),
        ("Detail", "detail"),
        ("parentNode", "parent_node"),
    ],
)
def test_snake_case(name, expected):
    assert ea.snake_case(name) == expected


def test_accessor_names():
    V = ea.variant_set("Enum", [("Value", int), "None", ("ListAB", tuple)])
    assert V.accessor_names() == {
        "Value": ("alloc_value", "get_value", "get_value_mut"),
        "None": ("alloc_none",),
        "ListAB": ("alloc_list_ab", "get_list_ab", "get_list_ab_mut"),
    }


@pytest.mark.parametrize(
    "variants",
    [
        [],
        ["A", "A"],
        ["ListAB", "ListAb"],
        ["not valid"],
        ["_Hidden"],
        [42],
    ],
)
def test_invalid_declarations(variants):
    with pytest.raises(ea.ArenaSchemaError):
        ea.variant_set("Bad", variants)


def test_make_checks_payload_presence():
    V = ea.variant_set("Opt", ["Nothing", ("Some", object)])
    assert V.make("Some", None).payload is None
    with pytest.raises(ea.ArenaPayloadError):
        V.make("Some")
    with pytest.raises(ea.ArenaPayloadError):
        V.make("Nothing", 1)
    with pytest.raises(ea.ArenaSchemaError):
        V.make("Missing")


def test_array_dtype_only_for_numeric_dtypes():
    assert ea.VariantDescriptor("A", jnp.int32).array_dtype == np.int32
    assert ea.VariantDescriptor("B", np.float64).array_dtype == np.float64
    assert ea.VariantDescriptor("C", int).array_dtype is None
    assert ea.VariantDescriptor("D", tuple).array_dtype is None
    assert ea.VariantDescriptor("E").array_dtype is None


def test_variant_repr():
    V = ea.variant_set("Sample", ["None", ("B", int)])
    assert repr(V.make("None")) == "None"
    assert repr(V.make("B", 5)) == "B(5)"


def test_variant_sets_compare_by_identity():
    a = ea.variant_set("Same", ["X"])
    b = ea.variant_set("Same", ["X"])
    assert a != b
    assert a == a
