"""Per-variant accessor binding.

Derives the specialized surface from a VariantSet: alloc_<v> for every
variant, get_<v> and get_<v>_mut for each payload-bearing variant. The
methods are thin closures over EnumArena's generic accessors.
"""

from __future__ import annotations

from enums_arena_core.errors import ArenaSchemaError
from enums_arena_schema.naming import alloc_name, get_mut_name, get_name
from enums_arena_schema.variants import VariantSet

from enums_arena_engine.config import DEFAULT_ARENA_CONFIG, ArenaConfig
from enums_arena_engine.engine import EnumArena


def _unit_alloc(tag, name):
    def alloc(self):
        return self._alloc(tag)

    alloc.__name__ = alloc_name(name)
    alloc.__doc__ = f"Allocate the unit variant {name}."
    return alloc


def _payload_alloc(tag, name):
    def alloc(self, val):
        return self._alloc(tag, val)

    alloc.__name__ = alloc_name(name)
    alloc.__doc__ = f"Allocate {name}(val)."
    return alloc


def _payload_get(tag, name):
    def get(self, id):
        return self.get_variant(id, tag)

    get.__name__ = get_name(name)
    get.__doc__ = f"Stored {name} payload for id, or None."
    return get


def _payload_get_mut(tag, name):
    def get_mut(self, id):
        return self.get_variant_mut(id, tag)

    get_mut.__name__ = get_mut_name(name)
    get_mut.__doc__ = f"MutRef to the stored {name} payload for id, or None."
    return get_mut


def _bind(namespace: dict, method) -> None:
    name = method.__name__
    if name in namespace or hasattr(EnumArena, name):
        raise ArenaSchemaError(f"generated accessor {name!r} collides with an arena method")
    namespace[name] = method


def _build_arena_class(variants: VariantSet) -> type[EnumArena]:
    namespace: dict = {"VARIANTS": variants}
    for tag, desc in zip(variants.tags, variants.descriptors):
        if desc.has_payload:
            _bind(namespace, _payload_alloc(tag, desc.name))
            _bind(namespace, _payload_get(tag, desc.name))
            _bind(namespace, _payload_get_mut(tag, desc.name))
        else:
            _bind(namespace, _unit_alloc(tag, desc.name))
    namespace["__doc__"] = f"Arena for {variants.name} values."
    namespace["__module__"] = __name__
    return type(f"{variants.name}IdArena", (EnumArena,), namespace)


def make_arena_class(variants: VariantSet) -> type[EnumArena]:
    """Build (once per VariantSet) the `<Name>IdArena` subclass."""
    if not isinstance(variants, VariantSet):
        raise ArenaSchemaError(f"expected VariantSet, got {variants!r}")
    cls = variants.derived.get("arena_class")
    if cls is None:
        cls = _build_arena_class(variants)
        variants.derived["arena_class"] = cls
    return cls


def arena_for(
    variants: VariantSet,
    index=None,
    generation=None,
    *,
    cfg: ArenaConfig = DEFAULT_ARENA_CONFIG,
) -> EnumArena:
    """Empty specialized arena for `variants`."""
    return make_arena_class(variants)(index=index, generation=generation, cfg=cfg)


__all__ = ["make_arena_class", "arena_for"]
