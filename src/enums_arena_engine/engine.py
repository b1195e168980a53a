"""Generational, variant-partitioned arena.

Storage layout:
  - one offset table, indexed by logical allocation order, recording the
    variant tag and the real index into that variant's pool (sentinel 0
    for unit variants);
  - one append-only pool per payload-bearing variant.

Handles carry (tag, logical offset, generation). A lookup first compares
the generation, then bounds-checks the logical offset, then compares the
handle tag against the recorded tag. Every failure reads as absent; only
forged handles under a strict SafetyPolicy raise.

No-op generation caveat: clear() keeps the generation, so an old handle
whose offset falls inside the regrown table passes validation and reads
the newer value stored there, provided the recorded tag matches.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterator

from enums_arena_core.errors import (
    ArenaBorrowError,
    ArenaCorruptHandleError,
    ArenaPayloadError,
    ArenaSchemaError,
)
from enums_arena_core.numeric import OverflowMode
from enums_arena_metrics.metrics import _arena_metrics_tick
from enums_arena_schema.variants import MISSING, Variant, VariantSet
from enums_arena_storage.offsets import UNIT_SENTINEL, OffsetEntry, OffsetTable
from enums_arena_storage.pool import make_pool

from enums_arena_engine.borrow import MutRef
from enums_arena_engine.config import (
    DEFAULT_ARENA_CONFIG,
    ArenaConfig,
    resolve_arena_config,
)
from enums_arena_engine.handle import Handle, HandleState


class EnumArena:
    """Arena for values of one VariantSet.

    Generic accessors take a variant key (name, ordinal or tag member);
    make_arena_class binds the per-variant alloc_<v>/get_<v>/get_<v>_mut
    methods on a subclass.
    """

    VARIANTS: VariantSet | None = None

    def __init__(
        self,
        variants: VariantSet | None = None,
        index=None,
        generation=None,
        *,
        cfg: ArenaConfig = DEFAULT_ARENA_CONFIG,
    ):
        if variants is None:
            variants = type(self).VARIANTS
        if not isinstance(variants, VariantSet):
            raise ArenaSchemaError(f"expected VariantSet, got {variants!r}")
        if index is not None:
            cfg = replace(cfg, index_policy=index)
        if generation is not None:
            cfg = replace(cfg, generation_policy=generation)
        resolved = resolve_arena_config(cfg)
        self._variants = variants
        self._index = resolved.index_policy
        self._gen_policy = resolved.generation_policy
        self._overflow = resolved.generation_overflow
        self._safety = resolved.safety_policy
        self._copy = resolved.copy_fn
        self._g = self._gen_policy.initial()
        self._offsets = OffsetTable(
            self._index.dtype, variants.tag_dtype, cfg=resolved.storage_cfg
        )
        self._pools = [
            make_pool(d, cfg=resolved.storage_cfg) if d.has_payload else None
            for d in variants.descriptors
        ]
        self._borrow: MutRef | None = None
        self._epoch = 0
        # Under an advancing, non-wrapping generation a matching stamp with
        # an offset past the table can only come from a forged handle.
        self._offset_oob_forged = (
            self._gen_policy.advancing and self._overflow == OverflowMode.RAISE
        )

    # --- introspection ---

    @property
    def variants(self) -> VariantSet:
        return self._variants

    @property
    def generation(self):
        return self._g

    @property
    def index_policy(self):
        return self._index

    @property
    def generation_policy(self):
        return self._gen_policy

    @property
    def safety_policy(self):
        return self._safety

    @property
    def borrowed(self) -> bool:
        return self._borrow is not None

    def len(self) -> int:
        """Allocations since the last clear."""
        return len(self._offsets)

    def __len__(self) -> int:
        return len(self._offsets)

    def __contains__(self, id) -> bool:
        return self.is_valid(id)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(variants={self._variants.name}, "
            f"len={len(self._offsets)}, generation={self._g!r}, "
            f"index={self._index.name}, gen_policy={self._gen_policy.name})"
        )

    def pool_len(self, key) -> int:
        tag = self._variants.tag(key)
        pool = self._pools[int(tag)]
        return 0 if pool is None else len(pool)

    def offset_table_views(self):
        """Read-only (tag, real index) numpy views of the live table."""
        return self._offsets.tag_view(), self._offsets.real_view()

    def handle_state(self, id) -> HandleState:
        tag, offset, generation = id
        if generation != self._g:
            return HandleState.STALE
        entry = self._offsets.entry(self._index.to_index(offset))
        if entry is None:
            return HandleState.OUT_OF_RANGE
        if entry.tag != int(tag):
            return HandleState.TAG_MISMATCH
        return HandleState.FRESH

    def is_valid(self, id) -> bool:
        return self.handle_state(id) == HandleState.FRESH

    def iter_handles(self) -> Iterator[Handle]:
        """Handles of the current generation, in allocation order."""
        tags = self._variants.tag_enum
        for logical in range(len(self._offsets)):
            entry = self._offsets.entry(logical)
            yield Handle(tags(entry.tag), logical, self._g)

    def ty(self, id):
        """Tag component of a handle. Pure projection, no validation."""
        return id[0]

    # --- borrow bookkeeping ---

    def _check_not_borrowed(self, operation: str) -> None:
        if self._borrow is not None:
            raise ArenaBorrowError("arena is mutably borrowed", operation=operation)

    def _acquire_borrow(self, ref: MutRef, epoch: int) -> None:
        if self._borrow is not None:
            raise ArenaBorrowError(
                "arena already has a live mutable reference", operation="get_mut"
            )
        if epoch != self._epoch:
            raise ArenaBorrowError(
                "mutable reference outlived arena clear", operation="get_mut"
            )
        self._borrow = ref
        _arena_metrics_tick("borrows")

    def _release_borrow(self, ref: MutRef) -> None:
        if self._borrow is ref:
            self._borrow = None

    # --- allocation ---

    def _alloc(self, tag, payload=MISSING) -> Handle:
        self._check_not_borrowed("alloc")
        desc = self._variants.descriptors[int(tag)]
        logical = self._index.from_index(len(self._offsets))
        if not desc.has_payload:
            if payload is not MISSING:
                raise ArenaPayloadError(variant=desc.name, expects_payload=False)
            self._offsets.push(int(tag), UNIT_SENTINEL)
            _arena_metrics_tick("allocs")
            return Handle(tag, logical, self._g)
        if payload is MISSING:
            raise ArenaPayloadError(variant=desc.name, expects_payload=True)
        pool = self._pools[int(tag)]
        before = len(pool)
        real = self._index.from_index(before)
        pool.push(payload)
        # Pool and table grow together or not at all.
        try:
            self._offsets.push(int(tag), real)
        except Exception:
            pool.truncate(before)
            raise
        _arena_metrics_tick("allocs")
        return Handle(tag, logical, self._g)

    def alloc_variant(self, key, payload=MISSING) -> Handle:
        """Allocate a variant by name/ordinal/tag; unit variants take no payload."""
        return self._alloc(self._variants.tag(key), payload)

    def alloc(self, value: Variant) -> Handle:
        """Allocate a Variant value, dispatching on its tag."""
        tag = self._variants.tag(value.tag)
        if self._variants.descriptors[int(tag)].has_payload:
            return self._alloc(tag, value.payload)
        return self._alloc(tag)

    # --- lookup ---

    def _forged(self, id, label: str, index: int, size: int) -> None:
        if self._safety.strict:
            raise ArenaCorruptHandleError(
                handle=id, label=label, index=index, size=size
            )

    def _resolve(self, id, label: str) -> OffsetEntry | None:
        tag, offset, generation = id
        if generation != self._g:
            _arena_metrics_tick("stale")
            return None
        logical = self._index.to_index(offset)
        entry = self._offsets.entry(logical)
        if entry is None:
            if self._offset_oob_forged:
                self._forged(id, label, logical, len(self._offsets))
            _arena_metrics_tick("out_of_range")
            return None
        if entry.tag != int(tag):
            _arena_metrics_tick("tag_mismatch")
            return None
        return entry

    def _pool_slot(self, entry: OffsetEntry, id, label: str):
        """(pool, real) for a payload entry, or None if the real index is
        outside the pool (only reachable through corruption)."""
        pool = self._pools[entry.tag]
        if entry.real >= len(pool):
            self._forged(id, label, entry.real, len(pool))
            _arena_metrics_tick("out_of_range")
            return None
        return pool, entry.real

    def get(self, id) -> Variant | None:
        """Copy of the stored value, or None for stale/out-of-range ids."""
        entry = self._resolve(id, "get")
        if entry is None:
            return None
        tag = self._variants.tag_enum(entry.tag)
        if self._pools[entry.tag] is None:
            if entry.real != UNIT_SENTINEL:
                self._forged(id, "get", entry.real, 1)
                return None
            _arena_metrics_tick("hits")
            return Variant(tag)
        slot = self._pool_slot(entry, id, "get")
        if slot is None:
            return None
        pool, real = slot
        _arena_metrics_tick("hits")
        return Variant(tag, self._copy(pool.get(real)))

    def _typed_entry(self, id, key, label: str) -> OffsetEntry | None:
        tag = self._variants.tag(key)
        if self._pools[int(tag)] is None:
            raise ArenaPayloadError(
                variant=self._variants.descriptors[int(tag)].name,
                expects_payload=False,
            )
        entry = self._resolve(id, label)
        if entry is None:
            return None
        if entry.tag != int(tag):
            _arena_metrics_tick("tag_mismatch")
            return None
        return entry

    def get_variant(self, id, key):
        """Stored payload itself (no copy) if `id` is a live `key` variant."""
        entry = self._typed_entry(id, key, "get_variant")
        if entry is None:
            return None
        slot = self._pool_slot(entry, id, "get_variant")
        if slot is None:
            return None
        pool, real = slot
        _arena_metrics_tick("hits")
        return pool.get(real)

    def get_variant_mut(self, id, key) -> MutRef | None:
        """MutRef to the stored payload; enter it with `with` before use."""
        self._check_not_borrowed("get_mut")
        entry = self._typed_entry(id, key, "get_variant_mut")
        if entry is None:
            return None
        slot = self._pool_slot(entry, id, "get_variant_mut")
        if slot is None:
            return None
        pool, real = slot
        _arena_metrics_tick("hits")
        return MutRef(self, pool, real, id, self._epoch)

    # --- mutation ---

    def update(self, id, value: Variant) -> bool:
        """Overwrite the payload in place. False (no mutation) when the id is
        stale or out of range, or `value` is a different variant."""
        self._check_not_borrowed("update")
        tag = self._variants.tag(value.tag)
        entry = self._resolve(id, "update")
        if entry is None:
            return False
        if entry.tag != int(tag):
            _arena_metrics_tick("tag_mismatch")
            return False
        if self._pools[entry.tag] is not None:
            slot = self._pool_slot(entry, id, "update")
            if slot is None:
                return False
            pool, real = slot
            pool.set(real, value.payload)
        _arena_metrics_tick("updates")
        return True

    def clear(self) -> None:
        """Advance the generation and empty the table and every pool.

        Raises ArenaGenerationExhaustedError, leaving the arena untouched,
        when the generation cannot advance without wrapping.
        """
        self._check_not_borrowed("clear")
        self._g = self._gen_policy.advance(self._g, overflow=self._overflow)
        self._offsets.clear()
        for pool in self._pools:
            if pool is not None:
                pool.clear()
        self._epoch += 1
        _arena_metrics_tick("clears")


__all__ = ["EnumArena"]
