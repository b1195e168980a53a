"""Generational arenas for tagged-union values.

    import enums_arena as ea

    Event = ea.variant_set("Event", [("Click", tuple), ("Tick", float), "Close"])
    arena = ea.arena_for(Event, index="u32", generation="u8")
    h = arena.alloc_click((1, 2))
    assert arena.get(h) == Event.make("Click", (1, 2))
    arena.clear()
    assert arena.get(h) is None
"""

from enums_arena_core.errors import (
    ArenaBorrowError,
    ArenaCapacityError,
    ArenaConfigError,
    ArenaCorruptHandleError,
    ArenaGenerationExhaustedError,
    ArenaModeError,
    ArenaPayloadError,
    ArenaPayloadRangeError,
    ArenaPayloadTypeError,
    ArenaPolicyError,
    ArenaSchemaError,
)
from enums_arena_core.numeric import (
    DEFAULT_GENERATION_POLICY,
    DEFAULT_INDEX_POLICY,
    GEN_U8,
    GEN_U16,
    GEN_U32,
    GEN_U64,
    NOOP_GENERATION,
    U8,
    U16,
    U32,
    U64,
    GenerationPolicy,
    IndexPolicy,
    OverflowMode,
    coerce_generation_policy,
    coerce_index_policy,
)
from enums_arena_core.protocols import GenerationPolicyLike, IndexPolicyLike
from enums_arena_core.safety import (
    DROP_SAFETY_POLICY,
    STRICT_SAFETY_POLICY,
    SafetyMode,
    SafetyPolicy,
)
from enums_arena_schema.naming import snake_case
from enums_arena_schema.variants import (
    Variant,
    VariantDescriptor,
    VariantSet,
    tag_width_for,
    variant_set,
)
from enums_arena_storage.config import StorageConfig
from enums_arena_engine.borrow import MutRef
from enums_arena_engine.config import ArenaConfig, DEFAULT_ARENA_CONFIG
from enums_arena_engine.engine import EnumArena
from enums_arena_engine.facade import arena_for, make_arena_class
from enums_arena_engine.handle import Handle, HandleState
from enums_arena_engine.batch import (
    BatchResolution,
    compacted_handles,
    get_many,
    live_columns,
    resolve_many,
)
from enums_arena_metrics.metrics import arena_metrics_get, arena_metrics_reset

__all__ = [
    "ArenaBorrowError",
    "ArenaCapacityError",
    "ArenaConfigError",
    "ArenaCorruptHandleError",
    "ArenaGenerationExhaustedError",
    "ArenaModeError",
    "ArenaPayloadError",
    "ArenaPayloadRangeError",
    "ArenaPayloadTypeError",
    "ArenaPolicyError",
    "ArenaSchemaError",
    "DEFAULT_GENERATION_POLICY",
    "DEFAULT_INDEX_POLICY",
    "GEN_U8",
    "GEN_U16",
    "GEN_U32",
    "GEN_U64",
    "NOOP_GENERATION",
    "U8",
    "U16",
    "U32",
    "U64",
    "GenerationPolicy",
    "IndexPolicy",
    "OverflowMode",
    "coerce_generation_policy",
    "coerce_index_policy",
    "GenerationPolicyLike",
    "IndexPolicyLike",
    "DROP_SAFETY_POLICY",
    "STRICT_SAFETY_POLICY",
    "SafetyMode",
    "SafetyPolicy",
    "snake_case",
    "Variant",
    "VariantDescriptor",
    "VariantSet",
    "tag_width_for",
    "variant_set",
    "StorageConfig",
    "MutRef",
    "ArenaConfig",
    "DEFAULT_ARENA_CONFIG",
    "EnumArena",
    "arena_for",
    "make_arena_class",
    "Handle",
    "HandleState",
    "BatchResolution",
    "compacted_handles",
    "get_many",
    "live_columns",
    "resolve_many",
    "arena_metrics_get",
    "arena_metrics_reset",
]
