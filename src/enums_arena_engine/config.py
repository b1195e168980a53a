from __future__ import annotations

import copy
import os
from dataclasses import dataclass

from enums_arena_core.numeric import (
    OverflowMode,
    coerce_generation_policy,
    coerce_index_policy,
    coerce_overflow_mode,
)
from enums_arena_core.protocols import CopyFn, GenerationPolicyLike, IndexPolicyLike
from enums_arena_core.safety import SafetyPolicy
from enums_arena_storage.config import StorageConfig


def _env_overflow_mode() -> OverflowMode:
    value = os.environ.get("ENUMS_ARENA_GENERATION_OVERFLOW", "").strip().lower()
    return coerce_overflow_mode(value or None)


@dataclass(frozen=True, slots=True)
class ArenaConfig:
    """Arena DI bundle (control-plane only, no storage state).

    None fields fall back to the defaults picked by resolve_arena_config.
    """

    index_policy: IndexPolicyLike | str | None = None
    generation_policy: GenerationPolicyLike | str | None = None
    generation_overflow: OverflowMode | str | None = None
    safety_policy: SafetyPolicy | None = None
    storage_cfg: StorageConfig | None = None
    copy_fn: CopyFn | None = None

    @staticmethod
    def from_env() -> "ArenaConfig":
        return ArenaConfig(
            generation_overflow=_env_overflow_mode(),
            safety_policy=SafetyPolicy.from_env(),
            storage_cfg=StorageConfig.from_env(),
        )


@dataclass(frozen=True, slots=True)
class ResolvedArenaConfig:
    """ArenaConfig with every field bound."""

    index_policy: IndexPolicyLike
    generation_policy: GenerationPolicyLike
    generation_overflow: OverflowMode
    safety_policy: SafetyPolicy
    storage_cfg: StorageConfig
    copy_fn: CopyFn


def resolve_arena_config(cfg: ArenaConfig) -> ResolvedArenaConfig:
    return ResolvedArenaConfig(
        index_policy=coerce_index_policy(cfg.index_policy),
        generation_policy=coerce_generation_policy(cfg.generation_policy),
        generation_overflow=(
            coerce_overflow_mode(cfg.generation_overflow)
            if cfg.generation_overflow is not None
            else _env_overflow_mode()
        ),
        safety_policy=cfg.safety_policy or SafetyPolicy.from_env(),
        storage_cfg=cfg.storage_cfg or StorageConfig.from_env(),
        copy_fn=cfg.copy_fn or copy.deepcopy,
    )


DEFAULT_ARENA_CONFIG = ArenaConfig()


__all__ = [
    "ArenaConfig",
    "ResolvedArenaConfig",
    "resolve_arena_config",
    "DEFAULT_ARENA_CONFIG",
]
