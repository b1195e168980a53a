from __future__ import annotations

from dataclasses import dataclass
import os

from enums_arena_core.errors import ArenaConfigError


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    if not value.isdigit():
        raise ArenaConfigError(setting=name, value=value, reason="must be an integer")
    return int(value)


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Growth parameters for dtype-backed columns (offset table, array pools).

    Object pools are plain lists and ignore these settings.
    """

    initial_capacity: int = 16
    growth_factor: int = 2

    def __post_init__(self):
        if self.initial_capacity < 1:
            raise ArenaConfigError(
                setting="initial_capacity",
                value=self.initial_capacity,
                reason="must be >= 1",
            )
        if self.growth_factor < 2:
            raise ArenaConfigError(
                setting="growth_factor", value=self.growth_factor, reason="must be >= 2"
            )

    @staticmethod
    def from_env() -> "StorageConfig":
        capacity = _env_int("ENUMS_ARENA_INITIAL_CAPACITY", 16)
        if capacity < 1:
            raise ArenaConfigError(
                setting="ENUMS_ARENA_INITIAL_CAPACITY",
                value=capacity,
                reason="must be >= 1",
            )
        return StorageConfig(initial_capacity=capacity)


# Static fallback for direct Column/OffsetTable construction; arenas read
# the environment when they are built.
DEFAULT_STORAGE_CONFIG = StorageConfig()


__all__ = ["StorageConfig", "DEFAULT_STORAGE_CONFIG"]
