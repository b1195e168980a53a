from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from enums_arena_core.errors import ArenaModeError

_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def handle_guard_enabled() -> bool:
    """True when forged handles should raise instead of reading as absent."""
    return _env_flag("ENUMS_ARENA_TEST_GUARDS") or _env_flag(
        "ENUMS_ARENA_HANDLE_GUARD"
    )


class SafetyMode(str, Enum):
    CORRUPT = "corrupt"
    DROP = "drop"


def coerce_safety_mode(mode: SafetyMode | str) -> SafetyMode:
    if isinstance(mode, SafetyMode):
        return mode
    if isinstance(mode, str):
        if mode == SafetyMode.CORRUPT.value:
            return SafetyMode.CORRUPT
        if mode == SafetyMode.DROP.value:
            return SafetyMode.DROP
    raise ArenaModeError(
        mode=mode,
        allowed=(SafetyMode.CORRUPT.value, SafetyMode.DROP.value),
        context="safety",
    )


@dataclass(frozen=True, slots=True)
class SafetyPolicy:
    """Handling of forged or corrupted handles.

    mode:
      - "drop": report the lookup as absent
      - "corrupt": raise ArenaCorruptHandleError

    Stale and out-of-range handles produced by legitimate use are always
    reported as absent, whatever the mode.
    """

    mode: SafetyMode | str = SafetyMode.DROP

    def __post_init__(self):
        object.__setattr__(self, "mode", coerce_safety_mode(self.mode))

    @property
    def strict(self) -> bool:
        return self.mode == SafetyMode.CORRUPT

    @staticmethod
    def from_env() -> "SafetyPolicy":
        if handle_guard_enabled():
            return SafetyPolicy(SafetyMode.CORRUPT)
        return SafetyPolicy(SafetyMode.DROP)


DROP_SAFETY_POLICY = SafetyPolicy(SafetyMode.DROP)
STRICT_SAFETY_POLICY = SafetyPolicy(SafetyMode.CORRUPT)


__all__ = [
    "SafetyMode",
    "coerce_safety_mode",
    "SafetyPolicy",
    "DROP_SAFETY_POLICY",
    "STRICT_SAFETY_POLICY",
    "handle_guard_enabled",
    "_env_flag",
]
