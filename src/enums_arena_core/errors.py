from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class ArenaSchemaError(ValueError):
    message: str
    variant: str | None = None

    def __str__(self) -> str:
        if self.variant is None:
            return self.message
        return f"{self.message} (variant={self.variant!r})"


@dataclass(frozen=True)
class ArenaPolicyError(ValueError):
    policy: object
    kind: str = "index"
    allowed: tuple[str, ...] | None = None

    def __str__(self) -> str:
        return f"unknown {self.kind} policy={self.policy!r}"


@dataclass(frozen=True)
class ArenaModeError(ValueError):
    mode: object
    allowed: tuple[str, ...] = ()
    context: str | None = None

    def __str__(self) -> str:
        if self.context is None:
            return f"unknown mode={self.mode!r}"
        return f"unknown {self.context} mode={self.mode!r}"


@dataclass(frozen=True)
class ArenaPayloadError(TypeError):
    variant: str
    expects_payload: bool

    def __str__(self) -> str:
        if self.expects_payload:
            return f"variant {self.variant} requires a payload"
        return f"variant {self.variant} carries no payload"


@dataclass(frozen=True)
class ArenaPayloadTypeError(TypeError):
    value: object
    dtype: object

    def __str__(self) -> str:
        return f"payload {self.value!r} is not a {self.dtype} value"


@dataclass(frozen=True)
class ArenaPayloadRangeError(OverflowError):
    value: object
    dtype: object

    def __str__(self) -> str:
        return f"payload {self.value!r} out of range for {self.dtype}"


@dataclass(frozen=True)
class ArenaConfigError(ValueError):
    setting: str
    value: object
    reason: str

    def __str__(self) -> str:
        return f"{self.setting}={self.value!r}: {self.reason}"


@dataclass(frozen=True)
class ArenaCapacityError(OverflowError):
    index: int
    policy: str
    context: str = "offset"

    def __str__(self) -> str:
        return f"{self.context} {self.index} not representable as {self.policy}"


@dataclass(frozen=True)
class ArenaGenerationExhaustedError(OverflowError):
    generation: int
    policy: str

    def __str__(self) -> str:
        return (
            f"generation {self.generation} cannot advance under {self.policy} "
            "without wrapping"
        )


@dataclass(frozen=True)
class ArenaBorrowError(RuntimeError):
    message: str
    operation: str | None = None

    def __str__(self) -> str:
        if self.operation is None:
            return self.message
        return f"{self.message} (operation={self.operation})"


@dataclass(frozen=True)
class ArenaCorruptHandleError(RuntimeError):
    handle: object
    label: str
    index: int
    size: int

    def __str__(self) -> str:
        return (
            f"handle index out of bounds in {self.label} "
            f"(index={self.index}, size={self.size}, handle={self.handle!r})"
        )


def _allowed_tuple(values: Iterable[str] | None) -> tuple[str, ...] | None:
    if values is None:
        return None
    return tuple(values)


__all__ = [
    "ArenaSchemaError",
    "ArenaPolicyError",
    "ArenaModeError",
    "ArenaPayloadError",
    "ArenaPayloadTypeError",
    "ArenaPayloadRangeError",
    "ArenaConfigError",
    "ArenaCapacityError",
    "ArenaGenerationExhaustedError",
    "ArenaBorrowError",
    "ArenaCorruptHandleError",
    "_allowed_tuple",
]
