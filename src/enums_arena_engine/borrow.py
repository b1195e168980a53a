from __future__ import annotations

from enums_arena_core.errors import ArenaBorrowError


class MutRef:
    """Exclusive mutable reference to one stored payload.

    Python has no aliasing checker, so exclusivity is a runtime borrow:
    the reference is live only inside its `with` block, and while it is
    live the arena rejects a second mutable borrow, alloc, update and
    clear. Reading or writing `value` outside the block raises.

        with arena.get_b_mut(h) as ref:
            ref.value = 9
    """

    __slots__ = ("_arena", "_pool", "_real", "_handle", "_epoch", "_active")

    def __init__(self, arena, pool, real: int, handle, epoch: int):
        self._arena = arena
        self._pool = pool
        self._real = real
        self._handle = handle
        self._epoch = epoch
        self._active = False

    @property
    def handle(self):
        return self._handle

    @property
    def active(self) -> bool:
        return self._active

    def __enter__(self) -> "MutRef":
        self._arena._acquire_borrow(self, self._epoch)
        self._active = True
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._active = False
        self._arena._release_borrow(self)
        return False

    def _require_active(self) -> None:
        if not self._active:
            raise ArenaBorrowError(
                "mutable reference used outside its with-block",
                operation="get_mut",
            )

    @property
    def value(self):
        self._require_active()
        return self._pool.get(self._real)

    @value.setter
    def value(self, new_value) -> None:
        self._require_active()
        self._pool.set(self._real, new_value)

    def __repr__(self) -> str:
        state = "active" if self._active else "idle"
        return f"MutRef({self._handle!r}, {state})"


__all__ = ["MutRef"]
