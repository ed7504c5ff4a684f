from __future__ import annotations


class IdGenerator:
    """Monotonic source of node identifiers.

    Identifiers are for tracing only; dependency tracking always uses
    object identity.
    """

    def __init__(self, start: int = 1) -> None:
        self._next = start

    def __call__(self) -> int:
        value = self._next
        self._next += 1
        return value

    def peek(self) -> int:
        return self._next

    def reset(self, start: int = 1) -> None:
        self._next = start

    def __repr__(self) -> str:
        return f"IdGenerator(next={self._next})"


DEFAULT_IDS = IdGenerator()
