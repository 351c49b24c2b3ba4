"""Append-only store of decoded characters."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


def bracketed(chars: Iterable[str]) -> str:
    """Progress rendering, e.g. ``[H][O][L]``."""
    return "".join(f"[{c}]" for c in chars)


class PayloadAccumulator:
    """Decoded message fragments in arrival order."""

    def __init__(self) -> None:
        self._chars: list[str] = []

    def append(self, symbol: str) -> None:
        self._chars.append(symbol)

    def snapshot(self) -> str:
        """Current message, without mutating the accumulator."""
        return "".join(self._chars)

    def __len__(self) -> int:
        return len(self._chars)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._chars))

    def __repr__(self) -> str:
        return f"PayloadAccumulator({self.snapshot()!r})"
