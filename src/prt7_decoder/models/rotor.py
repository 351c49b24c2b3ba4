"""Rotating substitution rotor.

The rotor is a 26-symbol disc holding ``A..Z`` in canonical order. Its state
is a single offset: how far the zero position has turned away from ``A``::

    offset 0:  A B C D ... Z      input 'A' -> 'A'
    offset 2:  C D E F ... B      input 'A' -> 'C'

Rotations wrap in both directions, so ``rotate(-2)`` from offset 0 lands on
offset 24.
"""

from __future__ import annotations

import string

ALPHABET = string.ascii_uppercase
ROTOR_SIZE = len(ALPHABET)
SPACE = " "


def effective_shift(delta: int) -> int:
    """Normalize a rotation delta into ``[0, 26)``."""
    return delta % ROTOR_SIZE


class Rotor:
    """Cipher rotor over the uppercase Latin alphabet."""

    def __init__(self, offset: int = 0) -> None:
        self._offset = effective_shift(offset)

    @property
    def offset(self) -> int:
        return self._offset

    def rotate(self, delta: int) -> int:
        """Turn the rotor ``delta`` positions (negative turns backwards).

        Returns:
            The effective shift applied, always in ``[0, 26)``.
        """
        shift = effective_shift(delta)
        self._offset = (self._offset + shift) % ROTOR_SIZE
        return shift

    def reset(self) -> None:
        self._offset = 0

    def map(self, symbol: str) -> str:
        """Decode one character through the current alignment.

        Lowercase letters are folded to uppercase. Space and any character
        outside ``A-Z`` pass through unchanged.
        """
        if symbol == SPACE:
            return SPACE
        upper = _normalize(symbol)
        if upper is None:
            return symbol
        index = ALPHABET.index(upper)
        return ALPHABET[(index + self._offset) % ROTOR_SIZE]

    def unmap(self, symbol: str) -> str:
        """Inverse of :meth:`map`: the input that decodes to ``symbol``."""
        if symbol == SPACE:
            return SPACE
        upper = _normalize(symbol)
        if upper is None:
            return symbol
        index = ALPHABET.index(upper)
        return ALPHABET[(index - self._offset) % ROTOR_SIZE]

    def table(self) -> str:
        """The 26 symbols read from the current zero position."""
        return ALPHABET[self._offset:] + ALPHABET[:self._offset]

    def __repr__(self) -> str:
        return f"Rotor(offset={self._offset}, table={self.table()})"


def _normalize(symbol: str) -> str | None:
    if len(symbol) != 1:
        return None
    upper = symbol.upper() if "a" <= symbol <= "z" else symbol
    if "A" <= upper <= "Z":
        return upper
    return None
