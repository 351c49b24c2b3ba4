"""PRT-7 frame model.

Each line of the protocol carries exactly one frame::

    +------+-------+------------------------------------------+
    | Type | Comma | Argument                                 |
    +------+-------+------------------------------------------+
    |  L   |   ,   | one character, or the word ``Space``     |
    |  M   |   ,   | signed rotation delta, e.g. ``2``, ``-3``|
    +------+-------+------------------------------------------+

- ``L`` (Load): deliver one payload character, decoded through the rotor.
- ``M`` (Map): rotate the rotor by the given delta.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

FIELD_SEPARATOR = ","
SPACE_WORD = "Space"


class FrameKind(str, Enum):
    """Frame type tokens."""

    LOAD = "L"
    MAP = "M"


@dataclass(frozen=True)
class LoadFrame:
    """Payload delivery: one encoded character."""

    symbol: str

    @property
    def kind(self) -> FrameKind:
        return FrameKind.LOAD

    def __repr__(self) -> str:
        shown = SPACE_WORD if self.symbol == " " else self.symbol
        return f"LoadFrame({shown})"


@dataclass(frozen=True)
class MapFrame:
    """Rotor rotation by ``delta`` positions."""

    delta: int

    @property
    def kind(self) -> FrameKind:
        return FrameKind.MAP

    def __repr__(self) -> str:
        return f"MapFrame({self.delta:+d})"


Frame = Union[LoadFrame, MapFrame]
