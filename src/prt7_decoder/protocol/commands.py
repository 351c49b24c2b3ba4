"""Frame line builders and a message encoder.

The builders produce the exact text the parser accepts, so scripts written
here can be fed back through the decoder (simulation files, tests, the MCP
``encode_message`` tool).
"""

from __future__ import annotations

from collections.abc import Mapping

from ..models.rotor import Rotor
from .framing import FIELD_SEPARATOR, SPACE_WORD, Frame, FrameKind, LoadFrame, MapFrame

# Example transmission shipped with the decoder's usage text.
SAMPLE_SCRIPT = [
    "L,H", "L,O", "L,L", "M,2", "L,A", "L,Space", "L,W",
    "M,-2", "L,O", "L,R", "L,L", "L,D",
]


def build_load(symbol: str) -> str:
    """Build a Load line for a single character."""
    if len(symbol) != 1:
        raise ValueError(f"Load frames carry one character, got {symbol!r}")
    if symbol == FIELD_SEPARATOR or (symbol.isspace() and symbol != " "):
        raise ValueError(f"Character {symbol!r} cannot be sent in a Load frame")
    argument = SPACE_WORD if symbol == " " else symbol
    return f"{FrameKind.LOAD.value}{FIELD_SEPARATOR}{argument}"


def build_map(delta: int) -> str:
    """Build a Map line rotating the rotor by ``delta``."""
    return f"{FrameKind.MAP.value}{FIELD_SEPARATOR}{int(delta)}"


def build_line(frame: Frame) -> str:
    """Serialize a frame back to its protocol line."""
    if isinstance(frame, LoadFrame):
        return build_load(frame.symbol)
    if isinstance(frame, MapFrame):
        return build_map(frame.delta)
    raise TypeError(f"Not a frame: {frame!r}")


def encode_message(
    message: str,
    rotations: Mapping[int, int] | None = None,
) -> list[str]:
    """Build a frame script that decodes to ``message``.

    Letters come out of the decoder uppercase, so the message is encoded
    in uppercase.

    Args:
        message: Plain text to hide.
        rotations: Map frames to insert, as ``{position: delta}``. The
            rotation is sent just before the character at ``position``;
            a position equal to ``len(message)`` appends a trailing Map.

    Returns:
        The protocol lines, in transmission order.
    """
    rotations = dict(rotations or {})
    for position in rotations:
        if not 0 <= position <= len(message):
            raise ValueError(
                f"Rotation position must be 0-{len(message)}, got {position}"
            )

    rotor = Rotor()
    lines: list[str] = []
    for position, char in enumerate(message):
        if position in rotations:
            rotor.rotate(rotations[position])
            lines.append(build_map(rotations[position]))
        lines.append(build_load(rotor.unmap(char)))

    if len(message) in rotations:
        lines.append(build_map(rotations[len(message)]))
    return lines
