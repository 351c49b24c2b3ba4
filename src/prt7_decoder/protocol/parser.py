"""Line parser: raw protocol text to typed frames."""

from __future__ import annotations

import re

from ..errors import MalformedArgument, MissingArgument, UnknownFrameType
from .framing import (
    FIELD_SEPARATOR,
    SPACE_WORD,
    Frame,
    FrameKind,
    LoadFrame,
    MapFrame,
)

# Optional sign followed by digits, anchored at the start of the argument.
_INT_PREFIX = re.compile(r"[+-]?[0-9]+")
_WHOLE_INT = re.compile(r"[+-]?[0-9]+\Z")


def lenient_int(text: str) -> int:
    """Parse the leading integer of ``text``, like C ``atoi``.

    Stops at the first non-digit and yields 0 when no digits lead.
    """
    match = _INT_PREFIX.match(text.lstrip())
    if match is None:
        return 0
    return int(match.group())


def parse_line(line: str, strict: bool = False) -> Frame | None:
    """Parse one protocol line into a frame.

    Args:
        line: Raw line, with or without its terminator.
        strict: Reject Map arguments that are not whole integers instead of
            parsing their numeric prefix.

    Returns:
        A ``LoadFrame`` or ``MapFrame``, or ``None`` for a blank line.

    Raises:
        UnknownFrameType: The type token is not ``L`` or ``M``.
        MissingArgument: The frame has no argument.
        MalformedArgument: Strict mode and a non-integer Map argument.
    """
    text = line.strip()
    if not text:
        return None

    token, sep, rest = text.partition(FIELD_SEPARATOR)
    token = token.strip()
    argument = rest.strip() if sep else ""

    kind = _frame_kind(token)
    if kind is None:
        raise UnknownFrameType(line, token)

    if kind is FrameKind.LOAD:
        # Only the first character of the remainder counts, commas included.
        if not argument:
            raise MissingArgument(line, kind.value)
        if argument.lower() == SPACE_WORD.lower():
            return LoadFrame(" ")
        return LoadFrame(argument[0])

    if not argument:
        raise MissingArgument(line, kind.value)
    if strict and not _WHOLE_INT.match(argument):
        raise MalformedArgument(line, argument)
    return MapFrame(lenient_int(argument))


def _frame_kind(token: str) -> FrameKind | None:
    if len(token) != 1:
        return None
    try:
        return FrameKind(token.upper())
    except ValueError:
        return None
