"""Exception hierarchy for the PRT-7 decoder.

Parse errors are per-line and recoverable: the decoding engine catches them
at the line boundary and turns them into ``FrameInvalid`` events.
"""

from __future__ import annotations


class DecoderError(Exception):
    """Base class for all decoder errors."""


class ParseError(DecoderError):
    """A raw line could not be turned into a frame."""

    def __init__(self, line: str, message: str) -> None:
        super().__init__(message)
        self.line = line

    @property
    def reason(self) -> str:
        return str(self)


class UnknownFrameType(ParseError):
    """The type token is neither ``L`` nor ``M``."""

    def __init__(self, line: str, token: str) -> None:
        super().__init__(line, f"Unknown frame type: {token!r}")
        self.token = token


class MissingArgument(ParseError):
    """A frame type was given without its argument."""

    def __init__(self, line: str, frame_type: str) -> None:
        super().__init__(line, f"Frame {frame_type} without argument")
        self.frame_type = frame_type


class MalformedArgument(ParseError):
    """Map argument is not a whole integer (only raised in strict mode)."""

    def __init__(self, line: str, argument: str) -> None:
        super().__init__(line, f"Map argument is not an integer: {argument!r}")
        self.argument = argument


class SessionDrainedError(DecoderError):
    """A frame was fed to an engine whose line source is already exhausted."""


class LineSourceError(DecoderError, ConnectionError):
    """The serial port or simulation file could not be opened."""
