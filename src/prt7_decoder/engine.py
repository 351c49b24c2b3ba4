"""Decoding engine: drives parsed frames through the rotor and accumulator.

The engine owns one :class:`Rotor` and one :class:`PayloadAccumulator` per
session. It never renders anything itself; every observable step is
published as a diagnostic event to the registered subscribers::

    engine = DecodingEngine()
    engine.subscribe(LoggingSink())
    message = engine.run(["L,H", "M,2", "L,A"])   # "HC"

A malformed line is reported with ``FrameInvalid`` and skipped. Only the
exhaustion of the line source ends a session.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Union

from .errors import ParseError, SessionDrainedError
from .models.payload import PayloadAccumulator
from .models.rotor import Rotor
from .protocol.framing import Frame, LoadFrame, MapFrame
from .protocol.parser import parse_line

logger = logging.getLogger(__name__)


class EngineState(str, Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    DRAINED = "drained"


# ─── DIAGNOSTIC EVENTS ───────────────────────────────────────────────

@dataclass(frozen=True)
class FrameReceived:
    """A raw line arrived from the line source."""

    raw_line: str

    def to_dict(self) -> dict[str, Any]:
        return {"event": "frame_received", **asdict(self)}


@dataclass(frozen=True)
class FrameInvalid:
    """A line failed to parse and was skipped."""

    raw_line: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"event": "frame_invalid", **asdict(self)}


@dataclass(frozen=True)
class LoadProcessed:
    """A Load frame was decoded and appended to the message."""

    raw_symbol: str
    decoded_symbol: str
    message_so_far: str

    def to_dict(self) -> dict[str, Any]:
        return {"event": "load_processed", **asdict(self)}


@dataclass(frozen=True)
class RotationApplied:
    """A Map frame rotated the rotor."""

    raw_delta: int
    effective_shift: int
    rotor_table: str

    def to_dict(self) -> dict[str, Any]:
        return {"event": "rotation_applied", **asdict(self)}


@dataclass(frozen=True)
class SessionComplete:
    """The line source is exhausted; the message is final."""

    final_message: str

    def to_dict(self) -> dict[str, Any]:
        return {"event": "session_complete", **asdict(self)}


Event = Union[FrameReceived, FrameInvalid, LoadProcessed, RotationApplied, SessionComplete]
Subscriber = Callable[[Event], None]


@dataclass
class SessionStats:
    """Per-session line counters."""

    lines: int = 0
    loads: int = 0
    maps: int = 0
    invalid: int = 0
    blank: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


# ─── ENGINE ──────────────────────────────────────────────────────────

class DecodingEngine:
    """One decoding session over a stream of protocol lines."""

    def __init__(
        self,
        subscribers: Iterable[Subscriber] = (),
        strict: bool = False,
    ) -> None:
        self._rotor = Rotor()
        self._payload = PayloadAccumulator()
        self._subscribers: list[Subscriber] = list(subscribers)
        self._strict = strict
        self._state = EngineState.IDLE
        self._stats = SessionStats()

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def rotor(self) -> Rotor:
        return self._rotor

    @property
    def payload(self) -> PayloadAccumulator:
        return self._payload

    @property
    def stats(self) -> SessionStats:
        return self._stats

    @property
    def message(self) -> str:
        """Message assembled so far."""
        return self._payload.snapshot()

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def process_line(self, line: str) -> Frame | None:
        """Parse one raw line and apply the resulting frame.

        Returns:
            The applied frame, or ``None`` if the line was blank or invalid.

        Raises:
            SessionDrainedError: The session has already finished.
        """
        self._check_open()
        self._stats.lines += 1
        self._emit(FrameReceived(raw_line=line))

        try:
            frame = parse_line(line, strict=self._strict)
        except ParseError as e:
            self._stats.invalid += 1
            logger.debug("Invalid frame %r: %s", line, e.reason)
            self._emit(FrameInvalid(raw_line=line, reason=e.reason))
            return None

        if frame is None:
            self._stats.blank += 1
            logger.debug("Skipping blank line")
            return None

        self.apply(frame)
        return frame

    def apply(self, frame: Frame) -> None:
        """Dispatch an already parsed frame."""
        self._check_open()
        self._state = EngineState.DISPATCHING
        try:
            if isinstance(frame, LoadFrame):
                self._apply_load(frame)
            elif isinstance(frame, MapFrame):
                self._apply_map(frame)
            else:
                raise TypeError(f"Not a frame: {frame!r}")
        finally:
            self._state = EngineState.IDLE

    def finish(self) -> str:
        """Mark the line source exhausted and return the assembled message."""
        self._check_open()
        self._state = EngineState.DRAINED
        message = self._payload.snapshot()
        logger.info(
            "Session complete: %d lines, %d loads, %d maps, %d invalid",
            self._stats.lines, self._stats.loads, self._stats.maps,
            self._stats.invalid,
        )
        self._emit(SessionComplete(final_message=message))
        return message

    def run(self, source: Iterable[str]) -> str:
        """Process every line of ``source`` and finish the session.

        ``source`` may be any iterable of lines, including the line sources
        in :mod:`prt7_decoder.transport`.
        """
        for line in source:
            self.process_line(line)
        return self.finish()

    def _apply_load(self, frame: LoadFrame) -> None:
        decoded = self._rotor.map(frame.symbol)
        self._payload.append(decoded)
        self._stats.loads += 1
        logger.debug("Load %r decoded as %r", frame.symbol, decoded)
        self._emit(LoadProcessed(
            raw_symbol=frame.symbol,
            decoded_symbol=decoded,
            message_so_far=self._payload.snapshot(),
        ))

    def _apply_map(self, frame: MapFrame) -> None:
        shift = self._rotor.rotate(frame.delta)
        self._stats.maps += 1
        logger.debug("Rotor rotated %+d (effective +%d)", frame.delta, shift)
        self._emit(RotationApplied(
            raw_delta=frame.delta,
            effective_shift=shift,
            rotor_table=self._rotor.table(),
        ))

    def _check_open(self) -> None:
        if self._state is EngineState.DRAINED:
            raise SessionDrainedError("Session is drained; no more frames accepted")

    def _emit(self, event: Event) -> None:
        for subscriber in self._subscribers:
            subscriber(event)


def decode_lines(lines: Iterable[str], strict: bool = False) -> str:
    """Decode a complete transmission in one call."""
    return DecodingEngine(strict=strict).run(lines)


class LoggingSink:
    """Subscriber that writes diagnostic events to a logger."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def __call__(self, event: Event) -> None:
        if isinstance(event, FrameReceived):
            self._log.debug("Frame received: [%s]", event.raw_line)
        elif isinstance(event, FrameInvalid):
            self._log.warning("Frame invalid: [%s] (%s)", event.raw_line, event.reason)
        elif isinstance(event, LoadProcessed):
            self._log.info(
                "Fragment %r decoded as %r, message: %r",
                event.raw_symbol, event.decoded_symbol, event.message_so_far,
            )
        elif isinstance(event, RotationApplied):
            self._log.info(
                "Rotor rotated %+d (effective +%d), state: %s",
                event.raw_delta, event.effective_shift, event.rotor_table,
            )
        elif isinstance(event, SessionComplete):
            self._log.info("Hidden message assembled: %r", event.final_message)
