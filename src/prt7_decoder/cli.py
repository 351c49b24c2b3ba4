"""Command-line decoder.

Usage::

    prt7-decoder --sim entrada.txt
    prt7-decoder --serial /dev/ttyUSB0 --baud 9600
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TextIO

from .engine import (
    DecodingEngine,
    Event,
    FrameInvalid,
    FrameReceived,
    LoadProcessed,
    LoggingSink,
    RotationApplied,
    SessionComplete,
)
from .errors import LineSourceError
from .models.payload import bracketed
from .protocol.commands import SAMPLE_SCRIPT
from .transport.serial_connection import (
    DEFAULT_BAUDRATE,
    FileLineSource,
    SerialSettings,
    open_line_source,
)

logger = logging.getLogger(__name__)


class ConsoleRenderer:
    """Narrates a decoding session on a text stream, one frame at a time."""

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out or sys.stdout

    def __call__(self, event: Event) -> None:
        w = self._out.write
        if isinstance(event, FrameReceived):
            w(f"Frame received: [{event.raw_line}] ")
        elif isinstance(event, FrameInvalid):
            w(f"-> Invalid frame ({event.reason}). Ignored.\n")
        elif isinstance(event, LoadProcessed):
            shown = "Space" if event.raw_symbol == " " else event.raw_symbol
            brackets = bracketed(event.message_so_far)
            w(
                f"-> [L,{shown}] fragment '{event.raw_symbol}' decoded as "
                f"'{event.decoded_symbol}'. Message: {brackets}\n\n"
            )
        elif isinstance(event, RotationApplied):
            w(
                f"-> [M,{event.raw_delta}] rotating rotor {event.raw_delta:+d} "
                f"(effective: +{event.effective_shift}). "
                f"Rotor state: {event.rotor_table}\n\n"
            )
        elif isinstance(event, SessionComplete):
            w("\n---\nData stream finished.\n")
            w("HIDDEN MESSAGE ASSEMBLED:\n")
            w(f"{event.final_message}\n---\n")
        self._out.flush()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="prt7-decoder",
        description="Decode a PRT-7 frame stream (L/M frames) into its hidden message.",
        epilog="Example simulation file (one frame per line): " + "  ".join(SAMPLE_SCRIPT),
    )
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--sim", metavar="FILE", help="Read frames from a simulation file")
    mode.add_argument(
        "--serial", metavar="DEVICE",
        help="Read frames from a serial port (falls back to a file if the path is not a port)",
    )
    ap.add_argument("--baud", type=int, default=DEFAULT_BAUDRATE, help="Serial baud rate")
    ap.add_argument(
        "--timeout", type=float, default=None,
        help="Seconds without data before the serial stream counts as finished",
    )
    ap.add_argument(
        "--strict", action="store_true",
        help="Reject M frames whose argument is not a whole integer",
    )
    ap.add_argument("--quiet", action="store_true", help="Only print the final message")
    ap.add_argument(
        "--log-level", type=str.upper, default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    return ap


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    logging.basicConfig(level=args.log_level)

    if not args.sim and not args.serial:
        ap.print_usage()
        print("Example simulation file lines: " + "  ".join(SAMPLE_SCRIPT))
        print("Exiting (no file or serial device given).")
        return 1

    try:
        if args.sim:
            source = FileLineSource(args.sim).open()
        else:
            settings = SerialSettings(baudrate=args.baud, timeout=args.timeout)
            source = open_line_source(args.serial, settings)
    except LineSourceError as e:
        print(f"Could not open source: {e}", file=sys.stderr)
        return 1

    engine = DecodingEngine(strict=args.strict)
    engine.subscribe(LoggingSink())
    if not args.quiet:
        print("Connection established. Waiting for frames...\n")
        engine.subscribe(ConsoleRenderer())

    with source:
        try:
            message = engine.run(source)
        except KeyboardInterrupt:
            message = engine.finish()

    if args.quiet:
        print(message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
