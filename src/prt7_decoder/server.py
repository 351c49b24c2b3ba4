"""MCP server entry point for the PRT-7 decoder.

Exposes decoding tools, protocol resources, and prompts via the Model
Context Protocol using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from .engine import DecodingEngine, Event, FrameInvalid
from .errors import LineSourceError, ParseError
from .models.rotor import Rotor
from .protocol.commands import SAMPLE_SCRIPT, encode_message as encode_script
from .protocol.framing import LoadFrame
from .protocol.parser import parse_line
from .transport.serial_connection import (
    FileLineSource,
    SerialConnection,
    SerialSettings,
    TextLineSource,
)

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "prt7-decoder",
    instructions="Decode PRT-7 frame streams (L/M frames) into their hidden message",
)

# Interactive session state
_session: DecodingEngine | None = None
_session_events: list[Event] = []


def _get_session() -> DecodingEngine:
    """Get the interactive session, raising if none is active."""
    if _session is None:
        raise RuntimeError(
            "No active session. Use the 'start_session' tool first."
        )
    return _session


def _decode(lines, strict: bool, include_events: bool) -> dict[str, Any]:
    events: list[Event] = []
    engine = DecodingEngine(subscribers=[events.append], strict=strict)
    message = engine.run(lines)
    result: dict[str, Any] = {
        "message": message,
        "stats": engine.stats.to_dict(),
        "invalid": [e.to_dict() for e in events if isinstance(e, FrameInvalid)],
    }
    if include_events:
        result["events"] = [e.to_dict() for e in events]
    return result


# ─── DECODING TOOLS ──────────────────────────────────────────────────

@mcp.tool()
def decode_text(
    text: str,
    strict: bool = False,
    include_events: bool = False,
) -> dict[str, Any]:
    """Decode a PRT-7 transmission given as text, one frame per line.

    Args:
        text: Frame lines such as "L,H\\nM,2\\nL,A".
        strict: Reject M frames whose argument is not a whole integer.
        include_events: Also return the full diagnostic event trace.
    """
    return _decode(TextLineSource(text), strict, include_events)


@mcp.tool()
def decode_file(
    path: str,
    strict: bool = False,
    include_events: bool = False,
) -> dict[str, Any]:
    """Decode a simulation file containing one frame per line.

    Args:
        path: Path to the simulation file.
        strict: Reject M frames whose argument is not a whole integer.
        include_events: Also return the full diagnostic event trace.
    """
    if not Path(path).exists():
        return {"error": f"File not found: {path}"}

    try:
        source = FileLineSource(path).open()
    except LineSourceError as e:
        return {"error": str(e)}

    with source:
        result = _decode(source, strict, include_events)
    result["path"] = path
    return result


@mcp.tool()
def decode_serial(
    port: str,
    baudrate: int = 9600,
    timeout: float = 5.0,
    strict: bool = False,
) -> dict[str, Any]:
    """Read frames from a serial port until it goes quiet, then decode them.

    Args:
        port: Serial device, e.g. /dev/ttyUSB0.
        baudrate: Line speed (default 9600).
        timeout: Seconds without data that end the transmission.
        strict: Reject M frames whose argument is not a whole integer.
    """
    settings = SerialSettings(port=port, baudrate=baudrate, timeout=timeout)
    try:
        conn = SerialConnection(settings).open()
    except LineSourceError as e:
        return {"error": str(e)}

    with conn:
        result = _decode(conn, strict, include_events=False)
    result["port"] = port
    return result


@mcp.tool()
def parse_frame_line(line: str, strict: bool = False) -> dict[str, Any]:
    """Parse a single protocol line and describe the resulting frame.

    Args:
        line: One raw line, e.g. "L,Space" or "M,-3".
        strict: Reject M frames whose argument is not a whole integer.
    """
    try:
        frame = parse_line(line, strict=strict)
    except ParseError as e:
        return {"valid": False, "error": type(e).__name__, "reason": e.reason}

    if frame is None:
        return {"valid": True, "blank": True}
    if isinstance(frame, LoadFrame):
        return {"valid": True, "type": frame.kind.value, "symbol": frame.symbol}
    return {"valid": True, "type": frame.kind.value, "delta": frame.delta}


@mcp.tool()
def encode_message(
    message: str,
    rotations: dict[str, int] | None = None,
) -> dict[str, Any]:
    """Build a frame script that decodes to the given message.

    Args:
        message: Plain text (letters, digits, spaces).
        rotations: Optional Map frames as {"position": delta}, inserted
                   before the character at that position.
    """
    try:
        schedule = {int(pos): int(delta) for pos, delta in (rotations or {}).items()}
        lines = encode_script(message, schedule)
    except ValueError as e:
        return {"error": str(e)}
    return {"lines": lines, "text": "\n".join(lines)}


@mcp.tool()
def rotor_table(offset: int = 0) -> dict[str, Any]:
    """Show the rotor alignment for a given offset.

    Args:
        offset: Rotation applied from the initial A..Z alignment.
    """
    rotor = Rotor()
    shift = rotor.rotate(offset)
    return {"offset": rotor.offset, "effective_shift": shift, "table": rotor.table()}


# ─── INTERACTIVE SESSION TOOLS ───────────────────────────────────────

@mcp.tool()
def start_session(strict: bool = False) -> dict[str, Any]:
    """Start a fresh interactive decoding session (rotor at offset 0).

    Any previous session is discarded.
    """
    global _session
    _session_events.clear()
    _session = DecodingEngine(subscribers=[_session_events.append], strict=strict)
    return {"started": True, "state": _session.state.value}


@mcp.tool()
def feed_line(line: str) -> dict[str, Any]:
    """Feed one protocol line into the interactive session.

    Args:
        line: One raw line, e.g. "L,H".
    """
    engine = _get_session()
    start = len(_session_events)
    engine.process_line(line)
    return {
        "events": [e.to_dict() for e in _session_events[start:]],
        "message": engine.message,
        "offset": engine.rotor.offset,
    }


@mcp.tool()
def end_session() -> dict[str, Any]:
    """Finish the interactive session and return the assembled message."""
    global _session
    engine = _get_session()
    message = engine.finish()
    stats = engine.stats.to_dict()
    _session = None
    return {"message": message, "stats": stats}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("prt7://session/status")
def resource_session_status() -> str:
    """Interactive session state, rotor offset, and message so far."""
    if _session is None:
        return json.dumps({"active": False})
    return json.dumps({
        "active": True,
        "state": _session.state.value,
        "offset": _session.rotor.offset,
        "rotor_table": _session.rotor.table(),
        "message": _session.message,
        "stats": _session.stats.to_dict(),
    })


@mcp.resource("prt7://protocol/grammar")
def resource_protocol_grammar() -> str:
    """Accepted line grammar."""
    return json.dumps({
        "frames": [
            {"type": "L", "argument": "single character or the word Space",
             "effect": "decode the character through the rotor and append it"},
            {"type": "M", "argument": "optionally signed integer",
             "effect": "rotate the rotor by the delta, modulo 26"},
        ],
        "separator": ",",
        "blank_lines": "skipped",
    })


@mcp.resource("prt7://protocol/sample")
def resource_protocol_sample() -> str:
    """Sample transmission and its decoded message."""
    return json.dumps({
        "lines": SAMPLE_SCRIPT,
        "message": DecodingEngine().run(SAMPLE_SCRIPT),
    })


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def explain_decoding(text: str) -> str:
    """Guide the AI through a step-by-step explanation of a transmission.

    Args:
        text: Frame lines to explain.
    """
    return f"""Decode the following PRT-7 transmission with the decode_text tool
(include_events=true) and explain it frame by frame:

{text}

For each frame:
- L frames: show the raw character, the rotor offset at that moment, and
  the decoded character
- M frames: show the requested delta and the effective shift (mod 26)
- Invalid lines: say why they were skipped

Finish with the assembled hidden message."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
