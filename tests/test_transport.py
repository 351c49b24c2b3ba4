"""Tests for line sources (serial port, file, text)."""

from __future__ import annotations

import tempfile
from unittest.mock import MagicMock, patch

import pytest
import serial

from prt7_decoder.engine import DecodingEngine
from prt7_decoder.errors import LineSourceError
from prt7_decoder.transport.serial_connection import (
    FileLineSource,
    SerialConnection,
    SerialSettings,
    TextLineSource,
    open_line_source,
)


def _write_sim_file(content: str) -> str:
    """Write a simulation file and return its path."""
    f = tempfile.NamedTemporaryFile(
        "w", suffix=".txt", delete=False, encoding="ascii", newline=""
    )
    f.write(content)
    f.close()
    return f.name


def _mock_serial(lines: list[bytes]) -> MagicMock:
    port = MagicMock()
    port.is_open = True
    port.readline.side_effect = lines + [b""]
    return port


def test_text_source_from_string():
    """Strings are split into lines without terminators."""
    source = TextLineSource("L,H\r\nL,I\n")
    assert list(source) == ["L,H", "L,I"]
    assert source.next_line() is None


def test_text_source_from_list():
    """Lists keep their lines, minus trailing terminators."""
    assert list(TextLineSource(["L,A\n", "M,1"])) == ["L,A", "M,1"]


def test_file_source_strips_terminators():
    """CRLF and LF terminators are removed; blank lines are kept."""
    path = _write_sim_file("L,H\r\nL,O\n\nM,2\r\n")
    with FileLineSource(path).open() as source:
        assert list(source) == ["L,H", "L,O", "", "M,2"]


def test_file_source_missing_file():
    """Opening a missing file raises LineSourceError."""
    with pytest.raises(LineSourceError):
        FileLineSource("/nonexistent/prt7/input.txt").open()


def test_file_source_feeds_engine():
    """A simulation file decodes end to end."""
    path = _write_sim_file("L,H\nL,O\nL,L\nM,2\nL,A\nL,Space\nL,W\n")
    with FileLineSource(path).open() as source:
        assert DecodingEngine().run(source) == "HOLC Y"


def test_file_source_keeps_non_ascii_symbols():
    """UTF-8 symbols reach the rotor intact and pass through unchanged."""
    f = tempfile.NamedTemporaryFile("wb", suffix=".txt", delete=False)
    f.write("L,é\nL,A\n".encode("utf-8"))
    f.close()
    with FileLineSource(f.name).open() as source:
        assert DecodingEngine().run(source) == "éA"


def test_serial_connection_decodes_utf8():
    """Serial bytes are decoded as UTF-8 by default."""
    port = _mock_serial(["L,ñ\r\n".encode("utf-8")])
    with patch("serial.Serial", return_value=port):
        conn = SerialConnection(SerialSettings(port="COM3")).open()
        assert conn.next_line() == "L,ñ"


def test_unopened_file_source_is_exhausted():
    """next_line() on an unopened source reports exhaustion."""
    assert FileLineSource("whatever.txt").next_line() is None


def test_serial_settings_defaults():
    """Defaults are 9600 baud 8N1."""
    s = SerialSettings()
    assert s.baudrate == 9600
    assert s.bytesize == serial.EIGHTBITS
    assert s.parity == serial.PARITY_NONE
    assert s.stopbits == serial.STOPBITS_ONE


def test_serial_connection_reads_lines():
    """Serial lines are decoded and stripped; an empty read ends the stream."""
    port = _mock_serial([b"L,H\r\n", b"M,2\n", b"L,A\r\n"])
    with patch("serial.Serial", return_value=port) as serial_cls:
        conn = SerialConnection(SerialSettings(port="/dev/ttyUSB0")).open()
        assert conn.connected
        assert list(conn) == ["L,H", "M,2", "L,A"]
        conn.close()

    kwargs = serial_cls.call_args.kwargs
    assert kwargs["port"] == "/dev/ttyUSB0"
    assert kwargs["baudrate"] == 9600
    port.close.assert_called_once()
    assert not conn.connected


def test_serial_connection_replaces_bad_bytes():
    """Undecodable bytes do not abort the stream."""
    port = _mock_serial([b"L,\xff\n"])
    with patch("serial.Serial", return_value=port):
        conn = SerialConnection(SerialSettings(port="COM3")).open()
        assert conn.next_line() == "L,\ufffd"


def test_serial_read_error_ends_stream():
    """A read failure is treated as exhaustion."""
    port = MagicMock()
    port.is_open = True
    port.readline.side_effect = serial.SerialException("unplugged")
    with patch("serial.Serial", return_value=port):
        conn = SerialConnection(SerialSettings(port="COM3")).open()
        assert conn.next_line() is None


def test_serial_open_failure():
    """A port that cannot be opened raises LineSourceError."""
    with patch("serial.Serial", side_effect=serial.SerialException("busy")):
        with pytest.raises(LineSourceError):
            SerialConnection(SerialSettings(port="/dev/ttyUSB9")).open()


def test_open_line_source_prefers_serial():
    """A path that opens as a port is used as a port."""
    port = _mock_serial([b"L,A\n"])
    with patch("serial.Serial", return_value=port):
        source = open_line_source("/dev/ttyUSB0", SerialSettings(baudrate=19200))
    assert isinstance(source, SerialConnection)
    assert source.settings.port == "/dev/ttyUSB0"
    assert source.settings.baudrate == 19200


def test_open_line_source_falls_back_to_file():
    """A path that is not a port is read as a simulation file."""
    path = _write_sim_file("L,A\n")
    with patch("serial.Serial", side_effect=serial.SerialException("not a tty")):
        source = open_line_source(path)
    assert isinstance(source, FileLineSource)
    with source:
        assert list(source) == ["L,A"]


def test_open_line_source_neither():
    """A path that is neither a port nor a file raises LineSourceError."""
    with patch("serial.Serial", side_effect=serial.SerialException("missing")):
        with pytest.raises(LineSourceError):
            open_line_source("/nonexistent/prt7/port")
