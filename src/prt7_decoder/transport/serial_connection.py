"""Line sources: serial port, simulation file, and in-memory text.

Every source yields raw protocol lines with their ``\\r\\n`` terminators
stripped. ``next_line()`` returns ``None`` once the source is exhausted, and
sources can be iterated directly::

    with open_line_source("/dev/ttyUSB0") as source:
        for line in source:
            ...

The serial port uses the PRT-7 line settings: 9600 baud, 8 data bits,
no parity, one stop bit (8N1).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Protocol, TextIO

import serial

from ..errors import LineSourceError

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 9600
DEFAULT_ENCODING = "utf-8"
LINE_TERMINATORS = "\r\n"


class LineSource(Protocol):
    """Anything the decoding engine can pull raw lines from."""

    def next_line(self) -> str | None: ...


def strip_terminators(line: str) -> str:
    return line.rstrip(LINE_TERMINATORS)


class _IterableSource:
    """Iteration and context manager support on top of ``next_line``."""

    def next_line(self) -> str | None:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


@dataclass
class SerialSettings:
    """Serial port line settings."""

    port: str = ""
    baudrate: int = DEFAULT_BAUDRATE
    bytesize: int = serial.EIGHTBITS
    parity: str = serial.PARITY_NONE
    stopbits: float = serial.STOPBITS_ONE
    timeout: float | None = None  # None blocks until a line arrives
    encoding: str = DEFAULT_ENCODING


class SerialConnection(_IterableSource):
    """Reads protocol lines from a serial port.

    Usage::

        conn = SerialConnection(SerialSettings(port="/dev/ttyUSB0"))
        conn.open()
        line = conn.next_line()
        conn.close()

    A read that returns no data (the configured timeout expired) counts as
    the end of the transmission.
    """

    def __init__(self, settings: SerialSettings) -> None:
        self._settings = settings
        self._serial: serial.Serial | None = None

    @property
    def settings(self) -> SerialSettings:
        return self._settings

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def open(self) -> SerialConnection:
        """Open the port with the configured line settings.

        Raises:
            LineSourceError: If the port cannot be opened.
        """
        s = self._settings
        try:
            self._serial = serial.Serial(
                port=s.port,
                baudrate=s.baudrate,
                bytesize=s.bytesize,
                parity=s.parity,
                stopbits=s.stopbits,
                timeout=s.timeout,
            )
        except (serial.SerialException, ValueError) as e:
            raise LineSourceError(
                f"Could not open serial port {s.port!r}: {e}"
            ) from e

        logger.info("Serial connection open on %s (%d baud)", s.port, s.baudrate)
        return self

    def close(self) -> None:
        """Close the port."""
        if self._serial is None:
            return
        try:
            self._serial.close()
        except serial.SerialException as e:
            logger.warning("Error closing serial port: %s", e)
        finally:
            self._serial = None
            logger.info("Serial connection closed")

    def next_line(self) -> str | None:
        if not self.connected:
            return None
        try:
            raw = self._serial.readline()
        except serial.SerialException as e:
            logger.warning("Serial read failed: %s", e)
            return None
        if not raw:
            return None
        return strip_terminators(raw.decode(self._settings.encoding, errors="replace"))


class FileLineSource(_IterableSource):
    """Reads protocol lines from a simulation file."""

    def __init__(self, path: str | Path, encoding: str = DEFAULT_ENCODING) -> None:
        self._path = Path(path)
        self._encoding = encoding
        self._file: TextIO | None = None

    @property
    def path(self) -> Path:
        return self._path

    def open(self) -> FileLineSource:
        """Open the file for reading.

        Raises:
            LineSourceError: If the file cannot be opened.
        """
        try:
            self._file = self._path.open(
                "r", encoding=self._encoding, errors="replace", newline=""
            )
        except OSError as e:
            raise LineSourceError(f"Could not open {str(self._path)!r}: {e}") from e
        logger.info("Simulation file open: %s", self._path)
        return self

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def next_line(self) -> str | None:
        if self._file is None:
            return None
        line = self._file.readline()
        if not line:
            return None
        return strip_terminators(line)


class TextLineSource(_IterableSource):
    """Serves lines from a string or a list of strings."""

    def __init__(self, text: str | Iterable[str]) -> None:
        if isinstance(text, str):
            lines = text.splitlines()
        else:
            lines = [strip_terminators(line) for line in text]
        self._lines = iter(lines)

    def next_line(self) -> str | None:
        return next(self._lines, None)


def open_line_source(
    path: str | Path,
    settings: SerialSettings | None = None,
) -> SerialConnection | FileLineSource:
    """Open ``path`` as a serial port, falling back to a simulation file.

    Raises:
        LineSourceError: If the path opens as neither.
    """
    settings = replace(settings or SerialSettings(), port=str(path))
    try:
        return SerialConnection(settings).open()
    except LineSourceError as e:
        logger.debug("Not a serial port (%s), trying as a file", e)

    return FileLineSource(path, encoding=settings.encoding).open()
