"""Transport layer: where raw protocol lines come from."""

from .serial_connection import (
    FileLineSource,
    LineSource,
    SerialConnection,
    SerialSettings,
    TextLineSource,
    open_line_source,
)
