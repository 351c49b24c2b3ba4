"""Protocol layer: frame model, line parser, and line builders."""

from .framing import Frame, FrameKind, LoadFrame, MapFrame
from .parser import parse_line
from .commands import build_line, encode_message
