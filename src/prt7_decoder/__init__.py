"""PRT-7 frame decoder: rotor cipher, frame parser, and decoding engine."""

from .engine import DecodingEngine, decode_lines
from .errors import DecoderError, ParseError, UnknownFrameType, MissingArgument
from .models import Rotor, PayloadAccumulator
from .protocol import Frame, LoadFrame, MapFrame, parse_line

__version__ = "0.1.0"
