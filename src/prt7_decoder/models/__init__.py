"""Decoder state: the cipher rotor and the payload accumulator."""

from .rotor import Rotor, ALPHABET, ROTOR_SIZE, effective_shift
from .payload import PayloadAccumulator
