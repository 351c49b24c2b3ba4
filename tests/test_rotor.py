"""Tests for the cipher rotor."""

import string

import pytest

from prt7_decoder.models.rotor import ALPHABET, Rotor, effective_shift


def test_initial_offset_is_identity():
    """A fresh rotor maps every letter to itself."""
    rotor = Rotor()
    assert rotor.offset == 0
    assert "".join(rotor.map(c) for c in ALPHABET) == ALPHABET


def test_rotate_positive():
    """Rotating by 2 maps A to C and Y to A."""
    rotor = Rotor()
    assert rotor.rotate(2) == 2
    assert rotor.map("A") == "C"
    assert rotor.map("Y") == "A"
    assert rotor.map("Z") == "B"


def test_rotate_negative_wraps():
    """rotate(-2) from offset 0 lands on offset 24, not -2."""
    rotor = Rotor()
    assert rotor.rotate(-2) == 24
    assert rotor.offset == 24
    assert rotor.map("A") == "Y"


def test_negative_rotation_equals_complement():
    """M,-2 maps exactly like M,24."""
    a, b = Rotor(), Rotor()
    a.rotate(-2)
    b.rotate(24)
    assert a.table() == b.table()


@pytest.mark.parametrize("n", [0, 1, 13, 25, 26, 27, -1, -26, -27, 1000, -1000])
def test_rotation_is_invertible(n):
    """rotate(n) followed by rotate(-n) restores the mapping."""
    rotor = Rotor()
    rotor.rotate(5)
    before = rotor.table()
    rotor.rotate(n)
    rotor.rotate(-n)
    assert rotor.table() == before


@pytest.mark.parametrize("n", [0, 3, 26, 52, -3, -26, -29, 12345, -12345])
def test_effective_shift_formula(n):
    """Effective shift equals ((n mod 26) + 26) mod 26."""
    expected = ((n % 26) + 26) % 26
    assert effective_shift(n) == expected
    assert Rotor().rotate(n) == expected


@pytest.mark.parametrize("offset", range(0, 26, 5))
def test_map_is_bijection(offset):
    """Every offset permutes A-Z."""
    rotor = Rotor(offset)
    mapped = [rotor.map(c) for c in ALPHABET]
    assert sorted(mapped) == list(ALPHABET)


def test_lowercase_is_normalized():
    """Lowercase letters decode to uppercase."""
    rotor = Rotor()
    rotor.rotate(1)
    assert rotor.map("a") == "B"
    assert rotor.map("z") == "A"


def test_space_and_symbols_pass_through():
    """Space and non-letters are returned unchanged at any offset."""
    rotor = Rotor()
    rotor.rotate(7)
    assert rotor.map(" ") == " "
    for c in string.digits + "!?.-_,":
        assert rotor.map(c) == c
    assert rotor.map("é") == "é"


def test_unmap_inverts_map():
    """unmap(map(c)) == c for every letter."""
    rotor = Rotor()
    rotor.rotate(11)
    for c in ALPHABET:
        assert rotor.unmap(rotor.map(c)) == c
    assert rotor.unmap(" ") == " "


def test_table_reads_from_zero_position():
    """The table starts at the symbol aligned with A."""
    rotor = Rotor()
    rotor.rotate(2)
    assert rotor.table() == "CDEFGHIJKLMNOPQRSTUVWXYZAB"


def test_reset():
    """reset() returns the rotor to offset 0."""
    rotor = Rotor()
    rotor.rotate(9)
    rotor.reset()
    assert rotor.offset == 0
    assert rotor.map("Q") == "Q"
