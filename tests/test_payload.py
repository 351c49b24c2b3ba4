"""Tests for the payload accumulator."""

from prt7_decoder.models.payload import PayloadAccumulator, bracketed


def test_empty():
    """A new accumulator is empty."""
    acc = PayloadAccumulator()
    assert len(acc) == 0
    assert acc.snapshot() == ""


def test_append_preserves_order():
    """Characters come back in arrival order."""
    acc = PayloadAccumulator()
    for c in "HOLA MUNDO":
        acc.append(c)
    assert acc.snapshot() == "HOLA MUNDO"
    assert list(acc) == list("HOLA MUNDO")


def test_snapshot_does_not_mutate():
    """Taking a snapshot leaves the contents intact."""
    acc = PayloadAccumulator()
    acc.append("A")
    first = acc.snapshot()
    acc.append("B")
    assert first == "A"
    assert acc.snapshot() == "AB"


def test_bracketed():
    """Progress rendering wraps each character in brackets."""
    acc = PayloadAccumulator()
    for c in "HO L":
        acc.append(c)
    assert bracketed(acc) == "[H][O][ ][L]"
    assert bracketed("") == ""
