"""
Deterministic random numbers for the daily puzzle.

Every client derives the daily point on its own, so both functions here are
part of the interoperability contract and must not change:

* date_to_seed: 32-bit rolling hash ``h = int32(31 * h + c)`` over the UTF-16
  code units of the date string, then ``abs(h)``.
* SeededSequence: mulberry32 with increment 0x6D2B79F5 and mix constants
  15 / 7 / 61 / 14, yielding ``uint32 / 2**32``.
"""
from typing import Iterator

MASK_32 = 0xFFFFFFFF
MULBERRY_INCREMENT = 0x6D2B79F5


def _imul(a: int, b: int) -> int:
    """Low 32 bits of a 32-bit integer product."""
    return (a * b) & MASK_32


def _to_int32(value: int) -> int:
    value &= MASK_32
    return value - 0x100000000 if value & 0x80000000 else value


def _utf16_units(text: str) -> Iterator[int]:
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def date_to_seed(date_str: str) -> int:
    """Hash a date string such as '2024-06-01' into a non-negative seed."""
    h = 0
    for unit in _utf16_units(date_str):
        h = _to_int32(31 * h + unit)
    return abs(h)


class SeededSequence:
    """
    A reproducible stream of floats in [0, 1).

    The stream cannot be rewound; build a new sequence from the same seed to
    start over.
    """

    def __init__(self, seed: int):
        self.seed = seed
        self._state = seed & MASK_32

    def next(self) -> float:
        self._state = (self._state + MULBERRY_INCREMENT) & MASK_32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK_32
        return ((t ^ (t >> 14)) & MASK_32) / 4294967296

    __call__ = next

    def __iter__(self) -> "SeededSequence":
        return self

    def __next__(self) -> float:
        return self.next()
