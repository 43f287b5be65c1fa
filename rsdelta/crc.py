"""The weak rolling checksum used to find candidate block matches."""

from __future__ import annotations

import operator
from dataclasses import dataclass
from itertools import accumulate

CRC_MAGIC = 31

_U16 = 0xFFFF
_U32 = 0xFFFFFFFF


def _len_term(length: int) -> int:
    """The length-dependent part of s2, with 32-bit wrap-around before halving."""
    return (((length * (length + 1)) & _U32) // 2) & _U16


@dataclass(frozen=True, order=True)
class Crc:
    """A rolling checksum made of two 16-bit sums packed into 32 bits."""

    value: int = 0

    SIZE = 4

    def __post_init__(self) -> None:
        if not 0 <= self.value <= _U32:
            raise ValueError(f"checksum out of range: {self.value}")

    def to_bytes(self) -> bytes:
        """Big-endian serialized form."""
        return self.value.to_bytes(self.SIZE, "big")

    @classmethod
    def from_bytes(cls, data: bytes) -> Crc:
        """Read a checksum from its big-endian serialized form."""
        if len(data) != cls.SIZE:
            raise ValueError(f"expected {cls.SIZE} bytes, got {len(data)}")
        return cls(int.from_bytes(data, "big"))

    def _split(self) -> tuple[int, int]:
        return self.value & _U16, (self.value >> 16) & _U16

    @classmethod
    def _combine(cls, s1: int, s2: int) -> Crc:
        return cls((s1 & _U16) | ((s2 & _U16) << 16))

    def rollout(self, size: int, old_byte: int) -> Crc:
        """Remove the first byte of a window of ``size`` bytes."""
        size &= _U16
        s1, s2 = self._split()
        s1 -= old_byte + CRC_MAGIC
        s2 -= size * (old_byte + CRC_MAGIC)
        return self._combine(s1, s2)

    def rotate(self, size: int, old_byte: int, new_byte: int) -> Crc:
        """Slide a window of ``size`` bytes forward by one byte."""
        size &= _U16
        s1, s2 = self._split()
        s1 = (s1 + new_byte - old_byte) & _U16
        s2 = s2 + s1 - size * (old_byte + CRC_MAGIC)
        return self._combine(s1, s2)

    def rollin(self, new_byte: int) -> Crc:
        """Append one byte to the window."""
        s1, s2 = self._split()
        s1 += new_byte
        s2 += s1
        s1 += CRC_MAGIC
        s2 += CRC_MAGIC
        return self._combine(s1, s2)

    def update(self, buf: bytes) -> Crc:
        """Append a whole buffer to the window."""
        s1, s2 = self._split()
        length = len(buf)
        s2 += s1 * length
        s1 += sum(buf)
        s2 += sum(map(operator.mul, buf, range(length, 0, -1)))
        s1 += length * CRC_MAGIC
        s2 += _len_term(length) * CRC_MAGIC
        return self._combine(s1, s2)

    def basic_update(self, buf: bytes) -> Crc:
        """Append a whole buffer by running the two sums byte by byte."""
        s1, s2 = self._split()
        running = list(accumulate(buf, initial=s1))
        s2 += sum(running) - s1
        s1 = running[-1]
        length = len(buf)
        s1 += length * CRC_MAGIC
        s2 += _len_term(length) * CRC_MAGIC
        return self._combine(s1, s2)