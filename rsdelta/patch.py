"""Applying rsync deltas to base data."""

from __future__ import annotations

from .consts import (
    DELTA_MAGIC,
    RS_OP_COPY_N1_N1,
    RS_OP_COPY_N8_N8,
    RS_OP_END,
    RS_OP_LITERAL_1,
    RS_OP_LITERAL_64,
    RS_OP_LITERAL_N1,
    RS_OP_LITERAL_N8,
)

_UNLIMITED = 0xFFFFFFFFFFFFFFFF


class ApplyError(ValueError):
    """A delta could not be applied because it is invalid."""


class WrongMagicError(ApplyError):
    """The delta does not start with the delta magic number."""

    def __init__(self, magic: int) -> None:
        self.magic = magic
        super().__init__(f"incorrect magic: 0x{magic:08x}")


class UnexpectedEofError(ApplyError):
    """The delta ended in the middle of an item."""

    def __init__(self, reading: str, expected: int, available: int) -> None:
        self.reading = reading
        self.expected = expected
        self.available = available
        super().__init__(
            f"unexpected end of input when reading {reading} "
            f"(expected={expected}, available={available})"
        )


class OutputLimitError(ApplyError):
    """The output would grow beyond the allowed limit."""

    def __init__(self, what: str, wanted: int, available: int) -> None:
        self.what = what
        self.wanted = wanted
        self.available = available
        super().__init__(
            f"exceeded output size limit when writing {what} "
            f"(wanted={wanted}, available={available})"
        )


class CopyOutOfBoundsError(ApplyError):
    """A copy command refers to bytes past the end of the base data."""

    def __init__(self, offset: int, length: int, data_len: int) -> None:
        self.offset = offset
        self.length = length
        self.data_len = data_len
        super().__init__(
            f"requested copy is out of bounds "
            f"(offset={offset}, len={length}, data_len={data_len})"
        )


class CopyZeroError(ApplyError):
    """A copy command has length zero."""

    def __init__(self) -> None:
        super().__init__("copy length is empty")


class UnknownCommandError(ApplyError):
    """The delta holds an unrecognised command byte."""

    def __init__(self, command: int) -> None:
        self.command = command
        super().__init__(f"unexpected command byte: 0x{command:02x}")


class TrailingDataError(ApplyError):
    """The delta holds data after its end command."""

    def __init__(self, length: int) -> None:
        self.length = length
        super().__init__(f"unexpected data after end command (len={length})")


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = memoryview(bytes(data))
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def read(self, n: int, what: str) -> memoryview:
        if self.remaining < n:
            raise UnexpectedEofError(what, n, self.remaining)
        chunk = self._data[self._pos : self._pos + n]
        self._pos += n
        return chunk

    def read_int(self, n: int, what: str) -> int:
        return int.from_bytes(self.read(n, what), "big")


def apply_limited(base: bytes, delta: bytes, limit: int) -> bytes:
    """Apply ``delta`` to ``base``, refusing to produce more than ``limit`` bytes."""
    base = memoryview(bytes(base))
    reader = _Reader(delta)
    out = bytearray()
    remaining = limit

    def extend(chunk: memoryview, what: str) -> None:
        nonlocal remaining
        if len(chunk) > remaining:
            raise OutputLimitError(what, len(chunk), remaining)
        remaining -= len(chunk)
        out.extend(chunk)

    magic = reader.read_int(4, "magic")
    if magic != DELTA_MAGIC:
        raise WrongMagicError(magic)

    while True:
        cmd = reader.read_int(1, "cmd")
        if cmd == RS_OP_END:
            break
        if RS_OP_LITERAL_1 <= cmd <= RS_OP_LITERAL_N8:
            if cmd <= RS_OP_LITERAL_64:
                n = cmd - RS_OP_LITERAL_1 + 1
            else:
                n = reader.read_int(1 << (cmd - RS_OP_LITERAL_N1), "literal length")
            extend(reader.read(n, "literal"), "literal")
        elif RS_OP_COPY_N1_N1 <= cmd <= RS_OP_COPY_N8_N8:
            mode = cmd - RS_OP_COPY_N1_N1
            offset = reader.read_int(1 << (mode // 4), "copy offset")
            length = reader.read_int(1 << (mode % 4), "copy length")
            if length == 0:
                raise CopyZeroError()
            if offset + length > len(base):
                raise CopyOutOfBoundsError(offset, length, len(base))
            extend(base[offset : offset + length], "copy")
        else:
            raise UnknownCommandError(cmd)

    if reader.remaining:
        raise TrailingDataError(reader.remaining)
    return bytes(out)


def apply(base: bytes, delta: bytes) -> bytes:
    """Apply ``delta`` to ``base`` with no bound on the output size.

    Untrusted deltas can produce arbitrarily large output; prefer
    :func:`apply_limited` for those.
    """
    return apply_limited(base, delta, _UNLIMITED)