"""BLAKE3 hashing of blocks of data."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Iterator

BLAKE3_SIZE = 32

_MASK = 0xFFFFFFFF
_BLOCK_LEN = 64
_CHUNK_LEN = 1024

_CHUNK_START = 1 << 0
_CHUNK_END = 1 << 1
_PARENT = 1 << 2
_ROOT = 1 << 3

_IV = (
    0x6A09E667,
    0xBB67AE85,
    0x3C6EF372,
    0xA54FF53A,
    0x510E527F,
    0x9B05688C,
    0x1F83D9AB,
    0x5BE0CD19,
)

_MSG_PERMUTATION = (2, 6, 3, 10, 7, 0, 4, 13, 1, 11, 12, 5, 9, 14, 15, 8)

_COLUMNS_AND_DIAGONALS = (
    (0, 4, 8, 12),
    (1, 5, 9, 13),
    (2, 6, 10, 14),
    (3, 7, 11, 15),
    (0, 5, 10, 15),
    (1, 6, 11, 12),
    (2, 7, 8, 13),
    (3, 4, 9, 14),
)

_WORDS = struct.Struct("<16I")
_CV = struct.Struct("<8I")


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & _MASK


def _round(state: list[int], m: list[int]) -> None:
    for i, (a, b, c, d) in enumerate(_COLUMNS_AND_DIAGONALS):
        mx, my = m[2 * i], m[2 * i + 1]
        state[a] = (state[a] + state[b] + mx) & _MASK
        state[d] = _rotr(state[d] ^ state[a], 16)
        state[c] = (state[c] + state[d]) & _MASK
        state[b] = _rotr(state[b] ^ state[c], 12)
        state[a] = (state[a] + state[b] + my) & _MASK
        state[d] = _rotr(state[d] ^ state[a], 8)
        state[c] = (state[c] + state[d]) & _MASK
        state[b] = _rotr(state[b] ^ state[c], 7)


def _compress(
    cv: tuple[int, ...],
    block_words: tuple[int, ...],
    counter: int,
    block_len: int,
    flags: int,
) -> list[int]:
    state = [
        *cv,
        *_IV[:4],
        counter & _MASK,
        (counter >> 32) & _MASK,
        block_len,
        flags,
    ]
    m = list(block_words)
    for round_no in range(7):
        _round(state, m)
        if round_no < 6:
            m = [m[i] for i in _MSG_PERMUTATION]
    for i in range(8):
        state[i] ^= state[i + 8]
        state[i + 8] ^= cv[i]
    return state


def _words(block: bytes) -> tuple[int, ...]:
    return _WORDS.unpack(block.ljust(_BLOCK_LEN, b"\0"))


class _Output:
    """The inputs of a final compression, kept until we know if it is the root."""

    __slots__ = ("cv", "block_words", "counter", "block_len", "flags")

    def __init__(self, cv, block_words, counter, block_len, flags):
        self.cv = cv
        self.block_words = block_words
        self.counter = counter
        self.block_len = block_len
        self.flags = flags

    def chaining_value(self) -> tuple[int, ...]:
        return tuple(
            _compress(self.cv, self.block_words, self.counter, self.block_len, self.flags)[:8]
        )

    def root_digest(self) -> bytes:
        words = _compress(self.cv, self.block_words, 0, self.block_len, self.flags | _ROOT)
        return _CV.pack(*words[:8])


def _chunk_output(chunk: bytes, counter: int) -> _Output:
    blocks = [chunk[i : i + _BLOCK_LEN] for i in range(0, len(chunk), _BLOCK_LEN)] or [b""]
    cv = _IV
    for position, block in enumerate(blocks[:-1]):
        start = _CHUNK_START if position == 0 else 0
        cv = tuple(_compress(cv, _words(block), counter, _BLOCK_LEN, start)[:8])
    last = blocks[-1]
    flags = _CHUNK_END | (_CHUNK_START if len(blocks) == 1 else 0)
    return _Output(cv, _words(last), counter, len(last), flags)


def _parent_output(left: tuple[int, ...], right: tuple[int, ...]) -> _Output:
    return _Output(_IV, left + right, 0, _BLOCK_LEN, _PARENT)


def blake3(data: bytes) -> bytes:
    """Return the 32-byte BLAKE3 digest of ``data``."""
    data = bytes(data)
    chunks = [data[i : i + _CHUNK_LEN] for i in range(0, len(data), _CHUNK_LEN)] or [b""]
    stack: list[tuple[int, ...]] = []
    for counter, chunk in enumerate(chunks[:-1]):
        cv = _chunk_output(chunk, counter).chaining_value()
        total = counter + 1
        while total & 1 == 0:
            cv = _parent_output(stack.pop(), cv).chaining_value()
            total >>= 1
        stack.append(cv)
    output = _chunk_output(chunks[-1], len(chunks) - 1)
    while stack:
        output = _parent_output(stack.pop(), output.chaining_value())
    return output.root_digest()


def blake3_many(datas: Iterable[bytes]) -> Iterator[tuple[bytes, bytes]]:
    """Yield each block together with its BLAKE3 digest."""
    for data in datas:
        yield data, blake3(data)