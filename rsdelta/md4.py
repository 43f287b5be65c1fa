"""MD4 digests of blocks of data, as used by classic rsync signatures."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Iterator

MD4_SIZE = 16

_MASK = 0xFFFFFFFF
_BLOCK_LEN = 64

_INITIAL_STATE = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476)

_WORDS = struct.Struct("<16I")
_DIGEST = struct.Struct("<4I")
_BIT_LENGTH = struct.Struct("<Q")


def _schedule(order: Iterable[int], shifts: tuple[int, int, int, int]) -> tuple[tuple[int, int], ...]:
    return tuple((index, shifts[step % 4]) for step, index in enumerate(order))


_ROUND1 = _schedule(range(16), (3, 7, 11, 19))
_ROUND2 = _schedule((0, 4, 8, 12, 1, 5, 9, 13, 2, 6, 10, 14, 3, 7, 11, 15), (3, 5, 9, 13))
_ROUND3 = _schedule((0, 8, 4, 12, 2, 10, 6, 14, 1, 9, 5, 13, 3, 11, 7, 15), (3, 9, 11, 15))


def _rotl(x: int, n: int) -> int:
    return ((x << n) | (x >> (32 - n))) & _MASK


def _f(x: int, y: int, z: int) -> int:
    return (x & y) | (~x & z)


def _g(x: int, y: int, z: int) -> int:
    return (x & y) | (x & z) | (y & z)


def _h(x: int, y: int, z: int) -> int:
    return x ^ y ^ z


_ROUNDS = (
    (_f, 0, _ROUND1),
    (_g, 0x5A827999, _ROUND2),
    (_h, 0x6ED9EBA1, _ROUND3),
)


def _process_block(state: tuple[int, int, int, int], block: bytes) -> tuple[int, int, int, int]:
    words = _WORDS.unpack(block)
    a, b, c, d = state
    for func, constant, schedule in _ROUNDS:
        for index, shift in schedule:
            a = _rotl((a + func(b, c, d) + words[index] + constant) & _MASK, shift)
            # The next step updates the register that precedes this one.
            a, b, c, d = d, a, b, c
    return (
        (state[0] + a) & _MASK,
        (state[1] + b) & _MASK,
        (state[2] + c) & _MASK,
        (state[3] + d) & _MASK,
    )


def _padded(data: bytes) -> bytes:
    bit_length = (len(data) * 8) & 0xFFFFFFFFFFFFFFFF
    zeros = (55 - len(data)) % _BLOCK_LEN
    return data + b"\x80" + b"\0" * zeros + _BIT_LENGTH.pack(bit_length)


def md4(data: bytes) -> bytes:
    """Return the 16-byte MD4 digest of ``data``."""
    message = _padded(bytes(data))
    state = _INITIAL_STATE
    for start in range(0, len(message), _BLOCK_LEN):
        state = _process_block(state, message[start : start + _BLOCK_LEN])
    return _DIGEST.pack(*state)


def md4_many(datas: Iterable[bytes]) -> Iterator[tuple[bytes, bytes]]:
    """Yield each block together with its MD4 digest, in order."""
    for data in datas:
        yield data, md4(data)