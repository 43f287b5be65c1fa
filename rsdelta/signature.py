"""Block signatures of base data and their lookup index for computing deltas."""

from __future__ import annotations

import enum
import struct
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .blake3hash import BLAKE3_SIZE, blake3_many
from .consts import BLAKE2_MAGIC, BLAKE3_MAGIC, MD4_MAGIC
from .crc import Crc
from .md4 import MD4_SIZE, md4_many

_HEADER = struct.Struct(">III")  # magic, block size, crypto hash size
_U32_MAX = 0xFFFFFFFF


class SignatureType(enum.Enum):
    """The strong hash recorded in a signature, identified by its magic number."""

    MD4 = MD4_MAGIC
    BLAKE2 = BLAKE2_MAGIC
    BLAKE3 = BLAKE3_MAGIC

    @property
    def magic(self) -> int:
        return self.value


class HashAlgorithm(enum.Enum):
    """The strong hash a caller can choose when calculating a signature."""

    MD4 = "md4"
    BLAKE3 = "blake3"

    def to_signature_type(self) -> SignatureType:
        """The signature type written for this algorithm."""
        return SignatureType[self.name]

    def max_hash_size(self) -> int:
        """The full digest size of this algorithm in bytes."""
        return MD4_SIZE if self is HashAlgorithm.MD4 else BLAKE3_SIZE

    def _digests(self, blocks: Iterable[bytes]) -> Iterator[tuple[bytes, bytes]]:
        if self is HashAlgorithm.MD4:
            return md4_many(blocks)
        return blake3_many(blocks)


class SignatureParseError(ValueError):
    """A serialized signature is invalid or unsupported."""

    def __init__(self, message: str = "invalid or unsupported signature") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class SignatureOptions:
    """Parameters for :meth:`Signature.calculate`."""

    block_size: int
    crypto_hash_size: int
    hash_algorithm: HashAlgorithm


@dataclass
class IndexedSignature:
    """A signature indexed as weak checksum -> strong hash -> block index."""

    signature_type: SignatureType
    block_size: int
    crypto_hash_size: int
    blocks: dict[Crc, dict[bytes, int]] = field(default_factory=dict)


@dataclass(frozen=True)
class Signature:
    """A serialized rsync signature together with its parsed header fields."""

    signature_type: SignatureType
    block_size: int
    crypto_hash_size: int
    raw: bytes = field(repr=False)

    HEADER_SIZE = _HEADER.size

    @classmethod
    def calculate(cls, buf: bytes, options: SignatureOptions) -> Signature:
        """Compute the signature of ``buf``.

        Raises ``ValueError`` when the block size is not positive or the hash
        size exceeds the digest size of the chosen algorithm.
        """
        block_size = options.block_size
        hash_size = options.crypto_hash_size
        algorithm = options.hash_algorithm
        if not 0 < block_size <= _U32_MAX:
            raise ValueError(f"block size must be positive, got {block_size}")
        if not 0 <= hash_size <= algorithm.max_hash_size():
            raise ValueError(
                f"hash size {hash_size} exceeds {algorithm.max_hash_size()} "
                f"for {algorithm.name}"
            )
        signature_type = algorithm.to_signature_type()
        data = bytes(buf)
        blocks = (data[i : i + block_size] for i in range(0, len(data), block_size))
        parts = [_HEADER.pack(signature_type.magic, block_size, hash_size)]
        for block, digest in algorithm._digests(blocks):
            parts.append(Crc().update(block).to_bytes())
            parts.append(digest[:hash_size])
        return cls(signature_type, block_size, hash_size, b"".join(parts))

    @classmethod
    def deserialize(cls, signature: bytes) -> Signature:
        """Parse a serialized signature, raising :class:`SignatureParseError`."""
        raw = bytes(signature)
        if len(raw) < cls.HEADER_SIZE:
            raise SignatureParseError()
        magic, block_size, hash_size = _HEADER.unpack_from(raw)
        try:
            signature_type = SignatureType(magic)
        except ValueError:
            raise SignatureParseError() from None
        if (len(raw) - cls.HEADER_SIZE) % (Crc.SIZE + hash_size):
            raise SignatureParseError()
        return cls(signature_type, block_size, hash_size, raw)

    def serialized(self) -> bytes:
        """The serialized form of this signature."""
        return self.raw

    def _blocks(self) -> Iterator[tuple[Crc, bytes]]:
        step = Crc.SIZE + self.crypto_hash_size
        for start in range(self.HEADER_SIZE, len(self.raw), step):
            entry = self.raw[start : start + step]
            yield Crc.from_bytes(entry[: Crc.SIZE]), entry[Crc.SIZE :]

    def index(self) -> IndexedSignature:
        """Build the lookup index used to compute deltas."""
        blocks: dict[Crc, dict[bytes, int]] = {}
        inserted: dict[Crc, int] = {}
        for idx, (crc, strong) in enumerate(self._blocks()):
            layer = blocks.setdefault(crc, {})
            count = inserted.get(crc, 0)
            # A repeat of the sole entry keeps the earlier block; later repeats replace it.
            if not (count == 1 and strong in layer):
                layer[strong] = idx
            inserted[crc] = count + 1
        return IndexedSignature(
            signature_type=self.signature_type,
            block_size=self.block_size,
            crypto_hash_size=self.crypto_hash_size,
            blocks=blocks,
        )