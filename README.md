# rsdelta

Compute rsync-style block signatures of byte strings and apply deltas in the
librsync delta format to rebuild data from a base. Signatures built with MD4
have the same layout as librsync signatures.

The package has no runtime dependencies and runs on Python 3.10 or later.

## Installing

```
pip install rsdelta
```

To run the test suite, install the `test` extra:

```
pip install "rsdelta[test]"
pytest
```

## Signatures

A signature describes the base data block by block. For every block it holds
a weak rolling checksum and the first bytes of a strong hash.

```python
from rsdelta.signature import HashAlgorithm, Signature, SignatureOptions

base = b"hello" + bytes(1 << 20)

options = SignatureOptions(
    block_size=4096,
    crypto_hash_size=8,
    hash_algorithm=HashAlgorithm.BLAKE3,
)
signature = Signature.calculate(base, options)

# Store or send the serialized form, and read it back.
blob = signature.serialized()
signature = Signature.deserialize(blob)

# Weak checksum -> strong hash -> block index.
indexed = signature.index()
```

`SignatureOptions` has three fields:

- `block_size`: the size of each block in bytes. It must be greater than zero.
- `crypto_hash_size`: how many bytes of the strong hash to keep per block. It
  can be at most `HashAlgorithm.max_hash_size()`, which is 16 for MD4 and 32
  for BLAKE3.
- `hash_algorithm`: `HashAlgorithm.MD4` (librsync-compatible, but
  cryptographically broken) or `HashAlgorithm.BLAKE3`.

`Signature.calculate` raises `ValueError` for a block size that is not
positive or a hash size larger than the algorithm's digest.
`Signature.deserialize` raises `SignatureParseError` when the input is too
short, has an unknown magic number, or has a body that does not divide into
whole block entries.

A `Signature` exposes `signature_type` (a `SignatureType`: `MD4`, `BLAKE2` or
`BLAKE3`), `block_size` and `crypto_hash_size`. `Signature.index()` returns an
`IndexedSignature` whose `blocks` maps each `Crc` to a dict from truncated
strong hash to block number.

## Applying deltas

A delta starts with the delta magic number, then holds copy commands (take a
range of the base) and literal commands (insert the bytes that follow), and
ends with an end command.

```python
from rsdelta.patch import OutputLimitError, apply, apply_limited

base = b"hello world"
delta = (
    b"rs\x026"           # delta magic
    + bytes([0x45, 0, 5])  # copy 5 bytes from offset 0
    + bytes([0x03])        # literal of 3 bytes
    + b"!!!"
    + b"\x00"              # end
)

assert apply(base, delta) == b"hello!!!"

# With untrusted deltas, cap the size of the output.
try:
    apply_limited(base, delta, 4)
except OutputLimitError as error:
    print(error)
```

Both functions return the rebuilt data as `bytes`. On a malformed delta they
raise a subclass of `ApplyError` (itself a `ValueError`):

- `WrongMagicError`: the delta does not start with the delta magic number.
- `UnexpectedEofError`: the delta ends in the middle of an item.
- `OutputLimitError`: the output would exceed the limit given to
  `apply_limited`.
- `CopyOutOfBoundsError`: a copy reaches past the end of the base.
- `CopyZeroError`: a copy has length zero.
- `UnknownCommandError`: an unrecognised command byte.
- `TrailingDataError`: bytes follow the end command.

`apply` places no bound on the size of its output. Use `apply_limited` for
deltas from untrusted sources.

## What this package does not do

It does not compute deltas. Deltas must come from another librsync-compatible
tool or be built by hand as above. The `IndexedSignature` holds the lookup
structure such a delta builder would use, but no function here walks new data
against it.

## Lower-level pieces

- `rsdelta.crc.Crc` is the weak rolling checksum. `Crc().update(data)` sums a
  buffer; `rollin`, `rollout` and `rotate` add, remove or slide one byte;
  `to_bytes` and `Crc.from_bytes` give its 4-byte big-endian form.
- `rsdelta.md4.md4` and `rsdelta.md4.md4_many` compute MD4 digests.
- `rsdelta.blake3hash.blake3` and `rsdelta.blake3hash.blake3_many` compute
  BLAKE3 digests.
- `rsdelta.consts` holds the magic numbers and command bytes.

## Security

The weak checksum and the truncated strong hash can collide, especially with
MD4. Always check rebuilt data with a separate cryptographic hash.