import pytest

from rsdelta.patch import (
    ApplyError,
    CopyOutOfBoundsError,
    CopyZeroError,
    OutputLimitError,
    TrailingDataError,
    UnexpectedEofError,
    UnknownCommandError,
    WrongMagicError,
    apply,
    apply_limited,
)

BASE = b"potato"
MAGIC = bytes([114, 115, 2, 54])
COPY_N1_N1 = 0x45


def test_empty_patch():
    assert apply(BASE, MAGIC + b"\x00") == b""


def test_no_magic():
    with pytest.raises(UnexpectedEofError) as info:
        apply(BASE, b"")
    assert str(info.value) == (
        "unexpected end of input when reading magic (expected=4, available=0)"
    )


def test_wrong_magic():
    with pytest.raises(WrongMagicError) as info:
        apply(BASE, bytes([1, 2, 3, 4]))
    assert str(info.value) == "incorrect magic: 0x01020304"
    assert info.value.magic == 0x01020304


def test_zero_length_copy():
    with pytest.raises(CopyZeroError) as info:
        apply(BASE, MAGIC + bytes([COPY_N1_N1, 0, 0, 0]))
    assert str(info.value) == "copy length is empty"


def test_copy_start_out_of_range():
    with pytest.raises(CopyOutOfBoundsError) as info:
        apply(BASE, MAGIC + bytes([COPY_N1_N1, 10, 1, 0]))
    assert str(info.value) == (
        "requested copy is out of bounds (offset=10, len=1, data_len=6)"
    )


def test_copy_end_out_of_range():
    with pytest.raises(CopyOutOfBoundsError) as info:
        apply(BASE, MAGIC + bytes([COPY_N1_N1, 0, 10, 0]))
    assert str(info.value) == (
        "requested copy is out of bounds (offset=0, len=10, data_len=6)"
    )
    assert (info.value.offset, info.value.length, info.value.data_len) == (0, 10, 6)


def test_unknown_command():
    with pytest.raises(UnknownCommandError) as info:
        apply(BASE, MAGIC + bytes([0x55]))
    assert str(info.value) == "unexpected command byte: 0x55"


def test_trailing_data():
    with pytest.raises(TrailingDataError) as info:
        apply(BASE, MAGIC + bytes([0, 1]))
    assert str(info.value) == "unexpected data after end command (len=1)"


def test_missing_command():
    with pytest.raises(UnexpectedEofError) as info:
        apply(BASE, MAGIC)
    assert str(info.value) == (
        "unexpected end of input when reading cmd (expected=1, available=0)"
    )


def test_errors_share_base_class():
    with pytest.raises(ApplyError):
        apply(BASE, MAGIC + bytes([0x60]))


def test_short_literal():
    assert apply(BASE, MAGIC + b"\x03abc\x00") == b"abc"


def test_literal_n1():
    payload = bytes(range(100))
    assert apply(BASE, MAGIC + bytes([0x41, 100]) + payload + b"\x00") == payload


def test_literal_n2():
    payload = b"x" * 300
    assert apply(BASE, MAGIC + bytes([0x42, 1, 44]) + payload + b"\x00") == payload


def test_truncated_literal():
    with pytest.raises(UnexpectedEofError) as info:
        apply(BASE, MAGIC + b"\x03ab")
    assert str(info.value) == (
        "unexpected end of input when reading literal (expected=3, available=2)"
    )


def test_truncated_literal_length():
    with pytest.raises(UnexpectedEofError) as info:
        apply(BASE, MAGIC + bytes([0x42, 0]))
    assert info.value.reading == "literal length"
    assert (info.value.expected, info.value.available) == (2, 1)


def test_copy_n1_n1():
    assert apply(BASE, MAGIC + bytes([COPY_N1_N1, 1, 3, 0])) == b"ota"


def test_copy_n2_n1():
    base = bytes(range(256)) * 2
    delta = MAGIC + bytes([0x49, 1, 0, 2, 0])
    assert apply(base, delta) == bytes([0, 1])


def test_copy_and_literal_combined():
    delta = MAGIC + bytes([COPY_N1_N1, 0, 3]) + b"\x02es" + bytes([COPY_N1_N1, 3, 3, 0])
    assert apply(BASE, delta) == b"potesato"


def test_truncated_copy_offset():
    with pytest.raises(UnexpectedEofError) as info:
        apply(BASE, MAGIC + bytes([0x4D]))
    assert info.value.reading == "copy offset"
    assert info.value.expected == 4


def test_literal_over_limit():
    with pytest.raises(OutputLimitError) as info:
        apply_limited(BASE, MAGIC + b"\x03abc\x00", 2)
    assert str(info.value) == (
        "exceeded output size limit when writing literal (wanted=3, available=2)"
    )


def test_copy_over_limit_counts_previous_output():
    delta = MAGIC + b"\x02ab" + bytes([COPY_N1_N1, 0, 4, 0])
    with pytest.raises(OutputLimitError) as info:
        apply_limited(BASE, delta, 5)
    assert (info.value.what, info.value.wanted, info.value.available) == ("copy", 4, 3)


def test_exact_limit_is_allowed():
    assert apply_limited(BASE, MAGIC + bytes([COPY_N1_N1, 0, 6, 0]), 6) == BASE