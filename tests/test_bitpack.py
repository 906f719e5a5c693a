import pytest

from bitpack import pack_bits, unpack_bits
from errors import CorruptPayloadError, MissingCodewordError


def test_partial_last_group_goes_to_tail():
    packed, tail = pack_bits(b"AABC", {65: "0", 66: "10", 67: "11"})
    assert packed == b"\x00"
    assert tail == "001011"


def test_full_bytes_are_msb_first():
    codes = {0: "1", 1: "0"}
    packed, tail = pack_bits(bytes([0, 1, 0, 1, 1, 1, 1, 1, 0, 0]), codes)
    # 10100000 then 11
    assert packed == bytes([0b10100000, 0])
    assert tail == "11"


def test_exact_multiple_of_eight_keeps_last_byte_as_tail():
    packed, tail = pack_bits(b"A" * 16, {65: "1"})
    assert packed == b"\xff\xff"
    assert tail == "11111111"
    assert unpack_bits(packed, tail) == "1" * 16


def test_empty_input_packs_to_nothing():
    assert pack_bits(b"", {}) == (b"", "")


def test_missing_codeword_raises():
    with pytest.raises(MissingCodewordError) as exc:
        pack_bits(b"AB", {65: "0"})
    assert exc.value.symbol == 66


def test_unpack_ignores_last_byte_value():
    assert unpack_bits(bytes([0b00000101, 0xAB]), "01") == "00000101" + "01"


def test_unpack_zero_padding():
    assert unpack_bits(bytes([1, 2, 0]), "1") == "00000001" + "00000010" + "1"


def test_unpack_empty_payload_uses_tail_alone():
    assert unpack_bits(b"", "101") == "101"
    assert unpack_bits(b"", "") == ""


@pytest.mark.parametrize("tail", ["", "123456789", "000000000", "0a"])
def test_unpack_rejects_bad_tail(tail):
    with pytest.raises(CorruptPayloadError):
        unpack_bits(b"\x00\x00", tail)


def test_bit_count_law():
    codes = {65: "0", 66: "10", 67: "110", 68: "111"}
    for data in (b"A", b"ABCD" * 7, b"DDDDDDDDDDC", b"B" * 4):
        packed, tail = pack_bits(data, codes)
        total = sum(len(codes[b]) for b in data)
        assert total == 8 * (len(packed) - 1) + len(tail)
