import struct

import pytest

import codec
from payload import (MAGIC, CompressedPayload, CorruptPayload, InvalidCodeTable,
                     TruncatedPayload)


def test_wire_roundtrip_preserves_every_field():
    payload = codec.compress(b"POWER:100W,POWER:105W,POWER:100W")
    restored = CompressedPayload.from_bytes(payload.to_bytes())
    assert restored == payload
    assert restored.bit_length == payload.bit_length


def test_codewords_longer_than_a_byte_survive():
    payload = CompressedPayload(packed=b"\x00", pad_bits=7, code_table={1: "101010101011", 2: "0"}, symbol_count=1)
    assert CompressedPayload.from_bytes(payload.to_bytes()).code_table == payload.code_table


def test_empty_payload_layout():
    raw = codec.compress(b"").to_bytes()
    assert raw[:4] == MAGIC
    # header (4 + 4 + 2) and trailer (1 + 4), no entries, no data
    assert len(raw) == 15
    assert codec.decompress(raw) == b""


def test_header_fields():
    raw = codec.compress(b"aaaa").to_bytes()
    magic, symbol_count, num_symbols = struct.unpack_from(">4sIH", raw, 0)
    assert (magic, symbol_count, num_symbols) == (MAGIC, 4, 1)
    # one entry: symbol 'a', length 1, one code byte
    assert raw[10:13] == bytes([ord("a"), 1, 0x00])
    pad_bits, packed_len = struct.unpack_from(">BI", raw, 13)
    assert (pad_bits, packed_len) == (4, 1)


def test_bad_magic():
    raw = bytearray(codec.compress(b"hello").to_bytes())
    raw[0] ^= 0xFF
    with pytest.raises(CorruptPayload):
        CompressedPayload.from_bytes(bytes(raw))


def test_short_header():
    with pytest.raises(CorruptPayload):
        CompressedPayload.from_bytes(MAGIC + b"\x00")


@pytest.mark.parametrize("cut", [1, 5])
def test_truncated_wire_bytes(cut):
    raw = codec.compress(b"Hello World" * 50).to_bytes()
    with pytest.raises(TruncatedPayload):
        codec.decompress(raw[:-cut])


def test_truncated_inside_code_table():
    raw = codec.compress(b"Hello World").to_bytes()
    with pytest.raises(TruncatedPayload):
        CompressedPayload.from_bytes(raw[:12])


def test_trailing_bytes():
    raw = codec.compress(b"Hello World").to_bytes()
    with pytest.raises(CorruptPayload):
        CompressedPayload.from_bytes(raw + b"\x00")


def test_pad_bits_out_of_range():
    raw = MAGIC + struct.pack(">IH", 1, 1) + bytes([97, 1, 0]) + struct.pack(">BI", 9, 1) + b"\x00"
    with pytest.raises(CorruptPayload):
        CompressedPayload.from_bytes(raw)


def test_too_many_table_entries():
    raw = MAGIC + struct.pack(">IH", 1, 257)
    with pytest.raises(CorruptPayload):
        CompressedPayload.from_bytes(raw)


def test_zero_length_codeword():
    raw = MAGIC + struct.pack(">IH", 1, 1) + bytes([97, 0]) + struct.pack(">BI", 7, 1) + b"\x00"
    with pytest.raises(InvalidCodeTable):
        CompressedPayload.from_bytes(raw)


def test_duplicate_symbol():
    entries = bytes([97, 1, 0x00, 97, 1, 0x80])
    raw = MAGIC + struct.pack(">IH", 1, 2) + entries + struct.pack(">BI", 7, 1) + b"\x00"
    with pytest.raises(InvalidCodeTable):
        CompressedPayload.from_bytes(raw)


def test_non_prefix_free_table_on_the_wire():
    # 'a' -> "1", 'b' -> "10"
    entries = bytes([97, 1, 0x80, 98, 2, 0x80])
    raw = MAGIC + struct.pack(">IH", 1, 2) + entries + struct.pack(">BI", 7, 1) + b"\x80"
    with pytest.raises(InvalidCodeTable):
        codec.decompress(raw)


def test_code_table_cannot_be_changed_after_compress():
    payload = codec.compress(b"MOTION:0,MOTION:1")
    with pytest.raises(TypeError):
        payload.code_table[ord("M")] = "1"
    assert codec.decompress(payload) == b"MOTION:0,MOTION:1"


def test_payload_keeps_its_own_copy_of_the_table():
    table = {97: "0", 98: "1"}
    payload = CompressedPayload(packed=b"\x40", pad_bits=6, code_table=table, symbol_count=2)
    table[97] = "1"
    table[99] = "01"
    assert payload.code_table == {97: "0", 98: "1"}
    assert codec.decompress(payload) == b"ab"


def test_equal_payloads_hash_equal():
    a = codec.compress(b"HUM:60%,HUM:61%")
    b = codec.compress(b"HUM:60%,HUM:61%")
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1
