"""
Compressed payload container and its wire format

Wire format (big-endian):
    [4B]  MAGIC "HUF1"
    [4B]  symbol_count      (uint32)  symbols to decode
    [2B]  num_symbols       (uint16)  entries in the code table, 0..256
    per entry:
        [1B]  symbol
        [1B]  code length L  (1..255)
        [ceil(L/8) B] codeword, MSB first, zero-filled
    [1B]  pad_bits          (0..7)    fill bits at the end of the last byte
    [4B]  packed_length     (uint32)
    [N B] packed bitstream
"""

import logging
import struct
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping

from bitpack import bits_to_bytes, bytes_to_bits

logger = logging.getLogger(__name__)

MAGIC = b"HUF1"
_HEADER = struct.Struct(">4sIH")
_ENTRY = struct.Struct(">BB")
_TRAILER = struct.Struct(">BI")


class MalformedPayload(ValueError):
    """A payload that cannot be decoded back into the original bytes."""


class InvalidCodeTable(MalformedPayload):
    """Code table is not prefix-free, or has an empty or malformed codeword."""


class TruncatedPayload(MalformedPayload):
    """Fewer bits than needed to decode the declared symbol count."""


class CorruptPayload(MalformedPayload):
    """Declared metadata is inconsistent with the buffer."""


@dataclass(frozen=True)
class CompressedPayload:
    packed: bytes
    pad_bits: int
    code_table: Mapping[int, str] = field(default_factory=dict, hash=False)
    symbol_count: int = 0

    def __post_init__(self):
        # read-only copy, so the caller's dict cannot change the payload
        object.__setattr__(self, "code_table", MappingProxyType(dict(self.code_table)))

    @property
    def bit_length(self) -> int:
        return len(self.packed) * 8 - self.pad_bits

    def to_bytes(self) -> bytes:
        out = bytearray()
        out += _HEADER.pack(MAGIC, self.symbol_count, len(self.code_table))
        for symbol, code in self.code_table.items():
            out += _ENTRY.pack(symbol, len(code))
            out += bits_to_bytes(code)
        out += _TRAILER.pack(self.pad_bits, len(self.packed))
        out += self.packed
        return bytes(out)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "CompressedPayload":
        if len(raw) < _HEADER.size:
            raise CorruptPayload(f"payload is {len(raw)} bytes, shorter than the {_HEADER.size}-byte header")

        magic, symbol_count, num_symbols = _HEADER.unpack_from(raw, 0)
        if magic != MAGIC:
            raise CorruptPayload(f"bad magic {magic!r}")
        if num_symbols > 256:
            raise CorruptPayload(f"{num_symbols} code table entries, at most 256 byte symbols exist")
        offset = _HEADER.size

        code_table: Dict[int, str] = {}
        for _ in range(num_symbols):
            if offset + _ENTRY.size > len(raw):
                raise TruncatedPayload("payload ends inside the code table")
            symbol, length = _ENTRY.unpack_from(raw, offset)
            offset += _ENTRY.size
            if length == 0:
                raise InvalidCodeTable(f"symbol {symbol} has an empty codeword")
            if symbol in code_table:
                raise InvalidCodeTable(f"symbol {symbol} appears twice in the code table")
            n_bytes = (length + 7) // 8
            if offset + n_bytes > len(raw):
                raise TruncatedPayload("payload ends inside a codeword")
            code_table[symbol] = bytes_to_bits(raw[offset:offset + n_bytes], length)
            offset += n_bytes

        if offset + _TRAILER.size > len(raw):
            raise TruncatedPayload("payload ends before the bitstream header")
        pad_bits, packed_length = _TRAILER.unpack_from(raw, offset)
        offset += _TRAILER.size
        if pad_bits > 7:
            raise CorruptPayload(f"pad_bits is {pad_bits}, must be 0..7")

        packed = raw[offset:offset + packed_length]
        if len(packed) < packed_length:
            raise TruncatedPayload(f"bitstream has {len(packed)} of {packed_length} declared bytes")
        if offset + packed_length != len(raw):
            raise CorruptPayload(f"{len(raw) - offset - packed_length} unexpected bytes after the bitstream")

        logger.debug("read payload: %d symbols, %d table entries, %d packed bytes",
                     symbol_count, num_symbols, packed_length)
        return cls(packed=bytes(packed), pad_bits=pad_bits, code_table=code_table, symbol_count=symbol_count)
