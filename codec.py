"""
Static Huffman compression of a byte buffer

compress() counts symbols, builds the tree, assigns codes and packs the
bitstream. decompress() validates the code table and decodes exactly
bit_length bits, so padding in the last byte is never read as data.
"""

import logging
from typing import Dict, Union

from bitpack import iter_bits, pack_bits_from_codes
from huffman import HuffmanNode, build_huffman_tree, freq_table, generate_huffman_codes
from payload import CompressedPayload, CorruptPayload, InvalidCodeTable, TruncatedPayload

logger = logging.getLogger(__name__)


def encode(data: bytes, code_map: Dict[int, str]) -> CompressedPayload:
    packed, pad_bits = pack_bits_from_codes(data, code_map)
    return CompressedPayload(packed=packed, pad_bits=pad_bits, code_table=code_map, symbol_count=len(data))


def compress(data: bytes) -> CompressedPayload:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"compress() expects bytes, got {type(data).__name__}")
    data = bytes(data)
    if not data:
        return CompressedPayload(packed=b"", pad_bits=0)

    ft = freq_table(data)
    root = build_huffman_tree(ft)
    code_map = generate_huffman_codes(root)
    payload = encode(data, code_map)
    logger.debug("compressed %d bytes (%d distinct) into %d bits",
                 len(data), len(ft), payload.bit_length)
    return payload


def validate_code_table(code_table: Dict[int, str]) -> None:
    """
    Raise InvalidCodeTable unless every symbol is a byte, every codeword a
    non-empty '0'/'1' string, and no codeword is a prefix of another
    """
    for symbol, code in code_table.items():
        if not isinstance(symbol, int) or not 0 <= symbol <= 255:
            raise InvalidCodeTable(f"symbol {symbol!r} is not a byte value")
        if not isinstance(code, str) or not code:
            raise InvalidCodeTable(f"symbol {symbol} has an empty codeword")
        if code.strip("01"):
            raise InvalidCodeTable(f"symbol {symbol} has non-binary codeword {code!r}")

    # In sorted order a codeword that prefixes others sits right before
    # the first of them
    codes = sorted(code_table.values())
    for shorter, longer in zip(codes, codes[1:]):
        if longer.startswith(shorter):
            raise InvalidCodeTable(f"codeword {shorter!r} is a prefix of {longer!r}")


def build_decode_tree(code_table: Dict[int, str]) -> HuffmanNode:
    """Rebuild a decoding tree from a validated code table. Node weights are not recovered."""
    root = HuffmanNode(None, 0)
    for symbol, code in code_table.items():
        node = root
        for ch in code[:-1]:
            attr = "left" if ch == "0" else "right"
            child = getattr(node, attr)
            if child is None:
                child = HuffmanNode(None, 0)
                setattr(node, attr, child)
            node = child
        setattr(node, "left" if code[-1] == "0" else "right", HuffmanNode(symbol, 0))
    return root


def _check_counts(payload: CompressedPayload) -> bool:
    """Validate metadata. Returns True when there is nothing to decode."""
    if not 0 <= payload.pad_bits <= 7:
        raise CorruptPayload(f"pad_bits is {payload.pad_bits}, must be 0..7")
    if payload.symbol_count < 0:
        raise CorruptPayload(f"negative symbol count {payload.symbol_count}")

    if payload.symbol_count == 0:
        if payload.packed:
            raise CorruptPayload(f"{payload.bit_length} data bits for zero declared symbols")
        if payload.pad_bits:
            raise CorruptPayload("pad bits declared for an empty bitstream")
        return True
    if not payload.code_table:
        raise CorruptPayload(f"{payload.symbol_count} symbols declared with an empty code table")
    if not payload.packed:
        # every symbol takes at least one bit
        raise TruncatedPayload(f"empty bitstream for {payload.symbol_count} declared symbols")
    return False


def decode_with_tree(payload: CompressedPayload) -> bytes:
    """
    Decode by walking the Huffman tree from the root, one bit at a time
    """
    validate_code_table(payload.code_table)
    if _check_counts(payload):
        return b""
    root = build_decode_tree(payload.code_table)

    total_bits = payload.bit_length
    decoded = bytearray()
    node = root
    bits_used = 0

    for bit in iter_bits(payload.packed, total_bits):
        node = node.right if bit == 1 else node.left
        bits_used += 1
        if node is None:
            raise CorruptPayload(f"bit {bits_used - 1} leaves the code tree")

        # Leaf
        if node.is_leaf:
            decoded.append(node.symbol)
            node = root
            if len(decoded) == payload.symbol_count:
                break

    _check_finished(payload, len(decoded), bits_used, node is not root)
    return bytes(decoded)


def decode_with_table(payload: CompressedPayload) -> bytes:
    """
    Decode by growing a bit buffer until it matches a codeword
    """
    validate_code_table(payload.code_table)
    if _check_counts(payload):
        return b""

    reverse = {code: symbol for symbol, code in payload.code_table.items()}
    max_len = max(len(code) for code in reverse)

    decoded = bytearray()
    buffer = ""
    bits_used = 0

    for bit in iter_bits(payload.packed, payload.bit_length):
        buffer += "1" if bit else "0"
        bits_used += 1
        symbol = reverse.get(buffer)
        if symbol is not None:
            decoded.append(symbol)
            buffer = ""
            if len(decoded) == payload.symbol_count:
                break
        elif len(buffer) >= max_len:
            raise CorruptPayload(f"bits {bits_used - len(buffer)}..{bits_used - 1} match no codeword")

    _check_finished(payload, len(decoded), bits_used, bool(buffer))
    return bytes(decoded)


def _check_finished(payload: CompressedPayload, produced: int, bits_used: int, mid_codeword: bool) -> None:
    if produced < payload.symbol_count:
        where = "mid-codeword" if mid_codeword else "at a codeword boundary"
        logger.warning("bitstream ended %s after %d of %d symbols", where, produced, payload.symbol_count)
        raise TruncatedPayload(
            f"bitstream ended {where} after {produced} of {payload.symbol_count} symbols"
        )
    if bits_used != payload.bit_length:
        logger.warning("%d data bits left after %d symbols", payload.bit_length - bits_used, produced)
        raise CorruptPayload(
            f"{payload.bit_length - bits_used} data bits left after the declared {payload.symbol_count} symbols"
        )


DECODERS = {
    "tree": decode_with_tree,
    "table": decode_with_table,
}


def decompress(payload: Union[CompressedPayload, bytes]) -> bytes:
    if isinstance(payload, (bytes, bytearray, memoryview)):
        payload = CompressedPayload.from_bytes(bytes(payload))
    data = decode_with_tree(payload)
    logger.debug("decompressed %d bits into %d bytes", payload.bit_length, len(data))
    return data
