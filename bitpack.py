from typing import Dict, Iterator, Tuple


def pack_bits_from_codes(data: bytes, code_map: Dict[int, str]) -> Tuple[bytes, int]:
    """
    Converts Huffman codes into packed bytes, most significant bit first
    Returns (packed_bytes, pad_bits) where pad_bits is number of 0 bits added at the end
    """
    out = bytearray()
    acc = 0
    acc_bits = 0

    for b in data:
        bits = code_map.get(b)
        if bits is None:
            # code_map was not derived from this data
            raise RuntimeError(f"no codeword for symbol {b}")
        for ch in bits:
            acc = (acc << 1) | (1 if ch == '1' else 0)
            acc_bits += 1
            if acc_bits == 8:
                out.append(acc & 0xFF)
                acc = 0
                acc_bits = 0

    pad_bits = 0
    if acc_bits != 0:
        pad_bits = 8 - acc_bits
        acc = acc << pad_bits
        out.append(acc & 0xFF)

    return bytes(out), pad_bits


def iter_bits(packed: bytes, total_bits: int) -> Iterator[int]:
    """Yield the first total_bits bits of packed, MSB first. Padding is never yielded."""
    bit_index = 0
    for byte in packed:
        for i in range(7, -1, -1):
            if bit_index >= total_bits:
                return
            yield (byte >> i) & 1
            bit_index += 1


def bits_to_bytes(bits: str) -> bytes:
    """Pack a '0'/'1' string MSB first, zero-filling the last byte."""
    out = bytearray()
    for i in range(0, len(bits), 8):
        chunk = bits[i:i + 8]
        out.append(int(chunk.ljust(8, "0"), 2))
    return bytes(out)


def bytes_to_bits(raw: bytes, bit_count: int) -> str:
    return "".join(format(byte, "08b") for byte in raw)[:bit_count]
