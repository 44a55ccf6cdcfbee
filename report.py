from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List

from huffman import freq_table
from payload import CompressedPayload


@dataclass
class CompressionStats:
    original_size: int          # bytes
    original_bits: int
    compressed_bits: int        # data bits, padding excluded
    compressed_size: float      # compressed_bits / 8
    space_saved_pct: float      # (1 - compressed/original) * 100
    unique_symbols: int
    avg_code_length: float      # bits per symbol
    entropy: float              # Shannon bound, bits per symbol
    wire_bytes: int             # serialized payload, header included


def shannon_entropy(ft: Dict[int, int]) -> float:
    total = sum(ft.values())
    if total == 0:
        return 0.0
    h = 0.0
    for c in ft.values():
        p = c / total
        h -= p * math.log2(p)
    return h


def compression_stats(data: bytes, payload: CompressedPayload) -> CompressionStats:
    ft = freq_table(data)
    original_bits = len(data) * 8
    compressed_bits = payload.bit_length
    saved = (1 - compressed_bits / original_bits) * 100 if original_bits else 0.0
    return CompressionStats(
        original_size=len(data),
        original_bits=original_bits,
        compressed_bits=compressed_bits,
        compressed_size=compressed_bits / 8,
        space_saved_pct=saved,
        unique_symbols=len(ft),
        avg_code_length=compressed_bits / len(data) if data else 0.0,
        entropy=shannon_entropy(ft),
        wire_bytes=len(payload.to_bytes()),
    )


def symbol_label(symbol: int) -> str:
    if 0x20 <= symbol < 0x7F:
        return f"'{chr(symbol)}'"
    return f"0x{symbol:02x}"


def format_code_table(code_table: Dict[int, str], ft: Dict[int, int]) -> List[str]:
    """One line per symbol, most frequent first."""
    lines = []
    for symbol in sorted(code_table, key=lambda s: (-ft.get(s, 0), s)):
        lines.append(f"{symbol_label(symbol):>6}  count={ft.get(symbol, 0):<8d} code={code_table[symbol]}")
    return lines


def format_stats(stats: CompressionStats) -> List[str]:
    return [
        f"Original size:      {stats.original_size} bytes ({stats.original_bits} bits)",
        f"Compressed size:    {stats.compressed_size:.2f} bytes ({stats.compressed_bits} bits)",
        f"Space saved:        {stats.space_saved_pct:.2f}%",
        f"Distinct symbols:   {stats.unique_symbols}",
        f"Avg code length:    {stats.avg_code_length:.3f} bits/symbol (entropy {stats.entropy:.3f})",
        f"Serialized payload: {stats.wire_bytes} bytes",
    ]
