"""
huffpack: command-line front end for the Huffman codec

How to run:
  huffpack compress readings.log readings.huf
  huffpack decompress readings.huf readings.out
  huffpack stats --sample temperature --codes
  huffpack stats --text "TEMP:25.5C,TEMP:25.5C"
  huffpack samples
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import codec
import report
from huffman import freq_table
from payload import CompressedPayload, MalformedPayload
from sensor_samples import SAMPLE_DATASETS, get_sample

logger = logging.getLogger("huffpack")


def cmd_compress(args: argparse.Namespace) -> int:
    data = Path(args.infile).read_bytes()
    payload = codec.compress(data)
    raw = payload.to_bytes()
    Path(args.outfile).write_bytes(raw)
    logger.info("compressed %s (%d bytes) -> %s (%d bytes)", args.infile, len(data), args.outfile, len(raw))
    print(f"Input bytes:             {len(data)}")
    print(f"Output bytes:            {len(raw)}")
    return 0


def cmd_decompress(args: argparse.Namespace) -> int:
    raw = Path(args.infile).read_bytes()
    data = codec.decompress(CompressedPayload.from_bytes(raw))
    Path(args.outfile).write_bytes(data)
    logger.info("decompressed %s (%d bytes) -> %s (%d bytes)", args.infile, len(raw), args.outfile, len(data))
    print(f"Restored bytes:          {len(data)}")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    if args.sample:
        data = get_sample(args.sample)
    elif args.text is not None:
        data = args.text.encode("utf-8")
    else:
        data = Path(args.file).read_bytes()

    payload = codec.compress(data)
    if codec.decompress(payload) != data:
        # the codec is deterministic, a mismatch here is a bug
        raise RuntimeError("round trip mismatch")

    for line in report.format_stats(report.compression_stats(data, payload)):
        print(line)
    if args.codes:
        print()
        for line in report.format_code_table(payload.code_table, freq_table(data)):
            print(line)
    return 0


def cmd_samples(args: argparse.Namespace) -> int:
    for name, text in SAMPLE_DATASETS.items():
        print(f"{name:<12} {text}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffpack", description="Static Huffman compression of byte files")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("compress", help="Compress a file into the HUF1 format")
    p.add_argument("infile")
    p.add_argument("outfile")
    p.set_defaults(func=cmd_compress)

    p = sub.add_parser("decompress", help="Restore a file written by compress")
    p.add_argument("infile")
    p.add_argument("outfile")
    p.set_defaults(func=cmd_decompress)

    p = sub.add_parser("stats", help="Show compression statistics for some input")
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--sample", choices=sorted(SAMPLE_DATASETS), help="Built-in sensor sample")
    src.add_argument("--text", type=str, help="Literal text, UTF-8 encoded")
    src.add_argument("--file", type=str, help="Path to a file")
    p.add_argument("--codes", action="store_true", help="Also print the code table")
    p.set_defaults(func=cmd_stats)

    p = sub.add_parser("samples", help="List the built-in sensor samples")
    p.set_defaults(func=cmd_samples)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except MalformedPayload as e:
        logger.error("cannot decode %s: %s", getattr(args, "infile", "input"), e)
        return 1
    except OSError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
