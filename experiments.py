"""
Sensor payload benchmark

For each sensor dataset and payload size, compresses once, decodes with
every decoder in codec.DECODERS and records what goes over the wire:
data bits, pad bits, HUF1 header + code table overhead and the decode
time per decoder.

Outputs (in --outdir):
  - runs.csv        (one row per dataset, size and run)
  - summary.csv     (per dataset and size, timings averaged over runs)
  - *.png

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --sizes 32,128,512 --datasets temperature,motion
"""

from __future__ import annotations

import argparse
import csv
import logging
import random
import statistics
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import matplotlib.pyplot as plt

import codec
from huffman import freq_table
from report import shannon_entropy
from sensor_samples import SAMPLE_DATASETS, get_sample, repeat_to_size

logger = logging.getLogger(__name__)

DEFAULT_SIZES = "32,128,512,2048,8192,32768"


def drifting_readings(size: int, seed: int, base: float = 25.5, jitter: float = 0.2) -> bytes:
    """TEMP:xx.xC readings wandering around base, comma separated"""
    rng = random.Random(seed)
    out = bytearray()
    while len(out) < size:
        value = base + rng.choice((-1, 0, 0, 0, 1)) * rng.uniform(0.0, jitter)
        out += f"TEMP:{value:.1f}C,".encode("ascii")
    return bytes(out[:size])


def _repeated(name: str) -> Callable[[int, int], bytes]:
    return lambda size, seed: repeat_to_size(get_sample(name), size)


DATASETS: Dict[str, Callable[[int, int], bytes]] = {name: _repeated(name) for name in SAMPLE_DATASETS}
DATASETS["temperature_drift"] = drifting_readings


def make_dataset(name: str, size: int, seed: int) -> bytes:
    fn = DATASETS.get(name)
    if fn is None:
        raise ValueError(f"unknown dataset {name!r}, expected one of {', '.join(DATASETS)}")
    return fn(size, seed)


@dataclass
class PayloadRun:
    dataset: str
    size_bytes: int
    run_id: int
    unique_symbols: int
    data_bits: int
    pad_bits: int
    overhead_bytes: int     # HUF1 header and code table
    wire_bytes: int
    wire_ratio: float       # wire_bytes / size_bytes
    bits_per_symbol: float
    entropy: float
    compress_ms: float
    decode_ms: Dict[str, float]
    decoders_agree: bool

    def flat(self) -> Dict[str, object]:
        row = asdict(self)
        for name, ms in row.pop("decode_ms").items():
            row[f"decode_{name}_ms"] = ms
        return row


def _timed(fn, *args) -> Tuple[object, float]:
    t0 = time.perf_counter_ns()
    result = fn(*args)
    return result, (time.perf_counter_ns() - t0) / 1_000_000.0


def measure(data: bytes, dataset: str = "", run_id: int = 0) -> PayloadRun:
    payload, compress_ms = _timed(codec.compress, data)
    wire = payload.to_bytes()

    decode_ms: Dict[str, float] = {}
    agree = True
    for name, decoder in codec.DECODERS.items():
        decoded, decode_ms[name] = _timed(decoder, payload)
        if decoded != data:
            logger.warning("%s decoder mismatch on %s (%d bytes)", name, dataset, len(data))
            agree = False

    ft = freq_table(data)
    return PayloadRun(
        dataset=dataset,
        size_bytes=len(data),
        run_id=run_id,
        unique_symbols=len(ft),
        data_bits=payload.bit_length,
        pad_bits=payload.pad_bits,
        overhead_bytes=len(wire) - len(payload.packed),
        wire_bytes=len(wire),
        wire_ratio=len(wire) / max(1, len(data)),
        bits_per_symbol=payload.bit_length / len(data) if data else 0.0,
        entropy=shannon_entropy(ft),
        compress_ms=compress_ms,
        decode_ms=decode_ms,
        decoders_agree=agree,
    )


def summarize(runs: List[PayloadRun]) -> List[Dict[str, object]]:
    """
    One row per (dataset, size). Sizes and bit counts are identical across
    runs, since compression is deterministic; only timings are averaged
    """
    grouped: Dict[Tuple[str, int], List[PayloadRun]] = {}
    for r in runs:
        grouped.setdefault((r.dataset, r.size_bytes), []).append(r)

    summary = []
    for (dataset, size), items in sorted(grouped.items()):
        first = items[0]
        row: Dict[str, object] = {
            "dataset": dataset,
            "size_bytes": size,
            "n_runs": len(items),
            "wire_bytes": first.wire_bytes,
            "overhead_bytes": first.overhead_bytes,
            "pad_bits": first.pad_bits,
            "wire_ratio": first.wire_ratio,
            "bits_per_symbol": first.bits_per_symbol,
            "entropy": first.entropy,
            "compress_ms": statistics.mean(r.compress_ms for r in items),
            "all_agree": all(r.decoders_agree for r in items),
        }
        for name in first.decode_ms:
            row[f"decode_{name}_ms"] = statistics.mean(r.decode_ms[name] for r in items)
        summary.append(row)
    return summary


def write_rows(path: Path, rows: List[Dict[str, object]]) -> None:
    if not rows:
        return
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(rows[0]))
        w.writeheader()
        w.writerows(rows)


def _by_dataset(summary: List[Dict[str, object]]) -> Dict[str, List[Dict[str, object]]]:
    out: Dict[str, List[Dict[str, object]]] = {}
    for row in summary:
        out.setdefault(row["dataset"], []).append(row)
    return out


def plot_wire_ratio(summary: List[Dict[str, object]], outdir: Path) -> None:
    # below 1.0 the payload, header included, is smaller than the readings
    plt.figure()
    for dataset, rows in _by_dataset(summary).items():
        plt.plot([r["size_bytes"] for r in rows], [r["wire_ratio"] for r in rows], marker="o", label=dataset)
    plt.axhline(1.0, color="grey", linestyle="--")
    plt.xscale("log", base=2)
    plt.xlabel("Readings (bytes)")
    plt.ylabel("HUF1 Payload / Readings")
    plt.title("Wire Size vs Input Size")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "wire_ratio.png", dpi=200)
    plt.close()


def plot_overhead_share(summary: List[Dict[str, object]], outdir: Path) -> None:
    plt.figure()
    for dataset, rows in _by_dataset(summary).items():
        share = [r["overhead_bytes"] / r["wire_bytes"] for r in rows]
        plt.plot([r["size_bytes"] for r in rows], share, marker="o", label=dataset)
    plt.xscale("log", base=2)
    plt.xlabel("Readings (bytes)")
    plt.ylabel("Header + Code Table / Payload")
    plt.title("Code Table Overhead")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "overhead_share.png", dpi=200)
    plt.close()


def plot_decoders(summary: List[Dict[str, object]], outdir: Path) -> None:
    largest = max(r["size_bytes"] for r in summary)
    rows = [r for r in summary if r["size_bytes"] == largest]
    x = list(range(len(rows)))
    width = 0.8 / len(codec.DECODERS)

    plt.figure()
    for i, name in enumerate(codec.DECODERS):
        plt.bar([p + i * width for p in x], [r[f"decode_{name}_ms"] for r in rows], width=width, label=name)
    plt.xticks([p + width * (len(codec.DECODERS) - 1) / 2 for p in x], [r["dataset"] for r in rows],
               rotation=20, ha="right")
    plt.ylabel("Decode Time (ms)")
    plt.title(f"Decoders at {largest} bytes")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "decode_time.png", dpi=200)
    plt.close()


def _int_list(s: str) -> List[int]:
    return [int(x) for x in s.split(",") if x.strip()]


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Benchmark HUF1 payloads on sensor readings")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per dataset and size")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--sizes", type=_int_list, default=_int_list(DEFAULT_SIZES),
                    help="Comma-separated input sizes in bytes")
    ap.add_argument("--datasets", type=str, default=",".join(DATASETS),
                    help="Comma-separated dataset names")
    ap.add_argument("--no_plots", action="store_true", help="Only write the CSV files")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    names = [n.strip() for n in args.datasets.split(",") if n.strip()]
    unknown = [n for n in names if n not in DATASETS]
    if unknown or not names:
        print(f"Unknown datasets: {', '.join(unknown) or '(none given)'}; choose from {', '.join(DATASETS)}")
        return 2

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    runs: List[PayloadRun] = []
    for name in names:
        for size in args.sizes:
            for run_id in range(1, args.runs + 1):
                data = make_dataset(name, size, args.seed + run_id)
                runs.append(measure(data, name, run_id))

    summary = summarize(runs)
    write_rows(outdir / "runs.csv", [r.flat() for r in runs])
    write_rows(outdir / "summary.csv", summary)
    if summary and not args.no_plots:
        plot_wire_ratio(summary, outdir)
        plot_overhead_share(summary, outdir)
        plot_decoders(summary, outdir)

    mismatches = sum(not r.decoders_agree for r in runs)
    print(f"Wrote {len(runs)} runs to {outdir / 'runs.csv'}")
    print(f"Decoder mismatches: {mismatches}")
    print("Charts saved in:", outdir.resolve())
    return 1 if mismatches else 0


if __name__ == "__main__":
    raise SystemExit(main())
