"""
Huffman codec experiments

Runs the codec over synthetic text distributions, with repeated runs, and
records how close the codes come to the entropy bound and how the build,
encode and decode phases scale.

Outputs (in --outdir):
  - metrics.csv     (raw row per run)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 256 --exp2_max_kb 2048
  python experiments.py --outdir results --exp1_generators uniform95,zipf64,english_like

Notes:
  Compressed size is measured by packing the '0'/'1' string into bytes.
  Decoding always unpacks back to a bitstring and goes through the codec.
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import matplotlib

matplotlib.use("Agg") # charts are only written to files

import matplotlib.pyplot as plt

from codec_errors import HuffmanError
from freqtable import frequency_table
from huffman import HuffmanCodec, build_priority_queue, weighted_code_length


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def entropy_bits(ft: Dict[str, int]) -> float:
    """
    Shannon entropy in bits per symbol, the lower bound for mean code length
    """
    total = sum(ft.values())
    if total == 0:
        return 0.0
    return -sum((c / total) * math.log2(c / total) for c in ft.values() if c)


def pack_bits(bits: str) -> Tuple[bytes, int]:
    """
    Packs a '0'/'1' string into bytes, MSB first
    Returns (packed_bytes, pad_bits) where pad_bits is number of 0 bits added at the end
    """
    pad_bits = (-len(bits)) % 8
    padded = bits + "0" * pad_bits
    out = bytearray(int(padded[i:i + 8], 2) for i in range(0, len(padded), 8))
    return bytes(out), pad_bits


def unpack_bits(packed: bytes, pad_bits: int) -> str:
    bits = "".join(format(byte, "08b") for byte in packed)
    return bits[:len(bits) - pad_bits] if pad_bits else bits


# Synthetic text generators

PRINTABLE = "".join(chr(i) for i in range(32, 127))

def _sample(chars: str, weights: List[float], size: int, rng: random.Random) -> str:
    return "".join(rng.choices(chars, weights=weights, k=size))

def gen_uniform(size: int, alphabet: str = PRINTABLE, seed: int = 0) -> str:
    rng = random.Random(seed)
    return _sample(alphabet, [1.0] * len(alphabet), size, rng)

def gen_repetitive(size: int, dominant: str = "A", dom_frac: float = 0.90, seed: int = 0) -> str:
    rng = random.Random(seed)
    others = PRINTABLE.replace(dominant, "")
    weights = [dom_frac] + [(1.0 - dom_frac) / len(others)] * len(others)
    return _sample(dominant + others, weights, size, rng)

def gen_zipf_like(size: int, alphabet: int = 64, s: float = 1.2, seed: int = 0) -> str:
    rng = random.Random(seed)
    chars = PRINTABLE[:alphabet]
    weights = [1.0 / ((i + 1) ** s) for i in range(len(chars))]
    return _sample(chars, weights, size, rng)

def gen_english_like(size: int, seed: int = 0) -> str:
    rng = random.Random(seed)
    chars = (
        " etaoinshrdlcumwfgypbvkjxq"
        "ETAOINSHRDLCUMWFGYPBVKJXQ"
        "\n"
    )
    weights = []
    for ch in chars:
        if ch == " ":
            weights.append(13.0)
        elif ch == "\n":
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0 if ch.islower() else 0.6)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5 if ch.islower() else 0.25)
        else:
            weights.append(1.2 if ch.islower() else 0.1)
    return _sample(chars, weights, size, rng)

def gen_alphabet(size: int, alphabet: int, seed: int = 0) -> str:
    # every symbol of a Unicode block, each at least once, for alphabet scaling
    rng = random.Random(seed)
    chars = "".join(chr(0x4E00 + i) for i in range(alphabet))
    body = _sample(chars, [rng.random() + 0.01 for _ in chars], max(0, size - alphabet), rng)
    return chars + body

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], str]] = {
    "uniform95": lambda size, seed: gen_uniform(size, seed=seed),
    "uniform16": lambda size, seed: gen_uniform(size, alphabet=PRINTABLE[:16], seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "zipf32": lambda size, seed: gen_zipf_like(size, alphabet=32, s=1.5, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size_chars: int, seed: int) -> str:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r}, choose from {', '.join(sorted(GENERATOR_REGISTRY))}")
    return fn(size_chars, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    text_chars: int
    run_id: int
    unique_symbols: int

    build_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    encoded_bits: int
    compressed_bytes: int
    pad_bits: int
    mean_code_length: float
    entropy_bits: float
    code_efficiency: float  # entropy / mean code length, 1.0 is optimal
    correctness_ok: int  # 1 or 0


def run_one(text: str) -> MetricRow:
    ft = frequency_table(text)

    t0 = now_ns()
    codec = HuffmanCodec()
    codec.build_tree(build_priority_queue(ft))
    t1 = now_ns()

    bits = codec.encode(text)
    packed, pad_bits = pack_bits(bits)
    t2 = now_ns()

    try:
        decoded = codec.decode(unpack_bits(packed, pad_bits), len(bits))
    except HuffmanError:
        decoded = None
    t3 = now_ns()

    # a one-symbol alphabet codes to nothing, the count alone restores it
    if len(ft) == 1:
        decoded = next(iter(ft)) * len(text)

    n = max(1, len(text))
    expected_bits = weighted_code_length(codec.get_code_table(), ft)
    mean_len = expected_bits / n
    h = entropy_bits(ft)

    return MetricRow(
        exp_name="",
        dataset_name="",
        text_chars=len(text),
        run_id=0,
        unique_symbols=len(ft),
        build_ms=ns_to_ms(t1 - t0),
        encode_ms=ns_to_ms(t2 - t1),
        decode_ms=ns_to_ms(t3 - t2),
        total_ms=ns_to_ms(t3 - t0),
        encoded_bits=len(bits),
        compressed_bytes=len(packed),
        pad_bits=pad_bits,
        mean_code_length=mean_len,
        entropy_bits=h,
        code_efficiency=(h / mean_len) if mean_len else 1.0,
        correctness_ok=1 if decoded == text and expected_bits == len(bits) else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


SUMMARY_METRICS = (
    "build_ms", "encode_ms", "decode_ms", "total_ms",
    "mean_code_length", "entropy_bits", "code_efficiency",
)

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)


def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, text_chars, unique_symbols and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int, int], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.text_chars, r.unique_symbols)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "text_chars", "unique_symbols", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, chars, unique = key
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "text_chars": chars,
                "unique_symbols": unique,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)


# Plotting

def _save(outdir: Path, name: str) -> None:
    plt.tight_layout()
    plt.savefig(outdir / name, dpi=200)
    plt.close()


def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset]
        return statistics.mean(vals) if vals else float("nan")

    x = list(range(len(datasets)))

    plt.figure()
    plt.plot(x, [mean_for(d, "mean_code_length") for d in datasets], marker="o", label="Huffman mean code length")
    plt.plot(x, [mean_for(d, "entropy_bits") for d in datasets], marker="x", linestyle="--", label="entropy bound")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 1: Code Length vs Entropy by Distribution")
    plt.legend()
    _save(outdir, "exp1_code_length.png")

    plt.figure()
    plt.bar(x, [mean_for(d, "code_efficiency") for d in datasets])
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylim(0.0, 1.05)
    plt.ylabel("Entropy / Mean Code Length")
    plt.title("Experiment 1: Code Efficiency by Distribution")
    _save(outdir, "exp1_code_efficiency.png")


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.text_chars for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.text_chars == size]
            return statistics.mean(vals) if vals else float("nan")

        plt.figure()
        for field, label in (("encode_ms", "encode"), ("decode_ms", "decode"), ("build_ms", "build")):
            plt.plot(sizes, [mean_size(s, field) for s in sizes], marker="o", label=label)
        plt.xlabel("Text Size (characters)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Phase Time vs Size ({dist})")
        plt.legend()
        _save(outdir, f"exp2_phase_time_{dist}.png")


def plot_experiment_3(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp3_alphabet_scaling"]
    if not exp_rows:
        return

    alphabets = sorted(set(r.unique_symbols for r in exp_rows))

    def mean_build(n: int) -> float:
        vals = [r.build_ms for r in exp_rows if r.unique_symbols == n]
        return statistics.mean(vals) if vals else float("nan")

    ys = [mean_build(n) for n in alphabets]
    # n log n reference scaled to the largest measurement
    ref = [n * math.log2(n) for n in alphabets]
    scale = ys[-1] / ref[-1] if ref[-1] else 0.0

    plt.figure()
    plt.plot(alphabets, ys, marker="o", label="tree build")
    plt.plot(alphabets, [r * scale for r in ref], linestyle="--", label="n log n (scaled)")
    plt.xlabel("Distinct Symbols")
    plt.ylabel("Build Time (ms)")
    plt.title("Experiment 3: Tree Build Time vs Alphabet Size")
    plt.legend()
    _save(outdir, "exp3_build_time.png")


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Huffman codec experiments")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")
    ap.add_argument("--no_exp3", action="store_true", help="Disable experiment 3 (alphabet scaling)")
    ap.add_argument("--no_plots", action="store_true", help="Write CSV files only")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=128, help="Experiment 1 fixed text size in K characters")
    ap.add_argument("--exp1_generators", type=str, default="uniform95,zipf64,repetitive90,english_like",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in K characters (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=1024, help="Experiment 2 max size in K characters")
    ap.add_argument("--exp2_generators", type=str, default="uniform95,english_like",
                    help="Comma-separated dataset generator names for experiment 2")

    # Experiment 3 controls
    ap.add_argument("--exp3_max_symbols", type=int, default=8192, help="Experiment 3 largest alphabet (power-of-two growth from 16)")
    return ap


def run_experiments(args: argparse.Namespace) -> List[MetricRow]:
    rows: List[MetricRow] = []

    def record(exp_name: str, dataset_name: str, run_id: int, text: str) -> None:
        row = run_one(text)
        row.exp_name = exp_name
        row.dataset_name = dataset_name
        row.run_id = run_id
        rows.append(row)

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                record("exp1_distribution", gen_name, run_id, generate_dataset(gen_name, fixed_size, args.seed + run_id))
        print(f"Experiment 1 done ({len(rows)} rows)")

    # Experiment 2: size scaling (powers of 2)
    if not args.no_exp2:
        sizes: List[int] = []
        s = max(1, args.exp2_min_kb) * 1024
        while s <= max(1, args.exp2_max_kb) * 1024:
            sizes.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp2_generators):
            for size_c in sizes:
                for run_id in range(1, args.runs + 1):
                    text = generate_dataset(gen_name, size_c, args.seed + 10_000 + size_c + run_id)
                    record("exp2_size_scaling", gen_name, run_id, text)
        print(f"Experiment 2 done ({len(rows)} rows)")

    # Experiment 3: alphabet scaling, text size fixed at 4 characters per symbol
    if not args.no_exp3:
        n = 16
        while n <= args.exp3_max_symbols:
            for run_id in range(1, args.runs + 1):
                text = gen_alphabet(4 * n, n, seed=args.seed + 200_000 + n + run_id)
                record("exp3_alphabet_scaling", f"alphabet{n}", run_id, text)
            n *= 2
        print(f"Experiment 3 done ({len(rows)} rows)")

    return rows


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    try:
        rows = run_experiments(args)
    except (HuffmanError, ValueError) as exc:
        print(f"Experiment failed: {exc}")
        return 1

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    if not args.no_plots:
        plot_experiment_1(rows, outdir)
        plot_experiment_2(rows, outdir)
        plot_experiment_3(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
