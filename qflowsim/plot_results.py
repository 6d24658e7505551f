# qflowsim/plot_results.py
import csv, os
from collections import defaultdict
from statistics import median
import matplotlib
matplotlib.use("Agg")  # files only
import matplotlib.pyplot as plt

from .bench import DATA_DIR

def load_rows(path):
    rows = []
    with open(path, "r", newline="") as f:
        for row in csv.DictReader(f):
            row["qubits"]  = int(row["qubits"])
            row["depth"]   = int(row["depth"])
            row["threads"] = int(row["threads"])
            row["wall_ms"] = float(row["wall_ms"])
            rows.append(row)
    return rows

def median_by_key(rows, key_fields):
    buckets = defaultdict(list)
    for r in rows:
        buckets[tuple(r[k] for k in key_fields)].append(r["wall_ms"])
    agg = []
    for key, vals in buckets.items():
        out = dict(zip(key_fields, key))
        out["wall_ms"] = float(median(vals))
        agg.append(out)
    return agg

def _line_plot(series, xlabel, ylabel, title, out_path, logy=False):
    plt.figure()
    for label, pts in series.items():
        xs, ys = zip(*sorted(pts))
        plt.plot(xs, ys, marker="o", label=label)
    plt.xlabel(xlabel)
    plt.ylabel(ylabel)
    plt.title(title)
    if logy:
        plt.yscale("log")
    plt.grid(True, which="both", ls="--", lw=0.5)
    if len(series) > 1:
        plt.legend()
    plt.tight_layout()
    plt.savefig(out_path, dpi=200)
    plt.close()
    return out_path

def plot_runtime_vs(rows, key, out_dir, tag):
    """Median runtime against 'qubits' or 'depth', one line per backend."""
    series = defaultdict(list)
    for r in median_by_key(rows, ["backend", key]):
        series[r["backend"]].append((r[key], r["wall_ms"]))
    if not series:
        return None
    return _line_plot(series, key.capitalize(), "Runtime (ms)", f"Runtime vs {key} [{tag}]",
                      os.path.join(out_dir, f"runtime_vs_{key}_{tag}.png"),
                      logy=(key == "qubits"))

def plot_speedup_vs_threads(rows, out_dir, tag):
    pts = sorted(median_by_key(rows, ["threads"]), key=lambda r: r["threads"])
    t1 = next((r["wall_ms"] for r in pts if r["threads"] == 1), None)
    if not t1:
        return None
    series = {"speedup": [(r["threads"], t1 / r["wall_ms"]) for r in pts]}
    return _line_plot(series, "Threads", "Speedup (T1/Tt)", f"Speedup vs Threads [{tag}]",
                      os.path.join(out_dir, f"speedup_vs_threads_{tag}.png"))

def plot_file(path):
    tag = os.path.splitext(os.path.basename(path))[0]
    backend = os.path.basename(os.path.dirname(path))
    out_dir = os.path.dirname(path)
    rows = load_rows(path)
    print(f"Plotting from {backend}/{tag}.csv ({len(rows)} rows)...")
    if tag.startswith("threads"):
        return [plot_speedup_vs_threads(rows, out_dir, backend)]
    if tag.startswith("depth"):
        return [plot_runtime_vs(rows, "depth", out_dir, backend)]
    return [plot_runtime_vs(rows, "qubits", out_dir, backend)]

def main(data_dir=DATA_DIR):
    csvs = []
    for root, _, files in os.walk(data_dir):
        csvs.extend(os.path.join(root, f) for f in files if f.endswith(".csv"))
    if not csvs:
        print(f"No CSV files found under {data_dir}")
        return []
    written = []
    for path in sorted(csvs):
        try:
            written.extend(p for p in plot_file(path) if p)
        except (OSError, KeyError, ValueError) as e:
            print(f"Skipping {path}: {e}")
    print(f"\nSaved {len(written)} plots under {data_dir}/<backend>/*.png")
    return written

if __name__ == "__main__":
    main()
