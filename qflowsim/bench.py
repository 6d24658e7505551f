# qflowsim/bench.py
import argparse, csv, os, platform, socket, time
from datetime import datetime
import numpy as np
from .circuit import Circuit
from .config import BACKENDS

DATA_DIR = os.path.join(os.getcwd(), "data")

def backend_dir(backend):
    path = os.path.join(DATA_DIR, backend)
    os.makedirs(path, exist_ok=True)
    return path

def warmup(circ, backend, threads=None):
    # one dummy run to JIT-compile the kernel; no norm check
    _ = circ.run(backend=backend, num_threads=threads, check_norm=False)

# ---------------------------------------------------------------------

HEADER = ["qubits","depth","backend","threads","gates","wall_ms","hostname","python","timestamp"]

def meta_row():
    return {
        "hostname": socket.gethostname(),
        "python": platform.python_version(),
        "timestamp": datetime.now().isoformat(timespec="seconds"),
    }

def new_csv(path):
    """Create/overwrite CSV with header."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writeheader()

def write_row(path, row):
    with open(path, "a", newline="") as f:
        csv.DictWriter(f, fieldnames=HEADER).writerow(row)

# ---------------------------------------------------------------------

def random_circuit(n, depth, seed=0):
    """Alternating layers of 1-qubit gates and 2/3-qubit entanglers."""
    rng = np.random.default_rng(seed)
    c = Circuit.empty(n)
    for layer in range(depth):
        if layer % 2 == 0:
            for k in range(n):
                g = rng.integers(0, 3)
                if g == 0:
                    c.add("H", k, step=layer)
                elif g == 1:
                    c.add("X", k, step=layer)
                else:
                    c.add("Rz", k, params=(float(rng.uniform(0, 2*np.pi)),), step=layer)
        else:
            for k in range(0, n-1, 2):
                if n >= 3 and k + 2 < n and rng.integers(0, 4) == 0:
                    c.add("Toffoli", k, k+1, k+2, step=layer)
                elif rng.integers(0, 2) == 0:
                    c.add("CNOT", k, k+1, step=layer)
                else:
                    c.add("CNOT", k+1, k, step=layer)
    return c

def time_run(circ, backend, threads=None):
    t0 = time.perf_counter()
    _ = circ.run(backend=backend, num_threads=threads, check_norm=False)
    return (time.perf_counter() - t0) * 1e3  # ms

def numba_max_threads():
    from numba import config
    return config.NUMBA_NUM_THREADS

def _row(circ, n, depth, backend, threads, wall):
    m = meta_row()
    return {"qubits": n, "depth": depth, "backend": backend, "threads": threads,
            "gates": len(circ.ops), "wall_ms": f"{wall:.3f}", **m}

# ---------------------------------------------------------------------
# individual experiments

def bench_qubits(ns, depth, backend, out_path):
    print(f"[run] Qubits scaling -> {out_path}")
    new_csv(out_path)
    threads = 0 if backend == "serial" else numba_max_threads()
    warmup(random_circuit(min(ns), 2, seed=42), backend=backend)
    for n in ns:
        circ = random_circuit(n, depth, seed=42)
        wall = time_run(circ, backend)
        write_row(out_path, _row(circ, n, depth, backend, threads, wall))
        print(f"  n={n}  wall={wall:.2f} ms")
    print("done.\n")

def bench_depth(n, depths, backend, out_path):
    print(f"[run] Depth scaling -> {out_path}")
    new_csv(out_path)
    threads = 0 if backend == "serial" else numba_max_threads()
    warmup(random_circuit(n, min(depths), seed=7), backend=backend)
    for d in depths:
        circ = random_circuit(n, d, seed=7)
        wall = time_run(circ, backend)
        write_row(out_path, _row(circ, n, d, backend, threads, wall))
        print(f"  depth={d}  wall={wall:.2f} ms")
    print("done.\n")

def bench_threads(n, depth, threads_list, out_path):
    print(f"[run] Thread scaling -> {out_path}")
    new_csv(out_path)
    circ = random_circuit(n, depth, seed=123)
    pool = numba_max_threads()
    warmup(circ, "numba", threads=1)
    t1 = time_run(circ, "numba", threads=1)
    print(f"  pool={pool}  T1={t1:.1f} ms")
    for t in threads_list:
        tt = min(int(t), pool)
        if tt != t:
            print(f"  requested t={t} > pool={pool}; using t={tt}")
        wall = time_run(circ, "numba", threads=tt)
        speedup = t1 / wall if wall > 0 else float("nan")
        write_row(out_path, _row(circ, n, depth, "numba", tt, wall))
        print(f"  t={tt}  wall={wall:.2f} ms  speedup={speedup:.2f}x")
    print("done.\n")

# ---------------------------------------------------------------------
def main(argv=None):
    p = argparse.ArgumentParser(description="qflowsim benchmarks -> data/<backend>/*.csv")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_qubits = sub.add_parser("qubits")
    p_qubits.add_argument("--ns", type=str, required=True)
    p_qubits.add_argument("--depth", type=int, default=100)
    p_qubits.add_argument("--backend", type=str, default="serial", choices=BACKENDS)

    p_depth = sub.add_parser("depth")
    p_depth.add_argument("--n", type=int, default=12)
    p_depth.add_argument("--depths", type=str, default="10,50,100,300,600")
    p_depth.add_argument("--backend", type=str, default="serial", choices=BACKENDS)

    p_threads = sub.add_parser("threads")
    p_threads.add_argument("--n", type=int, default=16)
    p_threads.add_argument("--depth", type=int, default=200)
    p_threads.add_argument("--threads", type=str, default="1,2,4,8,16")

    args = p.parse_args(argv)

    if args.cmd == "qubits":
        ns = [int(x) for x in args.ns.split(",")]
        bench_qubits(ns, args.depth, args.backend,
                     os.path.join(backend_dir(args.backend), "qubits.csv"))

    elif args.cmd == "depth":
        ds = [int(x) for x in args.depths.split(",")]
        bench_depth(args.n, ds, args.backend,
                    os.path.join(backend_dir(args.backend), "depth.csv"))

    elif args.cmd == "threads":
        ts = [int(x) for x in args.threads.split(",")]
        bench_threads(args.n, args.depth, ts,
                      os.path.join(backend_dir("numba"), "threads.csv"))

if __name__ == "__main__":
    main()
