# qflowsim/tests/test_bench.py
import csv, os
from qflowsim import bench, plot_results
from qflowsim.gates import GATE_LIBRARY

def test_random_circuit_uses_library_gates():
    c = bench.random_circuit(5, 6, seed=0)
    assert c.depth == 6
    assert all(op.gate in GATE_LIBRARY for op in c.ops)
    res = c.run()
    assert abs(res.probabilities.sum() - 1.0) < 1e-9

def test_qubits_bench_writes_csv_and_plot(tmp_path, monkeypatch):
    monkeypatch.setattr(bench, "DATA_DIR", str(tmp_path))
    bench.main(["qubits", "--ns", "3,4", "--depth", "4", "--backend", "serial"])
    bench.main(["depth", "--n", "3", "--depths", "2,4", "--backend", "serial"])
    path = os.path.join(tmp_path, "serial", "qubits.csv")
    with open(path) as f:
        rows = list(csv.DictReader(f))
    assert [int(r["qubits"]) for r in rows] == [3, 4]
    assert all(float(r["wall_ms"]) > 0 for r in rows)

    written = plot_results.main(str(tmp_path))
    names = sorted(os.path.basename(p) for p in written)
    assert names == ["runtime_vs_depth_serial.png", "runtime_vs_qubits_serial.png"]
    assert all(os.path.getsize(p) > 0 for p in written)

def test_median_by_key():
    rows = [{"threads": 1, "wall_ms": 3.0}, {"threads": 1, "wall_ms": 1.0},
            {"threads": 1, "wall_ms": 2.0}, {"threads": 2, "wall_ms": 1.5}]
    agg = sorted(plot_results.median_by_key(rows, ["threads"]), key=lambda r: r["threads"])
    assert agg == [{"threads": 1, "wall_ms": 2.0}, {"threads": 2, "wall_ms": 1.5}]
