# qflowsim/tests/test_cross_backend.py
import numpy as np
import pytest
from qflowsim.circuit import Circuit
from qflowsim.bench import random_circuit

pytest.importorskip("numba")

def max_abs_diff(a, b):
    return float(np.max(np.abs(a - b)))

def test_serial_vs_numba_small():
    # 3-qubit mixed circuit including a reversed-order 2-qubit and a 3-qubit gate
    c = (Circuit.empty(3).h(0).x(1).cnot(1, 2).h(2).cnot(2, 0).rz(1, 0.4)
         .toffoli(2, 0, 1).add("RYY", 1, 0, params=(0.9,)).add("RCCX", 0, 2, 1))
    st_s = c.run(backend="serial").state_vector
    st_n = c.run(backend="numba", num_threads=2).state_vector
    assert max_abs_diff(st_s, st_n) < 1e-10

def test_random_circuits_match():
    rng = np.random.default_rng(123)
    n = 5
    for depth in (5, 10, 20):
        c = Circuit.empty(n)
        for _ in range(depth):
            g = rng.integers(0, 4)  # 0:H, 1:Rx, 2:CNOT, 3:Fredkin
            if g == 0:
                c.h(int(rng.integers(0, n)))
            elif g == 1:
                c.rx(int(rng.integers(0, n)), float(rng.uniform(0, np.pi)))
            elif g == 2:
                a, b = (int(q) for q in rng.permutation(n)[:2])
                c.cnot(a, b)
            else:
                a, b, t = (int(q) for q in rng.permutation(n)[:3])
                c.add("Fredkin", a, b, t)
        s = c.run(backend="serial").state_vector
        t = c.run(backend="numba", num_threads=4).state_vector
        assert np.allclose(s, t, atol=1e-10, rtol=0)

def test_bench_circuit_agrees_at_moderate_size():
    c = random_circuit(12, 6, seed=3)
    s = c.run(backend="serial").state_vector
    t = c.run(backend="numba").state_vector
    assert np.allclose(s, t, atol=1e-9, rtol=0)
