# qflowsim/tests/test_correctness_small.py
import numpy as np
import pytest
from qflowsim.circuit import Circuit
from qflowsim.simulator import QuantumSimulator
from qflowsim.gates import GATE_LIBRARY

INV_SQRT2 = 1 / np.sqrt(2)

def almost(p, q, tol=1e-9):
    return np.allclose(p, q, atol=tol, rtol=0)

def basis(n, index):
    v = np.zeros(1 << n, dtype=np.complex128); v[index] = 1.0
    return v

def test_starts_in_all_zero():
    sim = QuantumSimulator(3)
    assert almost(sim.get_state(), basis(3, 0))

def test_h_on_qubit0_is_msb():
    # H on qubit 0 of 2: (|00> + |10>)/sqrt(2)
    st = Circuit.empty(2).h(0).run().state_vector
    assert almost(st, [INV_SQRT2, 0, INV_SQRT2, 0])

def test_x_on_last_qubit_sets_lsb():
    st = Circuit.empty(2).x(1).run().state_vector
    assert almost(st, basis(2, 1))

def test_h_twice_restores():
    sim = QuantumSimulator(3)
    sim.apply("Ry", [0.7], 0).apply("CNOT", 0, 2).apply("U3", [0.3, 1.1, -0.4], 1)
    before = sim.get_state()
    for q in range(3):
        sim.apply("H", q).apply("H", q)
        assert almost(sim.get_state(), before)

def test_bell_state():
    sim = QuantumSimulator(2)
    sim.apply("H", 0).apply("CNOT", 0, 1)
    amps = sim.get_state()
    assert abs(amps[0]) == pytest.approx(INV_SQRT2)
    assert abs(amps[3]) == pytest.approx(INV_SQRT2)
    assert abs(amps[1]) < 1e-12 and abs(amps[2]) < 1e-12
    assert almost(sim.get_probabilities(), [0.5, 0, 0, 0.5])

def test_cnot_control_off_noop():
    st = Circuit.empty(2).cnot(1, 0).run().state_vector
    assert almost(st, basis(2, 0))

def test_cnot_reversed_qubit_order():
    # control=1 (LSB), target=0 (MSB): |01> -> |11>
    st = Circuit.empty(2).x(1).cnot(1, 0).run().state_vector
    assert almost(st, basis(2, 3))
    # control=0, target=1: |10> -> |11>
    st = Circuit.empty(2).x(0).cnot(0, 1).run().state_vector
    assert almost(st, basis(2, 3))

def test_cnot_non_adjacent_qubits():
    # |100> with CNOT(0 -> 2) gives |101>; CNOT(2 -> 0) on |001> gives |101>
    assert almost(Circuit.empty(3).x(0).cnot(0, 2).run().state_vector, basis(3, 0b101))
    assert almost(Circuit.empty(3).x(2).cnot(2, 0).run().state_vector, basis(3, 0b101))

@pytest.mark.parametrize("c1,c2,t", [(0, 1, 2), (2, 1, 0), (1, 2, 0), (0, 2, 1)])
def test_toffoli_truth_table(c1, c2, t):
    for a in (0, 1):
        for b in (0, 1):
            for tv in (0, 1):
                bits = {c1: a, c2: b, t: tv}
                label = "".join(str(bits[q]) for q in range(3))
                sim = QuantumSimulator(3).initialize(label)
                sim.apply("Toffoli", c1, c2, t)
                bits[t] = tv ^ (a & b)
                expect = int("".join(str(bits[q]) for q in range(3)), 2)
                assert almost(sim.get_state(), basis(3, expect))

def test_fredkin_swaps_when_control_set():
    sim = QuantumSimulator(3).initialize("110")
    sim.apply("Fredkin", 0, 1, 2)
    assert almost(sim.get_state(), basis(3, 0b101))
    sim = QuantumSimulator(3).initialize("010")
    sim.apply("Fredkin", 0, 1, 2)
    assert almost(sim.get_state(), basis(3, 0b010))

def test_swap_and_aliases():
    sim = QuantumSimulator(2).initialize("10")
    sim.apply("SWAP", 0, 1)
    assert almost(sim.get_state(), basis(2, 0b01))
    sim.apply("CX", 1, 0)
    assert almost(sim.get_state(), basis(2, 0b11))

def test_gate_on_spectator_register_matches_kron():
    # embedding a 2-qubit gate on (2, 0) of 3 qubits equals the dense operator
    from qflowsim.matrix import kron
    rng = np.random.default_rng(11)
    v = rng.normal(size=8) + 1j*rng.normal(size=8)
    v /= np.linalg.norm(v)
    sim = QuantumSimulator(3).set_state(v)
    sim.apply("CH", 2, 0)
    # permute qubits so the gate acts on the leading pair (2, 0, 1)
    CH = GATE_LIBRARY["CH"].matrix
    t = v.reshape(2, 2, 2).transpose(2, 0, 1).reshape(8)
    t = kron(CH, np.eye(2)) @ t
    expect = t.reshape(2, 2, 2).transpose(1, 2, 0).reshape(8)
    assert almost(sim.get_state(), expect)

def test_normalization_preserved_over_random_sequence():
    rng = np.random.default_rng(2024)
    n = 4
    sim = QuantumSimulator(n)
    names = list(GATE_LIBRARY)
    for _ in range(200):
        info = GATE_LIBRARY[names[rng.integers(0, len(names))]]
        qubits = [int(q) for q in rng.permutation(n)[:info.qubits]]
        params = [float(p) for p in rng.uniform(-2*np.pi, 2*np.pi, size=len(info.params))]
        if params:
            sim.apply(info.symbol, params, *qubits)
        else:
            sim.apply(info.symbol, *qubits)
        assert abs(np.sum(sim.get_probabilities()) - 1.0) < 1e-6

def test_group_bases_clear_target_bits():
    from qflowsim.apply_serial import group_bases, qubit_mask
    n, qubits = 6, (4, 1)
    target = qubit_mask(n, 4) | qubit_mask(n, 1)
    expected = [i for i in range(1 << n) if i & target == 0]
    assert list(group_bases(n, qubits, 0, 16)) == expected
    assert list(group_bases(n, qubits, 5, 9)) == expected[5:9]

def test_chunked_gather_matches_permutation():
    # 17 qubits gives 2^15 CNOT groups, two gather chunks
    n = 17
    rng = np.random.default_rng(5)
    psi = rng.normal(size=1 << n) + 1j * rng.normal(size=1 << n)
    psi /= np.linalg.norm(psi)
    sim = QuantumSimulator(n).set_state(psi)
    sim.apply("CNOT", 0, 16)
    idx = np.arange(1 << n)
    perm = np.where(idx & (1 << 16), idx ^ 1, idx)
    assert almost(sim.get_state(limit=None), psi[perm])
