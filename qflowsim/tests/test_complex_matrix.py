# qflowsim/tests/test_complex_matrix.py
import math
import numpy as np
import pytest
from qflowsim import complex_ops as C
from qflowsim import matrix as M

def test_arithmetic_matches_builtin():
    a, b = complex(1.5, -2.0), complex(-0.25, 3.0)
    assert C.add(a, b) == a + b
    assert C.subtract(a, b) == a - b
    assert C.equals(C.multiply(a, b), a * b)
    assert C.equals(C.divide(a, b), a / b)
    assert C.conjugate(a) == a.conjugate()
    assert C.magnitude(a) == pytest.approx(abs(a))
    assert C.magnitude_squared(a) == pytest.approx(abs(a) ** 2)
    assert C.phase(C.I) == pytest.approx(math.pi / 2)
    assert C.scale(a, 2.0) == 2 * a

def test_divide_by_zero_is_nan():
    q = C.divide(C.ONE, C.ZERO)
    assert math.isnan(q.real) and math.isnan(q.imag)

def test_polar_and_exp():
    assert C.equals(C.from_polar(2.0, math.pi / 2), complex(0, 2))
    assert C.equals(C.exp(complex(0, math.pi)), complex(-1, 0))
    assert C.equals(C.exp(complex(1, 0)), complex(math.e, 0))

def test_to_string_forms():
    assert C.to_string(complex(0.5, 0)) == "0.5000"
    assert C.to_string(complex(0, -1)) == "-1.0000i"
    assert C.to_string(complex(0.5, -0.5)) == "0.5000 - 0.5000i"
    assert C.to_string(complex(1, 2), precision=1) == "1.0 + 2.0i"

def test_kron_and_identity():
    X = np.array([[0, 1], [1, 0]])
    k = M.kron(X, M.identity(2))
    assert k.shape == (4, 4)
    # X on the most-significant qubit maps |00> -> |10>
    assert np.allclose(M.matvec(k, [1, 0, 0, 0]), [0, 0, 1, 0])
    assert np.allclose(M.kron(X, X, X), np.kron(np.kron(X, X), X))

def test_dagger_trace_matmul():
    a = np.array([[1, 2j], [3, 4]])
    assert np.allclose(M.dagger(a), [[1, 3], [-2j, 4]])
    assert M.trace(a) == 5
    assert np.allclose(M.matmul(a, M.identity(2)), a)
    with pytest.raises(ValueError):
        M.matmul(a, np.ones((3, 3)))

def test_is_unitary():
    s = 1 / np.sqrt(2)
    assert M.is_unitary([[s, s], [s, -s]])
    assert not M.is_unitary([[1, 1], [0, 1]])
    assert not M.is_unitary(np.ones((2, 3)))
    assert not M.is_unitary([[np.nan, 0], [0, 1]])
