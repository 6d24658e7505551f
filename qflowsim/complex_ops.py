# qflowsim/complex_ops.py
import math

ZERO = complex(0.0, 0.0)
ONE = complex(1.0, 0.0)
I = complex(0.0, 1.0)
MINUS_I = complex(0.0, -1.0)

NAN = complex(math.nan, math.nan)


def add(a: complex, b: complex) -> complex:
    return complex(a.real + b.real, a.imag + b.imag)

def subtract(a: complex, b: complex) -> complex:
    return complex(a.real - b.real, a.imag - b.imag)

def multiply(a: complex, b: complex) -> complex:
    return complex(a.real*b.real - a.imag*b.imag,
                   a.real*b.imag + a.imag*b.real)

def divide(a: complex, b: complex) -> complex:
    """a / b; a zero-magnitude divisor yields NaN instead of raising."""
    den = b.real*b.real + b.imag*b.imag
    if den == 0.0:
        return NAN
    return complex((a.real*b.real + a.imag*b.imag) / den,
                   (a.imag*b.real - a.real*b.imag) / den)

def conjugate(a: complex) -> complex:
    return complex(a.real, -a.imag)

def magnitude(a: complex) -> float:
    return math.hypot(a.real, a.imag)

def magnitude_squared(a: complex) -> float:
    return a.real*a.real + a.imag*a.imag

def phase(a: complex) -> float:
    return math.atan2(a.imag, a.real)

def from_polar(r: float, theta: float) -> complex:
    return complex(r * math.cos(theta), r * math.sin(theta))

def scale(a: complex, s: float) -> complex:
    return complex(a.real * s, a.imag * s)

def exp(a: complex) -> complex:
    return from_polar(math.exp(a.real), a.imag)

def equals(a: complex, b: complex, epsilon: float = 1e-10) -> bool:
    return abs(a.real - b.real) < epsilon and abs(a.imag - b.imag) < epsilon

def to_string(a: complex, precision: int = 4) -> str:
    """Display form: '0.7071', '-1.0000i', '0.5000 - 0.5000i'."""
    re = f"{a.real:.{precision}f}"
    im = f"{abs(a.imag):.{precision}f}"
    if abs(a.imag) < 1e-10:
        return re
    if abs(a.real) < 1e-10:
        return f"{im}i" if a.imag >= 0 else f"-{im}i"
    sign = "+" if a.imag >= 0 else "-"
    return f"{re} {sign} {im}i"
