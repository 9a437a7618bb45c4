"""Standard single-qubit gates as `Gate` transforms."""

from __future__ import annotations

import cmath
import math

from .extensions import ONE_OVER_ROOT_TWO
from .transforms import Gate


# --- Fixed single-qubit gates ---

I = Gate(1, 0, 0, 1)

# Pauli matrices
X = Gate(0, 1, 1, 0)
Y = Gate(0, -1j, 1j, 0)
Z = Gate(1, 0, 0, -1)

H = Gate(1, 1, 1, -1).scale(ONE_OVER_ROOT_TWO)

S = Gate(1, 0, 0, 1j)

# pi/8 gate
T = Gate(1, 0, 0, cmath.exp(1j * math.pi / 4))

# Classical not
NOT = X


# --- Parameterized single-qubit gates ---

def phase(n: int) -> Gate:
    """R_n = diag(1, e^(2*pi*i / 2^n)), the Fourier transform rotation."""
    return Gate(1, 0, 0, cmath.exp(2j * math.pi / 2 ** n))


def phase_shift(phi: float) -> Gate:
    return Gate(1, 0, 0, cmath.exp(1j * phi))


def rx(theta: float) -> Gate:
    c, s = math.cos(theta / 2), math.sin(theta / 2)
    return Gate(c, -1j * s, -1j * s, c)


def ry(theta: float) -> Gate:
    c, s = math.cos(theta / 2), math.sin(theta / 2)
    return Gate(c, -s, s, c)


def rz(theta: float) -> Gate:
    return Gate(cmath.exp(-1j * theta / 2), 0, 0, cmath.exp(1j * theta / 2))
