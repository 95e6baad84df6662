"""
Field-element helpers and numpy integration.

Generic numeric containers need zero and one elements, a real-part
projection and finiteness predicates. Predicates look at the nominal value
and the standard deviation together: finite only if both are finite, NaN
if either is NaN.

Arrays of uncertain values are numpy object arrays. Ordinary array
arithmetic (including A @ v) dispatches to the scalar operators element by
element, so correlation survives matrix products.
"""

import math
import sys
from typing import Optional

import numpy as np

from correlated_uncertainty.registry import VariableRegistry
from correlated_uncertainty.scalar import UncertainScalar


def _nominal_of(x) -> float:
    return x.nominal if isinstance(x, UncertainScalar) else float(x)


def _stddev_of(x) -> float:
    return x.stddev() if isinstance(x, UncertainScalar) else 0.0


_nominal_values = np.vectorize(_nominal_of, otypes=[float])
_std_devs = np.vectorize(_stddev_of, otypes=[float])


def zero() -> UncertainScalar:
    """Additive identity."""
    return UncertainScalar(0.0)


def one() -> UncertainScalar:
    """Multiplicative identity."""
    return UncertainScalar(1.0)


def epsilon() -> UncertainScalar:
    return UncertainScalar(sys.float_info.epsilon)


def highest() -> UncertainScalar:
    """Largest finite value."""
    return UncertainScalar(sys.float_info.max)


def lowest() -> UncertainScalar:
    """Most negative finite value."""
    return UncertainScalar(-sys.float_info.max)


def infinity() -> UncertainScalar:
    return UncertainScalar(math.inf)


def quiet_nan() -> UncertainScalar:
    return UncertainScalar(math.nan)


def isfinite(x: UncertainScalar) -> bool:
    return math.isfinite(x.nominal) and math.isfinite(x.stddev())


def isnan(x: UncertainScalar) -> bool:
    return math.isnan(x.nominal) or math.isnan(x.stddev())


def isinf(x: UncertainScalar) -> bool:
    return math.isinf(x.nominal) or math.isinf(x.stddev())


def real(x: UncertainScalar) -> float:
    """Real part: the nominal value."""
    return x.nominal


def imag(x: UncertainScalar) -> float:
    return 0.0


def conj(x: UncertainScalar) -> UncertainScalar:
    return +x


def abs2(x: UncertainScalar) -> UncertainScalar:
    return x * x


def uarray(nominals, stddevs, registry: Optional[VariableRegistry] = None) -> np.ndarray:
    """
    Object array of independent atomic variables.

    Parameters
    ----------
    nominals : array_like
        Nominal values.
    stddevs : array_like
        Standard deviations, broadcast against nominals.
    registry : VariableRegistry, optional
        Registry for the new variables (the default registry if None).
    """
    nominals, stddevs = np.broadcast_arrays(
        np.asarray(nominals, dtype=float), np.asarray(stddevs, dtype=float)
    )
    out = np.empty(nominals.shape, dtype=object)
    for index in np.ndindex(nominals.shape):
        out[index] = UncertainScalar(nominals[index], stddevs[index], registry=registry)
    return out


def nominal_values(arr) -> np.ndarray:
    """Float array of nominal values; plain numbers pass through."""
    return _nominal_values(np.asarray(arr, dtype=object))


def std_devs(arr) -> np.ndarray:
    """Float array of standard deviations; plain numbers count as exact."""
    return _std_devs(np.asarray(arr, dtype=object))
