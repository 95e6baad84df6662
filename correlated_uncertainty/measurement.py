"""
Atomic variables from measurement data.

Type A uncertainty comes from the scatter of repeated readings, Type B
from instrument specifications. Either way the result is a single atomic
UncertainScalar; independent components of one input quantity are first
combined in quadrature so the quantity is still one variable downstream.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from correlated_uncertainty.errors import InvalidParameterError
from correlated_uncertainty.registry import VariableRegistry
from correlated_uncertainty.scalar import UncertainScalar

# Standard uncertainty = half-width / divisor
DISTRIBUTION_DIVISORS = {
    "normal": 2.0,               # half-width taken as ~95% coverage, k=2
    "rectangular": np.sqrt(3),
    "triangular": np.sqrt(6),
    "u-shaped": np.sqrt(2),
}


def standard_error(data) -> tuple:
    """
    Mean and standard error of the mean of repeated readings.

    NaN readings are ignored. Returns (mean, sem, n).
    """
    data = np.asarray(data, dtype=float).ravel()
    data = data[~np.isnan(data)]
    n = len(data)
    if n < 2:
        raise InvalidParameterError("Type A evaluation requires at least 2 measurements.")

    mean = float(np.mean(data))
    std = float(np.std(data, ddof=1))      # sample standard deviation
    return mean, std / np.sqrt(n), n


def type_b_uncertainty(uncertainty: float, distribution: str = "normal",
                       is_half_width: bool = False) -> float:
    """
    Standard uncertainty from an instrument specification.

    Parameters
    ----------
    uncertainty : float
        Standard uncertainty u(x), or the half-width 'a' of the
        distribution bounds when is_half_width is True.
    distribution : str
        "normal"      → u = a / 2   (half-width read as 95% coverage)
        "rectangular" → u = a / √3
        "triangular"  → u = a / √6
        "u-shaped"    → u = a / √2
    is_half_width : bool
        Interpret 'uncertainty' as a half-width.
    """
    if distribution not in DISTRIBUTION_DIVISORS:
        raise InvalidParameterError(
            f"Unknown distribution '{distribution}'. "
            f"Choose from: {list(DISTRIBUTION_DIVISORS.keys())}"
        )
    if not uncertainty >= 0.0:
        raise InvalidParameterError(f"Uncertainty cannot be negative, got {uncertainty}")

    if is_half_width:
        return float(uncertainty / DISTRIBUTION_DIVISORS[distribution])
    return float(uncertainty)


def from_samples(data, registry: Optional[VariableRegistry] = None) -> UncertainScalar:
    """Type A: mean of the readings with the standard error of the mean."""
    mean, sem, _ = standard_error(data)
    return UncertainScalar(mean, sem, registry=registry)


def from_type_b(value: float, uncertainty: float, distribution: str = "normal",
                is_half_width: bool = False,
                registry: Optional[VariableRegistry] = None) -> UncertainScalar:
    """Type B: best value with an uncertainty taken from a specification."""
    u = type_b_uncertainty(uncertainty, distribution, is_half_width)
    return UncertainScalar(value, u, registry=registry)


def combine_sources(value: float, *stddevs: float,
                    registry: Optional[VariableRegistry] = None) -> UncertainScalar:
    """One atomic variable whose deviation is the root-sum-of-squares of the components."""
    for s in stddevs:
        if not s >= 0.0:
            raise InvalidParameterError(f"Standard deviation cannot be negative, got {s}")
    combined = float(np.sqrt(sum(s ** 2 for s in stddevs)))
    return UncertainScalar(value, combined, registry=registry)


@dataclass
class UncertaintySource:
    """A single Type A or Type B component of an input quantity."""
    name: str
    type: str                     # "A" or "B"
    value: float                  # standard uncertainty u(x)
    description: str = ""
    distribution: str = "normal"

    def __repr__(self):
        return f"UncertaintySource({self.name}: u={self.value:.4g}, Type {self.type})"


@dataclass
class MeasuredQuantity:
    """
    A directly measured quantity with its uncertainty budget.

    Sources are independent and combine in quadrature. as_variable() turns
    the quantity into one atomic UncertainScalar; repeated calls return the
    same variable until a source is added.
    """
    name: str
    symbol: str
    unit: str
    best_value: float = 0.0
    sources: List[UncertaintySource] = field(default_factory=list)
    registry: Optional[VariableRegistry] = None
    _variable: Optional[UncertainScalar] = field(default=None, init=False, repr=False)

    @property
    def combined_uncertainty(self) -> float:
        """Root-sum-of-squares of all uncertainty sources."""
        return float(np.sqrt(sum(s.value ** 2 for s in self.sources)))

    @property
    def relative_uncertainty(self) -> float:
        if self.best_value == 0:
            return float("inf")
        return self.combined_uncertainty / abs(self.best_value)

    def add_type_a(self, data, name: str = "", description: str = "") -> UncertaintySource:
        """Add Type A uncertainty from repeated readings; the mean becomes the best value."""
        mean, sem, n = standard_error(data)
        self.best_value = mean

        source = UncertaintySource(
            name=name or f"{self.name}_typeA",
            type="A",
            value=float(sem),
            description=description or f"Statistical scatter from {n} repeated measurements",
        )
        return self._add(source)

    def add_type_b(self, uncertainty: float, name: str = "", description: str = "",
                   distribution: str = "normal", is_half_width: bool = False) -> UncertaintySource:
        """Add Type B uncertainty from non-statistical knowledge."""
        source = UncertaintySource(
            name=name or f"{self.name}_typeB",
            type="B",
            value=type_b_uncertainty(uncertainty, distribution, is_half_width),
            description=description or f"Systematic uncertainty ({distribution} distribution)",
            distribution=distribution,
        )
        return self._add(source)

    def _add(self, source: UncertaintySource) -> UncertaintySource:
        self.sources.append(source)
        self._variable = None
        return source

    def as_variable(self) -> UncertainScalar:
        if self._variable is None:
            self._variable = UncertainScalar(
                self.best_value, self.combined_uncertainty, registry=self.registry
            )
        return self._variable
