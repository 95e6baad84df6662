"""
UncertainScalar: a nominal value with correlation-aware uncertainty.

Instead of carrying an accumulated standard deviation, every scalar keeps
the partial derivatives of its value with respect to the atomic variables
it was built from. The standard deviation is recomputed on demand:

    sigma = sqrt( sum_i (dv/dx_i)^2 * sigma_i^2 )

with sigma_i looked up in the owning VariableRegistry. Because shared
atomic variables keep a single ID, x - x cancels to exactly zero and
x + x doubles instead of growing by sqrt(2).

Example:
    x = ufloat(10.0, 0.5)
    y = ufloat(3.0, 0.2)
    (x - x).stddev()        # 0.0
    (x * y / x).stddev()    # 0.2
"""

import copy
import numbers
from typing import Dict, Optional, Union

from correlated_uncertainty import operators
from correlated_uncertainty.derivatives import Linearization
from correlated_uncertainty.errors import InvalidParameterError, RegistryConsistencyError
from correlated_uncertainty.registry import VariableRegistry, get_default_registry, quadrature

Real = Union[int, float]


def _validated_stddev(stddev) -> float:
    stddev = float(stddev)
    if not stddev >= 0.0:
        raise InvalidParameterError(f"Standard deviation cannot be negative, got {stddev}")
    return stddev


class UncertainScalar:
    """
    Value type for a measurement and everything derived from it.

    Construction:
        UncertainScalar()                  -> constant 0
        UncertainScalar(5.0)               -> constant 5
        UncertainScalar(5.0, 0.0)          -> constant 5 (nothing registered)
        UncertainScalar(5.0, 0.1)          -> atomic variable, registers one ID

    Comparisons use nominal values only. Two measurements may be equal in
    central value while having different uncertainty and provenance.
    """

    __slots__ = ("_nominal", "_derivatives", "_registry")

    def __init__(self, nominal: Real = 0.0, stddev: Optional[Real] = None,
                 registry: Optional[VariableRegistry] = None):
        if isinstance(nominal, UncertainScalar):
            if stddev is not None:
                raise TypeError("Cannot combine an UncertainScalar with an explicit stddev")
            if registry is not None and registry is not nominal._registry:
                raise TypeError("A copied UncertainScalar keeps the registry of its source")
            self._nominal = nominal._nominal
            self._derivatives = nominal._derivatives
            self._registry = nominal._registry
            return

        self._nominal = float(nominal)
        self._registry = registry if registry is not None else get_default_registry()
        self._derivatives = self._atomic_map(stddev)

    def _atomic_map(self, stddev) -> Dict[int, float]:
        if stddev is None:
            return {}
        stddev = _validated_stddev(stddev)
        if stddev == 0.0:
            return {}
        return {self._registry.register(stddev): 1.0}

    @classmethod
    def _derived(cls, linear: Linearization, registry: VariableRegistry) -> "UncertainScalar":
        """Build a scalar from an already-computed linearization."""
        obj = cls.__new__(cls)
        obj._nominal = float(linear.nominal)
        obj._derivatives = linear.derivatives
        obj._registry = registry
        return obj

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def nominal(self) -> float:
        return self._nominal

    nominal_value = nominal

    def stddev(self) -> float:
        """Combined standard deviation, recomputed from the registry on every call."""
        return quadrature(self._derivatives, self._registry)

    @property
    def std_dev(self) -> float:
        return self.stddev()

    @property
    def derivatives(self) -> Dict[int, float]:
        """Copy of the derivative map (variable ID -> partial derivative)."""
        return dict(self._derivatives)

    @property
    def registry(self) -> VariableRegistry:
        return self._registry

    def num_variables(self) -> int:
        return len(self._derivatives)

    def is_atomic(self) -> bool:
        """True for a freshly declared variable: one entry with derivative 1."""
        if len(self._derivatives) != 1:
            return False
        (d,) = self._derivatives.values()
        return d == 1.0

    def is_constant(self) -> bool:
        return not self._derivatives

    def independent_copy(self) -> "UncertainScalar":
        """Same nominal and deviation, but a brand-new, uncorrelated variable."""
        return UncertainScalar(self._nominal, self.stddev(), registry=self._registry)

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------

    def set_nominal_value(self, value: Real) -> None:
        self._nominal = float(value)

    def set_stddev(self, value: Real) -> None:
        """Discard all correlation and become a new atomic variable (or a constant for 0)."""
        self._derivatives = self._atomic_map(value)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other):
        return _apply(operators.add, self, other)

    def __radd__(self, other):
        return _apply(operators.add, other, self)

    def __sub__(self, other):
        return _apply(operators.sub, self, other)

    def __rsub__(self, other):
        return _apply(operators.sub, other, self)

    def __mul__(self, other):
        return _apply(operators.mul, self, other)

    def __rmul__(self, other):
        return _apply(operators.mul, other, self)

    def __truediv__(self, other):
        return _apply(operators.truediv, self, other)

    def __rtruediv__(self, other):
        return _apply(operators.truediv, other, self)

    def __pow__(self, other, modulo=None):
        if modulo is not None:
            return NotImplemented
        return _apply(operators.power, self, other)

    def __rpow__(self, other):
        return _apply(operators.power, other, self)

    def __neg__(self):
        return UncertainScalar._derived(operators.neg(self._linear()), self._registry)

    def __pos__(self):
        return self.__copy__()

    def __abs__(self):
        return UncertainScalar._derived(operators.absolute(self._linear()), self._registry)

    # ------------------------------------------------------------------
    # Comparison (nominal values only)
    # ------------------------------------------------------------------

    def __eq__(self, other):
        other_nominal = _nominal_of(other)
        if other_nominal is None:
            return NotImplemented
        return self._nominal == other_nominal

    def __ne__(self, other):
        other_nominal = _nominal_of(other)
        if other_nominal is None:
            return NotImplemented
        return self._nominal != other_nominal

    def __lt__(self, other):
        other_nominal = _nominal_of(other)
        if other_nominal is None:
            return NotImplemented
        return self._nominal < other_nominal

    def __le__(self, other):
        other_nominal = _nominal_of(other)
        if other_nominal is None:
            return NotImplemented
        return self._nominal <= other_nominal

    def __gt__(self, other):
        other_nominal = _nominal_of(other)
        if other_nominal is None:
            return NotImplemented
        return self._nominal > other_nominal

    def __ge__(self, other):
        other_nominal = _nominal_of(other)
        if other_nominal is None:
            return NotImplemented
        return self._nominal >= other_nominal

    # Setters make instances mutable, and equality ignores uncertainty.
    __hash__ = None

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def __float__(self):
        return self._nominal

    def __bool__(self):
        return self._nominal != 0.0

    def __copy__(self):
        return UncertainScalar._derived(self._linear(), self._registry)

    def __deepcopy__(self, memo):
        # The registry is shared state, never duplicated; a deep copy stays correlated.
        return UncertainScalar._derived(
            Linearization(self._nominal, copy.copy(self._derivatives)), self._registry
        )

    def __repr__(self):
        return f"{type(self).__name__}({self._nominal!r}, {self.stddev()!r})"

    def __str__(self):
        return f"{self._nominal} ± {self.stddev()}"

    def __format__(self, format_spec):
        if not format_spec:
            return str(self)
        return f"{format(self._nominal, format_spec)} ± {format(self.stddev(), format_spec)}"

    def _linear(self) -> Linearization:
        return Linearization(self._nominal, self._derivatives)


def ufloat(nominal: Real, stddev: Real = 0.0,
           registry: Optional[VariableRegistry] = None) -> UncertainScalar:
    """Shorthand constructor: ufloat(10.0, 0.5)."""
    return UncertainScalar(nominal, stddev, registry=registry)


def _nominal_of(value) -> Optional[float]:
    if isinstance(value, UncertainScalar):
        return value._nominal
    if isinstance(value, numbers.Real):
        return float(value)
    return None


def linearize(value) -> Optional[Linearization]:
    """Linearization of a scalar or plain real; None for anything else."""
    if isinstance(value, UncertainScalar):
        return value._linear()
    if isinstance(value, numbers.Real):
        return Linearization(float(value), {})
    return None


def resolve_registry(*values) -> VariableRegistry:
    """
    Registry that owns the IDs of the given operands.

    Constants fit any registry. Two operands with derivatives from
    different registries cannot be combined.
    """
    owner = None
    fallback = None
    for value in values:
        if not isinstance(value, UncertainScalar):
            continue
        if fallback is None:
            fallback = value._registry
        if not value._derivatives:
            continue
        if owner is None:
            owner = value._registry
        elif value._registry is not owner:
            raise RegistryConsistencyError(
                f"Cannot combine values from registries '{owner.name}' "
                f"and '{value._registry.name}'"
            )
    if owner is not None:
        return owner
    return fallback if fallback is not None else get_default_registry()


def _apply(rule, left, right):
    a = linearize(left)
    b = linearize(right)
    if a is None or b is None:
        return NotImplemented
    return UncertainScalar._derived(rule(a, b), resolve_registry(left, right))
