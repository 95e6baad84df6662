"""
Elementary functions over UncertainScalar.

Single-argument functions evaluate f at the nominal value, check the
domain, and scale every derivative entry by f'(nominal). Two-argument
functions (atan2, hypot, pow) merge both operands' maps, so an argument
that appears twice is counted once with the summed sensitivity.

Plain reals are accepted anywhere and treated as constants. Results that
overflow (exp, sinh, cosh and friends) become a signed infinity, with the
derivative factor following suit.
"""

import math

import structlog

from correlated_uncertainty import operators
from correlated_uncertainty.derivatives import Linearization, combine, overflow_safe, scale
from correlated_uncertainty.errors import MathDomainError
from correlated_uncertainty.scalar import UncertainScalar, linearize, resolve_registry

logger = structlog.get_logger(__name__)

LN10 = math.log(10.0)


def _linear(x) -> Linearization:
    linear = linearize(x)
    if linear is None:
        raise TypeError(f"Expected an UncertainScalar or a real number, got {type(x).__name__}")
    return linear


def _domain_error(function: str, value: float, message: str):
    logger.debug("math_domain_error", function=function, nominal=value)
    raise MathDomainError(f"{function}: {message} (got {value})")


def _chain(x, value: float, derivative: float) -> UncertainScalar:
    """Apply the one-variable chain rule to x's derivative map."""
    return UncertainScalar._derived(
        Linearization(value, scale(_linear(x).derivatives, derivative)),
        resolve_registry(x),
    )


# ═══════════════════════════════════════════════════════════════════════
# Trigonometric
# ═══════════════════════════════════════════════════════════════════════

def sin(x) -> UncertainScalar:
    v = _linear(x).nominal
    return _chain(x, math.sin(v), math.cos(v))


def cos(x) -> UncertainScalar:
    v = _linear(x).nominal
    return _chain(x, math.cos(v), -math.sin(v))


def tan(x) -> UncertainScalar:
    v = _linear(x).nominal
    cos_v = math.cos(v)
    if cos_v == 0.0:
        _domain_error("tan", v, "undefined where cos(x) = 0")
    return _chain(x, math.tan(v), 1.0 / (cos_v * cos_v))


def asin(x) -> UncertainScalar:
    v = _linear(x).nominal
    if v < -1.0 or v > 1.0:
        _domain_error("asin", v, "input must be in [-1, 1]")
    denom = math.sqrt(1.0 - v * v)
    if denom == 0.0:
        _domain_error("asin", v, "derivative undefined at x = ±1")
    return _chain(x, math.asin(v), 1.0 / denom)


def acos(x) -> UncertainScalar:
    v = _linear(x).nominal
    if v < -1.0 or v > 1.0:
        _domain_error("acos", v, "input must be in [-1, 1]")
    denom = math.sqrt(1.0 - v * v)
    if denom == 0.0:
        _domain_error("acos", v, "derivative undefined at x = ±1")
    return _chain(x, math.acos(v), -1.0 / denom)


def atan(x) -> UncertainScalar:
    v = _linear(x).nominal
    return _chain(x, math.atan(v), 1.0 / (1.0 + v * v))


def atan2(y, x) -> UncertainScalar:
    """Angle of the point (x, y); undefined at the origin."""
    ly = _linear(y)
    lx = _linear(x)
    if lx.nominal == 0.0 and ly.nominal == 0.0:
        _domain_error("atan2", 0.0, "undefined at (0, 0)")

    denom = lx.nominal * lx.nominal + ly.nominal * ly.nominal
    derivatives = combine([
        (lx.nominal / denom, ly.derivatives),
        (-ly.nominal / denom, lx.derivatives),
    ])
    return UncertainScalar._derived(
        Linearization(math.atan2(ly.nominal, lx.nominal), derivatives),
        resolve_registry(y, x),
    )


def degrees(x) -> UncertainScalar:
    return _chain(x, math.degrees(_linear(x).nominal), 180.0 / math.pi)


def radians(x) -> UncertainScalar:
    return _chain(x, math.radians(_linear(x).nominal), math.pi / 180.0)


# ═══════════════════════════════════════════════════════════════════════
# Hyperbolic
# ═══════════════════════════════════════════════════════════════════════

def sinh(x) -> UncertainScalar:
    v = _linear(x).nominal
    return _chain(
        x, overflow_safe(math.sinh, v, negative=v < 0.0), overflow_safe(math.cosh, v)
    )


def cosh(x) -> UncertainScalar:
    v = _linear(x).nominal
    return _chain(
        x, overflow_safe(math.cosh, v), overflow_safe(math.sinh, v, negative=v < 0.0)
    )


def tanh(x) -> UncertainScalar:
    v = _linear(x).nominal
    cosh_v = overflow_safe(math.cosh, v)
    return _chain(x, math.tanh(v), 1.0 / (cosh_v * cosh_v))


def asinh(x) -> UncertainScalar:
    v = _linear(x).nominal
    return _chain(x, math.asinh(v), 1.0 / math.sqrt(1.0 + v * v))


def acosh(x) -> UncertainScalar:
    v = _linear(x).nominal
    if v <= 1.0:
        _domain_error("acosh", v, "input must be greater than 1")
    return _chain(x, math.acosh(v), 1.0 / math.sqrt(v * v - 1.0))


def atanh(x) -> UncertainScalar:
    v = _linear(x).nominal
    if v <= -1.0 or v >= 1.0:
        _domain_error("atanh", v, "input must be in (-1, 1)")
    return _chain(x, math.atanh(v), 1.0 / (1.0 - v * v))


# ═══════════════════════════════════════════════════════════════════════
# Exponential, logarithmic, roots
# ═══════════════════════════════════════════════════════════════════════

def exp(x) -> UncertainScalar:
    value = overflow_safe(math.exp, _linear(x).nominal)
    return _chain(x, value, value)


def expm1(x) -> UncertainScalar:
    v = _linear(x).nominal
    return _chain(x, overflow_safe(math.expm1, v), overflow_safe(math.exp, v))


def log(x, base=None) -> UncertainScalar:
    """Natural logarithm, or logarithm in the given (possibly uncertain) base."""
    v = _linear(x).nominal
    if v <= 0.0:
        _domain_error("log", v, "input must be greater than zero")
    natural = _chain(x, math.log(v), 1.0 / v)
    if base is None:
        return natural
    return natural / log(base)


def log10(x) -> UncertainScalar:
    v = _linear(x).nominal
    if v <= 0.0:
        _domain_error("log10", v, "input must be greater than zero")
    return _chain(x, math.log10(v), 1.0 / (v * LN10))


def log1p(x) -> UncertainScalar:
    v = _linear(x).nominal
    if v <= -1.0:
        _domain_error("log1p", v, "input must be greater than -1")
    return _chain(x, math.log1p(v), 1.0 / (1.0 + v))


def sqrt(x) -> UncertainScalar:
    v = _linear(x).nominal
    if v <= 0.0:
        _domain_error("sqrt", v, "input must be greater than zero")
    root = math.sqrt(v)
    return _chain(x, root, 1.0 / (2.0 * root))


def fabs(x) -> UncertainScalar:
    return UncertainScalar._derived(operators.absolute(_linear(x)), resolve_registry(x))


def hypot(x, y) -> UncertainScalar:
    """
    sqrt(x^2 + y^2).

    At the origin the gradient does not exist; the input maps are summed
    directly instead, which matches combining the two in quadrature.
    """
    lx = _linear(x)
    ly = _linear(y)
    value = math.hypot(lx.nominal, ly.nominal)
    if value == 0.0:
        derivatives = combine([(1.0, lx.derivatives), (1.0, ly.derivatives)])
    else:
        derivatives = combine([
            (lx.nominal / value, lx.derivatives),
            (ly.nominal / value, ly.derivatives),
        ])
    return UncertainScalar._derived(
        Linearization(value, derivatives), resolve_registry(x, y)
    )


def pow(x, y) -> UncertainScalar:
    """x ** y with the same rules as the ** operator."""
    return UncertainScalar._derived(
        operators.power(_linear(x), _linear(y)), resolve_registry(x, y)
    )
