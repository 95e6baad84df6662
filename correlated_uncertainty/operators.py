"""
First-order propagation rules for the arithmetic operators.

Each rule takes two Linearization values (nominal plus derivative map) and
returns a new one. Plain constants enter as Linearization(c, {}), so the
same rule covers scalar-scalar, scalar-constant and constant-scalar cases.

    a + b   d = da + db
    a - b   d = da - db
    a * b   d = b*da + a*db
    a / b   d = da/b - (a/b^2)*db
    a ** b  d = v*(b/a)*da + v*ln(a)*db      (v = a^b, a > 0)
"""

import math

import structlog

from correlated_uncertainty.derivatives import Linearization, combine, odd_integer, overflow_safe, scale
from correlated_uncertainty.errors import MathDomainError, UncertaintyZeroDivisionError

logger = structlog.get_logger(__name__)


def add(a: Linearization, b: Linearization) -> Linearization:
    return Linearization(
        a.nominal + b.nominal,
        combine([(1.0, a.derivatives), (1.0, b.derivatives)]),
    )


def sub(a: Linearization, b: Linearization) -> Linearization:
    return Linearization(
        a.nominal - b.nominal,
        combine([(1.0, a.derivatives), (-1.0, b.derivatives)]),
    )


def mul(a: Linearization, b: Linearization) -> Linearization:
    return Linearization(
        a.nominal * b.nominal,
        combine([(b.nominal, a.derivatives), (a.nominal, b.derivatives)]),
    )


def truediv(a: Linearization, b: Linearization) -> Linearization:
    """Quotient rule; the divisor is checked before anything is computed."""
    if b.nominal == 0.0:
        logger.debug("division_by_zero", dividend=a.nominal)
        raise UncertaintyZeroDivisionError("Division by an uncertain value with nominal 0")

    inv = 1.0 / b.nominal
    return Linearization(
        a.nominal * inv,
        combine([(inv, a.derivatives), (-a.nominal * inv * inv, b.derivatives)]),
    )


def neg(a: Linearization) -> Linearization:
    return Linearization(-a.nominal, scale(a.derivatives, -1.0))


def power(a: Linearization, b: Linearization) -> Linearization:
    """
    a ** b.

    A constant exponent uses the ordinary power rule and accepts any base
    for which the real power and its derivative exist. An uncertain
    exponent needs ln(a), so the base must be strictly positive.
    """
    if not b.derivatives:
        return _constant_power(a, b.nominal)

    if a.nominal <= 0.0:
        logger.debug("math_domain_error", function="pow", base=a.nominal, exponent=b.nominal)
        raise MathDomainError(
            f"pow with an uncertain exponent requires a positive base, got {a.nominal}"
        )

    value = overflow_safe(math.pow, a.nominal, b.nominal)
    return Linearization(
        value,
        combine([
            (value * b.nominal / a.nominal, a.derivatives),
            (value * math.log(a.nominal), b.derivatives),
        ]),
    )


def _constant_power(a: Linearization, exponent: float) -> Linearization:
    if exponent == 0.0:
        return Linearization(1.0, {})

    base = a.nominal
    if base < 0.0 and not float(exponent).is_integer():
        logger.debug("math_domain_error", function="pow", base=base, exponent=exponent)
        raise MathDomainError(
            f"Negative base {base} with non-integer exponent {exponent}"
        )
    if base == 0.0 and exponent < 1.0:
        if exponent < 0.0:
            raise UncertaintyZeroDivisionError(
                f"0 raised to negative power {exponent}"
            )
        if not a.derivatives:
            return Linearization(0.0, {})
        logger.debug("math_domain_error", function="pow", base=base, exponent=exponent)
        raise MathDomainError(
            f"Derivative of x**{exponent} is undefined at x = 0"
        )

    if exponent == 1.0:
        return Linearization(base, a.derivatives)

    negative = base < 0.0
    value = overflow_safe(math.pow, base, exponent, negative=negative and odd_integer(exponent))
    slope = exponent * overflow_safe(
        math.pow, base, exponent - 1.0, negative=negative and odd_integer(exponent - 1.0)
    )
    return Linearization(value, scale(a.derivatives, slope))


def absolute(a: Linearization) -> Linearization:
    """|a|, with derivative sign(a) taken as 0 exactly at a = 0."""
    if a.nominal > 0.0:
        sign = 1.0
    elif a.nominal < 0.0:
        sign = -1.0
    else:
        sign = 0.0
    return Linearization(abs(a.nominal), scale(a.derivatives, sign))
