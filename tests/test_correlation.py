"""
Correlation tracking through arithmetic and elementary functions.

Includes property-based tests via Hypothesis.
"""

import math

import pytest
from hypothesis import given, settings as hyp_settings
from hypothesis import strategies as st

from correlated_uncertainty import umath
from correlated_uncertainty.scalar import UncertainScalar, ufloat

pytestmark = pytest.mark.correlation

nominals = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False).filter(lambda v: abs(v) > 1e-3)
sigmas = st.one_of(st.just(0.0), st.floats(min_value=1e-100, max_value=1e3))


class TestSelfCorrelation:
    """Identities over a single atomic variable."""

    def test_self_subtraction(self):
        x = ufloat(10.0, 0.5)
        result = x - x
        assert result.nominal == 0.0
        assert result.stddev() == 0.0
        assert result.num_variables() == 0

    def test_self_addition(self):
        x = ufloat(10.0, 0.5)
        result = x + x
        assert result.nominal == pytest.approx(20.0)
        assert result.stddev() == pytest.approx(1.0)

    def test_self_multiplication(self):
        x = ufloat(3.0, 0.1)
        result = x * x
        assert result.nominal == pytest.approx(9.0)
        assert result.stddev() == pytest.approx(0.6)

    def test_self_division(self):
        x = ufloat(10.0, 0.5)
        result = x / x
        assert result.nominal == pytest.approx(1.0)
        assert result.stddev() == pytest.approx(0.0, abs=1e-12)

    def test_chained_operations(self):
        x = ufloat(2.0, 0.1)
        c = ((x + x) + x) - x
        assert c.nominal == pytest.approx(4.0)
        assert c.stddev() == pytest.approx(0.2)

    def test_scalar_multiple_matches_repeated_addition(self):
        x = ufloat(5.0, 0.1)
        assert (x * 2.0).stddev() == pytest.approx((x + x).stddev())

    def test_unary_negation_cancels(self):
        x = ufloat(5.0, 0.3)
        assert (x + (-x)).stddev() == 0.0

    def test_unary_plus_keeps_correlation(self):
        x = ufloat(5.0, 0.3)
        assert (x - (+x)).stddev() == 0.0

    def test_compound_assignment(self):
        """+= rebinds to the sum; the original value is untouched."""
        x = ufloat(3.0, 0.1)
        y = x
        y += x
        assert y.nominal == pytest.approx(6.0)
        assert y.stddev() == pytest.approx(0.2)
        assert x.nominal == 3.0

        z = x
        z -= x
        assert z.nominal == 0.0
        assert z.stddev() == 0.0

    def test_pow_self_exponent(self):
        x = ufloat(2.0, 0.1)
        result = x ** x
        assert result.nominal == pytest.approx(4.0)
        assert result.stddev() == pytest.approx(abs(4.0 * (1.0 + math.log(2.0))) * 0.1, abs=1e-10)


class TestIndependentVariables:
    """Distinct atomic variables combine in quadrature."""

    def test_addition(self):
        x = ufloat(1.0, 0.1)
        y = ufloat(2.0, 0.2)
        result = x + y
        assert result.nominal == pytest.approx(3.0)
        assert result.stddev() == pytest.approx(0.223607, abs=1e-6)
        assert result.num_variables() == 2

    def test_subtraction(self):
        x = ufloat(5.0, 0.3)
        y = ufloat(2.0, 0.4)
        assert (x - y).stddev() == pytest.approx(0.5)

    def test_multiplication(self):
        x = ufloat(2.0, 0.1)
        y = ufloat(3.0, 0.2)
        result = x * y
        assert result.nominal == pytest.approx(6.0)
        assert result.stddev() == pytest.approx(0.5)

    def test_multiplication_small_values(self):
        x = ufloat(1.0, 0.1)
        y = ufloat(2.0, 0.2)
        assert (x * y).stddev() == pytest.approx(0.282843, abs=1e-6)

    def test_division(self):
        x = ufloat(1.0, 0.1)
        y = ufloat(2.0, 0.2)
        result = x / y
        assert result.nominal == pytest.approx(0.5)
        assert result.stddev() == pytest.approx(0.070711, abs=1e-6)

    def test_independent_copy_breaks_correlation(self, registry):
        x = ufloat(10.0, 0.5)
        y = x.independent_copy()
        assert set(x.derivatives).isdisjoint(y.derivatives)
        assert y.is_atomic()
        assert registry.size() == 2

        result = x - y
        assert result.nominal == 0.0
        assert result.stddev() == pytest.approx(math.sqrt(2) * 0.5)

    def test_partial_cancellation(self):
        x = ufloat(5.0, 0.1)
        y = ufloat(3.0, 0.2)
        result = (x + y) - x
        assert result.nominal == pytest.approx(3.0)
        assert result.stddev() == pytest.approx(0.2)
        assert result.num_variables() == 1

    def test_product_quotient_cancellation(self):
        x = ufloat(4.0, 0.2)
        y = ufloat(3.0, 0.3)
        result = (x * y) / x
        assert result.nominal == pytest.approx(3.0)
        assert result.stddev() == pytest.approx(0.3)


class TestFunctionCorrelation:
    """Chain rule keeps provenance through elementary functions."""

    def test_sin_minus_sin(self):
        x = ufloat(1.0, 0.1)
        assert (umath.sin(x) - umath.sin(x)).stddev() == 0.0

    def test_exp_over_exp(self):
        x = ufloat(1.0, 0.1)
        result = umath.exp(x) / umath.exp(x)
        assert result.nominal == pytest.approx(1.0)
        assert result.stddev() == pytest.approx(0.0, abs=1e-12)

    def test_pythagorean_identity(self):
        x = ufloat(0.5, 0.1)
        result = umath.sin(x) ** 2 + umath.cos(x) ** 2
        assert result.nominal == pytest.approx(1.0)
        assert result.stddev() == pytest.approx(0.0, abs=1e-10)

    def test_pythagorean_identity_products(self):
        x = ufloat(0.5, 0.1)
        s = umath.sin(x)
        c = umath.cos(x)
        assert (s * s + c * c).stddev() == pytest.approx(0.0, abs=1e-10)

    def test_log_of_exp(self):
        x = ufloat(2.0, 0.1)
        result = umath.log(umath.exp(x))
        assert result.nominal == pytest.approx(2.0)
        assert result.stddev() == pytest.approx(0.1)

    def test_sqrt_of_square(self):
        x = ufloat(3.0, 0.1)
        result = umath.sqrt(x * x)
        assert result.nominal == pytest.approx(3.0)
        assert result.stddev() == pytest.approx(0.1)

    def test_atan2_same_variable(self):
        x = ufloat(1.0, 0.1)
        result = umath.atan2(x, x)
        assert result.nominal == pytest.approx(math.pi / 4)
        assert result.stddev() == pytest.approx(0.0, abs=1e-10)

    def test_hypot_same_variable(self):
        x = ufloat(3.0, 0.1)
        result = umath.hypot(x, x)
        assert result.nominal == pytest.approx(3.0 * math.sqrt(2.0))
        assert result.stddev() == pytest.approx(math.sqrt(2.0) * 0.1, abs=1e-10)


class TestCorrelationProperties:
    """Hypothesis checks of the identities for arbitrary inputs."""

    @given(nominal=nominals, sigma=sigmas)
    @hyp_settings(max_examples=100, deadline=None)
    def test_self_subtraction_is_exact(self, nominal, sigma):
        x = UncertainScalar(nominal, sigma)
        result = x - x
        assert result.nominal == 0.0
        assert result.stddev() == 0.0

    @given(nominal=nominals, sigma=sigmas)
    @hyp_settings(max_examples=100, deadline=None)
    def test_self_addition_doubles(self, nominal, sigma):
        x = UncertainScalar(nominal, sigma)
        assert (x + x).stddev() == pytest.approx(2.0 * sigma, rel=1e-12, abs=1e-300)

    @given(nominal=nominals, sigma=sigmas)
    @hyp_settings(max_examples=100, deadline=None)
    def test_self_division_is_exact(self, nominal, sigma):
        x = UncertainScalar(nominal, sigma)
        assert (x / x).stddev() == pytest.approx(0.0, abs=1e-9 * max(sigma, 1.0))

    @given(nominal=nominals, sigma=sigmas)
    @hyp_settings(max_examples=100, deadline=None)
    def test_self_product(self, nominal, sigma):
        x = UncertainScalar(nominal, sigma)
        assert (x * x).stddev() == pytest.approx(2.0 * abs(nominal) * sigma, rel=1e-9, abs=1e-300)
