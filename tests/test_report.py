"""Tests for formatting, budgets and the text report."""

import math

import pytest

from correlated_uncertainty.errors import InvalidParameterError
from correlated_uncertainty.report import (
    UncertaintyReport,
    expanded_uncertainty,
    format_compact,
    format_fixed,
    format_scientific,
    uncertainty_budget,
)
from correlated_uncertainty.scalar import ufloat


class TestFormatting:
    """Fixed, scientific and compact notation."""

    def test_fixed(self):
        assert format_fixed(ufloat(12.345, 0.01), 3) == "12.345 ± 0.010"

    def test_scientific(self):
        assert format_scientific(ufloat(1234.0, 56.0)) == "(1.234 ± 0.056)e+03"

    def test_scientific_negative_exponent(self):
        assert format_scientific(ufloat(0.0025, 0.0001), 2) == "(2.50 ± 0.10)e-03"

    def test_scientific_zero(self):
        assert format_scientific(ufloat(0.0), 1) == "(0.0 ± 0.0)e+00"

    def test_scientific_infinite_nominal(self):
        assert format_scientific(ufloat(math.inf, 0.1)) == "(inf ± 0.100)e+00"

    def test_compact(self):
        assert format_compact(ufloat(10.0, 0.5)) == "10.00(50)"

    def test_compact_one_digit(self):
        assert format_compact(ufloat(10.0, 0.5), sig_figs=1) == "10.0(5)"

    def test_compact_large_uncertainty(self):
        assert format_compact(ufloat(1234.0, 56.0)) == "1234(56)"

    @pytest.mark.parametrize("nominal, sigma, expected", [
        (1.0, 0.0996, "1.00(10)"),
        (12.3, 0.996, "12.3(10)"),
        (100.0, 9.96, "100(10)"),
    ])
    def test_compact_rounding_carry(self, nominal, sigma, expected):
        """An uncertainty that rounds up a decade still shows two digits."""
        assert format_compact(ufloat(nominal, sigma)) == expected

    def test_compact_exact(self):
        assert format_compact(ufloat(2.5)) == "2.5"

    def test_compact_invalid(self):
        with pytest.raises(InvalidParameterError):
            format_compact(ufloat(1.0, 0.1), sig_figs=0)


class TestBudget:
    """Per-variable contributions."""

    def test_budget_rows(self):
        x = ufloat(2.0, 0.1)
        y = ufloat(3.0, 0.2)
        z = x * y
        budget = uncertainty_budget(z, labels={"x": x, "y": y})
        assert [row["variable"] for row in budget] == ["x", "y"]

        by_name = {row["variable"]: row for row in budget}
        assert by_name["x"]["sensitivity_coeff"] == pytest.approx(3.0)
        assert by_name["y"]["sensitivity_coeff"] == pytest.approx(2.0)
        assert by_name["x"]["|c·u|"] == pytest.approx(0.3)
        total = sum(row["pct_contribution"] for row in budget)
        assert total == pytest.approx(100.0)
        assert by_name["x"]["pct_contribution"] == pytest.approx(36.0)

    def test_unlabeled_variables(self):
        x = ufloat(2.0, 0.1)
        budget = uncertainty_budget(x * 2)
        (var_id,) = x.derivatives
        assert budget[0]["variable"] == f"x{var_id}"

    def test_budget_of_cancelled_value(self):
        x = ufloat(2.0, 0.1)
        assert uncertainty_budget(x - x) == []

    def test_label_must_be_atomic(self):
        x = ufloat(2.0, 0.1)
        with pytest.raises(InvalidParameterError):
            uncertainty_budget(x, labels={"twice": x + x})


class TestExpandedUncertainty:
    """Coverage factor from the normal distribution."""

    def test_95_percent(self):
        U, k = expanded_uncertainty(ufloat(1.0, 0.1))
        assert k == pytest.approx(1.959964, abs=1e-6)
        assert U == pytest.approx(0.1959964, abs=1e-6)

    def test_invalid_coverage(self):
        with pytest.raises(InvalidParameterError):
            expanded_uncertainty(ufloat(1.0, 0.1), 1.0)


class TestReport:
    """Text report."""

    def test_generate(self):
        L = ufloat(1.0, 0.001)
        T = ufloat(2.006, 0.002)
        g = 4 * math.pi ** 2 * L / T ** 2
        text = UncertaintyReport.generate(
            g, name="Gravitational acceleration", symbol="g", unit="m/s²",
            labels={"L": L, "T": T},
        )
        assert "UNCERTAINTY ANALYSIS: Gravitational acceleration" in text
        assert "UNCERTAINTY BUDGET" in text
        assert "Expanded uncertainty" in text
        assert "L " in text and "T " in text

    def test_generate_exact_value(self):
        text = UncertaintyReport.generate(ufloat(3.0), symbol="c")
        assert "no uncertain inputs" in text
