"""
Formatting and uncertainty reports.

Everything here reads only the public surface of UncertainScalar: the
nominal value, stddev(), and the derivative map for per-variable budgets.
"""

import math
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.stats import norm

from correlated_uncertainty.errors import InvalidParameterError
from correlated_uncertainty.scalar import UncertainScalar


# ═══════════════════════════════════════════════════════════════════════
# §1  NUMBER FORMATTING
# ═══════════════════════════════════════════════════════════════════════

def format_fixed(x: UncertainScalar, precision: int = 6) -> str:
    """'12.345000 ± 0.010000'"""
    return f"{x.nominal:.{precision}f} ± {x.stddev():.{precision}f}"


def format_scientific(x: UncertainScalar, precision: int = 3) -> str:
    """Shared exponent taken from the nominal value: '(1.234 ± 0.056)e+03'."""
    nominal = x.nominal
    u = x.stddev()
    reference = abs(nominal) if nominal != 0.0 else u
    if math.isfinite(reference) and reference > 0.0:
        exponent = int(math.floor(math.log10(reference)))
    else:
        exponent = 0
    scale = 10.0 ** exponent
    return f"({nominal / scale:.{precision}f} ± {u / scale:.{precision}f})e{exponent:+03d}"


def format_compact(x: UncertainScalar, sig_figs: int = 2) -> str:
    """
    Parenthetical notation: the uncertainty in units of the last digit.

    10.0 ± 0.5 with two significant figures -> '10.00(50)'.
    """
    if sig_figs < 1:
        raise InvalidParameterError(f"sig_figs must be at least 1, got {sig_figs}")
    u = x.stddev()
    if u == 0.0 or not math.isfinite(u):
        return f"{x.nominal:g}"

    magnitude = int(math.floor(math.log10(u)))
    decimals = sig_figs - 1 - magnitude
    u_rounded = round(u, decimals)
    if u_rounded >= 10.0 ** (magnitude + 1):
        # Rounding carried into the next decade, e.g. 0.0996 -> 0.100.
        decimals -= 1
        u_rounded = round(u, decimals)
    if decimals > 0:
        return f"{x.nominal:.{decimals}f}({int(round(u_rounded * 10 ** decimals))})"
    return f"{round(x.nominal, decimals):.0f}({int(round(u_rounded))})"


# ═══════════════════════════════════════════════════════════════════════
# §2  BUDGET & EXPANDED UNCERTAINTY
# ═══════════════════════════════════════════════════════════════════════

def _label_ids(labels: Optional[Dict[str, UncertainScalar]]) -> Dict[int, str]:
    names = {}
    for name, variable in (labels or {}).items():
        if not variable.is_atomic():
            raise InvalidParameterError(f"Label '{name}' does not refer to an atomic variable")
        (var_id,) = variable.derivatives
        names[var_id] = name
    return names


def uncertainty_budget(x: UncertainScalar,
                       labels: Optional[Dict[str, UncertainScalar]] = None) -> List[dict]:
    """
    Each atomic variable's contribution to the total uncertainty of x.

    Parameters
    ----------
    x : UncertainScalar
        The (usually derived) value to analyse.
    labels : dict, optional
        Mapping of display name -> atomic UncertainScalar. Variables without
        a label are shown as 'x<id>'.
    """
    names = _label_ids(labels)
    derivatives = x.derivatives
    sigmas = x.registry.lookup_many(list(derivatives))
    u_c_sq = x.stddev() ** 2

    budget = []
    for var_id, c_i in sorted(derivatives.items()):
        u_i = sigmas[var_id]
        contribution = (c_i * u_i) ** 2
        budget.append({
            "variable": names.get(var_id, f"x{var_id}"),
            "var_id": var_id,
            "sensitivity_coeff": c_i,
            "u_input": u_i,
            "|c·u|": abs(c_i * u_i),
            "variance_contribution": contribution,
            "pct_contribution": (contribution / u_c_sq * 100) if u_c_sq > 0 else 0.0,
        })
    return budget


def expanded_uncertainty(x: UncertainScalar, coverage_p: float = 0.95) -> Tuple[float, float]:
    """
    Expanded uncertainty U = k · u_c for the given coverage probability.

    Returns (U, k) with k from the normal quantile.
    """
    if not 0.0 < coverage_p < 1.0:
        raise InvalidParameterError(f"coverage_p must be in (0, 1), got {coverage_p}")
    k = float(norm.ppf((1 + coverage_p) / 2))
    return k * x.stddev(), k


# ═══════════════════════════════════════════════════════════════════════
# §3  REPORT GENERATOR
# ═══════════════════════════════════════════════════════════════════════

class UncertaintyReport:
    """Generates formatted summary reports for uncertainty analyses."""

    @staticmethod
    def _hline(width=72):
        return "─" * width

    @staticmethod
    def _dline(width=72):
        return "═" * width

    @classmethod
    def generate(cls, x: UncertainScalar, name: str = "", symbol: str = "y",
                 unit: str = "", labels: Optional[Dict[str, UncertainScalar]] = None,
                 coverage_p: float = 0.95) -> str:
        """Text report with the budget table and the expanded result."""
        U, k = expanded_uncertainty(x, coverage_p)
        budget = uncertainty_budget(x, labels)
        u_c = x.stddev()
        w = 72

        lines = []
        lines.append(cls._dline(w))
        lines.append(f"  UNCERTAINTY ANALYSIS: {name or symbol}")
        lines.append(cls._dline(w))
        lines.append("")

        lines.append("  UNCERTAINTY BUDGET")
        lines.append(cls._hline(w))
        lines.append(
            f"  {'Var':<8} {'|cᵢ|':<12} {'u(xᵢ)':<12} "
            f"{'|cᵢ·u(xᵢ)|':<14} {'Contribution'}"
        )
        lines.append("  " + "-" * 68)
        for row in budget:
            pct_bar = "█" * int(row["pct_contribution"] / 5)
            lines.append(
                f"  {row['variable']:<8} "
                f"{abs(row['sensitivity_coeff']):<12.4g} "
                f"{row['u_input']:<12.4g} "
                f"{row['|c·u|']:<14.4g} "
                f"{row['pct_contribution']:5.1f}%  {pct_bar}"
            )
        if not budget:
            lines.append("  (exact value, no uncertain inputs)")
        lines.append("")

        rel = u_c / abs(x.nominal) if x.nominal != 0 else float("inf")
        lines.append("  RESULTS")
        lines.append(cls._dline(w))
        lines.append(f"    Best estimate:            {symbol} = {x.nominal:.6g} {unit}")
        lines.append(f"    Combined std uncertainty: u({symbol}) = {u_c:.4g} {unit}")
        lines.append(f"    Relative uncertainty:     u_rel = {rel * 100:.3f}%")
        lines.append(f"    Coverage probability:     p = {coverage_p * 100:.0f}%")
        lines.append(f"    Coverage factor:          k = {k:.3f}")
        lines.append(f"    Expanded uncertainty:     U = {U:.4g} {unit}")
        lines.append(cls._hline(w))

        # Expanded uncertainty rounded to 2 significant figures
        if U > 0 and np.isfinite(U):
            round_to = int(2 - 1 - np.floor(np.log10(abs(U))))
            lines.append(
                f"    {symbol} = ({round(x.nominal, round_to)} ± {round(U, round_to)}) {unit}"
                f"  (coverage probability {coverage_p * 100:.0f}%, k = {k:.2f})"
            )
        lines.append(cls._dline(w))
        return "\n".join(lines)
