"""
Derivative maps and pruning.

A derivative map is a plain dict from atomic-variable ID to partial
derivative. Maps are never mutated after they are handed to a scalar;
every helper here returns a new dict.
"""

import math
from typing import Callable, Dict, Iterable, NamedTuple, Optional, Tuple

from correlated_uncertainty.config import get_config

DerivativeMap = Dict[int, float]


def overflow_safe(func: Callable[..., float], *args: float, negative: bool = False) -> float:
    """
    Evaluate func(*args), returning a signed infinity if it overflows.

    Parameters
    ----------
    func : callable
        A math-module style function that raises OverflowError when the
        result is out of range.
    negative : bool
        Sign of the result in the overflow case.
    """
    try:
        return func(*args)
    except OverflowError:
        return -math.inf if negative else math.inf


def odd_integer(value: float) -> bool:
    return float(value).is_integer() and value % 2 == 1


class Linearization(NamedTuple):
    """Nominal value plus first-order sensitivities, the unit the rules act on."""
    nominal: float
    derivatives: DerivativeMap


def prune(derivatives: DerivativeMap, threshold: Optional[float] = None) -> DerivativeMap:
    """Drop entries whose magnitude is below the prune threshold."""
    if threshold is None:
        threshold = get_config().prune_threshold
    # NaN entries survive so that isnan() can see them.
    return {
        i: d for i, d in derivatives.items()
        if d != 0.0 and not abs(d) < threshold
    }


def scale(derivatives: DerivativeMap, factor: float) -> DerivativeMap:
    """Chain rule for a single input: every entry times f'(x)."""
    if factor == 0.0:
        return {}
    return prune({i: factor * d for i, d in derivatives.items()})


def combine(terms: Iterable[Tuple[float, DerivativeMap]]) -> DerivativeMap:
    """
    Weighted union of derivative maps.

    IDs present in more than one map receive the sum of their weighted
    contributions; this is where shared provenance cancels.
    """
    result: DerivativeMap = {}
    for weight, derivatives in terms:
        if weight == 0.0:
            continue
        for var_id, d in derivatives.items():
            result[var_id] = result.get(var_id, 0.0) + weight * d
    return prune(result)
