"""
Gravitational acceleration from a simple pendulum.

    g = 4π² L / T²

The period is timed over 20 swings with a stopwatch (Type A scatter plus
the reaction-time spec), the length read off a metre stick (Type B).
"""

import math

import structlog

from correlated_uncertainty import MeasuredQuantity, UncertaintyReport, format_compact
from correlated_uncertainty.logconfig import configure_logging

logger = structlog.get_logger(__name__)


def main():
    configure_logging("INFO")

    length = MeasuredQuantity("Pendulum length", "L", "m", best_value=1.0000)
    length.add_type_b(0.0005, name="ruler", distribution="rectangular", is_half_width=True)

    period = MeasuredQuantity("Period", "T", "s")
    swings = [40.12, 40.08, 40.15, 40.10, 40.11, 40.09, 40.14, 40.13]
    period.add_type_a([t / 20 for t in swings], name="scatter")
    period.add_type_b(0.2 / 20, name="reaction", distribution="rectangular", is_half_width=True)

    L = length.as_variable()
    T = period.as_variable()
    g = 4 * math.pi ** 2 * L / T ** 2

    logger.info("derived_quantity", symbol="g", value=format_compact(g))
    print(UncertaintyReport.generate(
        g, name="Acceleration due to gravity", symbol="g", unit="m/s²",
        labels={"L": L, "T": T},
    ))

    # Same period used twice: the ratio is exact.
    logger.info("self_ratio", stddev=(T / T).stddev())


if __name__ == "__main__":
    main()
