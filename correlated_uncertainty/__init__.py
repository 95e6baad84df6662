"""
Correlation-aware propagation of measurement uncertainty.

    from correlated_uncertainty import ufloat, umath

    x = ufloat(0.5, 0.1)
    y = umath.sin(x) ** 2 + umath.cos(x) ** 2
    y.stddev()          # ~0: the identity has zero derivative

    (x - x).stddev()    # 0.0, not sqrt(2) * 0.1
"""

from correlated_uncertainty import umath
from correlated_uncertainty.config import PropagationConfig, get_config, set_config
from correlated_uncertainty.errors import (
    InvalidParameterError,
    MathDomainError,
    RegistryConsistencyError,
    UncertaintyError,
    UncertaintyZeroDivisionError,
)
from correlated_uncertainty.measurement import (
    MeasuredQuantity,
    UncertaintySource,
    combine_sources,
    from_samples,
    from_type_b,
)
from correlated_uncertainty.numeric import nominal_values, std_devs, uarray
from correlated_uncertainty.registry import (
    VariableRegistry,
    get_default_registry,
    set_default_registry,
)
from correlated_uncertainty.report import (
    UncertaintyReport,
    expanded_uncertainty,
    format_compact,
    format_fixed,
    format_scientific,
    uncertainty_budget,
)
from correlated_uncertainty.scalar import UncertainScalar, ufloat

__version__ = "0.1.0"

__all__ = [
    # Core
    "UncertainScalar",
    "ufloat",
    "umath",
    # Registry
    "VariableRegistry",
    "get_default_registry",
    "set_default_registry",
    # Errors
    "UncertaintyError",
    "InvalidParameterError",
    "UncertaintyZeroDivisionError",
    "MathDomainError",
    "RegistryConsistencyError",
    # Config
    "PropagationConfig",
    "get_config",
    "set_config",
    # Measurements
    "MeasuredQuantity",
    "UncertaintySource",
    "from_samples",
    "from_type_b",
    "combine_sources",
    # Arrays
    "uarray",
    "nominal_values",
    "std_devs",
    # Reporting
    "UncertaintyReport",
    "uncertainty_budget",
    "expanded_uncertainty",
    "format_fixed",
    "format_scientific",
    "format_compact",
]
