"""
Error taxonomy for uncertainty propagation.

Every exception derives from UncertaintyError and from the builtin the
caller would expect for the same condition on a plain float, so code that
already catches ValueError or ZeroDivisionError keeps working.
"""


class UncertaintyError(Exception):
    """Base exception for the package."""


class InvalidParameterError(UncertaintyError, ValueError):
    """Negative (or NaN) standard deviation given to a constructor or setter."""


class UncertaintyZeroDivisionError(UncertaintyError, ZeroDivisionError):
    """Divisor with a nominal value of exactly zero."""


class MathDomainError(UncertaintyError, ValueError):
    """
    Argument outside the domain of an elementary function, or at a point
    where the function is defined but its derivative is not (asin at ±1).
    """


class RegistryConsistencyError(UncertaintyError, RuntimeError):
    """
    Lookup of an identifier the registry never issued, or mixing scalars
    owned by different registries. Indicates a bookkeeping bug, not bad
    user input.
    """
