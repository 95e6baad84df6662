"""
Runtime configuration for uncertainty propagation.

Example:
    from correlated_uncertainty.config import PropagationConfig, set_config

    set_config(PropagationConfig(prune_threshold=1e-200))
"""

import os
from dataclasses import dataclass
from typing import Any, Dict

from correlated_uncertainty.errors import InvalidParameterError

ENV_PRUNE_THRESHOLD = "QUASAR_UNC_PRUNE_THRESHOLD"
ENV_LOG_REGISTRATIONS = "QUASAR_UNC_LOG_REGISTRATIONS"

DEFAULT_PRUNE_THRESHOLD = 1e-300


@dataclass(frozen=True)
class PropagationConfig:
    """
    Configuration for derivative-map bookkeeping.

    Attributes
    ----------
    prune_threshold : float
        Derivative entries with |value| below this are dropped.
    log_registrations : bool
        Emit a debug event for every registered variable.
    """
    prune_threshold: float = DEFAULT_PRUNE_THRESHOLD
    log_registrations: bool = False

    def __post_init__(self):
        if not self.prune_threshold >= 0.0:
            raise InvalidParameterError(
                f"prune_threshold must be non-negative, got {self.prune_threshold}"
            )

    @classmethod
    def from_env(cls) -> "PropagationConfig":
        """Build a configuration from environment variables."""
        threshold = os.environ.get(ENV_PRUNE_THRESHOLD)
        log_flag = os.environ.get(ENV_LOG_REGISTRATIONS, "")
        return cls(
            prune_threshold=float(threshold) if threshold else DEFAULT_PRUNE_THRESHOLD,
            log_registrations=log_flag.strip().lower() in ("1", "true", "yes", "on"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "prune_threshold": self.prune_threshold,
            "log_registrations": self.log_registrations,
        }


_active_config = None


def get_config() -> PropagationConfig:
    """Return the active configuration, reading the environment on first use."""
    global _active_config
    if _active_config is None:
        _active_config = PropagationConfig.from_env()
    return _active_config


def set_config(config: PropagationConfig) -> PropagationConfig:
    """Install a new active configuration and return the previous one."""
    global _active_config
    previous = get_config()
    _active_config = config
    return previous
