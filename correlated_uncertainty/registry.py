"""
Variable registry for atomic uncertain quantities.

Every atomic scalar (one created with an explicit, nonzero standard
deviation) receives a unique integer ID, and the registry stores the
original deviation under that ID. Derived scalars keep only partial
derivatives keyed by these IDs and resolve their uncertainty through the
registry, which is what makes shared provenance cancel correctly.

Registries are ordinary objects. A process-wide default is created lazily
by get_default_registry(); tests and embedding applications can build
isolated instances and pass them to constructors instead.
"""

import itertools
import math
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

import structlog

from correlated_uncertainty.config import get_config
from correlated_uncertainty.errors import (
    InvalidParameterError,
    RegistryConsistencyError,
)

logger = structlog.get_logger(__name__)

FIRST_ID = 1  # 0 is reserved


class _ReadWriteLock:
    """Many concurrent readers or one writer; waiting writers block new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class VariableRegistry:
    """
    Thread-safe store of original standard deviations keyed by variable ID.

    Entries are permanent until reset(); there is no eviction, so a process
    that keeps creating atomic variables grows the registry without bound.
    """

    def __init__(self, name: str = "registry"):
        self.name = name
        self._lock = _ReadWriteLock()
        self._ids = itertools.count(FIRST_ID)
        self._stddevs: Dict[int, float] = {}

    def register(self, stddev: float) -> int:
        """
        Allocate the next ID and store its deviation.

        Raises
        ------
        InvalidParameterError
            If stddev is negative or NaN.
        """
        stddev = float(stddev)
        if not stddev >= 0.0:
            raise InvalidParameterError(
                f"Standard deviation cannot be negative, got {stddev}"
            )

        # ID allocation and storage share the write section so a reader can
        # never see an ID whose deviation is missing.
        with self._lock.write():
            var_id = next(self._ids)
            self._stddevs[var_id] = stddev

        if get_config().log_registrations:
            logger.debug(
                "variable_registered", registry=self.name, var_id=var_id, stddev=stddev
            )
        return var_id

    def lookup(self, var_id: int) -> float:
        """
        Return the original deviation of a registered variable.

        Raises
        ------
        RegistryConsistencyError
            If the ID was never issued or was reset.
        """
        with self._lock.read():
            try:
                return self._stddevs[var_id]
            except KeyError:
                pass
        logger.error("unknown_variable_id", registry=self.name, var_id=var_id)
        raise RegistryConsistencyError(
            f"Unknown variable ID {var_id} in registry '{self.name}'"
        )

    def lookup_many(self, var_ids) -> Dict[int, float]:
        """Resolve several IDs under a single read lock."""
        with self._lock.read():
            missing = [i for i in var_ids if i not in self._stddevs]
            if not missing:
                return {i: self._stddevs[i] for i in var_ids}
        logger.error("unknown_variable_id", registry=self.name, var_ids=missing)
        raise RegistryConsistencyError(
            f"Unknown variable IDs {missing} in registry '{self.name}'"
        )

    def size(self) -> int:
        with self._lock.read():
            return len(self._stddevs)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, var_id) -> bool:
        with self._lock.read():
            return var_id in self._stddevs

    def reset(self) -> None:
        """
        Clear all entries and restart ID allocation at FIRST_ID.

        Test-only. Any scalar created before the reset still carries IDs
        that will now collide with newly issued ones.
        """
        with self._lock.write():
            count = len(self._stddevs)
            self._stddevs.clear()
            self._ids = itertools.count(FIRST_ID)
        logger.debug("registry_reset", registry=self.name, cleared=count)

    def __repr__(self):
        return f"VariableRegistry({self.name!r}, size={self.size()})"


_default_registry: Optional[VariableRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> VariableRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = VariableRegistry("default")
    return _default_registry


def set_default_registry(registry: VariableRegistry) -> Optional[VariableRegistry]:
    """Replace the process-wide registry and return the previous one."""
    global _default_registry
    with _default_lock:
        previous = _default_registry
        _default_registry = registry
    return previous


def quadrature(derivatives: Dict[int, float], registry: VariableRegistry) -> float:
    """sqrt(sum((d_i * sigma_i)^2)) over a derivative map."""
    if not derivatives:
        return 0.0
    sigmas = registry.lookup_many(list(derivatives))
    # hypot scales internally, so tiny or huge terms neither underflow nor overflow.
    return math.hypot(*(d * sigmas[i] for i, d in derivatives.items()))
