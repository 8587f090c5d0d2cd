from __future__ import annotations

import logging
import random
import secrets
import threading
from collections.abc import Iterable
from typing import Protocol

from .config import get_settings
from .errors import RandomSourceExhausted, TransformError


logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def roll(self, sides: int) -> int:
        """Return a uniform integer in ``[1, sides]``."""
        ...


class SystemRandomSource:
    """Thread-safe uniform die roller.

    Unseeded instances draw from ``secrets.SystemRandom``; a seed switches to
    ``random.Random`` so that a run can be replayed.
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed = seed
        self._rng: random.Random = secrets.SystemRandom() if seed is None else random.Random(seed)
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "secrets.SystemRandom" if self.seed is None else "random.Random"

    def roll(self, sides: int) -> int:
        if sides < 1:
            raise ValueError(f"sides must be >= 1, got {sides}")
        with self._lock:
            return self._rng.randint(1, sides)


class SequenceRandomSource:
    """Replays a fixed sequence of rolls, in order."""

    name = "sequence"

    def __init__(self, values: Iterable[int]) -> None:
        self._values = list(values)
        self._index = 0
        self._lock = threading.Lock()

    @property
    def remaining(self) -> int:
        return len(self._values) - self._index

    def roll(self, sides: int) -> int:
        with self._lock:
            if self._index >= len(self._values):
                raise RandomSourceExhausted(
                    f"Fixed roll sequence exhausted after {len(self._values)} value(s)."
                )
            value = self._values[self._index]
            self._index += 1
        if not 1 <= value <= sides:
            raise TransformError(f"Fixed roll {value} is outside [1, {sides}].")
        return value


_default_source: SystemRandomSource | None = None
_default_lock = threading.Lock()


def default_random_source() -> SystemRandomSource:
    """Process-wide source, seeded from settings when a seed is configured."""
    global _default_source
    with _default_lock:
        if _default_source is None:
            seed = get_settings().random_seed
            if seed is not None:
                logger.info("Using seeded random source (seed=%s)", seed)
            _default_source = SystemRandomSource(seed)
        return _default_source


def reset_default_random_source() -> None:
    global _default_source
    with _default_lock:
        _default_source = None
