import random
from dataclasses import dataclass, field


@dataclass
class ExponentialBackoff:
    """
    Exponential backoff with optional jitter, used to pace reconnection
    attempts after the broker connection drops.

        next_delay = min(current * factor, maximum) + jitter

    Jitter spreads the retries of several workers watching the same broker.
    """

    initial: float = 0.5
    """Delay (in seconds) before the first retry."""

    maximum: float = 30.0
    """Upper bound of the delay (in seconds), jitter excluded."""

    factor: float = 2.0
    """Growth factor applied after each retry."""

    jitter: float = 1.2
    """Maximum random jitter added to each delay."""

    _current: float = field(init=False, repr=False, default=0.0)

    def __post_init__(self) -> None:
        self._current = self.initial

    def next_delay(self) -> float:
        delay = self._current
        self._current = min(self._current * self.factor, self.maximum)

        if self.jitter > 0:
            delay += random.uniform(0, self.jitter)

        return delay

    def reset(self) -> None:
        """Start again from `initial`, called once a retry succeeded."""
        self._current = self.initial
