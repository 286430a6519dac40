"""Per-operation time budgets for the lifecycle calls."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from utils.errors import DeadlineExceededError

DEFAULT_CREATE_TIMEOUT_S = 30 * 60
DEFAULT_READ_TIMEOUT_S = 5 * 60
DEFAULT_DELETE_TIMEOUT_S = 30 * 60


@dataclass(frozen=True)
class ResourceTimeouts:
    """Timeouts in seconds for each lifecycle operation."""

    create: float = DEFAULT_CREATE_TIMEOUT_S
    read: float = DEFAULT_READ_TIMEOUT_S
    delete: float = DEFAULT_DELETE_TIMEOUT_S

    def with_overrides(self, overrides: Mapping[str, Any] | None) -> "ResourceTimeouts":
        """Return a copy with `create`/`read`/`delete` minutes replaced.

        Args:
            overrides: Mapping of operation name to minutes; unknown keys raise.
        """
        if not overrides:
            return self
        values = {"create": self.create, "read": self.read, "delete": self.delete}
        for key, minutes in overrides.items():
            if key not in values:
                raise ValueError(f"Unknown timeout {key!r}; expected create, read or delete.")
            if isinstance(minutes, bool) or not isinstance(minutes, (int, float)) or minutes <= 0:
                raise ValueError(f"Timeout {key!r} must be a positive number of minutes.")
            values[key] = float(minutes) * 60
        return ResourceTimeouts(**values)


class Deadline:
    """Absolute point in time after which remote calls must not start."""

    def __init__(
        self,
        budget_s: float,
        *,
        operation: str = "operation",
        clock: Callable[[], float] = time.monotonic,
    ):
        self.budget_s = budget_s
        self.operation = operation
        self._clock = clock
        self._expires_at = clock() + budget_s

    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self.remaining() <= 0

    def check(self) -> float:
        """Return the remaining seconds or raise once the budget is spent."""
        remaining = self.remaining()
        if remaining <= 0:
            raise DeadlineExceededError(
                f"{self.operation} exceeded its timeout of {self.budget_s:g}s"
            )
        return remaining
