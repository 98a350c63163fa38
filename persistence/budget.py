from __future__ import annotations

import time
from typing import Callable

from settings import get_settings

from .errors import QuotaExceededError


class RequestBudget:
    """
    Execution quota the host grants a single invocation.

    Every gateway/store request consumes one unit. Once the request count or
    the wall-clock limit is used up the budget stays exhausted.
    """

    def __init__(
        self,
        max_requests: int | None = None,
        time_limit: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_requests = max_requests if max_requests else None
        self._time_limit = time_limit if time_limit else None
        self._clock = clock
        self._started = clock()
        self._used = 0

    @classmethod
    def unlimited(cls) -> "RequestBudget":
        return cls()

    @property
    def used(self) -> int:
        return self._used

    @property
    def exhausted(self) -> bool:
        if self._max_requests is not None and self._used >= self._max_requests:
            return True
        if self._time_limit is not None and self._clock() - self._started > self._time_limit:
            return True
        return False

    def try_acquire(self) -> bool:
        if self.exhausted:
            return False
        self._used += 1
        return True

    def acquire(self, what: str) -> None:
        if not self.try_acquire():
            raise QuotaExceededError(f"request budget exhausted before {what} (used={self._used})")


def budget_from_settings() -> RequestBudget:
    """Fresh per-invocation budget sized from REQUEST_BUDGET / TIME_BUDGET_MS."""
    settings = get_settings()
    return RequestBudget(settings.request_budget, settings.time_budget_seconds)
