from __future__ import annotations

import time


class Deadline:
    """Wall-clock budget measured with time.monotonic(), in milliseconds."""

    def __init__(self, budget_ms: float):
        if budget_ms < 0:
            raise ValueError(f"budget must be >= 0 ms, got {budget_ms}")
        self.budget_ms = float(budget_ms)
        self.start = time.monotonic()

    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.start) * 1000.0

    def expired(self) -> bool:
        return self.elapsed_ms() >= self.budget_ms


def elapsed_ms_since(t0: float) -> float:
    return (time.monotonic() - t0) * 1000.0
