from __future__ import annotations


def ceil_log2(n: int) -> int:
    """Return ``ceil(log2(n))`` for ``n >= 1`` using exact integer arithmetic."""

    if n < 1:
        raise ValueError("ceil_log2 requires n >= 1")
    return (n - 1).bit_length()


class CostInjector:
    """Busy-work step that adds a Θ(log n) surcharge to a table operation.

    Each call loops ``ceil(log2(n))`` times over a throwaway counter and has no
    effect besides elapsed time. ``calls`` and ``iterations`` accumulate across
    calls so benchmarks and tests can see how often the surcharge was paid.
    """

    __slots__ = ("calls", "iterations")

    def __init__(self) -> None:
        self.calls = 0
        self.iterations = 0

    def __call__(self, n: int) -> int:
        self.calls += 1
        if n <= 1:
            return 0
        rounds = ceil_log2(n)
        dummy = 0
        for i in range(rounds):
            if i % 2 == 0:
                dummy += 1
        self.iterations += rounds
        return rounds

    def reset(self) -> None:
        self.calls = 0
        self.iterations = 0

    def __repr__(self) -> str:
        return f"CostInjector(calls={self.calls}, iterations={self.iterations})"


__all__ = ["CostInjector", "ceil_log2"]
