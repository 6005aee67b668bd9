"""Convergence diagnostics and iteration tracing for the transportation simplex.

This module provides utilities to monitor solver progress, detect cycling
between bases, and build the human-readable trace returned with each result.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

import numpy as np


@dataclass
class ConvergenceMonitor:
    """Tracks objective progress and degenerate pivots.

    Attributes:
        window_size: Number of recent objective values to keep
        degeneracy_threshold: Ratio of degenerate pivots considered high

    Examples:
        >>> monitor = ConvergenceMonitor(window_size=20)
        >>> monitor.record_iteration(objective=120.0, is_degenerate=False)
        >>> monitor.record_iteration(objective=120.0, is_degenerate=True)
        >>> monitor.get_degeneracy_ratio()
        0.5
    """

    window_size: int = 50
    degeneracy_threshold: float = 0.5

    objective_history: deque[float] = field(default_factory=lambda: deque(maxlen=50))
    degenerate_pivots: int = 0
    total_pivots: int = 0
    consecutive_no_improvement: int = 0

    def __post_init__(self) -> None:
        """Initialize history with correct maxlen."""
        self.objective_history = deque(maxlen=self.window_size)

    def record_iteration(self, objective: float, is_degenerate: bool = False) -> None:
        """Record the objective after a pivot."""
        if self.objective_history and objective >= self.objective_history[-1]:
            self.consecutive_no_improvement += 1
        else:
            self.consecutive_no_improvement = 0
        self.objective_history.append(objective)
        self.total_pivots += 1
        if is_degenerate:
            self.degenerate_pivots += 1

    def is_stalled(self, min_consecutive: int = 10) -> bool:
        return self.consecutive_no_improvement >= min_consecutive

    def get_degeneracy_ratio(self) -> float:
        if self.total_pivots == 0:
            return 0.0
        return self.degenerate_pivots / self.total_pivots

    def is_highly_degenerate(self) -> bool:
        if self.total_pivots < 10:
            return False
        return self.get_degeneracy_ratio() > self.degeneracy_threshold

    def get_diagnostic_summary(self) -> dict[str, float | bool | int]:
        return {
            "total_pivots": self.total_pivots,
            "degenerate_pivots": self.degenerate_pivots,
            "degeneracy_ratio": self.get_degeneracy_ratio(),
            "is_stalled": self.is_stalled(),
            "is_highly_degenerate": self.is_highly_degenerate(),
        }


@dataclass
class BasisHistory:
    """Tracks visited bases to detect cycling.

    Degenerate pivots can return the solver to a basis it has already visited,
    after which Dantzig pricing repeats the same sequence forever.

    Examples:
        >>> history = BasisHistory()
        >>> history.record_basis(basic_mask)
        False
        >>> history.record_basis(basic_mask)  # same basis again
        True
    """

    max_history: int = 1000
    visit_counts: dict[bytes, int] = field(default_factory=dict)
    order: deque[bytes] = field(default_factory=deque)

    def record_basis(self, basic: np.ndarray) -> bool:
        """Record a basis; return True if it had been visited before."""
        key = np.packbits(basic, axis=None).tobytes()
        seen = key in self.visit_counts
        self.visit_counts[key] = self.visit_counts.get(key, 0) + 1
        if not seen:
            self.order.append(key)
            if len(self.order) > self.max_history:
                del self.visit_counts[self.order.popleft()]
        return seen

    def get_most_frequent_basis_count(self) -> int:
        if not self.visit_counts:
            return 0
        return max(self.visit_counts.values())


class SolveTrace:
    """Accumulates the textual iteration trace and any warnings of one solve."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.lines: list[str] = []
        self.warnings: list[str] = []

    def add(self, line: str = "") -> None:
        if self.enabled:
            self.lines.append(line)

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        self.add(f"Warning: {message}")

    def potentials(self, u: np.ndarray, v: np.ndarray) -> None:
        if not self.enabled:
            return
        self.add("u values: " + " ".join(_format_value(x) for x in u))
        self.add("v values: " + " ".join(_format_value(x) for x in v))

    def reduced_costs(self, reduced: np.ndarray, basic: np.ndarray) -> None:
        if not self.enabled:
            return
        self.add("Improvement indices (c_ij - (u_i + v_j)):")
        for i in range(reduced.shape[0]):
            entries = [
                f"({i},{j}): BASIC" if basic[i, j] else f"({i},{j}): {reduced[i, j]:.2f}"
                for j in range(reduced.shape[1])
            ]
            self.add("  " + "  ".join(entries))

    def allocations(self, allocations: np.ndarray) -> None:
        if not self.enabled:
            return
        self.add("Current allocations:")
        for row in allocations:
            self.add("".join(f"{int(q):6d}" for q in row))

    def render(self) -> str:
        return "\n".join(self.lines)


def _format_value(value: float) -> str:
    return "?" if np.isnan(value) else f"{value:.2f}"
