"""Pricing strategies for selecting the entering cell.

A pricing strategy scans the non-basic cells' reduced costs
``r(i, j) = cost[i, j] - (u[i] + v[j])`` and either picks an improving cell to
enter the basis or reports that the plan is optimal.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from .basis import require_resolved


def reduced_costs(costs: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Return the full m x n matrix of reduced costs.

    Raises:
        DisconnectedBasisError: If any potential is unresolved.
    """
    require_resolved(u, v)
    return costs - (u[:, None] + v[None, :])


class PricingStrategy(ABC):
    """Abstract base class for entering-cell selection rules."""

    name: str = ""

    @abstractmethod
    def select_entering_cell(
        self,
        reduced: np.ndarray,
        basic: np.ndarray,
        tolerance: float,
    ) -> tuple[tuple[int, int], float] | None:
        """Select the entering cell.

        Args:
            reduced: Reduced cost matrix for the current potentials.
            basic: Boolean basis mask.
            tolerance: A cell improves only if its reduced cost is below -tolerance.

        Returns:
            ((row, col), reduced_cost) for the entering cell, or None if every
            non-basic reduced cost is at least -tolerance (the plan is optimal).
        """


class DantzigPricing(PricingStrategy):
    """Most negative reduced cost; the first occurrence in row-major order wins ties."""

    name = "dantzig"

    def select_entering_cell(self, reduced, basic, tolerance):
        candidates = np.where(basic, np.inf, reduced)
        flat = int(np.argmin(candidates))  # argmin returns the first occurrence
        cell = np.unravel_index(flat, candidates.shape)
        value = float(candidates[cell])
        if value >= -tolerance:
            return None
        return (int(cell[0]), int(cell[1])), value


class BlandPricing(PricingStrategy):
    """First improving cell in row-major order (Bland-style anti-cycling rule)."""

    name = "bland"

    def select_entering_cell(self, reduced, basic, tolerance):
        improving = np.flatnonzero(~basic & (reduced < -tolerance))
        if improving.size == 0:
            return None
        row, col = np.unravel_index(int(improving[0]), reduced.shape)
        return (int(row), int(col)), float(reduced[row, col])


def create_pricing_strategy(name: str) -> PricingStrategy:
    if name == "bland":
        return BlandPricing()
    return DantzigPricing()
