"""Utility functions for evaluating and validating shipment plans."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .basis import potential_residuals
from .data import TransportationProblem, TransportResult


@dataclass
class ValidationResult:
    """Results from validating a shipment plan.

    Attributes:
        is_valid: True if the plan satisfies all constraints.
        errors: List of validation error messages (empty if valid).
        row_sums: Units shipped from each source.
        column_sums: Units received by each destination.
        negative_cells: Cells with a negative allocation.
    """

    is_valid: bool
    errors: list[str]
    row_sums: list[int]
    column_sums: list[int]
    negative_cells: list[tuple[int, int]]


def total_cost(costs: np.ndarray, allocations: np.ndarray) -> float:
    """Total shipping cost: the elementwise product of plan and costs, summed."""
    return float(np.sum(np.asarray(allocations) * np.asarray(costs)))


def validate_plan(
    problem: TransportationProblem,
    allocations: np.ndarray,
) -> ValidationResult:
    """Check a shipment plan against the supply and demand constraints.

    Every cell must be nonnegative and every source may ship at most its supply.
    For a balanced problem rows must ship exactly their supply and columns must
    receive exactly their demand. For an unbalanced problem the side with the
    smaller total must be met exactly and the other side may not be exceeded.

    Examples:
        >>> result = solve_transportation(problem)
        >>> validate_plan(problem, result.allocations).is_valid
        True
    """
    plan = np.asarray(allocations)
    errors: list[str] = []
    if plan.shape != problem.shape:
        return ValidationResult(
            is_valid=False,
            errors=[f"Plan has shape {plan.shape}, expected {problem.shape}"],
            row_sums=[],
            column_sums=[],
            negative_cells=[],
        )

    negative_cells = [(int(i), int(j)) for i, j in zip(*np.nonzero(plan < 0))]
    for cell in negative_cells:
        errors.append(f"Cell {cell} has negative allocation {int(plan[cell])}")

    row_sums = [int(x) for x in plan.sum(axis=1)]
    column_sums = [int(x) for x in plan.sum(axis=0)]
    rows_exact = problem.total_supply <= problem.total_demand
    columns_exact = problem.total_demand <= problem.total_supply

    for i, (shipped, supply) in enumerate(zip(row_sums, problem.supply)):
        if shipped > supply or (rows_exact and shipped != supply):
            errors.append(f"Source {i} ships {shipped} units but supplies {int(supply)}")
    for j, (received, demand) in enumerate(zip(column_sums, problem.demand)):
        if received > demand or (columns_exact and received != demand):
            errors.append(f"Destination {j} receives {received} units but demands {int(demand)}")

    return ValidationResult(
        is_valid=not errors,
        errors=errors,
        row_sums=row_sums,
        column_sums=column_sums,
        negative_cells=negative_cells,
    )


def check_optimality(
    problem: TransportationProblem,
    result: TransportResult,
    tolerance: float = 1e-6,
) -> bool:
    """Verify the complementary slackness conditions of a solved plan.

    Every basic cell must satisfy cost = u + v and every non-basic cell must
    have a nonnegative reduced cost, both within ``tolerance``.
    """
    if result.basis is None or np.isnan(result.u).any() or np.isnan(result.v).any():
        return False
    basic = np.zeros(problem.shape, dtype=bool)
    for cell in result.basis.basic_cells:
        basic[cell] = True
    if potential_residuals(problem.costs, basic, result.u, result.v).max() > tolerance:
        return False
    reduced = problem.costs - (result.u[:, None] + result.v[None, :])
    return bool(np.all(reduced[~basic] >= -tolerance))
