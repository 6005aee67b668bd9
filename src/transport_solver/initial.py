"""Initial basic feasible solution via the Least Cost method."""

from __future__ import annotations

import logging

import numpy as np

from .basis import BasisComponents, count_basic
from .data import TransportationProblem

logger = logging.getLogger(__name__)


def least_cost_order(costs: np.ndarray) -> list[tuple[int, int]]:
    """Return every cell sorted by ascending unit cost.

    Ties keep row-major enumeration order (stable sort).
    """
    num_sources, num_destinations = costs.shape
    flat_order = np.argsort(costs, axis=None, kind="stable")
    return [(int(k) // num_destinations, int(k) % num_destinations) for k in flat_order]


def pad_row_major(basic: np.ndarray, allocations: np.ndarray, target: int) -> list[tuple[int, int]]:
    """Mark the first non-basic cells in row-major order as basic until ``target`` is reached.

    Connectivity is ignored, so the resulting basis may be disconnected.
    """
    added: list[tuple[int, int]] = []
    count = count_basic(basic)
    for row, col in np.ndindex(*basic.shape):
        if count >= target:
            break
        if not basic[row, col]:
            basic[row, col] = True
            allocations[row, col] = 0
            added.append((row, col))
            count += 1
    return added


def pad_spanning(basic: np.ndarray, allocations: np.ndarray, target: int) -> list[tuple[int, int]]:
    """Row-major padding that only admits cells joining two components.

    The Least Cost allocations form a forest, so admitting only connecting cells
    completes it to a spanning tree.
    """
    components = BasisComponents.from_mask(basic)
    added: list[tuple[int, int]] = []
    count = count_basic(basic)
    for row, col in np.ndindex(*basic.shape):
        if count >= target:
            break
        if not basic[row, col] and components.connects(row, col):
            basic[row, col] = True
            allocations[row, col] = 0
            components.add_cell(row, col)
            added.append((row, col))
            count += 1
    return added


PADDING_POLICIES = {
    "row_major": pad_row_major,
    "spanning": pad_spanning,
}


def least_cost_solution(
    problem: TransportationProblem,
    padding: str = "spanning",
) -> tuple[np.ndarray, np.ndarray, list[tuple[int, int]]]:
    """Build an initial shipment plan and basis with the Least Cost heuristic.

    Walks cells in ascending cost order and ships min(remaining supply,
    remaining demand) wherever both are positive. If fewer than m + n - 1 cells
    end up basic, the basis is padded with zero-allocation cells using the
    chosen padding policy.

    Returns:
        Tuple of (allocations, basic mask, padded cells).
    """
    allocations = np.zeros(problem.shape, dtype=np.int64)
    basic = np.zeros(problem.shape, dtype=bool)
    remaining_supply = problem.supply.copy()
    remaining_demand = problem.demand.copy()

    for row, col in least_cost_order(problem.costs):
        if remaining_supply[row] > 0 and remaining_demand[col] > 0:
            quantity = min(remaining_supply[row], remaining_demand[col])
            allocations[row, col] = quantity
            basic[row, col] = True
            remaining_supply[row] -= quantity
            remaining_demand[col] -= quantity

    padded: list[tuple[int, int]] = []
    if count_basic(basic) < problem.basis_size:
        padded = PADDING_POLICIES[padding](basic, allocations, problem.basis_size)
        logger.debug(
            "Degenerate initial solution padded with zero-allocation cells",
            extra={"padding": padding, "padded_cells": padded},
        )
    return allocations, basic, padded
