"""Basis bookkeeping and potential computation for the transportation simplex.

The basis is viewed as an undirected bipartite graph: sources are nodes
``0..m-1``, destinations are nodes ``m..m+n-1`` and every basic cell ``(i, j)``
is an edge between node ``i`` and node ``m + j``. A valid basis is a spanning
tree of this graph.
"""

from __future__ import annotations

from collections import deque

import numpy as np

from .exceptions import DisconnectedBasisError

UNKNOWN = float("nan")  # Sentinel for a potential the propagation never reached.


def count_basic(basic: np.ndarray) -> int:
    return int(np.count_nonzero(basic))


class BasisComponents:
    """Union-find over source and destination nodes of the basis graph."""

    def __init__(self, num_sources: int, num_destinations: int) -> None:
        self.num_sources = num_sources
        self.parent = list(range(num_sources + num_destinations))

    def find(self, node: int) -> int:
        while self.parent[node] != node:
            self.parent[node] = self.parent[self.parent[node]]
            node = self.parent[node]
        return node

    def connects(self, row: int, col: int) -> bool:
        """True if adding cell (row, col) would join two different components."""
        return self.find(row) != self.find(self.num_sources + col)

    def add_cell(self, row: int, col: int) -> None:
        root_a = self.find(row)
        root_b = self.find(self.num_sources + col)
        if root_a != root_b:
            self.parent[root_a] = root_b

    @classmethod
    def from_mask(cls, basic: np.ndarray) -> BasisComponents:
        components = cls(*basic.shape)
        for row, col in zip(*np.nonzero(basic)):
            components.add_cell(int(row), int(col))
        return components


def compute_potentials(
    costs: np.ndarray,
    basic: np.ndarray,
    reference_row: int = 0,
) -> tuple[np.ndarray, np.ndarray]:
    """Solve cost[i, j] = u[i] + v[j] over the basic cells.

    Fixes ``u[reference_row] = 0`` and propagates breadth-first along basic
    cells. Sources or destinations unreachable from the reference row keep the
    ``UNKNOWN`` (NaN) sentinel; this happens exactly when the basis graph is
    disconnected.
    """
    num_sources, num_destinations = basic.shape
    u = np.full(num_sources, UNKNOWN)
    v = np.full(num_destinations, UNKNOWN)
    u[reference_row] = 0.0

    # Queue holds (is_row, index) for nodes whose potential just became known.
    queue: deque[tuple[bool, int]] = deque([(True, reference_row)])
    while queue:
        is_row, index = queue.popleft()
        if is_row:
            for col in np.flatnonzero(basic[index]):
                if np.isnan(v[col]):
                    v[col] = costs[index, col] - u[index]
                    queue.append((False, int(col)))
        else:
            for row in np.flatnonzero(basic[:, index]):
                if np.isnan(u[row]):
                    u[row] = costs[row, index] - v[index]
                    queue.append((True, int(row)))
    return u, v


def require_resolved(u: np.ndarray, v: np.ndarray, iteration: int = 0) -> None:
    """Raise DisconnectedBasisError if any potential is still unknown."""
    rows = tuple(int(i) for i in np.flatnonzero(np.isnan(u)))
    cols = tuple(int(j) for j in np.flatnonzero(np.isnan(v)))
    if rows or cols:
        raise DisconnectedBasisError(
            f"Basis is disconnected: potentials unresolved for sources {list(rows)} "
            f"and destinations {list(cols)}. The basic cells do not form a spanning tree.",
            unresolved_rows=rows,
            unresolved_columns=cols,
            iteration=iteration,
        )


def potential_residuals(
    costs: np.ndarray, basic: np.ndarray, u: np.ndarray, v: np.ndarray
) -> np.ndarray:
    """Return |cost - (u + v)| on basic cells and 0 elsewhere."""
    residual = np.abs(costs - (u[:, None] + v[None, :]))
    return np.where(basic, residual, 0.0)
