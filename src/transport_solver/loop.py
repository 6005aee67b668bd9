"""Stepping-stone loop search for the entering cell.

A loop starts and ends at the entering cell and alternates between moves along
a row (same row, new column) and moves along a column (same column, new row).
Every corner other than the entering cell must be a basic cell and no cell is
visited twice. Corners at even positions receive flow (+), corners at odd
positions give it up (-).
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

from .exceptions import LoopNotFoundError

ALONG_ROW = 0
ALONG_COLUMN = 1


@dataclass(frozen=True)
class Loop:
    """Closed alternating path through the basis.

    Attributes:
        cells: Corner cells in loop order, starting with the entering cell. The
               closing return to the entering cell is implicit.
    """

    cells: tuple[tuple[int, int], ...]

    @property
    def entering(self) -> tuple[int, int]:
        return self.cells[0]

    @property
    def signs(self) -> tuple[str, ...]:
        return tuple("+" if k % 2 == 0 else "-" for k in range(len(self.cells)))

    @property
    def plus_cells(self) -> tuple[tuple[int, int], ...]:
        return self.cells[0::2]

    @property
    def minus_cells(self) -> tuple[tuple[int, int], ...]:
        return self.cells[1::2]

    def __len__(self) -> int:
        return len(self.cells)

    def describe(self) -> str:
        return " ".join(f"{sign}({r},{c})" for sign, (r, c) in zip(self.signs, self.cells))


def _moves(
    shape: tuple[int, int], cell: tuple[int, int], directions: tuple[int, ...]
) -> Iterator[tuple[tuple[int, int], int]]:
    # Candidates in coordinate order, along-row moves before along-column moves.
    num_sources, num_destinations = shape
    row, col = cell
    for direction in directions:
        if direction == ALONG_ROW:
            for j in range(num_destinations):
                if j != col:
                    yield (row, j), direction
        else:
            for i in range(num_sources):
                if i != row:
                    yield (i, col), direction


def find_loop(basic: np.ndarray, entering: tuple[int, int]) -> Loop:
    """Find the closed loop through ``entering`` using depth-first search.

    The search keeps an explicit stack of candidate iterators instead of
    recursing, with an on-path marker per cell so a path never revisits a cell.
    The first move may go either way; later moves alternate direction. The loop
    closes when the entering cell is reached again by a move perpendicular to
    the first one, after at least three cells.

    Raises:
        LoopNotFoundError: If no such loop exists, which means the basis is not
            a spanning tree. A connected basis of m + n - 1 cells always has
            the loop, and the driver checks connectivity when it computes
            potentials, so during a solve this only guards against a basis
            whose invariants were already broken.
    """
    shape = basic.shape
    on_path = np.zeros(shape, dtype=bool)
    on_path[entering] = True
    path = [entering]
    directions: list[int] = []
    stack = [_moves(shape, entering, (ALONG_ROW, ALONG_COLUMN))]

    while stack:
        for cell, direction in stack[-1]:
            if cell == entering:
                if len(path) >= 3 and direction != directions[0]:
                    return Loop(cells=tuple(path))
                continue
            if not basic[cell] or on_path[cell]:
                continue
            on_path[cell] = True
            path.append(cell)
            directions.append(direction)
            next_direction = ALONG_COLUMN if direction == ALONG_ROW else ALONG_ROW
            stack.append(_moves(shape, cell, (next_direction,)))
            break
        else:
            # Dead end: backtrack out of the current cell.
            stack.pop()
            if len(path) > 1:
                on_path[path.pop()] = False
                directions.pop()

    raise LoopNotFoundError(
        f"No closed loop through entering cell {entering}: the basis is not a spanning tree.",
        entering_cell=entering,
    )
