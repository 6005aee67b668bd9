"""Flow reallocation along a stepping-stone loop."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .loop import Loop


@dataclass(frozen=True)
class PivotOutcome:
    """Summary of a single pivot.

    Attributes:
        entering: Cell that joined the basis.
        leaving: Cell that left the basis.
        theta: Units shifted around the loop.
        loop: The loop the flow was shifted along.
    """

    entering: tuple[int, int]
    leaving: tuple[int, int]
    theta: int
    loop: Loop

    @property
    def is_degenerate(self) -> bool:
        return self.theta == 0


def apply_pivot(
    allocations: np.ndarray,
    basic: np.ndarray,
    loop: Loop,
    leaving_rule: str = "first_in_loop",
) -> PivotOutcome:
    """Shift theta units around ``loop`` and swap the entering and leaving cells.

    theta is the smallest allocation among the '-' cells. '+' cells gain theta,
    '-' cells lose it. Among the '-' cells that reach zero, the first in loop
    order leaves the basis (``leaving_rule="first_in_loop"``), or the first in
    row-major order (``leaving_rule="lowest_index"``). Other cells that reach
    zero stay basic with zero allocation.

    ``allocations`` and ``basic`` are updated in place.
    """
    minus_cells = loop.minus_cells
    theta = int(min(allocations[cell] for cell in minus_cells))

    for cell in loop.plus_cells:
        allocations[cell] += theta
    for cell in minus_cells:
        allocations[cell] -= theta

    emptied = [cell for cell in minus_cells if allocations[cell] == 0]
    leaving = min(emptied) if leaving_rule == "lowest_index" else emptied[0]

    basic[loop.entering] = True
    basic[leaving] = False
    return PivotOutcome(entering=loop.entering, leaving=leaving, theta=theta, loop=loop)
