"""Core data structures for the transportation problem."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import numpy as np

from .exceptions import (
    BasisInvariantError,
    InvalidProblemError,
    IterationLimitError,
    SolverConfigurationError,
)

Cell = tuple[int, int]


@dataclass(frozen=True, eq=False)
class TransportationProblem:
    """Immutable snapshot of a transportation problem.

    Attributes:
        costs: m x n array of nonnegative unit shipping costs (read-only).
        supply: Length-m integer array of source supplies (read-only).
        demand: Length-n integer array of destination demands (read-only).

    Examples:
        >>> problem = build_problem(
        ...     costs=[[1, 2], [3, 4]],
        ...     supply=[5, 5],
        ...     demand=[5, 5],
        ... )
        >>> problem.shape
        (2, 2)
        >>> problem.is_balanced
        True

    Note:
        Balance (sum(supply) == sum(demand)) is not enforced. Solving an
        unbalanced problem records a warning and proceeds without adding
        dummy sources or destinations.

    See Also:
        - build_problem(): Validating constructor for raw Python sequences.
        - solve_transportation(): Solve the problem.
    """

    costs: np.ndarray
    supply: np.ndarray
    demand: np.ndarray

    @property
    def num_sources(self) -> int:
        return int(self.supply.shape[0])

    @property
    def num_destinations(self) -> int:
        return int(self.demand.shape[0])

    @property
    def shape(self) -> tuple[int, int]:
        return self.num_sources, self.num_destinations

    @property
    def basis_size(self) -> int:
        """Number of basic cells in a spanning-tree basis (m + n - 1)."""
        return self.num_sources + self.num_destinations - 1

    @property
    def total_supply(self) -> int:
        return int(self.supply.sum())

    @property
    def total_demand(self) -> int:
        return int(self.demand.sum())

    @property
    def is_balanced(self) -> bool:
        return self.total_supply == self.total_demand


@dataclass
class Basis:
    """A shipment plan together with its basic cells, used for warm starts.

    Attributes:
        basic_cells: Set of (source, destination) cells in the basis.
        allocations: Mapping of (source, destination) cells to shipped quantities.
                     Cells not present ship zero.

    Examples:
        >>> result = solve_transportation(problem)
        >>> again = solve_transportation(problem, warm_start_basis=result.basis)
        >>> again.iterations
        0
    """

    basic_cells: set[Cell] = field(default_factory=set)
    allocations: dict[Cell, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ProgressInfo:
    """Progress information provided during solver execution.

    Attributes:
        iteration: Pivots performed so far.
        max_iterations: Iteration budget for this solve.
        objective: Total cost of the current shipment plan.
        elapsed_time: Elapsed time in seconds since the solve started.
    """

    iteration: int
    max_iterations: int
    objective: float
    elapsed_time: float


# Type alias for progress callback function
ProgressCallback = Callable[[ProgressInfo], None]


@dataclass
class TransportResult:
    """Represents the output of a transportation solve.

    Attributes:
        allocations: m x n integer array of shipped quantities.
        objective: Total cost of the plan (sum of allocations * costs).
        status: Solution status:
                - 'optimal': every non-basic reduced cost is nonnegative
                - 'aborted': a basis invariant was violated (see ``failure``)
                - 'iteration_limit': iteration budget exhausted before optimality
                - 'time_limit': wall-clock budget exhausted before optimality
        iterations: Number of pivots performed.
        u: Row potentials (length m). NaN marks an unresolved potential.
        v: Column potentials (length n). NaN marks an unresolved potential.
        basis: Basis for warm-starting a later solve (None when aborted).
        trace: Human-readable description of each iteration.
        warnings: Non-fatal conditions noticed during the solve.
        failure: The basis invariant violation that aborted the solve, if any.
        degenerate_pivots: Number of pivots that shifted zero units.
        elapsed_time: Wall-clock solve time in seconds.
    """

    allocations: np.ndarray
    objective: float
    status: str = "optimal"
    iterations: int = 0
    u: np.ndarray = field(default_factory=lambda: np.zeros(0))
    v: np.ndarray = field(default_factory=lambda: np.zeros(0))
    basis: Basis | None = None
    trace: str = ""
    warnings: list[str] = field(default_factory=list)
    failure: BasisInvariantError | None = None
    degenerate_pivots: int = 0
    elapsed_time: float = 0.0

    @property
    def is_optimal(self) -> bool:
        return self.status == "optimal"

    def raise_for_status(self) -> None:
        """Raise the structured failure when the solve did not reach optimality."""
        if self.failure is not None:
            raise self.failure
        if self.status in ("iteration_limit", "time_limit"):
            raise IterationLimitError(
                f"Solve stopped with status '{self.status}' after {self.iterations} iterations",
                iterations=self.iterations,
                objective=self.objective,
                status=self.status,
            )


@dataclass
class SolverOptions:
    """Configuration options for the transportation simplex solver.

    Attributes:
        max_iterations: Maximum number of pivots. If None, defaults to
                       max(100, 20 * m * n).
        time_limit: Wall-clock budget in seconds. None disables the check.
        tolerance: A non-basic cell enters the basis only when its reduced cost
                  is below -tolerance (default: 1e-9).
        pricing_strategy: Entering cell rule:
                         - "dantzig" (default): most negative reduced cost, first
                           occurrence in row-major order on ties
                         - "bland": first improving cell in row-major order
        padding: Degeneracy padding policy for the initial basis:
                - "spanning" (default): row-major scan admitting only cells that
                  connect two components, so the basis is always a spanning tree
                - "row_major": admit the first non-basic cells in row-major order
                  regardless of connectivity
        cycle_detection: Track visited bases and switch to Bland's rule when a
                        basis recurs (default: True).
        record_trace: Build the textual iteration trace (default: True).

    Examples:
        >>> options = SolverOptions(max_iterations=500, pricing_strategy="bland")
        >>> options = SolverOptions(padding="row_major", cycle_detection=False)
    """

    max_iterations: int | None = None
    time_limit: float | None = None
    tolerance: float = 1e-9
    pricing_strategy: str = "dantzig"
    padding: str = "spanning"
    cycle_detection: bool = True
    record_trace: bool = True

    def __post_init__(self) -> None:
        if self.max_iterations is not None and self.max_iterations <= 0:
            raise SolverConfigurationError(
                f"max_iterations must be positive, got {self.max_iterations}."
            )
        if self.time_limit is not None and self.time_limit <= 0:
            raise SolverConfigurationError(
                f"time_limit must be positive seconds, got {self.time_limit}."
            )
        if self.tolerance <= 0:
            raise SolverConfigurationError(
                f"Tolerance must be positive, got {self.tolerance}. "
                f"Tolerance controls when a reduced cost counts as negative."
            )
        if self.pricing_strategy not in ("dantzig", "bland"):
            raise SolverConfigurationError(
                f"Invalid pricing strategy '{self.pricing_strategy}'. Must be 'dantzig' or 'bland'."
            )
        if self.padding not in ("spanning", "row_major"):
            raise SolverConfigurationError(
                f"Invalid padding policy '{self.padding}'. Must be 'spanning' or 'row_major'."
            )


_MAX_QUANTITY = int(np.iinfo(np.int64).max)


def _as_quantity(value: object, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise InvalidProblemError(f"{label} must be a number, got {value!r}.")
    if not isinstance(value, (int, np.integer)) and (
        not math.isfinite(float(value)) or float(value) != int(value)
    ):
        raise InvalidProblemError(f"{label} must be a whole number of units, got {value!r}.")
    if value < 0:
        raise InvalidProblemError(f"{label} must be nonnegative, got {value!r}.")
    if int(value) > _MAX_QUANTITY:
        raise InvalidProblemError(
            f"{label} exceeds the largest supported quantity {_MAX_QUANTITY}, got {value!r}."
        )
    return int(value)


def build_problem(
    costs: Sequence[Sequence[float]],
    supply: Sequence[int],
    demand: Sequence[int],
) -> TransportationProblem:
    """Validate raw inputs and assemble a TransportationProblem.

    Raises:
        InvalidProblemError: If any input is missing, empty, ragged, mismatched in
            size, or contains negative or non-numeric values.
    """
    if costs is None or supply is None or demand is None:
        raise InvalidProblemError(
            "Missing input data: costs, supply and demand are all required."
        )
    if len(costs) == 0 or len(costs[0]) == 0:
        raise InvalidProblemError("Cost matrix cannot be empty.")

    width = len(costs[0])
    rows: list[list[float]] = []
    for i, row in enumerate(costs):
        if len(row) != width:
            raise InvalidProblemError(
                f"Cost matrix is ragged: row {i} has {len(row)} entries, expected {width}."
            )
        values = []
        for j, cost in enumerate(row):
            if isinstance(cost, bool) or not isinstance(
                cost, (int, float, np.integer, np.floating)
            ):
                raise InvalidProblemError(f"Cost ({i}, {j}) must be a number, got {cost!r}.")
            try:
                value = float(cost)
            except OverflowError as exc:
                raise InvalidProblemError(f"Cost ({i}, {j}) is too large, got {cost!r}.") from exc
            if not math.isfinite(value) or value < 0:
                raise InvalidProblemError(
                    f"Cost ({i}, {j}) must be a finite nonnegative number, got {cost!r}."
                )
            values.append(value)
        rows.append(values)

    if len(supply) != len(rows):
        raise InvalidProblemError(
            f"Cost matrix has {len(rows)} rows but supply has {len(supply)} entries."
        )
    if len(demand) != width:
        raise InvalidProblemError(
            f"Cost matrix has {width} columns but demand has {len(demand)} entries."
        )

    supply_values = [_as_quantity(s, f"Supply[{i}]") for i, s in enumerate(supply)]
    demand_values = [_as_quantity(d, f"Demand[{j}]") for j, d in enumerate(demand)]
    for label, values in (("supply", supply_values), ("demand", demand_values)):
        if sum(values) > _MAX_QUANTITY:
            raise InvalidProblemError(
                f"Total {label} {sum(values)} exceeds the largest supported quantity "
                f"{_MAX_QUANTITY}."
            )

    cost_array = np.array(rows, dtype=np.float64)
    supply_array = np.array(supply_values, dtype=np.int64)
    demand_array = np.array(demand_values, dtype=np.int64)
    # Freeze the snapshot so a solve can never mutate its inputs.
    for array in (cost_array, supply_array, demand_array):
        array.setflags(write=False)
    return TransportationProblem(costs=cost_array, supply=supply_array, demand=demand_array)
