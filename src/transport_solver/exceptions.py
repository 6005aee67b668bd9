"""Custom exceptions for the transportation solver library."""

from __future__ import annotations


class TransportSolverError(Exception):
    """Base exception for all transportation solver errors.

    All custom exceptions in the transport_solver package inherit from this class,
    allowing users to catch all solver-related errors with a single except clause.

    Example:
        try:
            result = solve_transportation(problem)
            result.raise_for_status()
        except TransportSolverError as e:
            print(f"Solver error: {e}")
    """


class InvalidProblemError(TransportSolverError):
    """Raised when a problem definition is invalid or malformed.

    This includes:
    - Missing or empty cost matrix, supply or demand
    - Ragged cost matrix or dimensions that do not match supply/demand lengths
    - Negative or non-finite unit costs
    - Negative or non-integer supply/demand quantities
    - Malformed JSON input

    Unbalanced problems (total supply != total demand) are NOT rejected; the
    solver records a warning and proceeds.

    Example:
        InvalidProblemError("Cost matrix has 3 rows but supply has 2 entries")
    """


class SolverConfigurationError(TransportSolverError):
    """Raised when solver configuration or options are invalid.

    Example:
        SolverConfigurationError("max_iterations must be positive, got -1")
    """


class BasisInvariantError(TransportSolverError):
    """Base class for violations of the basis invariants during optimization.

    These indicate that the current basis is not a spanning tree of the
    source/destination graph. They are distinct from optimality: the solver
    terminates in the ``aborted`` state and stores the exception on
    ``TransportResult.failure``.
    """

    def __init__(self, message: str, iteration: int = 0):
        """Initialize with message and the iteration at which the fault was detected."""
        super().__init__(message)
        self.iteration = iteration


class DisconnectedBasisError(BasisInvariantError):
    """Raised when potentials cannot be resolved for every source and destination.

    The basis graph is disconnected, so reduced costs against the unresolved
    potentials are undefined.

    Example:
        DisconnectedBasisError(
            "Basis is disconnected: potentials unresolved",
            unresolved_rows=(2,),
            unresolved_columns=(2,),
        )
    """

    def __init__(
        self,
        message: str,
        unresolved_rows: tuple[int, ...] = (),
        unresolved_columns: tuple[int, ...] = (),
        iteration: int = 0,
    ):
        """Initialize with message and the unresolved node indices."""
        super().__init__(message, iteration=iteration)
        self.unresolved_rows = unresolved_rows
        self.unresolved_columns = unresolved_columns


class LoopNotFoundError(BasisInvariantError):
    """Raised when no closed stepping-stone loop exists for the entering cell.

    Example:
        LoopNotFoundError(
            "No closed loop through entering cell (0, 2)",
            entering_cell=(0, 2),
        )
    """

    def __init__(
        self,
        message: str,
        entering_cell: tuple[int, int] | None = None,
        iteration: int = 0,
    ):
        """Initialize with message and the entering cell that has no loop."""
        super().__init__(message, iteration=iteration)
        self.entering_cell = entering_cell


class IterationLimitError(TransportSolverError):
    """Raised when the solver exhausts its iteration or time budget.

    By default the solver returns a TransportResult with status
    ``"iteration_limit"`` or ``"time_limit"`` instead of raising. The exception
    is raised by ``TransportResult.raise_for_status()`` for callers that want to
    treat budget exhaustion as an error.

    Example:
        IterationLimitError(
            "Iteration limit reached: 100 iterations completed",
            iterations=100,
            objective=123.0,
            status="iteration_limit",
        )
    """

    def __init__(
        self,
        message: str,
        iterations: int = 0,
        objective: float | None = None,
        status: str = "unknown",
    ):
        """Initialize with message and solution state."""
        super().__init__(message)
        self.iterations = iterations
        self.objective = objective
        self.status = status
