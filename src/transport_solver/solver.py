"""Public solver entrypoints."""

from __future__ import annotations

from pathlib import Path

from .data import Basis, ProgressCallback, SolverOptions, TransportationProblem, TransportResult
from .io import load_problem as load_problem_file
from .io import save_result as save_result_file
from .simplex import TransportSimplex


def solve_transportation(
    problem: TransportationProblem,
    options: SolverOptions | None = None,
    max_iterations: int | None = None,
    progress_callback: ProgressCallback | None = None,
    progress_interval: int = 100,
    warm_start_basis: Basis | None = None,
) -> TransportResult:
    """Find a minimum-cost shipment plan with the MODI method.

    Builds an initial plan with the Least Cost heuristic (or starts from
    ``warm_start_basis``) and pivots along stepping-stone loops until no
    non-basic cell has a negative reduced cost.

    Args:
        problem: The transportation problem to solve. Unbalanced problems are
                solved as given and a warning is recorded.
        options: Solver configuration options. If None, uses defaults.
        max_iterations: Maximum number of pivots. Overrides options.max_iterations
                       if provided. If None, defaults to max(100, 20*m*n).
        progress_callback: Optional callback function to receive progress updates.
        progress_interval: Number of pivots between progress callbacks (default: 100).
        warm_start_basis: Optional plan and basis from a previous solve
                         (``result.basis``). Re-solving from an optimal basis
                         performs zero pivots.

    Returns:
        TransportResult containing:
        - allocations: Final m x n shipment plan
        - objective: Total shipping cost
        - status: 'optimal', 'aborted', 'iteration_limit' or 'time_limit'
        - u, v: Row and column potentials
        - trace: Textual description of every iteration
        - failure: Structured basis invariant violation when status is 'aborted'

    Raises:
        SolverConfigurationError: If options are invalid.

    Examples:
        >>> from transport_solver import build_problem, solve_transportation
        >>> problem = build_problem([[1, 2], [3, 4]], supply=[5, 5], demand=[5, 5])
        >>> result = solve_transportation(problem)
        >>> result.status, result.objective
        ('optimal', 25.0)
        >>> result.allocations.tolist()
        [[5, 0], [0, 5]]

    See Also:
        - TransportationProblem: Problem definition structure
        - SolverOptions: Configuration and tuning parameters
        - TransportResult: Solution output format
    """
    # Instantiate a fresh solver each call so concurrent solves never share state.
    solver = TransportSimplex(problem, options=options)
    return solver.solve(
        max_iterations=max_iterations,
        progress_callback=progress_callback,
        progress_interval=progress_interval,
        warm_start_basis=warm_start_basis,
    )


def load_problem(path: str | Path) -> TransportationProblem:
    """Load a transportation problem from a JSON file.

    The file must contain ``costs``, ``supply`` and ``demand`` keys.

    Raises:
        FileNotFoundError: If file does not exist.
        InvalidProblemError: If JSON is malformed or problem is invalid.

    Examples:
        >>> problem = load_problem("examples/transport_problem.json")
        >>> problem.shape
        (3, 4)
    """
    return load_problem_file(path)


def save_result(path: str | Path, result: TransportResult) -> None:
    """Save a solve result to a JSON file.

    Raises:
        OSError: If file cannot be written.
    """
    save_result_file(path, result)
