"""High-level entrypoints for the transportation problem solver library."""

from .data import (
    Basis,
    ProgressCallback,
    ProgressInfo,
    SolverOptions,
    TransportationProblem,
    TransportResult,
    build_problem,
)
from .diagnostics import BasisHistory, ConvergenceMonitor
from .exceptions import (
    BasisInvariantError,
    DisconnectedBasisError,
    InvalidProblemError,
    IterationLimitError,
    LoopNotFoundError,
    SolverConfigurationError,
    TransportSolverError,
)
from .initial import least_cost_solution
from .loop import Loop, find_loop
from .service import handle_solve_request
from .simplex import SolverState, TransportSimplex
from .solver import load_problem, save_result, solve_transportation
from .utils import ValidationResult, check_optimality, total_cost, validate_plan
from .visualization import visualize_plan

__version__ = "0.1.0"

__all__ = [
    # Main API
    "build_problem",
    "load_problem",
    "solve_transportation",
    "save_result",
    "handle_solve_request",
    # Data types
    "TransportationProblem",
    "TransportResult",
    "SolverOptions",
    "Basis",
    # Progress tracking
    "ProgressCallback",
    "ProgressInfo",
    # Engine internals
    "TransportSimplex",
    "SolverState",
    "least_cost_solution",
    "find_loop",
    "Loop",
    # Utilities
    "total_cost",
    "validate_plan",
    "check_optimality",
    "ValidationResult",
    # Diagnostics
    "ConvergenceMonitor",
    "BasisHistory",
    # Visualization
    "visualize_plan",
    # Exceptions
    "TransportSolverError",
    "InvalidProblemError",
    "SolverConfigurationError",
    "BasisInvariantError",
    "DisconnectedBasisError",
    "LoopNotFoundError",
    "IterationLimitError",
    # Version
    "__version__",
]
