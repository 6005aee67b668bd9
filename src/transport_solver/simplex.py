"""Transportation simplex (MODI / stepping-stone) implementation."""

from __future__ import annotations

import logging
import time
from enum import Enum

import numpy as np

from .basis import UNKNOWN, compute_potentials, count_basic
from .data import (
    Basis,
    ProgressCallback,
    ProgressInfo,
    SolverOptions,
    TransportationProblem,
    TransportResult,
)
from .diagnostics import BasisHistory, ConvergenceMonitor, SolveTrace
from .exceptions import BasisInvariantError, SolverConfigurationError
from .initial import least_cost_solution
from .loop import find_loop
from .pivot import PivotOutcome, apply_pivot
from .pricing import BlandPricing, create_pricing_strategy, reduced_costs
from .utils import total_cost


class SolverState(Enum):
    """Lifecycle of a single solve."""

    BUILDING = "building"
    ITERATING = "iterating"
    OPTIMAL = "optimal"
    ABORTED = "aborted"
    ITERATION_LIMIT = "iteration_limit"
    TIME_LIMIT = "time_limit"


class TransportSimplex:
    """MODI solver for the balanced transportation problem.

    The solver builds an initial plan with the Least Cost method and then
    repeats: compute potentials, price the non-basic cells, find the
    stepping-stone loop for the entering cell and shift flow around it, until no
    cell has a negative reduced cost.

    All mutable state (allocations, basis mask, potentials, trace) belongs to
    one instance and one call to ``solve()``. Create a new instance per solve;
    ``solve_transportation()`` does this for you.

    Attributes:
        problem: The TransportationProblem being solved.
        options: Solver configuration.
        allocations: Current m x n shipment plan.
        basic: Current m x n basis mask.
        u: Current row potentials.
        v: Current column potentials.
        state: Current SolverState.
    """

    def __init__(self, problem: TransportationProblem, options: SolverOptions | None = None):
        self.options = options if options is not None else SolverOptions()
        self.logger = logging.getLogger(__name__)
        self.problem = problem
        self.costs = problem.costs
        self.tolerance = self.options.tolerance

        self.allocations = np.zeros(problem.shape, dtype=np.int64)
        self.basic = np.zeros(problem.shape, dtype=bool)
        self.u = np.full(problem.num_sources, UNKNOWN)
        self.v = np.full(problem.num_destinations, UNKNOWN)

        self.state = SolverState.BUILDING
        self.iterations = 0
        self.failure: BasisInvariantError | None = None
        self.trace = SolveTrace(enabled=self.options.record_trace)
        self.monitor = ConvergenceMonitor()
        self.history = BasisHistory() if self.options.cycle_detection else None
        self.pricing = create_pricing_strategy(self.options.pricing_strategy)

    @property
    def leaving_rule(self) -> str:
        return "lowest_index" if isinstance(self.pricing, BlandPricing) else "first_in_loop"

    # ============================================================================
    # Initial basis
    # ============================================================================

    def _check_balance(self) -> None:
        if self.problem.is_balanced:
            return
        message = (
            f"Transportation problem is unbalanced. Total supply: {self.problem.total_supply}, "
            f"total demand: {self.problem.total_demand}. Proceeding without a dummy source "
            f"or destination."
        )
        self.trace.warn(message)
        self.logger.warning(
            "Unbalanced transportation problem",
            extra={
                "total_supply": self.problem.total_supply,
                "total_demand": self.problem.total_demand,
            },
        )

    def _build_initial_solution(self) -> None:
        self.trace.add("Finding initial basic feasible solution (Least Cost method)...")
        self.allocations, self.basic, padded = least_cost_solution(
            self.problem, padding=self.options.padding
        )
        if padded:
            self.trace.add(
                "Degeneracy detected in initial solution. Added zero-allocation basic cells: "
                + " ".join(f"({r},{c})" for r, c in padded)
            )
        self.trace.add(f"Initial total cost: {self._objective():.2f}")

    def _apply_warm_start_basis(self, warm_start_basis: Basis) -> bool:
        """Load a previous plan and basis. Returns False if it cannot be used."""
        num_sources, num_destinations = self.problem.shape
        allocations = np.zeros(self.problem.shape, dtype=np.int64)
        basic = np.zeros(self.problem.shape, dtype=bool)

        cells = set(warm_start_basis.basic_cells) | set(warm_start_basis.allocations)
        for row, col in cells:
            if not (0 <= row < num_sources and 0 <= col < num_destinations):
                self.logger.warning(
                    "Warm-start basis references a cell outside the problem. Falling back to cold start.",
                    extra={"cell": (row, col), "shape": self.problem.shape},
                )
                return False
        for cell in warm_start_basis.basic_cells:
            basic[cell] = True
        for cell, quantity in warm_start_basis.allocations.items():
            allocations[cell] = int(quantity)

        reason = None
        if count_basic(basic) != self.problem.basis_size:
            reason = f"basis has {count_basic(basic)} cells, expected {self.problem.basis_size}"
        elif (allocations < 0).any():
            reason = "basis contains negative allocations"
        elif (allocations[~basic] != 0).any():
            reason = "non-basic cells carry flow"
        elif (allocations.sum(axis=0) > self.problem.demand).any() or (
            allocations.sum(axis=1) > self.problem.supply
        ).any():
            reason = "allocations exceed supply or demand"
        elif self.problem.total_supply >= self.problem.total_demand and not np.array_equal(
            allocations.sum(axis=0), self.problem.demand
        ):
            reason = "allocations do not meet demand"
        elif self.problem.total_supply <= self.problem.total_demand and not np.array_equal(
            allocations.sum(axis=1), self.problem.supply
        ):
            reason = "allocations do not use all supply"

        if reason is not None:
            self.logger.warning(
                f"Warm-start basis rejected: {reason}. Falling back to cold start."
            )
            self.trace.warn(f"Warm-start basis rejected: {reason}")
            return False

        self.allocations = allocations
        self.basic = basic
        self.trace.add("Starting from warm-start basis.")
        self.trace.add(f"Initial total cost: {self._objective():.2f}")
        return True

    # ============================================================================
    # Iteration
    # ============================================================================

    def _price(self) -> tuple[tuple[int, int], float] | None:
        """Compute potentials and select the entering cell (None when optimal)."""
        self.u, self.v = compute_potentials(self.costs, self.basic)
        self.trace.potentials(self.u, self.v)
        reduced = reduced_costs(self.costs, self.u, self.v)
        self.trace.reduced_costs(reduced, self.basic)
        return self.pricing.select_entering_cell(reduced, self.basic, self.tolerance)

    def _pivot(self, entering: tuple[int, int], reduced_cost: float) -> PivotOutcome:
        self.trace.add(
            f"Entering cell: ({entering[0]}, {entering[1]}) with improvement index {reduced_cost:.2f}"
        )
        loop = find_loop(self.basic, entering)
        self.trace.add(f"Closed loop found: {loop.describe()}")
        outcome = apply_pivot(self.allocations, self.basic, loop, leaving_rule=self.leaving_rule)
        self.trace.add(f"Minimum allocation to shift (theta): {outcome.theta}")
        self.trace.add(f"Leaving cell: ({outcome.leaving[0]}, {outcome.leaving[1]})")

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "Pivot applied",
                extra={
                    "iteration": self.iterations + 1,
                    "entering": entering,
                    "leaving": outcome.leaving,
                    "theta": outcome.theta,
                    "reduced_cost": reduced_cost,
                    "loop_length": len(loop),
                },
            )
        return outcome

    def _record_pivot(self, outcome: PivotOutcome) -> None:
        objective = self._objective()
        self.monitor.record_iteration(objective, is_degenerate=outcome.is_degenerate)
        self.trace.allocations(self.allocations)
        self.trace.add(f"Current total cost: {objective:.2f}")

        if self.history is not None and self.history.record_basis(self.basic):
            if not isinstance(self.pricing, BlandPricing):
                self.pricing = BlandPricing()
                message = (
                    f"Basis revisited at iteration {self.iterations}; switching to Bland's rule "
                    f"to prevent cycling."
                )
                self.trace.warn(message)
                self.logger.warning(
                    "Cycling detected, switching to Bland pricing",
                    extra={"iteration": self.iterations},
                )

    def _abort(self, exc: BasisInvariantError) -> None:
        exc.iteration = self.iterations + 1
        self.failure = exc
        self.state = SolverState.ABORTED
        self.trace.add(f"Error: {exc}")
        self.logger.error(
            "Optimization aborted: basis invariant violated",
            extra={
                "iteration": exc.iteration,
                "error": type(exc).__name__,
                "detail": str(exc),
            },
        )

    # ============================================================================
    # Public API
    # ============================================================================

    def solve(
        self,
        max_iterations: int | None = None,
        progress_callback: ProgressCallback | None = None,
        progress_interval: int = 100,
        warm_start_basis: Basis | None = None,
    ) -> TransportResult:
        """Solve the transportation problem.

        Args:
            max_iterations: Maximum number of pivots. If None, uses the value from
                           SolverOptions (default: max(100, 20 * m * n)).
            progress_callback: Optional callback receiving ProgressInfo updates.
            progress_interval: Number of pivots between progress callbacks.
            warm_start_basis: Optional plan and basis to start from instead of the
                             Least Cost solution.

        Returns:
            TransportResult with the final plan, potentials and status.

        Raises:
            RuntimeError: If called a second time on the same instance.
            SolverConfigurationError: If progress_interval is less than 1.
        """
        if self.state is not SolverState.BUILDING:
            raise RuntimeError("TransportSimplex.solve() may only be called once per instance.")
        if progress_interval < 1:
            raise SolverConfigurationError(
                f"progress_interval must be at least 1, got {progress_interval}."
            )

        if max_iterations is None:
            if self.options.max_iterations is not None:
                max_iterations = self.options.max_iterations
            else:
                max_iterations = max(100, 20 * self.costs.size)
        time_limit = self.options.time_limit
        start_time = time.time()

        self.logger.info(
            "Starting transportation simplex solver",
            extra={
                "sources": self.problem.num_sources,
                "destinations": self.problem.num_destinations,
                "max_iterations": max_iterations,
                "pricing_strategy": self.pricing.name,
                "padding": self.options.padding,
                "warm_start": warm_start_basis is not None,
            },
        )

        self._check_balance()
        if warm_start_basis is None or not self._apply_warm_start_basis(warm_start_basis):
            self._build_initial_solution()

        self.state = SolverState.ITERATING
        self.trace.add("")
        self.trace.add("Starting MODI iterations...")
        if self.history is not None:
            self.history.record_basis(self.basic)

        while self.state is SolverState.ITERATING:
            self.trace.add("")
            self.trace.add(f"--- Iteration {self.iterations + 1} ---")
            try:
                entering = self._price()
                if entering is None:
                    self.state = SolverState.OPTIMAL
                    self.trace.add("All improvement indices are non-negative. Optimal solution found!")
                    break
                if self.iterations >= max_iterations:
                    self.state = SolverState.ITERATION_LIMIT
                    break
                if time_limit is not None and time.time() - start_time >= time_limit:
                    self.state = SolverState.TIME_LIMIT
                    break
                outcome = self._pivot(*entering)
            except BasisInvariantError as exc:
                self._abort(exc)
                break

            self.iterations += 1
            self._record_pivot(outcome)

            if progress_callback is not None and self.iterations % progress_interval == 0:
                progress_callback(
                    ProgressInfo(
                        iteration=self.iterations,
                        max_iterations=max_iterations,
                        objective=self._objective(),
                        elapsed_time=time.time() - start_time,
                    )
                )

        if self.state in (SolverState.ITERATION_LIMIT, SolverState.TIME_LIMIT):
            message = (
                f"Stopped before optimality ({self.state.value}) after {self.iterations} iterations."
            )
            self.trace.warn(message)
            self.logger.warning(
                "Budget exhausted before optimality",
                extra={
                    "status": self.state.value,
                    "iterations": self.iterations,
                    "max_iterations": max_iterations,
                    "time_limit": time_limit,
                },
            )

        objective = self._objective()
        elapsed = time.time() - start_time
        self.logger.info(
            "Solver complete",
            extra={
                "status": self.state.value,
                "objective": objective,
                "iterations": self.iterations,
                "elapsed_ms": elapsed * 1000,
                **self.monitor.get_diagnostic_summary(),
            },
        )

        basis = None if self.state is SolverState.ABORTED else self._extract_basis()
        return TransportResult(
            allocations=self.allocations.copy(),
            objective=objective,
            status=self.state.value,
            iterations=self.iterations,
            u=self.u.copy(),
            v=self.v.copy(),
            basis=basis,
            trace=self.trace.render(),
            warnings=list(self.trace.warnings),
            failure=self.failure,
            degenerate_pivots=self.monitor.degenerate_pivots,
            elapsed_time=elapsed,
        )

    # ============================================================================
    # Utility Methods
    # ============================================================================

    def _objective(self) -> float:
        return total_cost(self.costs, self.allocations)

    def _extract_basis(self) -> Basis:
        cells = {(int(r), int(c)) for r, c in zip(*np.nonzero(self.basic))}
        return Basis(
            basic_cells=cells,
            allocations={cell: int(self.allocations[cell]) for cell in cells if self.allocations[cell]},
        )
