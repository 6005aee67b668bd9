"""Tests for the MODI driver: statuses, potentials, traces and safeguards."""

import logging
import sys
from pathlib import Path
from types import SimpleNamespace

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver import (  # noqa: E402
    DisconnectedBasisError,
    IterationLimitError,
    LoopNotFoundError,
    SolverOptions,
    SolverState,
    TransportSimplex,
    build_problem,
    solve_transportation,
)


@pytest.fixture
def textbook_problem():
    return build_problem(
        costs=[[19, 30, 50, 10], [70, 30, 40, 60], [40, 8, 70, 20]],
        supply=[7, 9, 18],
        demand=[5, 8, 7, 14],
    )


@pytest.fixture
def isolating_problem():
    return build_problem(
        costs=[[1, 10, 10], [2, 3, 10], [10, 10, 1]],
        supply=[3, 5, 5],
        demand=[5, 3, 5],
    )


def test_two_by_two_is_optimal_without_pivots():
    problem = build_problem([[1, 2], [3, 4]], supply=[5, 5], demand=[5, 5])

    result = solve_transportation(problem)

    assert result.status == "optimal"
    assert result.is_optimal
    assert result.iterations == 0
    assert result.objective == pytest.approx(25.0)
    assert result.allocations.tolist() == [[5, 0], [0, 5]]
    np.testing.assert_allclose(result.u, [0.0, 2.0])
    np.testing.assert_allclose(result.v, [1.0, 2.0])
    assert result.basis.basic_cells == {(0, 0), (0, 1), (1, 1)}
    assert result.basis.allocations == {(0, 0): 5, (1, 1): 5}
    assert result.failure is None
    assert result.warnings == []


def test_textbook_problem_reaches_unique_optimum(textbook_problem):
    result = solve_transportation(textbook_problem)

    assert result.status == "optimal"
    assert result.iterations == 2
    assert result.objective == pytest.approx(743.0)
    assert result.allocations.tolist() == [[5, 0, 0, 2], [0, 2, 7, 0], [0, 6, 0, 12]]
    np.testing.assert_allclose(result.u, [0.0, 32.0, 10.0])
    np.testing.assert_allclose(result.v, [19.0, -2.0, 8.0, 10.0])
    assert result.degenerate_pivots == 0


def test_bland_pricing_reaches_same_optimum(textbook_problem):
    result = solve_transportation(textbook_problem, options=SolverOptions(pricing_strategy="bland"))

    assert result.status == "optimal"
    assert result.objective == pytest.approx(743.0)
    assert result.allocations.tolist() == [[5, 0, 0, 2], [0, 2, 7, 0], [0, 6, 0, 12]]


def test_trace_describes_each_iteration(textbook_problem):
    result = solve_transportation(textbook_problem)
    trace = result.trace

    assert "Finding initial basic feasible solution (Least Cost method)..." in trace
    assert "Initial total cost: 814.00" in trace
    assert "--- Iteration 1 ---" in trace
    assert "Entering cell: (0, 0) with improvement index -11.00" in trace
    assert "Closed loop found: +(0,0) -(0,3) +(2,3) -(2,0)" in trace
    assert "Minimum allocation to shift (theta): 3" in trace
    assert "Leaving cell: (2, 0)" in trace
    assert "Current total cost: 781.00" in trace
    assert "Entering cell: (1, 1) with improvement index -19.00" in trace
    assert trace.rstrip().endswith("All improvement indices are non-negative. Optimal solution found!")


def test_trace_can_be_disabled(textbook_problem):
    result = solve_transportation(textbook_problem, options=SolverOptions(record_trace=False))

    assert result.trace == ""
    assert result.objective == pytest.approx(743.0)


def test_spanning_padding_keeps_basis_connected(isolating_problem):
    result = solve_transportation(isolating_problem)

    assert result.status == "optimal"
    assert result.objective == pytest.approx(21.0)
    assert result.allocations.tolist() == [[3, 0, 0], [2, 3, 0], [0, 0, 5]]
    assert result.iterations == 1
    assert result.degenerate_pivots == 1
    np.testing.assert_allclose(result.u, [0.0, 1.0, -8.0])
    np.testing.assert_allclose(result.v, [1.0, 2.0, 9.0])
    assert "Added zero-allocation basic cells: (0,2)" in result.trace


def test_row_major_padding_aborts_on_disconnected_basis(isolating_problem, caplog):
    with caplog.at_level(logging.ERROR, logger="transport_solver"):
        result = solve_transportation(isolating_problem, options=SolverOptions(padding="row_major"))

    assert result.status == "aborted"
    assert result.iterations == 0
    assert result.basis is None
    assert result.objective == pytest.approx(21.0)
    assert isinstance(result.failure, DisconnectedBasisError)
    assert result.failure.unresolved_rows == (2,)
    assert result.failure.unresolved_columns == (2,)
    assert result.failure.iteration == 1
    np.testing.assert_allclose(result.u[:2], [0.0, 1.0])
    assert np.isnan(result.u[2])
    np.testing.assert_allclose(result.v[:2], [1.0, 10.0])
    assert np.isnan(result.v[2])
    assert "Added zero-allocation basic cells: (0,1)" in result.trace
    assert "u values: 0.00 1.00 ?" in result.trace
    assert f"Error: {result.failure}" in result.trace
    assert any(
        record.getMessage() == "Optimization aborted: basis invariant violated"
        for record in caplog.records
    )

    with pytest.raises(DisconnectedBasisError):
        result.raise_for_status()


def test_loop_failure_aborts_with_structured_error(textbook_problem, monkeypatch):
    def no_loop(basic, entering):
        raise LoopNotFoundError("No closed loop through entering cell", entering_cell=entering)

    monkeypatch.setattr("transport_solver.simplex.find_loop", no_loop)

    result = solve_transportation(textbook_problem)

    assert result.status == "aborted"
    assert isinstance(result.failure, LoopNotFoundError)
    assert result.failure.entering_cell == (0, 0)
    assert result.failure.iteration == 1
    assert result.objective == pytest.approx(814.0)


def test_iteration_limit_reports_partial_plan(textbook_problem):
    result = solve_transportation(textbook_problem, max_iterations=1)

    assert result.status == "iteration_limit"
    assert result.iterations == 1
    assert result.objective == pytest.approx(781.0)
    assert result.allocations.tolist() == [[3, 0, 0, 4], [2, 0, 7, 0], [0, 8, 0, 10]]
    assert result.basis is not None
    assert any("iteration_limit" in warning for warning in result.warnings)

    with pytest.raises(IterationLimitError) as excinfo:
        result.raise_for_status()
    assert excinfo.value.iterations == 1
    assert excinfo.value.objective == pytest.approx(781.0)
    assert excinfo.value.status == "iteration_limit"


def test_max_iterations_argument_overrides_options(textbook_problem):
    options = SolverOptions(max_iterations=1)

    assert solve_transportation(textbook_problem, options=options).status == "iteration_limit"
    assert (
        solve_transportation(textbook_problem, options=options, max_iterations=10).status
        == "optimal"
    )


def test_time_limit_stops_before_pivoting(textbook_problem, monkeypatch):
    ticks = iter(range(1000))
    monkeypatch.setattr(
        "transport_solver.simplex.time", SimpleNamespace(time=lambda: float(next(ticks)))
    )

    result = solve_transportation(textbook_problem, options=SolverOptions(time_limit=0.5))

    assert result.status == "time_limit"
    assert result.iterations == 0
    assert result.objective == pytest.approx(814.0)


def test_unbalanced_problem_warns_and_solves(caplog):
    problem = build_problem([[4, 6], [5, 3]], supply=[6, 4], demand=[3, 5])

    with caplog.at_level(logging.WARNING, logger="transport_solver"):
        result = solve_transportation(problem)

    assert result.status == "optimal"
    assert result.allocations.tolist() == [[3, 1], [0, 4]]
    assert result.objective == pytest.approx(30.0)
    assert len(result.warnings) == 1
    assert "unbalanced" in result.warnings[0]
    assert "Total supply: 10, total demand: 8" in result.warnings[0]
    assert any(record.getMessage() == "Unbalanced transportation problem" for record in caplog.records)


def test_cycling_switches_to_bland_pricing(textbook_problem):
    solver = TransportSimplex(textbook_problem)
    solver.history.record_basis = lambda basic: True

    result = solver.solve()

    assert result.status == "optimal"
    assert result.objective == pytest.approx(743.0)
    assert solver.pricing.name == "bland"
    assert solver.leaving_rule == "lowest_index"
    assert sum("switching to Bland" in warning for warning in result.warnings) == 1


def test_cycle_detection_can_be_disabled(textbook_problem):
    solver = TransportSimplex(textbook_problem, SolverOptions(cycle_detection=False))

    assert solver.history is None
    assert solver.solve().objective == pytest.approx(743.0)


def test_solver_instance_is_single_use(textbook_problem):
    solver = TransportSimplex(textbook_problem)
    assert solver.state is SolverState.BUILDING

    solver.solve()
    assert solver.state is SolverState.OPTIMAL

    with pytest.raises(RuntimeError, match="only be called once"):
        solver.solve()


def test_inputs_are_not_mutated(textbook_problem):
    costs_before = textbook_problem.costs.copy()
    supply_before = textbook_problem.supply.copy()

    solve_transportation(textbook_problem)

    np.testing.assert_array_equal(textbook_problem.costs, costs_before)
    np.testing.assert_array_equal(textbook_problem.supply, supply_before)


def test_zero_supply_and_demand():
    problem = build_problem([[1, 2], [3, 4]], supply=[0, 0], demand=[0, 0])

    result = solve_transportation(problem)

    assert result.status == "optimal"
    assert result.objective == 0.0
    assert result.allocations.tolist() == [[0, 0], [0, 0]]
    assert len(result.basis.basic_cells) == 3
