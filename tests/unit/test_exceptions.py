"""Tests for custom exception hierarchy."""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver import (  # noqa: E402
    BasisInvariantError,
    DisconnectedBasisError,
    InvalidProblemError,
    IterationLimitError,
    LoopNotFoundError,
    SolverConfigurationError,
    TransportSolverError,
)


def test_all_exceptions_inherit_from_base():
    """Test that all custom exceptions inherit from TransportSolverError."""
    assert issubclass(InvalidProblemError, TransportSolverError)
    assert issubclass(SolverConfigurationError, TransportSolverError)
    assert issubclass(BasisInvariantError, TransportSolverError)
    assert issubclass(IterationLimitError, TransportSolverError)


def test_base_exception_is_exception():
    assert issubclass(TransportSolverError, Exception)


def test_engine_faults_share_basis_invariant_base():
    """Disconnected basis and missing loop are both basis invariant violations."""
    assert issubclass(DisconnectedBasisError, BasisInvariantError)
    assert issubclass(LoopNotFoundError, BasisInvariantError)
    assert not issubclass(InvalidProblemError, BasisInvariantError)


def test_disconnected_basis_error_attributes():
    error = DisconnectedBasisError(
        "disconnected", unresolved_rows=(2,), unresolved_columns=(1, 2), iteration=3
    )
    assert str(error) == "disconnected"
    assert error.unresolved_rows == (2,)
    assert error.unresolved_columns == (1, 2)
    assert error.iteration == 3


def test_loop_not_found_error_attributes():
    error = LoopNotFoundError("no loop", entering_cell=(0, 2))
    assert error.entering_cell == (0, 2)
    assert error.iteration == 0


def test_iteration_limit_error_attributes():
    error = IterationLimitError(
        "limit", iterations=10, objective=42.0, status="iteration_limit"
    )
    assert error.iterations == 10
    assert error.objective == 42.0
    assert error.status == "iteration_limit"


def test_catch_all_with_base_class():
    with pytest.raises(TransportSolverError):
        raise LoopNotFoundError("no loop", entering_cell=(1, 1))
