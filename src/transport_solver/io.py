"""File I/O helpers for transportation problems."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .data import TransportationProblem, TransportResult, build_problem
from .exceptions import InvalidProblemError


def problem_from_mapping(payload: Mapping[str, Any]) -> TransportationProblem:
    """Build a problem from a decoded JSON object."""
    if not isinstance(payload, Mapping):
        raise InvalidProblemError(
            f"Invalid problem format: expected a JSON object, got {type(payload).__name__}."
        )
    costs = payload.get("costs")
    supply = payload.get("supply")
    demand = payload.get("demand")
    if costs is None or supply is None or demand is None:
        raise InvalidProblemError(
            "Missing input data (costs, supply, or demand)."
        )
    if (
        not isinstance(costs, list)
        or not all(isinstance(row, list) for row in costs)
        or not isinstance(supply, list)
        or not isinstance(demand, list)
    ):
        raise InvalidProblemError(
            "Invalid problem format: 'costs' must be a list of lists and 'supply'/'demand' lists. "
            f"Got costs type: {type(costs).__name__}, supply type: {type(supply).__name__}, "
            f"demand type: {type(demand).__name__}"
        )
    return build_problem(costs=costs, supply=supply, demand=demand)


def load_problem(path: str | Path) -> TransportationProblem:
    """Load a transportation problem from a JSON file."""
    with Path(path).open("r", encoding="utf-8") as fh:
        try:
            payload = json.load(fh)
        except json.JSONDecodeError as exc:
            raise InvalidProblemError(f"Malformed JSON in {path}: {exc}") from exc
    return problem_from_mapping(payload)


def potentials_to_json(values) -> list[float | None]:
    # JSON has no NaN, unresolved potentials become null.
    return [None if math.isnan(x) else float(x) for x in values]


def result_to_dict(result: TransportResult) -> dict[str, Any]:
    """Convert a result to JSON-compatible primitives."""
    failure = None
    if result.failure is not None:
        failure = {
            "type": type(result.failure).__name__,
            "message": str(result.failure),
            "iteration": result.failure.iteration,
        }
    return {
        "status": result.status,
        "objective": result.objective,
        "iterations": result.iterations,
        "allocations": result.allocations.tolist(),
        "u": potentials_to_json(result.u),
        "v": potentials_to_json(result.v),
        "warnings": list(result.warnings),
        "failure": failure,
        "trace": result.trace,
    }


def save_result(path: str | Path, result: TransportResult) -> None:
    """Persist a solver result to JSON."""
    with Path(path).open("w", encoding="utf-8") as fh:
        json.dump(result_to_dict(result), fh, indent=2, sort_keys=False)
