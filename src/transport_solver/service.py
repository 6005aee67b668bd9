"""Request/response boundary for exposing the solver over a JSON API.

``handle_solve_request`` takes an already-decoded JSON body and returns an
HTTP-style status code together with the response body, so it can be mounted
behind any web framework.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .data import SolverOptions
from .exceptions import InvalidProblemError
from .io import potentials_to_json, problem_from_mapping
from .solver import solve_transportation

logger = logging.getLogger(__name__)


def _error_body(message: str) -> dict[str, Any]:
    return {
        "status": "error",
        "final_allocations": None,
        "optimal_cost": 0.0,
        "u_values": None,
        "v_values": None,
        "message": message,
    }


def handle_solve_request(
    payload: Mapping[str, Any] | None,
    options: SolverOptions | None = None,
) -> tuple[int, dict[str, Any]]:
    """Validate a solve request, run the solver and build the response body.

    Returns:
        (400, body) for missing, empty or malformed input, (500, body) when the
        solver itself fails unexpectedly, otherwise (200, body) where
        ``body["status"]`` is the solver status. Aborted solves are reported
        with status ``"aborted"`` and the failure in ``message``.
    """
    if payload is None:
        return 400, _error_body("Error: Missing input data (costs, supply, or demand).")
    try:
        problem = problem_from_mapping(payload)
    except InvalidProblemError as exc:
        logger.info("Rejected solve request", extra={"reason": str(exc)})
        return 400, _error_body(f"Error: {exc}")

    try:
        result = solve_transportation(problem, options=options)
    except Exception as exc:
        logger.exception("Solve request failed with an internal error")
        return 500, _error_body(f"An internal error occurred: {exc}")

    # The trace already ends with the failure when tracing is enabled.
    message = result.trace
    if not message and result.failure is not None:
        message = f"Error: {result.failure}"
    return 200, {
        "status": result.status,
        "final_allocations": result.allocations.tolist(),
        "optimal_cost": result.objective,
        "u_values": potentials_to_json(result.u),
        "v_values": potentials_to_json(result.v),
        "message": message,
    }
