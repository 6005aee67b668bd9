"""Solve the sample transportation problem and store the result."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver import load_problem, save_result, solve_transportation  # noqa: E402


def main() -> None:
    base_dir = Path(__file__).resolve().parent
    problem_path = base_dir / "transport_problem.json"
    output_path = base_dir / "transport_solution.json"

    problem = load_problem(problem_path)
    result = solve_transportation(problem)
    save_result(output_path, result)

    print(f"Solved {problem_path.name}: status={result.status}, objective={result.objective}")

    print("\nShipment plan:")
    for row in result.allocations.tolist():
        print("  " + " ".join(f"{q:4d}" for q in row))


if __name__ == "__main__":
    main()
