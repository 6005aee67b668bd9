"""Tests for the stepping-stone loop search."""

import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from transport_solver.exceptions import LoopNotFoundError  # noqa: E402
from transport_solver.loop import Loop, find_loop  # noqa: E402


def _mask(shape, cells):
    basic = np.zeros(shape, dtype=bool)
    for cell in cells:
        basic[cell] = True
    return basic


def _assert_valid_loop(loop, basic):
    cells = loop.cells
    assert len(cells) >= 4
    assert len(cells) % 2 == 0
    assert len(set(cells)) == len(cells)
    assert all(basic[cell] for cell in cells[1:])
    closed = cells + (cells[0],)
    for k in range(len(cells)):
        (r1, c1), (r2, c2) = closed[k], closed[k + 1]
        assert (r1 == r2) != (c1 == c2)
    # Consecutive moves alternate between rows and columns.
    for k in range(len(cells)):
        along_row_now = closed[k][0] == closed[k + 1][0]
        nxt = closed[(k + 1) % len(cells)], closed[(k + 2) % len(cells)]
        along_row_next = nxt[0][0] == nxt[1][0]
        assert along_row_now != along_row_next


def test_two_by_two_loop():
    basic = _mask((2, 2), [(0, 0), (0, 1), (1, 1)])

    loop = find_loop(basic, (1, 0))

    assert loop.cells == ((1, 0), (1, 1), (0, 1), (0, 0))
    assert loop.signs == ("+", "-", "+", "-")
    assert loop.entering == (1, 0)
    assert loop.plus_cells == ((1, 0), (0, 1))
    assert loop.minus_cells == ((1, 1), (0, 0))


def test_textbook_loop():
    basic = _mask((3, 4), [(0, 3), (1, 0), (1, 2), (2, 0), (2, 1), (2, 3)])

    loop = find_loop(basic, (0, 0))

    assert loop.cells == ((0, 0), (0, 3), (2, 3), (2, 0))
    _assert_valid_loop(loop, basic)


def test_loop_skips_dead_ends_and_backtracks():
    # (0, 1) is explored first but column 1 has no other basic cell.
    basic = _mask((2, 3), [(0, 1), (0, 2), (1, 0), (1, 2)])

    loop = find_loop(basic, (0, 0))

    assert loop.cells == ((0, 0), (0, 2), (1, 2), (1, 0))
    _assert_valid_loop(loop, basic)


def test_loop_must_turn_at_entering_cell():
    # Returning to (0, 0) along row 0 would give a five-cell path that is not a loop.
    basic = _mask((2, 3), [(0, 1), (0, 2), (1, 1), (1, 2)])

    with pytest.raises(LoopNotFoundError):
        find_loop(basic, (0, 0))


def test_loop_closes_after_three_basic_corners():
    basic = _mask((2, 3), [(0, 1), (0, 2), (1, 0), (1, 1)])

    loop = find_loop(basic, (0, 0))

    assert loop.cells == ((0, 0), (0, 1), (1, 1), (1, 0))
    _assert_valid_loop(loop, basic)


@pytest.mark.parametrize("entering", [(0, 2), (2, 0), (1, 2)])
def test_disconnected_basis_has_no_loop(entering):
    basic = _mask((3, 3), [(0, 0), (0, 1), (1, 0), (1, 1), (2, 2)])

    with pytest.raises(LoopNotFoundError) as exc_info:
        find_loop(basic, entering)

    assert exc_info.value.entering_cell == entering


def test_describe_loop():
    loop = Loop(cells=((1, 0), (1, 1), (0, 1), (0, 0)))
    assert loop.describe() == "+(1,0) -(1,1) +(0,1) -(0,0)"
    assert len(loop) == 4
