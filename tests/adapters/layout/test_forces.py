from __future__ import annotations

from typing import get_args

import pytest

from adapters.layout.forces import ForceWeights, MagneticForceModel
from domain.models import Canvas, Force, ForceKind, Rect


@pytest.fixture
def model() -> MagneticForceModel:
    return MagneticForceModel()


def _by_kind(forces: list[Force], kind: ForceKind) -> list[Force]:
    return [force for force in forces if force.kind == kind]


def test_grid_attraction_pulls_toward_nearest_line(model: MagneticForceModel, canvas: Canvas) -> None:
    forces = model.forces(Rect(105, 100, 200, 100), [], canvas)

    grid = _by_kind(forces, "grid")
    assert grid[0].dx == pytest.approx(-1.5)
    assert all(force.dy == 0 for force in grid)


def test_grid_attraction_ignores_far_positions(canvas: Canvas) -> None:
    model = MagneticForceModel(ForceWeights(grid_threshold=4))

    assert _by_kind(model.forces(Rect(105, 110, 200, 100), [], canvas), "grid") == []


def test_alignment_attracts_matching_edges(model: MagneticForceModel, canvas: Canvas) -> None:
    forces = model.forces(Rect(105, 100, 200, 100), [Rect(100, 300, 200, 100)], canvas)

    align = _by_kind(forces, "align")
    assert [force.dx for force in align] == pytest.approx([-2.0, -2.0])
    assert all(force.dy == 0 for force in align)


def test_repulsion_pushes_away_along_shallow_axis(model: MagneticForceModel, canvas: Canvas) -> None:
    forces = model.forces(Rect(100, 100, 200, 100), [Rect(250, 100, 200, 100)], canvas)

    assert _by_kind(forces, "repel") == [Force(-100, 0, "repel")]
    assert _by_kind(forces, "align") == []


def test_repulsion_on_identical_rects_goes_down(model: MagneticForceModel, canvas: Canvas) -> None:
    forces = model.forces(Rect(100, 100, 200, 100), [Rect(100, 100, 200, 100)], canvas)

    assert _by_kind(forces, "repel") == [Force(0, 200, "repel")]


def test_displacement_is_damped_sum(model: MagneticForceModel, canvas: Canvas) -> None:
    shift = model.displacement(Rect(105, 100, 200, 100), [], canvas)

    assert shift.x == pytest.approx(-1.05)
    assert shift.y == pytest.approx(0)


def test_force_kinds_cover_every_source(model: MagneticForceModel, canvas: Canvas) -> None:
    others = [Rect(100, 300, 200, 100), Rect(250, 100, 200, 100)]

    forces = model.forces(Rect(105, 100, 200, 100), others, canvas)

    assert {force.kind for force in forces} == set(get_args(ForceKind))
