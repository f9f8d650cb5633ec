from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.geometry import overlap, snap
from domain.models import Canvas, Force, Point, Rect
from domain.ports.layout import ForceModel


@dataclass(frozen=True)
class ForceWeights:
    grid: float = 0.3
    alignment: float = 0.4
    repulsion: float = 2.0
    damping: float = 0.7
    grid_threshold: float = 10.0
    alignment_tolerance: float = 15.0
    repulsion_margin: float = 0.0


class MagneticForceModel(ForceModel):
    def __init__(self, weights: ForceWeights | None = None) -> None:
        self.weights = weights or ForceWeights()

    def forces(self, rect: Rect, others: Sequence[Rect], canvas: Canvas) -> list[Force]:
        forces = self._grid_forces(rect, canvas)
        for other in others:
            depth = overlap(rect, other, self.weights.repulsion_margin)
            if depth.is_empty:
                forces.extend(self._alignment_forces(rect, other))
            else:
                forces.append(self._repulsion(rect, other, depth.dx, depth.dy))
        return forces

    def displacement(self, rect: Rect, others: Sequence[Rect], canvas: Canvas) -> Point:
        forces = self.forces(rect, others, canvas)
        total_x = sum(force.dx for force in forces)
        total_y = sum(force.dy for force in forces)
        return Point(total_x * self.weights.damping, total_y * self.weights.damping)

    def _grid_forces(self, rect: Rect, canvas: Canvas) -> list[Force]:
        forces: list[Force] = []
        grid_x = snap(rect.x, canvas.grid_size)
        grid_y = snap(rect.y, canvas.grid_size)
        if abs(rect.x - grid_x) < self.weights.grid_threshold:
            forces.append(Force((grid_x - rect.x) * self.weights.grid, 0, "grid"))
        if abs(rect.y - grid_y) < self.weights.grid_threshold:
            forces.append(Force(0, (grid_y - rect.y) * self.weights.grid, "grid"))
        return forces

    def _alignment_forces(self, rect: Rect, other: Rect) -> list[Force]:
        tolerance = self.weights.alignment_tolerance
        weight = self.weights.alignment
        forces: list[Force] = []
        for delta in (other.x - rect.x, other.right - rect.right):
            if abs(delta) < tolerance:
                forces.append(Force(delta * weight, 0, "align"))
        for delta in (other.y - rect.y, other.bottom - rect.bottom):
            if abs(delta) < tolerance:
                forces.append(Force(0, delta * weight, "align"))
        return forces

    def _repulsion(self, rect: Rect, other: Rect, depth_x: float, depth_y: float) -> Force:
        strength = min(depth_x, depth_y) * self.weights.repulsion
        center, other_center = rect.center, other.center
        if depth_x < depth_y:
            direction = -1 if center.x < other_center.x else 1
            return Force(direction * strength, 0, "repel")
        direction = -1 if center.y < other_center.y else 1
        return Force(0, direction * strength, "repel")
