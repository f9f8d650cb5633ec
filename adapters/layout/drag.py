from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from adapters.layout.forces import MagneticForceModel
from domain.geometry import HARD_MARGIN, clamp, clamp_rect, position_bounds, separation, snap_within
from domain.models import Block, Canvas, DragSession, Point, Rect, round_half_up
from domain.ports.layout import DragEngine, ForceModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DragConfig:
    bounds_margin: int = 20
    hard_margin: int = HARD_MARGIN
    collision_passes: int = 8


class MagneticDragEngine(DragEngine):
    def __init__(
        self,
        force_model: ForceModel | None = None,
        config: DragConfig | None = None,
    ) -> None:
        self.force_model = force_model or MagneticForceModel()
        self.config = config or DragConfig()

    def move(
        self,
        blocks: Sequence[Block],
        canvas: Canvas,
        session: DragSession,
        pointer: Point,
    ) -> Rect | None:
        block = next((item for item in blocks if item.id == session.block_id), None)
        if block is None:
            return None
        current = block.rect
        others = [item.rect for item in blocks if item.id != block.id]
        margin = self.config.bounds_margin

        target = pointer - session.grab_offset
        rect = clamp_rect(current.moved_to(target.x, target.y), canvas, margin)

        shift = self.force_model.displacement(rect, others, canvas)
        rect = clamp_rect(rect.moved_to(rect.x + shift.x, rect.y + shift.y), canvas, margin)
        if canvas.snap_to_grid:
            rect = self._snap_position(rect, canvas)

        resolved = self.resolve_collisions(rect, others, canvas)
        if resolved is None:
            logger.debug("Collisions for block %s not cleared, keeping previous frame", block.id)
            return current
        return resolved

    def resolve_collisions(self, rect: Rect, others: Sequence[Rect], canvas: Canvas) -> Rect | None:
        min_x, max_x, min_y, max_y = position_bounds(rect.size, canvas, self.config.bounds_margin)
        x, y = rect.x, rect.y
        for _ in range(self.config.collision_passes):
            moved = False
            for other in others:
                push = separation(rect.moved_to(x, y), other, self.config.hard_margin)
                if push.x == 0 and push.y == 0:
                    continue
                x = round_half_up(clamp(x + push.x, min_x, max_x))
                y = round_half_up(clamp(y + push.y, min_y, max_y))
                moved = True
            if not moved:
                return rect.moved_to(x, y)
        return None

    def _snap_position(self, rect: Rect, canvas: Canvas) -> Rect:
        min_x, max_x, min_y, max_y = position_bounds(rect.size, canvas, self.config.bounds_margin)
        grid = canvas.grid_size
        return rect.moved_to(
            snap_within(rect.x, grid, int(min_x), int(max_x)),
            snap_within(rect.y, grid, int(min_y), int(max_y)),
        )
