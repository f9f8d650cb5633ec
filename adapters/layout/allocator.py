from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from domain.geometry import (
    collides_with_any,
    constrain_size,
    position_bounds,
    snap,
    snap_size,
    snap_within,
)
from domain.models import Block, Canvas, Rect, Size
from domain.ports.layout import BlockAllocator

logger = logging.getLogger(__name__)

Strategy = Callable[[Sequence[Rect], Canvas, Size], "Rect | None"]


@dataclass(frozen=True)
class AllocatorConfig:
    edge_margin: int = 30
    placement_margin: int = 30
    stack_gap: int = 40
    gap_slack: int = 20
    side_gap: int = 40
    column_gutter: int = 30


class FreePositionAllocator(BlockAllocator):
    def __init__(self, config: AllocatorConfig | None = None) -> None:
        self.config = config or AllocatorConfig()

    def allocate(self, blocks: Sequence[Block], canvas: Canvas, size: Size) -> Rect:
        size = snap_size(constrain_size(size.width, size.height, canvas.limits), canvas)
        existing = [block.rect for block in blocks]

        if not existing:
            return self._first_slot(canvas, size)

        strategies: list[Strategy] = [
            self._below_lowest,
            self._in_vertical_gap,
            self._beside,
            self._in_column,
        ]
        for strategy in strategies:
            candidate = strategy(existing, canvas, size)
            if candidate is None:
                continue
            candidate = self._finish(candidate, canvas)
            if self._is_free(candidate, existing, canvas):
                return candidate

        logger.info("No free slot for %sx%s block, placing below lowest", size.width, size.height)
        fallback = self._below_lowest(existing, canvas, size)
        return self._finish(fallback, canvas)

    def _below_lowest(self, existing: Sequence[Rect], canvas: Canvas, size: Size) -> Rect:
        lowest = max(rect.bottom for rect in existing)
        return Rect(
            self._centered_x(canvas, size),
            lowest + self.config.stack_gap,
            size.width,
            size.height,
        )

    def _in_vertical_gap(self, existing: Sequence[Rect], canvas: Canvas, size: Size) -> Rect | None:
        ordered = sorted(existing, key=lambda rect: rect.y)
        for current, following in zip(ordered, ordered[1:]):
            gap_start = current.bottom + self.config.stack_gap
            gap_end = following.y - self.config.stack_gap
            if gap_end - gap_start >= size.height + self.config.gap_slack:
                return Rect(self._centered_x(canvas, size), gap_start, size.width, size.height)
        return None

    def _beside(self, existing: Sequence[Rect], canvas: Canvas, size: Size) -> Rect | None:
        for rect in sorted(existing, key=lambda item: item.x):
            right_edge = rect.right + self.config.side_gap
            available = canvas.width - right_edge - self.config.edge_margin
            if available >= size.width:
                return Rect(right_edge, rect.y, size.width, size.height)
        return None

    def _in_column(self, existing: Sequence[Rect], canvas: Canvas, size: Size) -> Rect | None:
        gutter = self.config.column_gutter
        column_width = (canvas.width - 3 * gutter) // 2
        width = max(canvas.limits.min_width, min(size.width, column_width))
        half = canvas.width / 2

        if not any(rect.x < half for rect in existing):
            return Rect(self.config.edge_margin, self.config.edge_margin, width, size.height)
        if not any(rect.x >= half for rect in existing) and size.width <= column_width:
            right_x = self.config.edge_margin + column_width + gutter
            return Rect(right_x, self.config.edge_margin, width, size.height)
        return None

    def _centered_x(self, canvas: Canvas, size: Size) -> int:
        return max(self.config.edge_margin, (canvas.width - size.width) // 2)

    def _first_slot(self, canvas: Canvas, size: Size) -> Rect:
        margin = self.config.edge_margin
        x = self._centered_x(canvas, size)
        if not canvas.snap_to_grid:
            return Rect(x, margin, size.width, size.height)
        min_x, max_x, min_y, max_y = position_bounds(size, canvas, margin)
        grid = canvas.grid_size
        return Rect(
            snap_within(x, grid, int(min_x), int(max_x)),
            snap_within(margin, grid, int(min_y), int(max_y)),
            size.width,
            size.height,
        )

    def _finish(self, rect: Rect, canvas: Canvas) -> Rect:
        if not canvas.snap_to_grid:
            return rect
        grid = canvas.grid_size
        sized = snap_size(rect.size, canvas)
        return Rect(snap(rect.x, grid), snap(rect.y, grid), sized.width, sized.height)

    def _is_free(self, rect: Rect, existing: Sequence[Rect], canvas: Canvas) -> bool:
        margin = self.config.edge_margin
        if rect.x < 0 or rect.y < 0:
            return False
        if rect.right > canvas.width - margin or rect.bottom > canvas.height - margin:
            return False
        return not collides_with_any(rect, existing, self.config.placement_margin)
