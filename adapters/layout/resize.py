from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from domain.geometry import HARD_MARGIN, clamp, intersects, snap_within
from domain.models import Block, Canvas, Point, Rect, ResizeSession, round_half_up
from domain.ports.layout import ResizeEngine


@dataclass(frozen=True)
class ResizeConfig:
    bounds_margin: int = 20
    hard_margin: int = HARD_MARGIN


@dataclass(frozen=True)
class _Extent:
    min_width: int
    max_width: int
    min_height: int
    max_height: int


class HandleResizeEngine(ResizeEngine):
    def __init__(self, config: ResizeConfig | None = None) -> None:
        self.config = config or ResizeConfig()

    def resize(
        self,
        blocks: Sequence[Block],
        canvas: Canvas,
        session: ResizeSession,
        pointer: Point,
    ) -> Rect | None:
        block = next((item for item in blocks if item.id == session.block_id), None)
        if block is None:
            return None
        start = session.start_rect
        edges = set(session.handle)
        delta = pointer - session.start_pointer
        extent = self._extent(start, edges, canvas)

        width: float = start.width
        height: float = start.height
        if "e" in edges:
            width += delta.x
        if "w" in edges:
            width -= delta.x
        if "s" in edges:
            height += delta.y
        if "n" in edges:
            height -= delta.y

        width = round_half_up(clamp(width, extent.min_width, extent.max_width))
        height = round_half_up(clamp(height, extent.min_height, extent.max_height))
        if canvas.snap_to_grid:
            width = snap_within(width, canvas.grid_size, extent.min_width, extent.max_width)
            height = snap_within(height, canvas.grid_size, extent.min_height, extent.max_height)

        others = [item.rect for item in blocks if item.id != block.id]
        clipped_width, clipped_height = self._clip_to_neighbors(start, edges, width, height, others, extent)
        if canvas.snap_to_grid:
            if clipped_width != width:
                clipped_width = snap_within(clipped_width, canvas.grid_size, extent.min_width, clipped_width)
            if clipped_height != height:
                clipped_height = snap_within(
                    clipped_height, canvas.grid_size, extent.min_height, clipped_height
                )
        return self._place(start, edges, clipped_width, clipped_height)

    def _extent(self, start: Rect, edges: set[str], canvas: Canvas) -> _Extent:
        limits = canvas.limits
        margin = self.config.bounds_margin
        max_width = limits.max_width
        max_height = limits.max_height
        if "e" in edges:
            max_width = min(max_width, canvas.width - margin - start.x)
        if "w" in edges:
            max_width = min(max_width, start.right - margin)
        if "s" in edges:
            max_height = min(max_height, canvas.height - margin - start.y)
        if "n" in edges:
            max_height = min(max_height, start.bottom - margin)
        return _Extent(
            min_width=limits.min_width,
            max_width=max(limits.min_width, max_width),
            min_height=limits.min_height,
            max_height=max(limits.min_height, max_height),
        )

    def _clip_to_neighbors(
        self,
        start: Rect,
        edges: set[str],
        width: int,
        height: int,
        others: Sequence[Rect],
        extent: _Extent,
    ) -> tuple[int, int]:
        margin = self.config.hard_margin
        for other in others:
            proposed = self._place(start, edges, width, height)
            if not intersects(proposed, other, margin):
                continue
            left, top, right, bottom = other.expanded(margin)
            width_limit: int | None = None
            height_limit: int | None = None
            # Only neighbors lying beyond the moving edge at resize start are clipped against.
            if "e" in edges and left >= start.right:
                width_limit = int(left - start.x)
            if "w" in edges and right <= start.x:
                width_limit = int(start.right - right)
            if "s" in edges and top >= start.bottom:
                height_limit = int(top - start.y)
            if "n" in edges and bottom <= start.y:
                height_limit = int(start.bottom - bottom)

            if width_limit is not None and height_limit is not None:
                if width - width_limit <= height - height_limit:
                    height_limit = None
                else:
                    width_limit = None
            if width_limit is not None:
                width = max(extent.min_width, min(width, width_limit))
            if height_limit is not None:
                height = max(extent.min_height, min(height, height_limit))
        return width, height

    def _place(self, start: Rect, edges: set[str], width: int, height: int) -> Rect:
        x = start.right - width if "w" in edges else start.x
        y = start.bottom - height if "n" in edges else start.y
        return Rect(x, y, width, height)
