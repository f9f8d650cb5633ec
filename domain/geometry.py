from __future__ import annotations

import math
from collections.abc import Iterable

from domain.models import Canvas, Overlap, Point, Rect, Size, SizeLimits

HARD_MARGIN = 20


def snap(value: float, grid_size: int) -> int:
    return int(math.floor(value / grid_size + 0.5)) * grid_size


def clamp(value: float, lower: float, upper: float) -> float:
    # The lower bound wins when the range is empty.
    return max(lower, min(value, upper))


def snap_within(value: float, grid_size: int, lower: int, upper: int) -> int:
    clamped = clamp(value, lower, upper)
    snapped = snap(clamped, grid_size)
    if snapped > upper:
        snapped -= grid_size
    if snapped < lower:
        snapped += grid_size
    if lower <= snapped <= upper:
        return snapped
    return int(math.floor(clamped + 0.5))


def overlap(a: Rect, b: Rect, margin: float = 0) -> Overlap:
    """Overlap extents of ``a`` against ``b`` grown by ``margin`` on every side."""
    left, top, right, bottom = b.expanded(margin)
    dx = min(a.right, right) - max(a.x, left)
    dy = min(a.bottom, bottom) - max(a.y, top)
    if dx <= 0 or dy <= 0:
        return Overlap(0, 0)
    return Overlap(dx, dy)


def intersects(a: Rect, b: Rect, margin: float = 0) -> bool:
    return not overlap(a, b, margin).is_empty


def separation(a: Rect, b: Rect, margin: float = 0) -> Point:
    """Smallest single-axis translation that moves ``a`` clear of ``b`` plus ``margin``."""
    if not intersects(a, b, margin):
        return Point(0, 0)
    left, top, right, bottom = b.expanded(margin)
    push_left = a.right - left
    push_right = right - a.x
    push_up = a.bottom - top
    push_down = bottom - a.y
    horizontal = min(push_left, push_right)
    vertical = min(push_up, push_down)
    if horizontal < vertical:
        return Point(-push_left if push_left < push_right else push_right, 0)
    return Point(0, -push_up if push_up < push_down else push_down)


def position_bounds(size: Size, bounds: Size | Canvas, margin: float) -> tuple[float, float, float, float]:
    return (
        margin,
        bounds.width - size.width - margin,
        margin,
        bounds.height - size.height - margin,
    )


def clamp_rect(rect: Rect, bounds: Size | Canvas, margin: float = 0) -> Rect:
    min_x, max_x, min_y, max_y = position_bounds(rect.size, bounds, margin)
    return rect.moved_to(
        int(math.floor(clamp(rect.x, min_x, max_x) + 0.5)),
        int(math.floor(clamp(rect.y, min_y, max_y) + 0.5)),
    )


def constrain_size(width: float, height: float, limits: SizeLimits) -> Size:
    return Size(
        int(clamp(width, limits.min_width, limits.max_width)),
        int(clamp(height, limits.min_height, limits.max_height)),
    )


def snap_size(size: Size, canvas: Canvas) -> Size:
    if not canvas.snap_to_grid:
        return size
    limits = canvas.limits
    return Size(
        snap_within(size.width, canvas.grid_size, limits.min_width, limits.max_width),
        snap_within(size.height, canvas.grid_size, limits.min_height, limits.max_height),
    )


def in_bounds(rect: Rect, bounds: Size | Canvas, margin: float = 0) -> bool:
    return (
        rect.x >= margin
        and rect.y >= margin
        and rect.right <= bounds.width - margin
        and rect.bottom <= bounds.height - margin
    )


def within_limits(rect: Rect, limits: SizeLimits) -> bool:
    return (
        limits.min_width <= rect.width <= max(limits.min_width, limits.max_width)
        and limits.min_height <= rect.height <= max(limits.min_height, limits.max_height)
    )


def collides_with_any(rect: Rect, others: Iterable[Rect], margin: float) -> bool:
    return any(intersects(rect, other, margin) for other in others)
