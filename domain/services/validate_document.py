from __future__ import annotations

from domain.geometry import clamp, snap_within
from domain.models import Block, Canvas, NewsletterDocument, Rect, round_half_up

VALIDATION_MARGIN = 30


def normalize_rect(rect: Rect, canvas: Canvas, margin: int = VALIDATION_MARGIN) -> Rect:
    limits = canvas.limits
    max_width = max(limits.min_width, limits.max_width)
    max_height = max(limits.min_height, limits.max_height)
    width = _fit(rect.width, canvas, limits.min_width, max_width)
    height = _fit(rect.height, canvas, limits.min_height, max_height)
    x = _fit(rect.x, canvas, margin, canvas.width - width - margin)
    y = _fit(rect.y, canvas, margin, canvas.height - height - margin)
    return Rect(x, y, width, height)


def normalize_block(block: Block, canvas: Canvas) -> Block:
    rect = normalize_rect(block.rect, canvas)
    if rect == block.rect:
        return block
    return block.with_rect(rect)


def validate_document(document: NewsletterDocument, *, snap_to_grid: bool = True) -> NewsletterDocument:
    canvas = Canvas.from_global_styles(document.global_styles, snap_to_grid=snap_to_grid)
    blocks = [normalize_block(block, canvas) for block in document.blocks]
    if all(new is old for new, old in zip(blocks, document.blocks)):
        return document
    return document.model_copy(update={"blocks": blocks})


def _fit(value: int, canvas: Canvas, lower: int, upper: int) -> int:
    if canvas.snap_to_grid:
        return snap_within(value, canvas.grid_size, lower, upper)
    return round_half_up(clamp(value, lower, upper))
