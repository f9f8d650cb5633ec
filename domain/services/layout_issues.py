from __future__ import annotations

from dataclasses import dataclass

from domain.geometry import HARD_MARGIN, in_bounds, intersects, within_limits
from domain.models import Canvas, NewsletterDocument

ISSUE_OUT_OF_BOUNDS = "out_of_bounds"
ISSUE_SIZE_OUT_OF_RANGE = "size_out_of_range"
ISSUE_OFF_GRID = "off_grid"
ISSUE_OVERLAP = "overlap"
ISSUE_TYPE_RECOVERED = "type_recovered"


@dataclass(frozen=True)
class LayoutIssue:
    code: str
    block_id: str
    message: str
    other_block_id: str | None = None


def find_layout_issues(document: NewsletterDocument, canvas: Canvas) -> list[LayoutIssue]:
    issues: list[LayoutIssue] = []
    limits = canvas.limits
    for block in document.blocks:
        rect = block.rect
        if block.recovered_from_type is not None:
            issues.append(
                LayoutIssue(
                    code=ISSUE_TYPE_RECOVERED,
                    block_id=block.id,
                    message=f"unknown type {block.recovered_from_type!r} treated as {block.type!r}",
                )
            )
        if not in_bounds(rect, canvas):
            issues.append(
                LayoutIssue(
                    code=ISSUE_OUT_OF_BOUNDS,
                    block_id=block.id,
                    message=(
                        f"rectangle ({rect.x}, {rect.y}, {rect.width}x{rect.height}) "
                        f"leaves the {canvas.width}x{canvas.height} canvas"
                    ),
                )
            )
        if not within_limits(rect, limits):
            issues.append(
                LayoutIssue(
                    code=ISSUE_SIZE_OUT_OF_RANGE,
                    block_id=block.id,
                    message=(
                        f"size {rect.width}x{rect.height} outside "
                        f"{limits.min_width}-{limits.max_width} x {limits.min_height}-{limits.max_height}"
                    ),
                )
            )
        if canvas.snap_to_grid and any(
            value % canvas.grid_size for value in (rect.x, rect.y, rect.width, rect.height)
        ):
            issues.append(
                LayoutIssue(
                    code=ISSUE_OFF_GRID,
                    block_id=block.id,
                    message=f"geometry is not aligned to the {canvas.grid_size}px grid",
                )
            )

    for index, block in enumerate(document.blocks):
        for other in document.blocks[index + 1 :]:
            if intersects(block.rect, other.rect, HARD_MARGIN):
                issues.append(
                    LayoutIssue(
                        code=ISSUE_OVERLAP,
                        block_id=block.id,
                        other_block_id=other.id,
                        message=f"closer than {HARD_MARGIN}px to block {other.id}",
                    )
                )
    return issues


def has_blocking_issues(issues: list[LayoutIssue]) -> bool:
    return any(issue.code != ISSUE_TYPE_RECOVERED for issue in issues)
