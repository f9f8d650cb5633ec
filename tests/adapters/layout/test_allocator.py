from __future__ import annotations

import logging

import pytest

from adapters.layout.allocator import FreePositionAllocator
from domain.geometry import collides_with_any, in_bounds, within_limits
from domain.models import Block, Canvas, Rect, Size
from tests.helpers.document_fixtures import make_block


@pytest.fixture
def allocator() -> FreePositionAllocator:
    return FreePositionAllocator()


def test_first_block_is_centered_at_top(allocator: FreePositionAllocator, free_canvas: Canvas) -> None:
    assert allocator.allocate([], free_canvas, Size(400, 80)) == Rect(100, 30, 400, 80)


def test_first_block_is_grid_aligned_when_snapping(allocator: FreePositionAllocator, canvas: Canvas) -> None:
    assert allocator.allocate([], canvas, Size(400, 80)) == Rect(100, 40, 400, 80)


def test_first_block_keeps_edge_margin_on_narrow_canvas(allocator: FreePositionAllocator) -> None:
    canvas = Canvas(545, 800)

    rect = allocator.allocate([], canvas, Size(480, 80))

    assert rect == Rect(32, 40, 480, 80)
    assert in_bounds(rect, canvas, 30)


def test_gap_between_blocks_is_used_when_bottom_is_full(
    allocator: FreePositionAllocator,
    free_canvas: Canvas,
) -> None:
    blocks = [
        make_block("top", "header", 100, 30, 400, 80),
        make_block("bottom", "image", 100, 600, 400, 80),
    ]

    assert allocator.allocate(blocks, free_canvas, Size(450, 120)) == Rect(75, 150, 450, 120)


def test_gap_placement_snaps_to_grid(allocator: FreePositionAllocator, canvas: Canvas) -> None:
    blocks = [
        make_block("top", "header", 100, 40, 400, 80),
        make_block("bottom", "image", 100, 600, 400, 80),
    ]

    assert allocator.allocate(blocks, canvas, Size(450, 120)) == Rect(80, 160, 460, 120)


def test_next_block_stacks_below_lowest(allocator: FreePositionAllocator, canvas: Canvas) -> None:
    blocks = [make_block("a", "header", 100, 40, 400, 80)]

    assert allocator.allocate(blocks, canvas, Size(200, 60)) == Rect(200, 160, 200, 80)


def test_side_by_side_when_no_vertical_room(allocator: FreePositionAllocator, free_canvas: Canvas) -> None:
    blocks = [make_block("tall", "image", 30, 30, 200, 700)]

    assert allocator.allocate(blocks, free_canvas, Size(200, 100)) == Rect(270, 30, 200, 100)


def test_fallback_stacks_below_when_canvas_is_full(
    allocator: FreePositionAllocator,
    free_canvas: Canvas,
    caplog: pytest.LogCaptureFixture,
) -> None:
    blocks = [
        make_block("left", "image", 30, 30, 240, 740),
        make_block("right", "image", 330, 30, 240, 740),
    ]

    with caplog.at_level(logging.INFO, logger="adapters.layout.allocator"):
        rect = allocator.allocate(blocks, free_canvas, Size(200, 100))

    assert rect == Rect(200, 810, 200, 100)
    assert "No free slot" in caplog.text


EXISTING_LAYOUTS: list[list[tuple[int, int, int, int]]] = [
    [],
    [(100, 40, 400, 80)],
    [(100, 40, 400, 80), (80, 160, 460, 120)],
    [(40, 40, 200, 100), (300, 300, 240, 120)],
    [(100, 40, 400, 80), (100, 560, 400, 120)],
]
REQUESTED_SIZES = [Size(400, 80), Size(450, 120), Size(200, 60), Size(700, 30), Size(163, 91)]


@pytest.mark.parametrize("snap_to_grid", [True, False])
@pytest.mark.parametrize("size", REQUESTED_SIZES)
@pytest.mark.parametrize("layout", EXISTING_LAYOUTS)
@pytest.mark.parametrize("canvas_size", [(600, 800), (760, 1000), (1200, 1500)])
def test_allocated_rect_is_valid_and_free(
    allocator: FreePositionAllocator,
    canvas_size: tuple[int, int],
    layout: list[tuple[int, int, int, int]],
    size: Size,
    snap_to_grid: bool,
) -> None:
    canvas = Canvas(*canvas_size, snap_to_grid=snap_to_grid)
    blocks: list[Block] = [
        make_block(f"b{index}", "text", *geometry) for index, geometry in enumerate(layout)
    ]

    rect = allocator.allocate(blocks, canvas, size)

    assert in_bounds(rect, canvas)
    assert within_limits(rect, canvas.limits)
    assert not collides_with_any(rect, [block.rect for block in blocks], 30)
    if snap_to_grid:
        assert all(value % 20 == 0 for value in (rect.x, rect.y, rect.width, rect.height))


@pytest.mark.parametrize("snap_to_grid", [True, False])
@pytest.mark.parametrize("size", REQUESTED_SIZES)
@pytest.mark.parametrize("canvas_size", [(200, 200), (333, 417), (545, 800), (900, 1200)])
def test_first_block_fits_any_canvas(
    allocator: FreePositionAllocator,
    canvas_size: tuple[int, int],
    size: Size,
    snap_to_grid: bool,
) -> None:
    canvas = Canvas(*canvas_size, snap_to_grid=snap_to_grid)

    rect = allocator.allocate([], canvas, size)

    assert in_bounds(rect, canvas)
    assert within_limits(rect, canvas.limits)
