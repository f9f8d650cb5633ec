from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from domain.models import Block, Canvas, DragSession, Force, Point, Rect, ResizeSession, Size


class BlockAllocator(Protocol):
    def allocate(self, blocks: Sequence[Block], canvas: Canvas, size: Size) -> Rect:
        ...


class ForceModel(Protocol):
    def forces(self, rect: Rect, others: Sequence[Rect], canvas: Canvas) -> list[Force]:
        ...

    def displacement(self, rect: Rect, others: Sequence[Rect], canvas: Canvas) -> Point:
        ...


class DragEngine(Protocol):
    def move(
        self,
        blocks: Sequence[Block],
        canvas: Canvas,
        session: DragSession,
        pointer: Point,
    ) -> Rect | None:
        ...


class ResizeEngine(Protocol):
    def resize(
        self,
        blocks: Sequence[Block],
        canvas: Canvas,
        session: ResizeSession,
        pointer: Point,
    ) -> Rect | None:
        ...
