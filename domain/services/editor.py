"""Reducer for canvas interactions.

Every event handler returns a new ``EditorState`` whose document satisfies the
layout invariants. Events that do not apply (unknown block, no active
gesture) return the state they were given.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Union

from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from domain.models import (
    BLOCK_TYPES,
    Block,
    BlockContent,
    BlockStyles,
    Canvas,
    DragSession,
    NewsletterDocument,
    Point,
    ResizeHandle,
    ResizeSession,
    Size,
    default_block_size,
    default_content,
    default_styles,
)
from domain.ports.layout import BlockAllocator, DragEngine, ResizeEngine
from domain.services.validate_document import validate_document

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_block_id() -> str:
    return uuid.uuid4().hex[:12]


def _snake_keys(values: Mapping[str, Any]) -> dict[str, Any]:
    return {to_snake(key): value for key, value in values.items()}


@dataclass(frozen=True)
class EditorState:
    document: NewsletterDocument
    snap_to_grid: bool = True
    selected_block_id: str | None = None
    drag: DragSession | None = None
    resize: ResizeSession | None = None

    @property
    def canvas(self) -> Canvas:
        return Canvas.from_global_styles(self.document.global_styles, snap_to_grid=self.snap_to_grid)

    @property
    def is_interacting(self) -> bool:
        return self.drag is not None or self.resize is not None


@dataclass(frozen=True)
class AddBlock:
    block_type: str
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class DeleteBlock:
    block_id: str


@dataclass(frozen=True)
class UpdateBlock:
    block_id: str
    content: Mapping[str, Any] | None = None
    styles: Mapping[str, Any] | None = None
    block_type: str | None = None


@dataclass(frozen=True)
class SelectBlock:
    block_id: str | None


@dataclass(frozen=True)
class StartDrag:
    block_id: str
    pointer: Point


@dataclass(frozen=True)
class StartResize:
    block_id: str
    handle: ResizeHandle
    pointer: Point


@dataclass(frozen=True)
class PointerMove:
    pointer: Point


@dataclass(frozen=True)
class PointerUp:
    pass


@dataclass(frozen=True)
class SetSnapToGrid:
    enabled: bool


@dataclass(frozen=True)
class UpdateGlobalStyles:
    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LoadDocument:
    document: NewsletterDocument


EditorEvent = Union[
    AddBlock,
    DeleteBlock,
    UpdateBlock,
    SelectBlock,
    StartDrag,
    StartResize,
    PointerMove,
    PointerUp,
    SetSnapToGrid,
    UpdateGlobalStyles,
    LoadDocument,
]

COMMITTING_EVENTS = (AddBlock, DeleteBlock, UpdateBlock, UpdateGlobalStyles, LoadDocument)


class LayoutEditor:
    def __init__(
        self,
        allocator: BlockAllocator,
        drag_engine: DragEngine,
        resize_engine: ResizeEngine,
        clock: Clock = _utcnow,
        id_factory: IdFactory = _new_block_id,
    ) -> None:
        self.allocator = allocator
        self.drag_engine = drag_engine
        self.resize_engine = resize_engine
        self.clock = clock
        self.id_factory = id_factory

    def reduce(self, state: EditorState, event: EditorEvent) -> EditorState:
        if isinstance(event, AddBlock):
            return self._add_block(state, event)
        if isinstance(event, DeleteBlock):
            return self._delete_block(state, event)
        if isinstance(event, UpdateBlock):
            return self._update_block(state, event)
        if isinstance(event, SelectBlock):
            if event.block_id is not None and state.document.find_block(event.block_id) is None:
                return state
            return replace(state, selected_block_id=event.block_id)
        if isinstance(event, StartDrag):
            return self._start_drag(state, event)
        if isinstance(event, StartResize):
            return self._start_resize(state, event)
        if isinstance(event, PointerMove):
            return self._pointer_move(state, event)
        if isinstance(event, PointerUp):
            if not state.is_interacting:
                return state
            return replace(state, drag=None, resize=None)
        if isinstance(event, SetSnapToGrid):
            return replace(state, snap_to_grid=event.enabled)
        if isinstance(event, UpdateGlobalStyles):
            return self._update_global_styles(state, event)
        if isinstance(event, LoadDocument):
            document = validate_document(event.document, snap_to_grid=state.snap_to_grid)
            return EditorState(document=document, snap_to_grid=state.snap_to_grid)
        msg = f"Unsupported editor event: {type(event).__name__}"
        raise TypeError(msg)

    def _add_block(self, state: EditorState, event: AddBlock) -> EditorState:
        if event.block_type not in BLOCK_TYPES:
            logger.warning("Refusing to add block of unknown type %r", event.block_type)
            return state
        document = state.document
        default = default_block_size(event.block_type)
        requested = Size(event.width or default.width, event.height or default.height)
        rect = self.allocator.allocate(document.blocks, state.canvas, requested)
        block = Block(
            id=self.id_factory(),
            type=event.block_type,
            content=default_content(event.block_type),
            styles=default_styles(event.block_type),
            order=len(document.blocks),
        ).with_rect(rect)
        return replace(
            state,
            document=self._touch(document, blocks=[*document.blocks, block]),
            selected_block_id=block.id,
        )

    def _delete_block(self, state: EditorState, event: DeleteBlock) -> EditorState:
        document = state.document
        blocks = [block for block in document.blocks if block.id != event.block_id]
        if len(blocks) == len(document.blocks):
            return state
        drag = state.drag if state.drag and state.drag.block_id != event.block_id else None
        resize = state.resize if state.resize and state.resize.block_id != event.block_id else None
        return replace(
            state,
            document=self._touch(document, blocks=blocks),
            selected_block_id=None,
            drag=drag,
            resize=resize,
        )

    def _update_block(self, state: EditorState, event: UpdateBlock) -> EditorState:
        block = state.document.find_block(event.block_id)
        if block is None:
            return state
        updates: dict[str, Any] = {}
        if event.content is not None:
            merged = {**block.content.model_dump(exclude_none=True), **_snake_keys(event.content)}
            updates["content"] = BlockContent.model_validate(merged)
        if event.styles is not None:
            merged = {**block.styles.model_dump(exclude_none=True), **_snake_keys(event.styles)}
            updates["styles"] = BlockStyles.model_validate(merged)
        if event.block_type is not None:
            if event.block_type in BLOCK_TYPES:
                updates["type"] = event.block_type
            else:
                logger.warning(
                    "Invalid block type %r for block %s, keeping %r",
                    event.block_type,
                    block.id,
                    block.type,
                )
        if not updates:
            return state
        return self._replace_block(state, block.model_copy(update=updates))

    def _start_drag(self, state: EditorState, event: StartDrag) -> EditorState:
        block = state.document.find_block(event.block_id)
        if block is None:
            return state
        offset = event.pointer - Point(block.position.x, block.position.y)
        return replace(
            state,
            drag=DragSession(block_id=block.id, grab_offset=offset),
            resize=None,
            selected_block_id=block.id,
        )

    def _start_resize(self, state: EditorState, event: StartResize) -> EditorState:
        block = state.document.find_block(event.block_id)
        if block is None:
            return state
        session = ResizeSession(
            block_id=block.id,
            handle=event.handle,
            start_pointer=event.pointer,
            start_rect=block.rect,
        )
        return replace(state, resize=session, drag=None, selected_block_id=block.id)

    def _pointer_move(self, state: EditorState, event: PointerMove) -> EditorState:
        blocks = state.document.blocks
        if state.drag is not None:
            block_id = state.drag.block_id
            rect = self.drag_engine.move(blocks, state.canvas, state.drag, event.pointer)
        elif state.resize is not None:
            block_id = state.resize.block_id
            rect = self.resize_engine.resize(blocks, state.canvas, state.resize, event.pointer)
        else:
            return state
        block = state.document.find_block(block_id)
        if rect is None or block is None or block.rect == rect:
            return state
        return self._replace_block(state, block.with_rect(rect))

    def _update_global_styles(self, state: EditorState, event: UpdateGlobalStyles) -> EditorState:
        if not event.changes:
            return state
        current = state.document.global_styles
        merged = {**current.model_dump(), **_snake_keys(event.changes)}
        try:
            global_styles = type(current).model_validate(merged)
        except ValidationError:
            logger.debug("Ignoring invalid global style changes %s", event.changes)
            return state
        document = state.document.model_copy(update={"global_styles": global_styles})
        document = validate_document(document, snap_to_grid=state.snap_to_grid)
        return replace(state, document=self._touch(document))

    def _replace_block(self, state: EditorState, updated: Block) -> EditorState:
        blocks = [updated if block.id == updated.id else block for block in state.document.blocks]
        return replace(state, document=self._touch(state.document, blocks=blocks))

    def _touch(self, document: NewsletterDocument, **updates: Any) -> NewsletterDocument:
        return document.model_copy(update={**updates, "updated_at": self.clock()})
