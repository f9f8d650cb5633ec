from __future__ import annotations

from dataclasses import replace

from domain.services.editor import (
    COMMITTING_EVENTS,
    EditorEvent,
    EditorState,
    LayoutEditor,
    PointerUp,
)


class EditorHistory:
    """Versioned snapshots of committed editor states."""

    def __init__(self, initial: EditorState, limit: int = 100) -> None:
        self._snapshots: list[EditorState] = [self._settled(initial)]
        self._cursor = 0
        self._limit = max(1, limit)

    @property
    def version(self) -> int:
        return self._cursor

    @property
    def current(self) -> EditorState:
        return self._snapshots[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def record(self, state: EditorState) -> int:
        snapshot = self._settled(state)
        if snapshot.document is self.current.document:
            return self._cursor
        del self._snapshots[self._cursor + 1 :]
        self._snapshots.append(snapshot)
        if len(self._snapshots) > self._limit:
            del self._snapshots[0]
        self._cursor = len(self._snapshots) - 1
        return self._cursor

    def undo(self) -> EditorState:
        if self.can_undo:
            self._cursor -= 1
        return self.current

    def redo(self) -> EditorState:
        if self.can_redo:
            self._cursor += 1
        return self.current

    @staticmethod
    def _settled(state: EditorState) -> EditorState:
        return replace(state, drag=None, resize=None)


class EditorSession:
    def __init__(self, editor: LayoutEditor, state: EditorState, history_limit: int = 100) -> None:
        self.editor = editor
        self.state = state
        self.history = EditorHistory(state, limit=history_limit)

    def dispatch(self, event: EditorEvent) -> EditorState:
        was_interacting = self.state.is_interacting
        self.state = self.editor.reduce(self.state, event)
        if isinstance(event, COMMITTING_EVENTS) or (isinstance(event, PointerUp) and was_interacting):
            self.history.record(self.state)
        return self.state

    def undo(self) -> EditorState:
        self.state = self.history.undo()
        return self.state

    def redo(self) -> EditorState:
        self.state = self.history.redo()
        return self.state
