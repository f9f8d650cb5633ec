from __future__ import annotations

from adapters.html.builder_renderer import BuilderHtmlRenderer
from adapters.layout.allocator import FreePositionAllocator
from adapters.layout.drag import DragConfig, MagneticDragEngine
from adapters.layout.forces import MagneticForceModel
from adapters.layout.resize import HandleResizeEngine
from app.config import AppSettings
from domain.models import NewsletterDocument
from domain.ports.rendering import HtmlRenderer
from domain.services.editor import EditorState, LayoutEditor
from domain.services.history import EditorSession
from domain.services.serialize_document import DocumentHtmlSerializer
from domain.services.validate_document import validate_document


def build_layout_editor(settings: AppSettings) -> LayoutEditor:
    editor = settings.editor
    force_model = MagneticForceModel(editor.forces.to_weights())
    return LayoutEditor(
        allocator=FreePositionAllocator(),
        drag_engine=MagneticDragEngine(
            force_model=force_model,
            config=DragConfig(collision_passes=editor.collision_passes),
        ),
        resize_engine=HandleResizeEngine(),
    )


def build_editor_session(settings: AppSettings, document: NewsletterDocument) -> EditorSession:
    snap_to_grid = settings.editor.snap_to_grid
    state = EditorState(
        document=validate_document(document, snap_to_grid=snap_to_grid),
        snap_to_grid=snap_to_grid,
    )
    return EditorSession(build_layout_editor(settings), state, history_limit=settings.editor.history_limit)


def build_serializer(settings: AppSettings, renderer: HtmlRenderer | None = None) -> DocumentHtmlSerializer:
    pixel = settings.editor.tracking_pixel_url
    return DocumentHtmlSerializer(
        fallback=BuilderHtmlRenderer(tracking_pixel_url=pixel),
        renderer=renderer,
        tracking_pixel_url=pixel,
    )


def new_document(settings: AppSettings, **fields: object) -> NewsletterDocument:
    styles = settings.editor.default_global_styles.model_copy()
    return NewsletterDocument.model_validate({"global_styles": styles, **fields})
