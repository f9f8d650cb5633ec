from __future__ import annotations

import html
import logging

from domain.models import NewsletterDocument
from domain.ports.rendering import HtmlRenderer
from domain.services.render_plain_text import block_text

logger = logging.getLogger(__name__)

TRACKING_PIXEL_PLACEHOLDER = "{{trackingPixelUrl}}"
BLOCK_PADDING = 24

MINIMAL_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body style="margin: 0; padding: 20px;">
<div class="container" style="position: relative; width: {width}px; height: {height}px; margin: 0 auto;">
{blocks}
</div>
<img src="{pixel}" width="1" height="1" style="display: none;" alt="" />
</body>
</html>
"""

MINIMAL_BLOCK = (
    '<div class="positioned-block" data-block-id="{block_id}" '
    'style="position: absolute; left: {x}px; top: {y}px; width: {width}px; height: {height}px; '
    'padding: {padding}px; box-sizing: border-box;">{text}</div>'
)

EMPTY_DOCUMENT = '<!DOCTYPE html>\n<html>\n<head>\n<meta charset="utf-8">\n</head>\n<body></body>\n</html>\n'


def render_minimal_html(document: NewsletterDocument, tracking_pixel_url: str = TRACKING_PIXEL_PLACEHOLDER) -> str:
    blocks = "\n".join(
        MINIMAL_BLOCK.format(
            block_id=html.escape(block.id),
            x=block.position.x,
            y=block.position.y,
            width=block.position.width,
            height=block.position.height,
            padding=BLOCK_PADDING,
            text=html.escape(block_text(block)),
        )
        for block in document.blocks
    )
    return MINIMAL_TEMPLATE.format(
        title=html.escape(document.subject),
        width=document.global_styles.content_width,
        height=document.global_styles.content_height,
        blocks=blocks,
        pixel=html.escape(tracking_pixel_url),
    )


class DocumentHtmlSerializer:
    """Renders a document to HTML and never raises.

    The optional ``renderer`` is tried first, then ``fallback`` (the builder
    renderer), then the minimal template.
    """

    def __init__(
        self,
        fallback: HtmlRenderer,
        renderer: HtmlRenderer | None = None,
        tracking_pixel_url: str = TRACKING_PIXEL_PLACEHOLDER,
    ) -> None:
        self.fallback = fallback
        self.renderer = renderer
        self.tracking_pixel_url = tracking_pixel_url

    def serialize(self, document: NewsletterDocument) -> str:
        for renderer in (self.renderer, self.fallback):
            if renderer is None:
                continue
            try:
                return renderer.render(document)
            except Exception:  # noqa: BLE001
                logger.exception("%s failed, falling back", type(renderer).__name__)
        try:
            return render_minimal_html(document, self.tracking_pixel_url)
        except Exception:  # noqa: BLE001
            logger.exception("Minimal template failed for document %s", document.id)
            return EMPTY_DOCUMENT
