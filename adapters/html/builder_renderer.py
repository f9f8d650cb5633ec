from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from markupsafe import Markup

from domain.models import Block, GlobalStyles, NewsletterDocument
from domain.ports.rendering import HtmlRenderer
from domain.services.serialize_document import BLOCK_PADDING, TRACKING_PIXEL_PLACEHOLDER

TEMPLATES_DIR = Path(__file__).parent / "templates"
DOCUMENT_TEMPLATE = "newsletter.html.j2"

_SCHEME_PATTERN = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.\-]*://|mailto:|tel:)")
_CSS_UNSAFE = re.compile(r"[<>{};]")


def normalize_href(url: str | None) -> str:
    raw = (url or "").strip()
    if not raw or raw == "#":
        return "#"
    if _SCHEME_PATTERN.match(raw):
        return raw
    if raw.startswith("//"):
        return f"https:{raw}"
    return f"https://{raw}"


def justify_for(text_align: str | None) -> str:
    if text_align == "left":
        return "flex-start"
    if text_align == "right":
        return "flex-end"
    return "center"


def css_value(value: object) -> str:
    return _CSS_UNSAFE.sub("", str(value))


class BuilderHtmlRenderer(HtmlRenderer):
    def __init__(
        self,
        tracking_pixel_url: str = TRACKING_PIXEL_PLACEHOLDER,
        templates_dir: Path = TEMPLATES_DIR,
    ) -> None:
        self.tracking_pixel_url = tracking_pixel_url
        self.environment = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=True,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.environment.filters["css"] = css_value

    def render(self, document: NewsletterDocument) -> str:
        template = self.environment.get_template(DOCUMENT_TEMPLATE)
        return template.render(**self.build_context(document))

    def build_context(self, document: NewsletterDocument) -> dict[str, Any]:
        styles = document.global_styles
        return {
            "subject": document.subject,
            "font_family": styles.font_family,
            "background_color": styles.background_color,
            "width": styles.content_width,
            "height": styles.content_height,
            "padding": BLOCK_PADDING,
            "tracking_pixel_url": self.tracking_pixel_url,
            "blocks": [self.block_view(block, styles) for block in document.blocks],
        }

    def block_view(self, block: Block, styles: GlobalStyles) -> dict[str, Any]:
        position = block.position
        view: dict[str, Any] = {
            "block_id": block.id,
            "kind": block.type,
            "x": position.x,
            "y": position.y,
            "width": position.width,
            "height": position.height,
            "font_family": styles.font_family,
        }
        content = block.content
        block_styles = block.styles

        if block.type == "header":
            view.update(
                text=content.text or "Titre",
                color=block_styles.color or styles.primary_color,
                align=block_styles.text_align or "center",
                justify=justify_for(block_styles.text_align or "center"),
            )
        elif block.type == "text":
            view.update(
                html=Markup(content.html or content.text or "<p>Texte</p>"),
                color=block_styles.color or "#000000",
                font_size=block_styles.font_size or "16px",
                align=block_styles.text_align or "left",
            )
        elif block.type == "image":
            view.update(
                src=content.src or "",
                alt=content.alt or "",
                href=content.href or "",
                image_width=max(0, position.width - 2 * BLOCK_PADDING),
                image_height=max(0, position.height - 2 * BLOCK_PADDING),
                border_radius=block_styles.border_radius or "8px",
            )
        elif block.type == "button":
            min_width = block_styles.min_width or 0
            view.update(
                text=content.text or "Bouton",
                href=normalize_href(content.href),
                background_color=block_styles.background_color or styles.primary_color,
                color=block_styles.color or "#FFFFFF",
                border_radius=block_styles.border_radius or "8px",
                padding_x=block_styles.padding_x or 32,
                padding_y=block_styles.padding_y or 16,
                font_size=block_styles.font_size or "16px",
                button_width=f"{min_width}px" if min_width > 0 else "auto",
                justify=justify_for(block_styles.text_align or "center"),
            )
        elif block.type == "divider":
            view.update(
                color=block_styles.color or "#E5E7EB",
                thickness=block_styles.thickness or "1px",
            )
        return view
