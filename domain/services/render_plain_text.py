from __future__ import annotations

import re

from domain.models import Block, NewsletterDocument

TAG_PATTERN = re.compile(r"<[^>]*>")


def block_text(block: Block) -> str:
    content = block.content
    if block.type == "header":
        return content.text or "Titre"
    if block.type == "text":
        if content.html:
            return TAG_PATTERN.sub("", content.html)
        return "Texte"
    if block.type == "button":
        return f"{content.text or 'Bouton'}: {content.href or '#'}"
    return ""


def render_plain_text(document: NewsletterDocument) -> str:
    parts = [block_text(block) for block in document.blocks]
    return "\n\n".join(part for part in parts if part)
