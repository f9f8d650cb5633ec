from __future__ import annotations

from typing import Protocol

from domain.models import NewsletterDocument


class HtmlRenderer(Protocol):
    def render(self, document: NewsletterDocument) -> str: ...
