from __future__ import annotations

import logging

import pytest

from adapters.html.builder_renderer import BuilderHtmlRenderer
from domain.models import NewsletterDocument
from domain.services import serialize_document
from domain.services.serialize_document import (
    EMPTY_DOCUMENT,
    TRACKING_PIXEL_PLACEHOLDER,
    DocumentHtmlSerializer,
    render_minimal_html,
)
from tests.helpers.document_fixtures import make_block, make_document


class ExplodingRenderer:
    def __init__(self) -> None:
        self.calls = 0

    def render(self, document: NewsletterDocument) -> str:
        self.calls += 1
        raise RuntimeError("renderer unavailable")


class StaticRenderer:
    def render(self, document: NewsletterDocument) -> str:
        return f"<html>{document.subject}</html>"


def test_preferred_renderer_wins(two_block_document: NewsletterDocument) -> None:
    serializer = DocumentHtmlSerializer(fallback=ExplodingRenderer(), renderer=StaticRenderer())

    assert serializer.serialize(two_block_document) == "<html>This week</html>"


def test_failing_renderer_falls_back_to_builder(
    two_block_document: NewsletterDocument,
    caplog: pytest.LogCaptureFixture,
) -> None:
    failing = ExplodingRenderer()
    serializer = DocumentHtmlSerializer(fallback=BuilderHtmlRenderer(), renderer=failing)

    with caplog.at_level(logging.ERROR):
        html = serializer.serialize(two_block_document)

    assert failing.calls == 1
    assert "@media (max-width: 600px)" in html
    assert html.count('class="positioned-block"') == 2
    assert "ExplodingRenderer failed" in caplog.text


def test_minimal_template_used_when_every_renderer_fails(two_block_document: NewsletterDocument) -> None:
    serializer = DocumentHtmlSerializer(
        fallback=ExplodingRenderer(),
        renderer=ExplodingRenderer(),
        tracking_pixel_url="https://pixel.test/o.gif?a=1&b=2",
    )

    html = serializer.serialize(two_block_document)

    assert html.index('data-block-id="title"') < html.index('data-block-id="body"')
    assert "Spring sale" in html
    assert "https://pixel.test/o.gif?a=1&amp;b=2" in html


def test_serializer_never_raises(
    two_block_document: NewsletterDocument,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _broken(*args: object, **kwargs: object) -> str:
        raise ValueError("template missing")

    monkeypatch.setattr(serialize_document, "render_minimal_html", _broken)
    serializer = DocumentHtmlSerializer(fallback=ExplodingRenderer())

    assert serializer.serialize(two_block_document) == EMPTY_DOCUMENT


def test_minimal_html_escapes_text_and_keeps_geometry() -> None:
    document = make_document(
        [make_block("x", "header", 100, 40, 400, 80, content={"text": "<script>alert(1)</script>"})],
        subject="Deals & more",
    )

    html = render_minimal_html(document)

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "<title>Deals &amp; more</title>" in html
    assert "left: 100px; top: 40px; width: 400px; height: 80px; padding: 24px;" in html
    assert TRACKING_PIXEL_PLACEHOLDER in html
