from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from domain.models import (
    Block,
    Canvas,
    GlobalStyles,
    NewsletterDocument,
    Size,
    default_block_size,
    default_content,
    default_styles,
    infer_block_type,
)
from tests.helpers.document_fixtures import make_block, make_document


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        ({"text": "Hello"}, "header"),
        ({"text": "x" * 150}, "text"),
        ({"html": "<p>Body</p>"}, "text"),
        ({"src": "https://cdn.test/a.png"}, "image"),
        ({}, "text"),
        (None, "text"),
    ],
)
def test_infer_block_type_from_content_shape(content: object, expected: str) -> None:
    assert infer_block_type(content) == expected


def test_unknown_block_type_is_recovered_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="domain.models"):
        block = Block.model_validate({"id": "b1", "type": "banner", "content": {"text": "Sale"}})

    assert block.type == "header"
    assert block.recovered_from_type == "banner"
    assert "banner" in caplog.text


def test_recovered_type_is_not_serialized() -> None:
    block = Block.model_validate({"id": "b1", "type": "gallery", "content": {"src": "a.png"}})

    payload = block.model_dump(by_alias=True)

    assert payload["type"] == "image"
    assert "recoveredFromType" not in payload
    assert "recovered_from_type" not in payload


def test_position_rounds_fractional_values() -> None:
    block = Block.model_validate(
        {"id": "b1", "type": "text", "position": {"x": 10.5, "y": 20.4, "width": 199.5, "height": 100}}
    )

    assert block.rect.x == 11
    assert block.rect.y == 20
    assert block.rect.width == 200


def test_missing_position_uses_default_rect() -> None:
    block = Block.model_validate({"id": "b1", "type": "divider"})

    assert (block.rect.x, block.rect.y, block.rect.width, block.rect.height) == (0, 0, 200, 100)


def test_global_styles_accept_camel_case_and_default_height() -> None:
    styles = GlobalStyles.model_validate({"contentWidth": 700, "contentHeight": 0, "primaryColor": "#111111"})

    assert styles.content_width == 700
    assert styles.content_height == 800
    assert styles.primary_color == "#111111"
    assert styles.font_family == "Arial, sans-serif"


def test_document_rejects_duplicate_block_ids() -> None:
    with pytest.raises(ValidationError, match="Duplicate block id"):
        make_document([make_block("a", "text", 30, 30, 200, 100), make_block("a", "text", 30, 200, 200, 100)])


def test_document_payload_uses_camel_case() -> None:
    document = make_document([make_block("a", "button", 30, 30, 200, 60, order=3)])

    payload = document.to_payload()

    assert payload["globalStyles"]["contentWidth"] == 600
    assert payload["status"] == "draft"
    assert "createdAt" in payload
    assert payload["blocks"][0]["order"] == 3
    assert NewsletterDocument.model_validate(payload).blocks[0].rect == document.blocks[0].rect


def test_canvas_limits_follow_canvas_size() -> None:
    assert Canvas(600, 800).limits.max_width == 480
    assert Canvas(600, 800).limits.max_height == 350
    assert Canvas(400, 300).limits.max_width == 340
    assert Canvas(400, 300).limits.max_height == 240


def test_block_defaults_per_type() -> None:
    assert default_block_size("header") == Size(400, 80)
    assert default_block_size("text") == Size(450, 120)
    assert default_block_size("image") == Size(400, 250)
    assert default_block_size("button") == Size(200, 60)
    assert default_block_size("divider") == Size(450, 40)
    assert default_block_size("carousel") == Size(200, 100)
    assert default_content("button").href == "#"
    assert default_styles("divider").thickness == "1px"
