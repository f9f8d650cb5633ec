from __future__ import annotations

from domain.services.render_plain_text import block_text, render_plain_text
from tests.helpers.document_fixtures import make_block, make_document


def test_plain_text_joins_blocks_in_document_order() -> None:
    document = make_document(
        [
            make_block("h", "header", 100, 40, 400, 80, content={"text": "Spring sale"}),
            make_block("d", "divider", 100, 140, 400, 40),
            make_block("t", "text", 100, 200, 400, 120, content={"html": "<p>All <b>must</b> go</p>"}),
            make_block("b", "button", 200, 340, 200, 60, content={"text": "Shop", "href": "shop.test"}),
            make_block("i", "image", 100, 420, 400, 250, content={"src": "a.png"}),
        ]
    )

    assert render_plain_text(document) == "Spring sale\n\nAll must go\n\nShop: shop.test"


def test_block_text_defaults() -> None:
    assert block_text(make_block("h", "header", 0, 0, 200, 100)) == "Titre"
    assert block_text(make_block("t", "text", 0, 0, 200, 100)) == "Texte"
    assert block_text(make_block("b", "button", 0, 0, 200, 100)) == "Bouton: #"


def test_empty_document_renders_empty_text() -> None:
    assert render_plain_text(make_document()) == ""
