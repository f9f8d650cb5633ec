from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from app.config import AppSettings, EditorSettings
from domain.models import Canvas, NewsletterDocument
from tests.helpers.document_fixtures import make_block, make_document


def _clear_nlc_env() -> None:
    for key in list(os.environ):
        if key.startswith("NLC_"):
            os.environ.pop(key, None)


_clear_nlc_env()


@pytest.fixture(autouse=True)
def clear_nlc_env() -> Generator[None, None, None]:
    _clear_nlc_env()
    yield
    _clear_nlc_env()


@pytest.fixture
def editor_settings(tmp_path: Path) -> EditorSettings:
    return EditorSettings(
        snap_to_grid=True,
        documents_dir=tmp_path / "documents",
        html_out_dir=tmp_path / "html",
        tracking_pixel_url="https://pixel.test/open.gif",
    )


@pytest.fixture
def editor_settings_factory(editor_settings: EditorSettings) -> Callable[..., EditorSettings]:
    def _factory(**overrides: object) -> EditorSettings:
        return editor_settings.model_copy(update=overrides)

    return _factory


@pytest.fixture
def app_settings(editor_settings: EditorSettings) -> AppSettings:
    return AppSettings(editor=editor_settings)


@pytest.fixture
def canvas() -> Canvas:
    return Canvas(width=600, height=800)


@pytest.fixture
def free_canvas() -> Canvas:
    return Canvas(width=600, height=800, snap_to_grid=False)


@pytest.fixture
def two_block_document() -> NewsletterDocument:
    return make_document(
        [
            make_block("title", "header", 100, 40, 400, 80, content={"text": "Spring sale"}),
            make_block(
                "body",
                "text",
                100,
                160,
                400,
                120,
                content={"html": "<p>Everything <b>must</b> go.</p>"},
            ),
        ]
    )
