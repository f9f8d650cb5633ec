from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import NewsletterDocument


class DocumentRepository(Protocol):
    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, NewsletterDocument]]: ...

    def load_by_path(self, path: Path) -> NewsletterDocument: ...

    def save(self, document: NewsletterDocument, path: Path) -> None: ...
