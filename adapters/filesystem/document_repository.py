from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson
from filelock import FileLock

from domain.models import NewsletterDocument
from domain.ports.repositories import DocumentRepository


def load_json(path: Path) -> dict[str, Any]:
    try:
        data = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path}: {exc}"
        raise ValueError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Expected a JSON object in {path}"
        raise ValueError(msg)
    return data


def write_json_atomic(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    tmp_path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
    tmp_path.replace(path)


class FileSystemDocumentRepository(DocumentRepository):
    def load_all_with_paths(self, directory: Path) -> list[tuple[Path, NewsletterDocument]]:
        return [(path, self.load_by_path(path)) for path in sorted(self._iter_paths(directory))]

    def load_by_path(self, path: Path) -> NewsletterDocument:
        if not path.exists():
            msg = f"Document not found: {path}"
            raise FileNotFoundError(msg)
        return NewsletterDocument.model_validate(self._unwrap(load_json(path)))

    def save(self, document: NewsletterDocument, path: Path) -> None:
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(str(lock_path)):
            write_json_atomic(path, document.to_payload())

    def _iter_paths(self, directory: Path) -> Iterable[Path]:
        yield from directory.glob("*.json")

    def _unwrap(self, payload: dict[str, Any]) -> dict[str, Any]:
        # Campaign exports nest the template under "templateData".
        template = payload.get("templateData")
        if isinstance(template, dict):
            return template
        return payload
