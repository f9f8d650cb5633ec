from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from adapters.filesystem.document_repository import FileSystemDocumentRepository
from app.config import AppSettings, load_settings
from app.editor_wiring import build_editor_session, build_serializer, new_document
from domain.models import BLOCK_TYPES, Canvas, NewsletterDocument
from domain.services.editor import AddBlock
from domain.services.layout_issues import find_layout_issues, has_blocking_issues
from domain.services.render_plain_text import render_plain_text
from domain.services.validate_document import validate_document

app = typer.Typer(no_args_is_help=True)
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="YAML settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine decisions."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = load_settings(config)


def _load(path: Path) -> NewsletterDocument:
    try:
        return FileSystemDocumentRepository().load_by_path(path)
    except FileNotFoundError as exc:
        console.print(f"[red]File not found:[/] {path}")
        raise typer.Exit(code=1) from exc
    except (ValueError, ValidationError) as exc:
        console.print(f"[red]Invalid document:[/] {exc}")
        raise typer.Exit(code=1) from exc


@app.command("new")
def create(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Where to write the empty document."),
    title: str = typer.Option("", help="Document title."),
    subject: str = typer.Option("", help="Email subject."),
) -> None:
    settings: AppSettings = ctx.obj
    if path.exists():
        console.print(f"[red]Refusing to overwrite[/] {path}")
        raise typer.Exit(code=1)
    FileSystemDocumentRepository().save(new_document(settings, title=title, subject=subject), path)
    console.print(f"[green]Wrote[/] {path}")


@app.command("validate")
def validate(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Document JSON file to normalize."),
    write: bool = typer.Option(False, "--write", help="Save the normalized document in place."),
) -> None:
    settings: AppSettings = ctx.obj
    document = _load(path)
    normalized = validate_document(document, snap_to_grid=settings.editor.snap_to_grid)

    changed = [
        (before, after)
        for before, after in zip(document.blocks, normalized.blocks)
        if before.rect != after.rect
    ]
    if not changed:
        console.print(f"[green]Geometry already valid:[/] {path}")
        return

    table = Table(title=f"Repaired blocks in {path.name}")
    table.add_column("block")
    table.add_column("before")
    table.add_column("after")
    for before, after in changed:
        old, new = before.rect, after.rect
        table.add_row(
            before.id,
            f"{old.x},{old.y} {old.width}x{old.height}",
            f"{new.x},{new.y} {new.width}x{new.height}",
        )
    console.print(table)
    if write:
        FileSystemDocumentRepository().save(normalized, path)
        console.print(f"[green]Wrote[/] {path}")


@app.command("check")
def check(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Document JSON file to inspect."),
) -> None:
    settings: AppSettings = ctx.obj
    document = _load(path)
    canvas = Canvas.from_global_styles(document.global_styles, snap_to_grid=settings.editor.snap_to_grid)
    issues = find_layout_issues(document, canvas)
    if not issues:
        console.print(f"[green]No layout issues:[/] {path}")
        return
    for issue in issues:
        colour = "red" if has_blocking_issues([issue]) else "yellow"
        console.print(f"[{colour}]{issue.code}[/] {issue.block_id}: {issue.message}")
    if has_blocking_issues(issues):
        raise typer.Exit(code=1)


@app.command("check-all")
def check_all(
    ctx: typer.Context,
    directory: Optional[Path] = typer.Option(None, "--dir", help="Defaults to editor.documents_dir."),
) -> None:
    settings: AppSettings = ctx.obj
    target = directory or settings.editor.documents_dir
    try:
        documents = FileSystemDocumentRepository().load_all_with_paths(target)
    except (ValueError, ValidationError) as exc:
        console.print(f"[red]Invalid document:[/] {exc}")
        raise typer.Exit(code=1) from exc

    table = Table(title=f"Layout issues in {target}")
    table.add_column("document")
    table.add_column("blocks", justify="right")
    table.add_column("issues", justify="right")
    failed = False
    for path, document in documents:
        canvas = Canvas.from_global_styles(document.global_styles, snap_to_grid=settings.editor.snap_to_grid)
        issues = find_layout_issues(document, canvas)
        failed = failed or has_blocking_issues(issues)
        table.add_row(path.name, str(len(document.blocks)), str(len(issues)))
    console.print(table)
    if failed:
        raise typer.Exit(code=1)


@app.command("render")
def render(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Document JSON file to render."),
    output: Optional[Path] = typer.Option(None, help="HTML output path."),
) -> None:
    settings: AppSettings = ctx.obj
    document = _load(path)
    html = build_serializer(settings).serialize(document)
    target = output or settings.editor.html_out_dir / f"{path.stem}.html"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(html, encoding="utf-8")
    console.print(f"[green]Wrote[/] {target}")


@app.command("text")
def text(path: Path = typer.Argument(..., help="Document JSON file to render as text.")) -> None:
    typer.echo(render_plain_text(_load(path)))


@app.command("add-block")
def add_block(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Document JSON file to extend."),
    block_type: str = typer.Argument(..., help="One of: " + ", ".join(BLOCK_TYPES)),
    width: Optional[int] = typer.Option(None, help="Requested width in pixels."),
    height: Optional[int] = typer.Option(None, help="Requested height in pixels."),
) -> None:
    settings: AppSettings = ctx.obj
    if block_type not in BLOCK_TYPES:
        console.print(f"[red]Unknown block type:[/] {block_type}")
        raise typer.Exit(code=1)
    session = build_editor_session(settings, _load(path))
    state = session.dispatch(AddBlock(block_type=block_type, width=width, height=height))
    block = state.document.blocks[-1]
    FileSystemDocumentRepository().save(state.document, path)
    rect = block.rect
    console.print(
        f"[green]Added[/] {block.type} {block.id} at {rect.x},{rect.y} {rect.width}x{rect.height}"
    )


if __name__ == "__main__":
    app()
