"""Template management CLI commands: add, list, preview, remove, clear."""

from __future__ import annotations

import mimetypes
import tempfile
import webbrowser
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from htmlemailer.cli.common import console, get_library
from htmlemailer.core.errors import UnsafeContentError
from htmlemailer.core.models import UploadedFile
from htmlemailer.library.preview import render_preview_page

templates_app = typer.Typer(name="templates", help="Manage stored HTML email templates.")


def _read_upload(path: Path) -> UploadedFile:
    content_type, _ = mimetypes.guess_type(path.name)
    return UploadedFile(name=path.name, data=path.read_bytes(), content_type=content_type or "")


@templates_app.command("add")
def add(
    files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, help="HTML files to add"),
    replace: bool = typer.Option(False, "--replace", help="Replace templates with the same name"),
) -> None:
    """Validate and store one or more HTML templates."""
    library = get_library()
    report = library.add_files(
        [_read_upload(p) for p in files],
        on_duplicate="replace" if replace else "rename",
    )

    if report.skipped:
        console.print(f"[yellow]Skipping {len(report.skipped)} non-HTML file(s).[/yellow]")
    for err in report.errors:
        console.print(f"[red]{escape(err)}[/red]")
    for tpl in report.added:
        warn = f" [yellow]({', '.join(tpl.warnings)})[/yellow]" if tpl.warnings else ""
        console.print(f"[green]Added[/green] {escape(tpl.name)} [dim]{tpl.id}[/dim]{warn}")

    if report.success_count:
        console.print(f"Successfully loaded [green]{report.success_count}[/green] template(s)")
    if report.errors:
        raise typer.Exit(1)


@templates_app.command("list")
def list_templates() -> None:
    """List stored templates."""
    library = get_library()
    templates = library.list()
    if not templates:
        console.print("[dim]No templates yet.[/dim] Add one with [cyan]htmlemailer templates add[/cyan].")
        return

    table = Table(title="Templates")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Size", justify="right")
    table.add_column("Added", style="dim")
    table.add_column("Warnings", style="yellow")

    for tpl in templates:
        table.add_row(
            tpl.id,
            escape(tpl.name),
            escape(tpl.preview.title),
            f"{tpl.size / 1024:.1f} KB",
            tpl.date_added.strftime("%Y-%m-%d %H:%M"),
            ", ".join(tpl.warnings),
        )
    console.print(table)


@templates_app.command("preview")
def preview_template(
    template_id: str = typer.Argument(..., help="Template ID"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the preview page here"),
    open_browser: bool = typer.Option(False, "--open", help="Open the preview in a web browser"),
) -> None:
    """Render a sanitized preview page for a template."""
    library = get_library()
    tpl = library.get(template_id)
    if not tpl:
        console.print(f"[red]Template not found:[/red] {escape(template_id)}")
        raise typer.Exit(1)

    try:
        page = render_preview_page(tpl)
    except UnsafeContentError as exc:
        console.print(f"[red]Security Error:[/red] {escape(exc.reason)}")
        raise typer.Exit(1)

    if output is None:
        with tempfile.NamedTemporaryFile(mode="w", encoding="utf-8", suffix=".html", delete=False) as f:
            f.write(page)
            output = Path(f.name)
    else:
        output.write_text(page, encoding="utf-8")

    console.print(f"Preview written to [cyan]{output}[/cyan]")
    if open_browser:
        webbrowser.open(output.resolve().as_uri())


@templates_app.command("remove")
def remove(template_id: str = typer.Argument(..., help="Template ID")) -> None:
    """Delete a stored template."""
    library = get_library()
    if not library.remove(template_id):
        console.print(f"[red]Template not found:[/red] {escape(template_id)}")
        raise typer.Exit(1)
    console.print(f"Removed template [cyan]{escape(template_id)}[/cyan]")


@templates_app.command("clear")
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete every stored template."""
    if not yes:
        typer.confirm("Delete all templates?", abort=True)
    count = get_library().clear()
    console.print(f"Removed [cyan]{count}[/cyan] template(s)")
