"""Root CLI application with init, check, send and serve commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from htmlemailer.cli.common import console, get_library, get_repo
from htmlemailer.cli.config_cmd import config_app
from htmlemailer.cli.history import history_app
from htmlemailer.cli.templates import templates_app
from htmlemailer.core.config import load_config
from htmlemailer.core.database import get_schema_version
from htmlemailer.core.errors import SendError
from htmlemailer.core.models import SendRecord
from htmlemailer.delivery.sender import EmailSender, validate_emails
from htmlemailer.library.validator import TemplateValidator

app = typer.Typer(
    name="htmlemailer",
    help="HTML Emailer: preview HTML email templates safely and send them through Resend.",
    no_args_is_help=True,
)

# Register sub-command groups
app.add_typer(templates_app)
app.add_typer(config_app)
app.add_typer(history_app)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    cfg = load_config()
    logging.basicConfig(
        level=logging.DEBUG if verbose else cfg.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def init() -> None:
    """Create the local template store."""
    cfg = load_config()
    console.print("[bold]Initializing HTML Emailer...[/bold]")
    get_repo(cfg)
    console.print(f"  Database created at [cyan]{cfg.db_path}[/cyan]")
    console.print(f"  Schema version: [cyan]{get_schema_version(cfg.db_path)}[/cyan]")
    console.print("\n[bold green]Ready![/bold green] Run [cyan]htmlemailer config sender[/cyan] next.")


@app.command()
def check(
    files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, help="HTML files to check"),
) -> None:
    """Check HTML files against the template rules without storing them."""
    cfg = load_config()
    validator = TemplateValidator(
        max_bytes=cfg.limits.max_template_bytes,
        allowed_extensions=cfg.safety.allowed_extensions,
    )

    table = Table(title="Template Check")
    table.add_column("File", style="cyan")
    table.add_column("Verdict")
    table.add_column("Details", style="white")

    rejected = 0
    for path in files:
        data = path.read_bytes()
        result = validator.validate(path.name, data.decode("utf-8", errors="replace"), len(data))
        if result.accepted:
            details = ", ".join(result.warnings) or "[dim]ok[/dim]"
            table.add_row(escape(path.name), "[green]safe[/green]", details)
        else:
            rejected += 1
            table.add_row(escape(path.name), "[red]rejected[/red]", escape(result.reason or ""))

    console.print(table)
    if rejected:
        raise typer.Exit(1)


@app.command()
def send(
    template_id: str = typer.Argument(..., help="Template ID"),
    to: List[str] = typer.Option(..., "--to", "-t", help="Recipient (repeat or comma-separate)"),
    subject: str = typer.Option(..., "--subject", "-s", help="Email subject"),
    api_key: str = typer.Option(
        ..., envvar="RESEND_API_KEY", prompt="Resend API key", hide_input=True,
        help="Used for this send only; never stored",
    ),
) -> None:
    """Send a stored template through the proxy."""
    cfg = load_config()
    library = get_library(cfg)

    try:
        tpl = library.select(template_id)
    except KeyError:
        console.print(f"[red]Template not found:[/red] {escape(template_id)}")
        raise typer.Exit(1)

    emails = validate_emails(addr for item in to for addr in item.split(","))
    if not emails.is_valid:
        console.print(f"[red]Invalid email address(es):[/red] {escape(', '.join(emails.invalid))}")
        raise typer.Exit(1)

    repo = library.repo
    sender = EmailSender(repo.get_sender_config(), proxy_url=cfg.server.proxy_url, timeout=cfg.provider.timeout)
    try:
        result = sender.send(emails.valid, subject, tpl.content, template_name=tpl.name, api_key=api_key)
    except SendError as exc:
        console.print(f"[red]Failed to send email:[/red] {escape(str(exc))}")
        raise typer.Exit(1)
    finally:
        sender.close()

    repo.save_send_record(
        SendRecord(
            template_name=tpl.name,
            subject=subject,
            recipients=result.recipients,
            sent_at=result.sent_at,
            email_id=result.email_id,
        )
    )
    console.print(f"[green]{result.message}[/green] [dim]{result.email_id or ''}[/dim]")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Host to bind to (default from config)"),
    port: Optional[int] = typer.Option(None, help="Port to listen on (default from config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
) -> None:
    """Start the send proxy."""
    import uvicorn

    cfg = load_config()
    host = host or cfg.server.host
    port = port or cfg.server.port

    console.print("\n[bold]HTML Emailer Proxy[/bold]")
    console.print(f"Starting at [cyan]http://{host}:{port}[/cyan]\n")
    uvicorn.run(
        "htmlemailer.web.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level=cfg.log_level.lower(),
    )
