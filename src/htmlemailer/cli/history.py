"""Send history CLI commands."""

from __future__ import annotations

import typer
from rich.markup import escape
from rich.table import Table

from htmlemailer.cli.common import console, get_repo
from htmlemailer.core.config import load_config

history_app = typer.Typer(name="history", help="Recent sends.", invoke_without_command=True)


@history_app.callback()
def show_history(
    ctx: typer.Context,
    limit: int = typer.Option(20, help="Number of sends to show"),
) -> None:
    """Display recent sends, newest first."""
    if ctx.invoked_subcommand is not None:
        return

    records = get_repo(load_config()).get_send_history(limit=limit)
    if not records:
        console.print("[dim]No emails sent yet.[/dim]")
        return

    table = Table(title="Send History")
    table.add_column("Sent", style="dim")
    table.add_column("Template", style="cyan")
    table.add_column("Subject", style="white")
    table.add_column("Recipients", justify="right")
    table.add_column("Message ID", style="dim")

    for rec in records:
        table.add_row(
            rec.sent_at.strftime("%Y-%m-%d %H:%M"),
            escape(rec.template_name),
            escape(rec.subject),
            str(len(rec.recipients)),
            rec.email_id or "",
        )
    console.print(table)


@history_app.command("clear")
def clear() -> None:
    """Delete the send history."""
    get_repo(load_config()).clear_send_history()
    console.print("Send history cleared.")
