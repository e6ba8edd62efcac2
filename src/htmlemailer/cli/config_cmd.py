"""Sender identity CLI commands: sender, show, clear."""

from __future__ import annotations

import typer
from rich.markup import escape

from htmlemailer.cli.common import console, get_repo
from htmlemailer.core.config import load_config
from htmlemailer.core.models import SenderConfig
from htmlemailer.delivery.sender import validate_emails

config_app = typer.Typer(name="config", help="Sender identity used for outgoing mail.")


@config_app.command("sender")
def set_sender(
    email: str = typer.Option(..., "--email", "-e", help="From address"),
    name: str = typer.Option("", "--name", "-n", help="From display name"),
) -> None:
    """Save the sender email and display name. The API key is never stored."""
    email = email.strip()
    if not validate_emails([email]).valid:
        console.print(f"[red]Please enter a valid email address:[/red] {escape(email)}")
        raise typer.Exit(1)

    repo = get_repo(load_config())
    repo.save_sender_config(SenderConfig(from_email=email, from_name=name.strip()))
    console.print("[green]Sender info saved.[/green]")


@config_app.command("show")
def show() -> None:
    """Show the saved sender and proxy settings."""
    cfg = load_config()
    sender = get_repo(cfg).get_sender_config()

    console.print("\n[bold]HTML Emailer Configuration[/bold]\n")
    if sender:
        console.print(f"  Sender     [cyan]{escape(sender.from_field)}[/cyan]")
    else:
        console.print("  Sender     [red]not configured[/red]")
    console.print(f"  Proxy      [cyan]{cfg.server.proxy_url}[/cyan]")
    console.print(f"  Provider   [cyan]{cfg.provider.base_url}[/cyan]")
    console.print(f"  Database   [cyan]{cfg.db_path}[/cyan]")
    strict = "[green]on[/green]" if cfg.safety.strict_proxy else "[dim]off[/dim]"
    console.print(f"  Strict proxy scanning {strict}")


@config_app.command("clear")
def clear() -> None:
    """Forget the saved sender."""
    get_repo(load_config()).clear_sender_config()
    console.print("Sender info cleared.")
