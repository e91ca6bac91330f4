"""Rich-based display functions for SMS Forwarder."""

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.prompt import Prompt
from rich.table import Table

from .constants import BODY_PREVIEW_LIMIT
from .models import Error, Message, Success, UiState
from .timeutils import format_timestamp

console = Console()


def _preview(body: str) -> str:
    """Collapse a message body to one line and truncate it."""
    text = " ".join(body.split())
    if len(text) > BODY_PREVIEW_LIMIT:
        return text[: BODY_PREVIEW_LIMIT - 1] + "…"
    return text


def display_sms_list(messages: list[Message], title: str = "SMS Messages") -> None:
    """Display fetched messages, newest first, numbered for selection."""
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", style="cyan")
    table.add_column("Sender")
    table.add_column("Received")
    table.add_column("Body")

    for idx, message in enumerate(messages, start=1):
        table.add_row(
            str(idx),
            message.id,
            message.sender,
            format_timestamp(message.timestamp),
            _preview(message.body),
        )

    console.print(table)
    console.print(Panel(f"Total messages: {len(messages)}", title="Summary"))


def display_senders(senders: list[str], selected: frozenset[str] | set[str]) -> None:
    """Display sender addresses, marking the selected ones."""
    table = Table(title="Senders")
    table.add_column("Selected", justify="center")
    table.add_column("Address")

    for sender in senders:
        if sender in selected:
            table.add_row("[green]✓[/green]", f"[bold]{sender}[/bold]")
        else:
            table.add_row("", sender)

    console.print(table)


def display_settings(info: dict) -> None:
    """Display stored settings."""
    last_fetch = info["last_fetch_timestamp"]
    lines = [
        f"[bold]Server URL:[/bold] {info['server_url'] or '[dim]not set[/dim]'}",
        f"[bold]Email:[/bold] {info['email'] or '[dim]not set[/dim]'}",
        f"[bold]Password:[/bold] {info['password'] or '[dim]not set[/dim]'}",
        f"[bold]Senders:[/bold] {info['sender_list'] or '[dim]not set[/dim]'}",
        f"[bold]Access token:[/bold] {'stored' if info['has_token'] else '[dim]none[/dim]'}",
        f"[bold]Last fetch:[/bold] {format_timestamp(last_fetch) if last_fetch else '[dim]never[/dim]'}",
        f"[bold]Sent or hidden:[/bold] {info['excluded_count']}",
    ]
    console.print(Panel("\n".join(lines), title="Settings"))


def display_state(state: UiState) -> None:
    """Print the outcome of the last operation."""
    if isinstance(state, Success):
        console.print(f"[green]{state.message}[/green]")
    elif isinstance(state, Error):
        console.print(f"[red]{state.message}[/red]")


def create_progress(description: str) -> Progress:
    """Create a configured Rich Progress bar."""
    return Progress(
        SpinnerColumn(),
        TextColumn(f"[bold blue]{description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )


def choose_action() -> str:
    """Ask whether selected messages should be sent or hidden."""
    return Prompt.ask(
        "[bold]Action[/bold]", choices=["send", "hide", "q"], default="send", console=console
    )


def display_review_summary(done: int, failed: int, action: str) -> None:
    """Display a summary after a review pass."""
    verb = "Sent" if action == "send" else "Hid"
    color = "green" if not failed else "yellow"
    console.print(
        Panel(
            f"[bold {color}]{verb} {done} messages, {failed} failed.[/bold {color}]",
            title="Done",
        )
    )
