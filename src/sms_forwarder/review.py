"""Interactive review workflow - pick fetched messages and send or hide them."""

from __future__ import annotations

from .display import (
    choose_action,
    console,
    create_progress,
    display_review_summary,
    display_sms_list,
    display_state,
)
from .models import Error, Message
from .session import ForwarderSession


def parse_selection(selection: str, messages: list[Message]) -> list[Message] | None:
    """Resolve "all" or comma-separated 1-based numbers to messages.

    Returns None when the input cannot be parsed.  Out-of-range numbers
    are ignored.
    """
    if selection.lower() == "all":
        return list(messages)
    try:
        indices = [int(x.strip()) - 1 for x in selection.split(",")]
    except ValueError:
        return None
    return [messages[i] for i in dict.fromkeys(indices) if 0 <= i < len(messages)]


async def interactive_review(session: ForwarderSession) -> dict:
    """Run the interactive review workflow on an initialized session.

    Returns a summary dict with keys: selected, done, failed.
    """
    await session.fetch_sms_messages()
    if isinstance(session.ui_state, Error):
        return {"selected": 0, "done": 0, "failed": 0}

    messages = session.sms_list
    if not messages:
        display_state(session.ui_state)
        return {"selected": 0, "done": 0, "failed": 0}

    display_sms_list(messages)

    console.print()
    console.print(
        "[bold]Select messages (comma-separated numbers, 'all', or 'q' to quit):[/bold]"
    )
    selection = console.input("> ").strip()

    if selection.lower() == "q":
        console.print("[dim]Cancelled.[/dim]")
        return {"selected": 0, "done": 0, "failed": 0}

    selected = parse_selection(selection, messages)
    if selected is None:
        console.print("[red]Invalid selection.[/red]")
        return {"selected": 0, "done": 0, "failed": 0}
    if not selected:
        console.print("[yellow]No messages selected.[/yellow]")
        return {"selected": 0, "done": 0, "failed": 0}

    action = choose_action()
    if action == "q":
        console.print("[dim]Cancelled.[/dim]")
        return {"selected": len(selected), "done": 0, "failed": 0}

    done = 0
    failed = 0
    with create_progress("Sending" if action == "send" else "Hiding") as progress:
        task = progress.add_task(action, total=len(selected))
        for message in selected:
            if action == "send":
                await session.send_sms_content(message)
            else:
                await session.hide_sms_message(message)

            if isinstance(session.ui_state, Error):
                failed += 1
                progress.console.print(f"[red]{message.id}: {session.ui_state.message}[/red]")
            else:
                done += 1
            progress.advance(task)

    display_review_summary(done, failed, action)

    return {"selected": len(selected), "done": done, "failed": failed}
