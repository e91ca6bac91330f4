"""CLI entry point for SMS Forwarder."""

from __future__ import annotations

import asyncio
import locale
import logging
from pathlib import Path

import click

from .display import console, display_senders, display_settings, display_sms_list, display_state
from .errors import PersistenceError
from .inbox import SmsInbox
from .models import Error, TimeFilter
from .review import interactive_review
from .session import ForwarderSession, parse_sender_list
from .settings import SettingsStore

logger = logging.getLogger(__name__)

_PERIODS = [f.value for f in TimeFilter]

period_option = click.option(
    "-p",
    "--period",
    type=click.Choice(_PERIODS),
    default=TimeFilter.TODAY.value,
    show_default=True,
    help="Time window to read messages from.",
)


def _open_session(ctx: click.Context) -> ForwarderSession:
    obj = ctx.obj
    try:
        settings = SettingsStore(db_path=obj.get("settings_db"))
    except PersistenceError as e:
        raise click.ClickException(str(e)) from e
    return ForwarderSession(
        settings,
        SmsInbox(db_path=obj.get("inbox_db")),
        transport=obj.get("transport"),
    )


def _finish(session: ForwarderSession) -> None:
    """Print a success message or exit with the error."""
    if isinstance(session.ui_state, Error):
        raise click.ClickException(session.ui_state.message)
    display_state(session.ui_state)


@click.group()
@click.version_option(version="0.1.0", prog_name="sms-forwarder")
@click.option(
    "--inbox-db",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="SMS_FORWARDER_INBOX_DB",
    default=None,
    help="Path to the Android SMS database (mmssms.db).",
)
@click.option(
    "--settings-db",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="SMS_FORWARDER_SETTINGS_DB",
    default=None,
    help="Path to the settings database.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, inbox_db: Path | None, settings_db: Path | None, verbose: bool) -> None:
    """SMS Forwarder - read SMS from an inbox and forward them to a server."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Month names in forwarded timestamps follow the user's locale
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as e:
        logger.warning("Could not apply system locale (%s); using default month names", e)
    ctx.ensure_object(dict)
    ctx.obj["inbox_db"] = inbox_db
    ctx.obj["settings_db"] = settings_db


@cli.command()
@click.option("--url", default=None, help="Server base URL.")
@click.option("--email", default=None, help="Login email.")
@click.option("--password", default=None, help="Login password.")
@click.option("--senders", default=None, help="Comma-separated sender tokens.")
@click.pass_context
def configure(
    ctx: click.Context,
    url: str | None,
    email: str | None,
    password: str | None,
    senders: str | None,
) -> None:
    """Save server URL, credentials and sender list."""

    async def run(session: ForwarderSession) -> None:
        await session.initialize()
        if url is not None:
            session.update_server_url(url)
        if email is not None:
            session.update_email(email)
        if password is not None:
            session.update_password(password)
        if senders is not None:
            session.update_selected_senders(parse_sender_list(senders))
        await session.save_user_data()

    with _open_session(ctx) as session:
        asyncio.run(run(session))
        _finish(session)


@cli.command()
@click.pass_context
def login(ctx: click.Context) -> None:
    """Authenticate with the server and store the access token."""

    async def run(session: ForwarderSession) -> None:
        await session.initialize()
        await session.fetch_token()

    with _open_session(ctx) as session:
        asyncio.run(run(session))
        _finish(session)


@cli.command()
@click.option("-s", "--search", default="", help="Only show senders containing this text.")
@click.option("--select", default=None, help="Comma-separated senders to select and save.")
@click.pass_context
def senders(ctx: click.Context, search: str, select: str | None) -> None:
    """List senders found in the inbox, selected ones first."""

    async def run(session: ForwarderSession) -> None:
        await session.initialize()
        await session.fetch_available_senders()
        if isinstance(session.ui_state, Error) or select is None:
            return
        session.update_selected_senders(parse_sender_list(select))
        await session.save_user_data()

    with _open_session(ctx) as session:
        asyncio.run(run(session))
        if isinstance(session.ui_state, Error):
            raise click.ClickException(session.ui_state.message)
        session.update_search_query(search)
        display_senders(session.filtered_senders, session.selected_senders)
        _finish(session)


@cli.command()
@period_option
@click.pass_context
def fetch(ctx: click.Context, period: str) -> None:
    """Fetch messages from the selected senders."""

    async def run(session: ForwarderSession) -> None:
        await session.initialize()
        session.update_time_filter(TimeFilter(period))
        await session.fetch_sms_messages()

    with _open_session(ctx) as session:
        asyncio.run(run(session))
        if isinstance(session.ui_state, Error):
            raise click.ClickException(session.ui_state.message)
        if session.sms_list:
            display_sms_list(session.sms_list)
        _finish(session)


def _act_on_message(ctx: click.Context, message_id: str, period: str, action: str) -> None:
    async def run(session: ForwarderSession) -> None:
        await session.initialize()
        session.update_time_filter(TimeFilter(period))
        await session.fetch_sms_messages()
        if isinstance(session.ui_state, Error):
            return
        message = session.find_message(message_id)
        if message is None:
            raise click.ClickException(
                f"No pending message with id {message_id} in period '{period}'."
            )
        if action == "send":
            await session.send_sms_content(message)
        else:
            await session.hide_sms_message(message)

    with _open_session(ctx) as session:
        asyncio.run(run(session))
        _finish(session)


@cli.command()
@click.argument("message_id")
@period_option
@click.pass_context
def send(ctx: click.Context, message_id: str, period: str) -> None:
    """Forward one message to the server."""
    _act_on_message(ctx, message_id, period, "send")


@cli.command()
@click.argument("message_id")
@period_option
@click.pass_context
def hide(ctx: click.Context, message_id: str, period: str) -> None:
    """Hide one message so it is never shown again."""
    _act_on_message(ctx, message_id, period, "hide")


@cli.command()
@period_option
@click.pass_context
def review(ctx: click.Context, period: str) -> None:
    """Interactively pick messages to send or hide."""

    async def run(session: ForwarderSession) -> dict:
        await session.initialize()
        session.update_time_filter(TimeFilter(period))
        return await interactive_review(session)

    with _open_session(ctx) as session:
        summary = asyncio.run(run(session))
        if not summary["selected"] and isinstance(session.ui_state, Error):
            raise click.ClickException(session.ui_state.message)

    if summary["failed"]:
        raise click.ClickException(f"{summary['failed']} messages failed.")


@cli.command(name="settings")
@click.pass_context
def settings_cmd(ctx: click.Context) -> None:
    """Show stored settings."""
    try:
        with SettingsStore(db_path=ctx.obj.get("settings_db")) as store:
            info = store.get_info()
    except PersistenceError as e:
        raise click.ClickException(str(e)) from e

    display_settings(info)
    if not info["has_token"]:
        console.print("[dim]Run 'login' to fetch an access token.[/dim]")
