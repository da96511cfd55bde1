"""CLI de envolve-chat.

Por qué existe:
- Permite generar el snippet o el comando firmado sin levantar la web app
  (útil para depurar la integración y para pegar el snippet a mano).
- `inspect` ayuda a revisar qué está llegando realmente al widget.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from envolve_chat.cli.ui_components import build_payload_table, build_verification_panel
from envolve_chat.core.config import AppSettings, write_user_env_vars
from envolve_chat.core.domain.errors import EnvolveAPIError
from envolve_chat.core.domain.models import ChatIdentity, CredentialKey, SignedPayload
from envolve_chat.core.services.command_renderer import CommandRenderer

app = typer.Typer(no_args_is_help=True, help="Signed Envolve chat commands and widget markup.")

_console = Console()
_err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


def _resolve_api_key(api_key: str | None, settings: AppSettings) -> str:
    value = api_key or settings.api_key
    if not value:
        raise typer.BadParameter(
            "No API key given. Pass --api-key or run `envolve-chat setup`.",
            param_hint="--api-key",
        )
    return value


def _fail(exc: Exception) -> NoReturn:
    _err_console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    _configure_logging(verbose)


@app.command()
def render(
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help="Envolve key `<site_id>-<secret>`."),
    first_name: Optional[str] = typer.Option(None, "--first-name", help="User first name (omit for anonymous)."),
    last_name: Optional[str] = typer.Option(None, "--last-name"),
    pic: Optional[str] = typer.Option(None, "--pic", help="Absolute URL of the user's avatar."),
    profile_html: Optional[str] = typer.Option(None, "--profile-html", help="HTML for the profile rollover."),
    admin: bool = typer.Option(False, "--admin/--no-admin", help="Mark the user as chat admin."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the markup to a file."),
) -> None:
    """Print the widget markup for a user (or an anonymous visitor)."""

    settings = AppSettings()
    key = _resolve_api_key(api_key, settings)
    identity = ChatIdentity(
        first_name=first_name,
        last_name=last_name,
        pic=pic,
        profile_html=profile_html,
        is_admin=admin,
    )

    try:
        markup = CommandRenderer(settings).render_widget_markup(key, identity)
    except EnvolveAPIError as exc:
        _fail(exc)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(markup + "\n", encoding="utf-8")
        _err_console.print(f"[green]Saved markup to:[/green] {output}")
        return

    # Sin resaltado: la salida se copia tal cual a una página.
    _console.print(markup, markup=False, highlight=False, emoji=False, soft_wrap=True)


@app.command()
def command(
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help="Envolve key `<site_id>-<secret>`."),
    first_name: Optional[str] = typer.Option(None, "--first-name"),
    last_name: Optional[str] = typer.Option(None, "--last-name"),
    pic: Optional[str] = typer.Option(None, "--pic"),
    profile_html: Optional[str] = typer.Option(None, "--profile-html"),
    admin: bool = typer.Option(False, "--admin/--no-admin"),
    logout: bool = typer.Option(False, "--logout", help="Sign a logout command even if a name is given."),
) -> None:
    """Print only the signed command string (`env_commandString` value)."""

    settings = AppSettings()
    key = _resolve_api_key(api_key, settings)
    renderer = CommandRenderer(settings)

    try:
        if logout or not first_name:
            signed = renderer.build_logout_command(key)
        else:
            signed = renderer.build_login_command(
                key,
                first_name,
                last_name=last_name,
                pic=pic,
                profile_html=profile_html,
                is_admin=admin,
            )
    except EnvolveAPIError as exc:
        _fail(exc)

    _console.print(signed, markup=False, highlight=False, emoji=False, soft_wrap=True)


@app.command()
def inspect(
    payload: str = typer.Argument(..., help="Signed command `<digest>;<timestamp>;<command>`."),
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help="Verify the digest with this key."),
) -> None:
    """Break a signed command into its fields and optionally verify it."""

    try:
        signed = SignedPayload.parse(payload)
        credential = CredentialKey.parse(api_key) if api_key else None
    except EnvolveAPIError as exc:
        _fail(exc)

    _console.print(build_payload_table(signed))
    if credential is not None:
        valid = signed.verify(credential.secret_key)
        _console.print(build_verification_panel(valid))
        if not valid:
            raise typer.Exit(code=1)


@app.command()
def setup() -> None:
    """Store the Envolve API key in the user config .env."""

    api_key = typer.prompt("Envolve API key", hide_input=True).strip()
    try:
        CredentialKey.parse(api_key)
    except EnvolveAPIError as exc:
        _fail(exc)

    env_path = write_user_env_vars({"ENVOLVE_CHAT_API_KEY": api_key})
    _console.print(f"[green]Saved API key to:[/green] {env_path}")


def run() -> None:
    app()
