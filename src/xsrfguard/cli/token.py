# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""'xsrfguard token': mint and inspect CSRF tokens from the command line."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import click
from rich.table import Table

from xsrfguard.cli.console import console
from xsrfguard.config.properties.csrf import CsrfProperties
from xsrfguard.core.config import Config
from xsrfguard.kernel.exceptions import (
    BadSignatureException,
    ConfigurationException,
    ExpiredTokenException,
    MalformedTokenException,
)
from xsrfguard.security.csrf.codec import TokenCodec
from xsrfguard.security.csrf.token import CsrfToken


def _format_millis(millis: int) -> str:
    try:
        moment = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return f"{millis} (out of range)"
    return f"{millis} ({moment.isoformat()})"


def _resolve(config_path: str | None, secret: str | None, timeout: int | None) -> tuple[TokenCodec, int]:
    properties = (
        Config.from_file(Path(config_path)).bind(CsrfProperties)
        if config_path
        else Config.from_defaults().bind(CsrfProperties)
    )
    try:
        codec = TokenCodec(secret if secret is not None else properties.secret)
    except ConfigurationException as exc:
        raise click.UsageError(f"{exc} (pass --secret or set it in --config)") from exc
    return codec, timeout if timeout is not None else properties.timeout_millis


_config_option = click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="YAML/TOML config file."
)
_secret_option = click.option("--secret", envvar="XSRFGUARD_CSRF_SECRET", help="Server secret.")


@click.group()
def token_group() -> None:
    """Mint and inspect CSRF tokens."""


@token_group.command("issue")
@_config_option
@_secret_option
def issue_command(config_path: str | None, secret: str | None) -> None:
    """Print a freshly signed token."""
    codec, _ = _resolve(config_path, secret, None)
    click.echo(codec.encode())


@token_group.command("inspect")
@click.argument("token")
@_config_option
@_secret_option
@click.option("--timeout", type=int, default=None, help="Token lifetime in milliseconds.")
def inspect_command(token: str, config_path: str | None, secret: str | None, timeout: int | None) -> None:
    """Show the parts of TOKEN and whether it verifies."""
    codec, timeout_millis = _resolve(config_path, secret, timeout)

    table = Table(title="CSRF token", show_header=False, border_style="dim")
    table.add_column("Field", style="info")
    table.add_column("Value")

    try:
        parsed = CsrfToken.parse(token)
    except MalformedTokenException as exc:
        console.print(f"[error]Malformed token:[/error] {exc}")
        raise SystemExit(1) from None

    table.add_row("Salt", parsed.salt)
    table.add_row("Issued at", _format_millis(parsed.issued_at))
    table.add_row("Expires at", _format_millis(parsed.expires_at(timeout_millis)))
    table.add_row("Signature", parsed.signature)

    status, ok = "[success]valid[/success]", True
    try:
        codec.verify(token, timeout_millis)
    except BadSignatureException:
        status, ok = "[error]bad signature[/error]", False
    except ExpiredTokenException:
        status, ok = "[warning]expired[/warning]", False
    table.add_row("Status", status)

    console.print(table)
    if not ok:
        raise SystemExit(1)
