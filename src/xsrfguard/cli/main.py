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
"""xsrfguard CLI: secrets and token diagnostics."""

from __future__ import annotations

import secrets

import click

from xsrfguard.cli.console import print_banner


class XsrfGuardCLI(click.Group):
    """Custom Click group that shows the banner on help."""

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        print_banner()
        super().format_help(ctx, formatter)


@click.group(cls=XsrfGuardCLI)
@click.version_option(package_name="xsrfguard")
def cli() -> None:
    """xsrfguard: CSRF protection toolkit."""


@cli.command("secret")
@click.option("--bytes", "num_bytes", type=click.IntRange(min=16), default=32, show_default=True)
def secret_command(num_bytes: int) -> None:
    """Print a new random server secret."""
    click.echo(secrets.token_urlsafe(num_bytes))


from xsrfguard.cli.token import token_group  # noqa: E402

cli.add_command(token_group, name="token")
