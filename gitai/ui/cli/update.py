"""
CLI command for self-update from GitHub releases.
"""

from __future__ import annotations

import sys

import click

from gitai import __version__
from gitai.core.services.updater import UpdateError


@click.command()
@click.option("--check", "-c", "check_only", is_flag=True, help="Only check for updates without installing.")
@click.option("--force", "-f", is_flag=True, help="Force update even if already on latest version.")
def update(check_only: bool, force: bool) -> None:
    """Update gitai to the latest version.

    \b
    1. Check GitHub releases for the latest version
    2. Download the binary for this platform
    3. Verify it against the published SHA-256 checksums
    4. Replace the current binary with the new version
    """
    from gitai.core.services.updater import Updater

    upd = Updater(__version__)

    click.echo("Current version: ", nl=False)
    click.secho(__version__, fg="cyan")
    click.echo("\nChecking for updates...")

    try:
        release, newer = upd.check_for_update()
    except UpdateError as e:
        click.secho(f"❌ failed to check for updates: {e}", fg="red")
        sys.exit(1)

    if not newer and not force:
        click.secho("✓ You are already on the latest version!", fg="green")
        return

    click.echo("\nLatest version: ", nl=False)
    click.secho(release.tag_name, fg="green")
    if newer:
        click.secho("→ A new version is available!", fg="yellow")
    else:
        click.secho("→ Forcing update to reinstall current version", fg="yellow")

    if check_only:
        if newer:
            click.echo("\nRun 'gitai update' to install the latest version.")
        return

    if not force and not click.confirm(
        f"\nDo you want to update to {release.tag_name}?", default=True
    ):
        click.echo("Update cancelled.")
        return

    click.echo("\nDownloading update...")
    try:
        upd.update(release.tag_name)
    except UpdateError as e:
        click.secho(f"❌ update failed: {e}", fg="red")
        sys.exit(1)

    click.echo()
    click.secho(f"✓ Successfully updated to {release.tag_name}!", fg="green")
    click.echo("\nRun 'gitai --version' to verify the new version.")
