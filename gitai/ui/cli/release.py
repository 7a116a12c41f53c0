"""
CLI commands for release packaging — formula, artifacts, install, self-test.

Used by maintainers when cutting a release and by install scripts on
machines without Homebrew.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from gitai import __version__


def _read_checksums(path: str | None) -> dict[str, str]:
    if not path:
        return {}
    from gitai.core.services.release import parse_checksums

    return parse_checksums(Path(path).read_text(encoding="utf-8"))


@click.group()
def release() -> None:
    """Release packaging — Homebrew formula, artifacts, install, self-test."""


@release.command("artifacts")
@click.option("--version", "version", default=__version__, show_default=True, help="Release version.")
@click.option("--checksums", type=click.Path(exists=True, dir_okay=False), default=None,
              help="checksums.txt (sha256sum format).")
@click.option("--os", "os_name", default=None, help="Only the artifact for this OS.")
@click.option("--arch", default=None, help="Only the artifact for this architecture.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def artifacts(
    version: str,
    checksums: str | None,
    os_name: str | None,
    arch: str | None,
    as_json: bool,
) -> None:
    """List download URLs and checksums per platform."""
    from gitai.core.services.release import (
        UnsupportedPlatformError,
        artifact_table,
        select_artifact,
    )

    sums = _read_checksums(checksums)
    try:
        if os_name or arch:
            items = [select_artifact(version, os_name, arch, sums)]
        else:
            items = artifact_table(version, sums)
    except UnsupportedPlatformError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([a.model_dump() for a in items], indent=2))
        return

    for a in items:
        click.secho(f"{a.platform:<14}", fg="cyan", nl=False)
        click.echo(f" {a.url}")
        click.echo(f"{'':<14} sha256 {a.sha256}")


@release.command("formula")
@click.option("--version", "version", default=__version__, show_default=True, help="Release version.")
@click.option("--checksums", type=click.Path(exists=True, dir_okay=False), default=None,
              help="checksums.txt (sha256sum format).")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Write to file instead of stdout.")
def formula(version: str, checksums: str | None, output: str | None) -> None:
    """Render the Homebrew formula."""
    from gitai.core.persistence.files import atomic_write_text
    from gitai.core.services.install import render_formula

    text = render_formula(version, _read_checksums(checksums))
    if output:
        try:
            atomic_write_text(Path(output), text)
        except OSError as e:
            click.secho(f"❌ failed to write formula: {e}", fg="red")
            sys.exit(1)
        click.secho(f"✅ Formula written to {output}", fg="green")
    else:
        click.echo(text, nl=False)


@release.command("install")
@click.argument("source", type=click.Path(exists=True))
@click.option("--bin-dir", type=click.Path(file_okay=False), default=str(Path.home() / ".local" / "bin"),
              show_default=True, help="Install directory.")
@click.option("--skip-test", is_flag=True, help="Don't run the post-install self-test.")
def install(source: str, bin_dir: str, skip_test: bool) -> None:
    """Install a downloaded gitai-* binary as bin/gitai."""
    from gitai.core.services.install import CAVEATS, InstallError, install_artifact, self_test

    try:
        target = install_artifact(Path(source), Path(bin_dir))
    except InstallError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    click.secho(f"✅ Installed {target}", fg="green")

    if not skip_test:
        result = self_test(target)
        if not result.ok:
            click.secho(f"❌ Self-test failed: {result.error}", fg="red")
            sys.exit(1)
        click.secho("✅ Self-test passed", fg="green")

    click.echo()
    click.echo(CAVEATS, nl=False)


@release.command("self-test")
@click.argument("binary", type=click.Path())
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def self_test_cmd(binary: str, as_json: bool) -> None:
    """Run BINARY --help and check that it mentions gitai."""
    from gitai.core.services.install import self_test

    result = self_test(Path(binary))
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)
    click.secho("✅ Self-test passed", fg="green")


@release.command("caveats")
def caveats() -> None:
    """Print the post-install instructions."""
    from gitai.core.services.install import CAVEATS

    click.echo(CAVEATS, nl=False)
