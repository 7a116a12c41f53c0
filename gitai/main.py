"""
gitai — CLI entrypoint.

Usage:
    gitai --help
    gitai commit
    gitai config --init
    python -m gitai.main stats -n 200
"""

from __future__ import annotations

import os
from pathlib import Path

import click

from gitai import __version__
from gitai.core.observability.logging_config import resolve_level, setup_logging


@click.group(name="gitai")
@click.version_option(version=__version__, prog_name="gitai")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to .gitcommit.yaml (default: ./.gitcommit.yaml, then ~/.gitcommit.yaml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """gitai — AI-powered Git commit messages from a local Ollama model."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(
            debug=debug,
            verbose=verbose,
            quiet=quiet,
            env_level=os.environ.get("GITAI_LOG_LEVEL"),
        ),
        log_file=os.environ.get("GITAI_LOG_FILE"),
        log_file_level=os.environ.get("GITAI_LOG_FILE_LEVEL"),
    )


# ── Register sub-groups ─────────────────────────────────────────

from gitai.ui.cli.commit import commit  # noqa: E402
from gitai.ui.cli.config import config  # noqa: E402
from gitai.ui.cli.release import release  # noqa: E402
from gitai.ui.cli.stats import stats  # noqa: E402
from gitai.ui.cli.update import update  # noqa: E402

cli.add_command(commit)
cli.add_command(config)
cli.add_command(stats)
cli.add_command(update)
cli.add_command(release)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
