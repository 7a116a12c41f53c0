"""
CLI command for ``.gitcommit.yaml`` — create a default file or show the
effective configuration.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from gitai.core.config.loader import CONFIG_FILE, ConfigError


@click.command()
@click.option("--init", "do_init", is_flag=True, help="Create default config file in current directory.")
@click.option("--show", "do_show", is_flag=True, help="Show current configuration.")
@click.option("--force", is_flag=True, help="Overwrite an existing file with --init.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output --show as JSON.")
@click.pass_context
def config(ctx: click.Context, do_init: bool, do_show: bool, force: bool, as_json: bool) -> None:
    """View or initialize gitai configuration."""
    if do_init:
        _init_config(force)
        return
    if do_show:
        _show_config(ctx.obj.get("config_path"), as_json)
        return
    click.echo(ctx.get_help())


def _init_config(force: bool) -> None:
    from gitai.core.config.loader import default_config, save_config

    path = Path(CONFIG_FILE)
    if path.exists() and not force:
        click.secho(f"❌ {path} already exists (use --force to overwrite)", fg="red")
        sys.exit(1)

    try:
        save_config(default_config(), path)
    except OSError as e:
        click.secho(f"❌ failed to create config file: {e}", fg="red")
        sys.exit(1)

    click.secho(f"✅ Created default configuration at: {path}", fg="green")
    click.echo("\nEdit this file to customize commit types, scopes, and AI model settings.")


def _show_config(config_path: Path | None, as_json: bool) -> None:
    from gitai.core.config.loader import load_config

    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(cfg.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return

    click.secho("Current Configuration:", bold=True)
    click.echo("======================")
    click.echo(f"Model: {cfg.model}")
    click.echo(f"Language: {cfg.language}")
    click.echo(f"Template: {cfg.template}")
    click.echo(f"Ollama: {cfg.ollama_url}")
    click.echo("\nCommit Types:")
    for t in cfg.types:
        click.echo(f"  {t.emoji} {t.name} - {t.desc}")

    if cfg.scopes:
        click.echo("\nScopes:")
        for s in cfg.scopes:
            click.echo(f"  - {s}")
