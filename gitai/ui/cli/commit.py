"""
CLI command that generates and creates a commit from the staged changes.

The interactive loop lives here; everything that touches git or the
model goes through ``gitai.core.use_cases.commit``.
"""

from __future__ import annotations

import sys

import click

from gitai.core.config.loader import ConfigError
from gitai.core.services.git_ops import GitError
from gitai.core.services.ollama import OllamaError
from gitai.ui.cli.display import Display

ACTIONS = {
    "a": "accept",
    "r": "regenerate",
    "e": "edit",
    "c": "cancel",
}


def _fail(display: Display, message: str) -> None:
    display.error(message)
    sys.exit(1)


def _choose_type(cfg, suggested: str) -> str:
    click.secho("Select commit type:", bold=True)
    for i, t in enumerate(cfg.types, 1):
        marker = "  ← suggested" if t.name == suggested else ""
        click.echo(f"  {i:2d}. {t.emoji} {t.name:<10} {t.desc}{marker}")
    names = cfg.type_names()
    answer = click.prompt(
        "Type",
        default=suggested,
        type=click.Choice(names + [str(i) for i in range(1, len(names) + 1)]),
        show_choices=False,
    )
    click.echo()
    return names[int(answer) - 1] if answer.isdigit() else answer


def _choose_scope(cfg) -> str:
    if not cfg.scopes:
        return ""
    click.secho(f"Scopes: {', '.join(cfg.scopes)}", bold=True)
    scope = click.prompt("Scope (empty for none)", default="", show_default=False)
    click.echo()
    return scope.strip()


def _ask_action() -> str:
    answer = click.prompt(
        "[a]ccept, [r]egenerate, [e]dit, [c]ancel",
        default="a",
        type=click.Choice(list(ACTIONS)),
        show_choices=False,
    )
    return ACTIONS[answer]


@click.command()
@click.option("--type", "-t", "commit_type", default=None, help="Commit type (feat, fix, ...).")
@click.option("--scope", "-s", default=None, help="Commit scope.")
@click.option("--ticket", default=None, help="Ticket number (default: from branch name).")
@click.option("--detailed", "-d", is_flag=True, help="Generate subject and body.")
@click.option("--model", "-m", default=None, help="Ollama model to use.")
@click.option("--language", "-l", default=None, help="Language of the message.")
@click.option("--dry-run", is_flag=True, help="Generate the message but don't commit.")
@click.option("--yes", "-y", is_flag=True, help="Accept the first generated message.")
@click.option("--no-color", is_flag=True, help="Plain output without colors or emoji.")
@click.pass_context
def commit(
    ctx: click.Context,
    commit_type: str | None,
    scope: str | None,
    ticket: str | None,
    detailed: bool,
    model: str | None,
    language: str | None,
    dry_run: bool,
    yes: bool,
    no_color: bool,
) -> None:
    """Generate a commit message for the staged changes and commit."""
    from gitai.core.config.loader import load_config
    from gitai.core.use_cases.commit import (
        GenerationRequest,
        apply_commit,
        generate_message,
        prepare_commit,
    )

    display = Display(no_color=no_color)

    try:
        cfg = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        _fail(display, str(e))

    overrides = {k: v for k, v in (("model", model), ("language", language)) if v}
    if overrides:
        cfg = cfg.model_copy(update=overrides)

    if not ctx.obj.get("quiet"):
        display.header()
    if dry_run:
        display.dry_run()

    try:
        draft = prepare_commit(cfg, ticket=ticket)
    except GitError as e:
        _fail(display, str(e))

    display.changed_files(draft.files)

    if draft.ticket:
        display.info(f"Ticket: {draft.ticket}")

    if commit_type:
        if cfg.get_type_by_name(commit_type) is None:
            display.warning(f"'{commit_type}' is not a configured commit type")
    elif yes:
        commit_type = draft.suggested_type
    else:
        commit_type = _choose_type(cfg, draft.suggested_type)

    if scope is None:
        scope = "" if yes else _choose_scope(cfg)

    request = GenerationRequest(
        commit_type=commit_type,
        scope=scope,
        detailed=detailed or cfg.detailed_commit,
    )

    message = ""
    generate = True
    while True:
        if generate:
            display.generating()
            try:
                message = generate_message(draft, request)
            except (OllamaError, ValueError) as e:
                _fail(display, str(e))
            generate = False

        display.commit_message(message)
        if yes:
            break

        action = _ask_action()
        if action == "accept":
            break
        if action == "regenerate":
            request.regenerate_count += 1
            generate = True
            continue
        if action == "edit":
            edited = click.edit(message)
            if edited is not None and edited.strip():
                message = edited.strip()
            continue
        click.echo("Commit cancelled.")
        return

    try:
        result = apply_commit(draft, message, dry_run=dry_run)
    except GitError as e:
        _fail(display, str(e))

    if result.dry_run:
        display.success("Dry run complete, no commit created.")
        return
    display.commit_success(result.message, result.files)
