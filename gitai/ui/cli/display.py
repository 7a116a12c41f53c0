"""
Terminal output for ``gitai commit`` — header, file list, message box.

With ``no_color`` every line is plain text without emoji, which keeps
piped output and CI logs readable.
"""

from __future__ import annotations

import click

from gitai.core.services.git_ops import FileChange

MIN_BOX_WIDTH = 40


class Display:
    def __init__(self, no_color: bool = False) -> None:
        self.no_color = no_color

    def _secho(self, text: str, **style) -> None:
        if self.no_color:
            click.echo(text)
        else:
            click.secho(text, **style)

    def _pick(self, plain: str, fancy: str) -> str:
        return plain if self.no_color else fancy

    def header(self) -> None:
        self._secho(self._pick("Git Commit AI Assistant", "📝 Git Commit AI Assistant"), fg="cyan", bold=True)
        click.echo()

    def changed_files(self, files: list[FileChange]) -> None:
        if not files:
            return
        self._secho(f"Changed files ({len(files)}):", bold=True)
        for f in files:
            add = "bin" if f.additions == "-" else f.additions
            dele = "bin" if f.deletions == "-" else f.deletions
            if self.no_color:
                click.echo(f"  ✓ {f.file} (+{add}, -{dele})")
            else:
                click.echo(f"  ✓ {f.file} (", nl=False)
                click.secho(f"+{add}", fg="green", nl=False)
                click.echo(", ", nl=False)
                click.secho(f"-{dele}", fg="red", nl=False)
                click.echo(")")
        click.echo()

    def generating(self) -> None:
        self._secho(self._pick("Generating commit message...", "🤖 Generating commit message..."), fg="yellow")
        click.echo()

    def commit_message(self, message: str) -> None:
        self._secho("Generated message:", bold=True)
        lines = message.split("\n")
        width = max(MIN_BOX_WIDTH, *(len(ln) for ln in lines))

        click.echo("┌─" + "─" * width + "─┐")
        for line in lines:
            pad = " " * (width - len(line))
            if self.no_color:
                click.echo(f"│ {line}{pad} │")
            else:
                click.echo("│ ", nl=False)
                click.secho(line, fg="cyan", nl=False)
                click.echo(f"{pad} │")
        click.echo("└─" + "─" * width + "─┘")
        click.echo()

    def success(self, message: str) -> None:
        self._secho(self._pick("✓ ", "✨ ") + message, fg="green", bold=True)

    def error(self, message: str) -> None:
        if self.no_color:
            click.echo(f"✗ Error: {message}", err=True)
        else:
            click.secho(f"❌ Error: {message}", fg="red", bold=True, err=True)

    def warning(self, message: str) -> None:
        self._secho(self._pick("⚠ ", "⚠️  ") + message, fg="yellow", bold=True)

    def info(self, message: str) -> None:
        self._secho(message, fg="blue")

    def dry_run(self) -> None:
        self._secho(
            self._pick(
                "Dry-run mode - no commit will be created",
                "🔍 Dry-run mode - no commit will be created",
            ),
            fg="cyan",
            bold=True,
        )
        click.echo()

    def commit_success(self, message: str, files: list[str]) -> None:
        self.success("Commit created successfully!")
        click.echo()
        self._secho("Commit message:", bold=True)
        click.echo(message)
        click.echo()
        if files:
            self._secho("Files changed:", bold=True)
            for f in files:
                click.echo(f"  {f}")
            click.echo()
        self.info("View commit: git show HEAD")
