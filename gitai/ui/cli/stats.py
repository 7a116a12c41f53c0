"""
CLI command for commit history statistics.

Thin wrapper over ``gitai.core.use_cases.stats``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from gitai.core.services.git_ops import GitError


@click.command()
@click.option("--limit", "-n", default=100, type=int, show_default=True, help="Number of commits to analyze.")
@click.option("--export", "-e", "export_path", type=click.Path(dir_okay=False), default=None,
              help="Export statistics to JSON file.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print statistics as JSON.")
@click.pass_context
def stats(ctx: click.Context, limit: int, export_path: str | None, as_json: bool) -> None:
    """Show commit history statistics and patterns.

    \b
    Examples:
      gitai stats                    # last 100 commits
      gitai stats --limit 500
      gitai stats --export stats.json
    """
    from gitai.core.services.commit_analyzer import format_stats_report
    from gitai.core.use_cases.stats import collect_stats

    if not as_json:
        click.echo(f"🔍 Analyzing last {limit} commits...\n")

    try:
        result = collect_stats(limit, export=Path(export_path) if export_path else None)
    except GitError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
    except OSError as e:
        click.secho(f"❌ failed to export stats: {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    if result.empty:
        click.echo("No commits found in the repository.")
        return

    click.echo(format_stats_report(result.stats))

    if result.patterns:
        click.secho("💡 Your Top Commit Patterns:", bold=True)
        for i, p in enumerate(result.patterns[:3], 1):
            scope = f"({p.scope})" if p.scope else ""
            click.echo(f"  {i}. {p.type}{scope} - used {p.frequency} times")
        click.echo()

    if result.export_path:
        click.secho(f"✅ Statistics exported to {result.export_path}", fg="green")

    click.secho("💭 Insights & Recommendations:", bold=True)
    for insight in result.insights:
        click.echo(f"  {insight.icon} {insight.message}")
        click.echo(f"     {insight.advice}")
    click.echo()
