"""review command — AI review of a repository plus its grouped commit history."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.tree import Tree

from repolens_core.errors import ConfigurationError, ValidationError
from repolens_core.models import Commit, CommitGroup
from repolens_core.session import ReviewSession, SubmissionResult
from repolens_core.utils.code import LANGUAGE_LABELS

console = Console()

_MESSAGE_WIDTH = 100


def _short_message(message: str) -> str:
    first_line = message.split("\n", 1)[0]
    if len(first_line) > _MESSAGE_WIDTH:
        return first_line[: _MESSAGE_WIDTH - 3] + "..."
    return first_line


def _commit_label(commit: Commit) -> str:
    return (
        f"[bold]{escape(_short_message(commit.message))}[/bold]\n"
        f"[dim]{escape(commit.author_name)} ({escape(commit.author_email)}) · "
        f"{commit.author_date:%Y-%m-%d %H:%M} · {commit.sha[:7]}[/dim]\n"
        f"[link={commit.html_url}]{escape(commit.html_url)}[/link]"
    )


def render_commit_groups(groups: list[CommitGroup], title: str = "Commit history") -> Tree:
    tree = Tree(f"[bold cyan]{escape(title)}[/bold cyan]")
    for group in groups:
        branch = tree.add(f"[bold]{escape(group.scope)}[/bold] [dim]({len(group.commits)})[/dim]")
        for commit in group.commits:
            branch.add(_commit_label(commit))
    return tree


def render_result(result: SubmissionResult) -> None:
    label = LANGUAGE_LABELS.get(result.language, result.language)
    console.print(f"\n[bold]{result.ref.full_name}[/bold] · {label}\n")

    if result.review.ok:
        report = result.review.value
        console.print(f"[cyan]Files reviewed (branch {escape(report.branch)}):[/cyan]")
        for path in report.files_reviewed:
            console.print(f"  • {escape(path)}")
        console.print()
        console.print(Panel(Markdown(report.feedback), title="AI Review", border_style="green"))

    if result.commits.ok:
        history = result.commits.value
        if not history.groups:
            console.print(f"[yellow]No commits found on branch {escape(history.branch)}.[/yellow]")
        else:
            title = f"Commit history — {history.branch} ({history.total_commits} commit(s))"
            console.print(render_commit_groups(history.groups, title))

    if result.errors:
        console.print(Panel(escape(result.error_message), title="Errors", border_style="red"))


@click.command("review")
@click.argument("repo_url")
@click.option(
    "--language",
    "-l",
    type=click.Choice(list(LANGUAGE_LABELS), case_sensitive=False),
    default="javascript",
    show_default=True,
    help="Language whose files are reviewed.",
)
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option(
    "--model-name",
    default=None,
    help="Model identifier for the provider. Overrides config file and REPOLENS_MODEL.",
)
@click.pass_context
def review_cmd(ctx, repo_url: str, language: str, model: str | None, model_name: str | None):
    """Review a public GitHub repository and show its commits grouped by issue.

    REPO_URL looks like https://github.com/owner/repo or
    https://github.com/owner/repo/tree/<branch>.

    \b
    Environment variables:
      ANTHROPIC_API_KEY    Required when using --model anthropic (default)
      OPENAI_API_KEY       Required when using --model openai
      REPOLENS_MODEL       Optional model identifier
      GITHUB_TOKEN         Optional, raises the GitHub API rate limit
    """
    from repolens_core.config import load_config

    config_path = (ctx.obj or {}).get("config_path", ".repolens.yml")
    config = load_config(config_path, cli_overrides={"model": model, "model_name": model_name})

    session = ReviewSession(config)
    try:
        with console.status("Fetching repository and requesting review..."):
            result = asyncio.run(session.submit(repo_url, language))
    except (ValidationError, ConfigurationError) as e:
        raise click.UsageError(str(e))

    if result is None:
        return
    render_result(result)
    if result.errors:
        ctx.exit(1)
