"""languages command — list the languages that can be reviewed."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from repolens_core.utils.code import LANGUAGE_EXTENSIONS, LANGUAGE_LABELS

console = Console()


@click.command("languages")
def languages_cmd():
    """List supported languages and the file extensions reviewed for each."""
    table = Table(title="Supported languages", show_header=True, header_style="bold cyan")
    table.add_column("Language", style="bold")
    table.add_column("Label")
    table.add_column("Extensions")

    for language, label in LANGUAGE_LABELS.items():
        table.add_row(language, label, ", ".join(LANGUAGE_EXTENSIONS[language]))

    console.print(table)
