"""Console interaction: headings, warnings, and operator prompts."""

from __future__ import annotations

from typing import Iterable, Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.rule import Rule


class Prompter:
    """Talks to the operator through a Rich console.

    The engine and the setup wizard only ever ask questions through this
    class, so tests can swap in a scripted replacement.

    Args:
        console: Console to render to. Defaults to a new stdout console.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def heading(self, text: str) -> None:
        self.console.print()
        self.console.print(Rule(f"[bold cyan]{text}[/]"))
        self.console.print()

    def info(self, text: str) -> None:
        self.console.print(f"  {text}")

    def warn(self, text: str) -> None:
        self.console.print(f"  [bold yellow]Warning:[/] {text}")

    def status(self, text: str):
        """Spinner shown while ``text`` is in progress; use as a context manager."""
        return self.console.status(f"[cyan]{text}[/]")

    def confirm(self, question: str, default: bool = False) -> bool:
        return Confirm.ask(f"  {question}", console=self.console, default=default)

    def prompt(self, question: str) -> str:
        return Prompt.ask(f"  {question}", console=self.console).strip()

    def select(self, options: Iterable[str], default: str, label: str = "Choice") -> str:
        """Pick one of ``options``, offering ``default`` first."""
        choices = sorted(options)
        if default in choices:
            choices.remove(default)
            choices.insert(0, default)

        for index, choice in enumerate(choices, start=1):
            marker = " [green](current)[/]" if choice == default else ""
            self.console.print(f"    [cyan]{index}[/]. {choice}{marker}")

        picked = Prompt.ask(
            f"  {label}",
            console=self.console,
            choices=[str(i) for i in range(1, len(choices) + 1)],
            default="1",
            show_choices=False,
        )
        return choices[int(picked) - 1]
