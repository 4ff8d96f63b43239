"""Operator interaction.

Core services never talk to the terminal directly; they take plain
parameters, and only the CLI (plus :class:`~skaya.imports.DependencySelector`
when no explicit names are given) asks questions through a :class:`Prompter`.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Protocol, Sequence

from rich.console import Console
from rich.prompt import Confirm, Prompt

from .utils import console as default_console


class Prompter(Protocol):
    """Synchronous question/answer exchanges."""

    def select(self, message: str, choices: Sequence[str], default: str | None = None) -> str: ...

    def confirm(self, message: str, default: bool = False) -> bool: ...

    def text(self, message: str, default: str = "", required: bool = False) -> str: ...

    def checkbox(self, message: str, choices: Sequence[str]) -> list[str]: ...


class RichPrompter:
    """Interactive prompts on the terminal using ``rich.prompt``."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or default_console

    def select(self, message: str, choices: Sequence[str], default: str | None = None) -> str:
        return Prompt.ask(
            message,
            choices=list(choices),
            default=default if default is not None else choices[0],
            console=self.console,
        )

    def confirm(self, message: str, default: bool = False) -> bool:
        return Confirm.ask(message, default=default, console=self.console)

    def text(self, message: str, default: str = "", required: bool = False) -> str:
        while True:
            answer = Prompt.ask(message, default=default, console=self.console).strip()
            if answer or not required:
                return answer
            self.console.print("[red]A value is required.[/red]")

    def checkbox(self, message: str, choices: Sequence[str]) -> list[str]:
        """Numbered list; the answer is comma-separated indices (blank for none)."""
        self.console.print(f"[bold]{message}[/bold]")
        for index, choice in enumerate(choices, start=1):
            self.console.print(f"  [cyan]{index}[/cyan]) {choice}")
        while True:
            raw = Prompt.ask("Numbers, comma separated", default="", console=self.console)
            try:
                picked = [int(part) for part in raw.replace(" ", "").split(",") if part]
            except ValueError:
                self.console.print("[red]Enter numbers such as 1,3[/red]")
                continue
            if all(1 <= p <= len(choices) for p in picked):
                return [choices[p - 1] for p in dict.fromkeys(picked)]
            self.console.print(f"[red]Choose numbers between 1 and {len(choices)}[/red]")


class ScriptedPrompter:
    """Answers questions from a pre-seeded queue (tests, non-interactive runs).

    When the queue is empty the question's default is returned
    (``[]`` for checkboxes, the first choice for selects).
    """

    def __init__(self, answers: Sequence[Any] = ()) -> None:
        self.answers: deque[Any] = deque(answers)
        self.asked: list[str] = []

    def _next(self, message: str, fallback: Any) -> Any:
        self.asked.append(message)
        return self.answers.popleft() if self.answers else fallback

    def select(self, message: str, choices: Sequence[str], default: str | None = None) -> str:
        answer = self._next(message, default if default is not None else choices[0])
        if answer not in choices:
            raise ValueError(f"{answer!r} is not one of {list(choices)}")
        return answer

    def confirm(self, message: str, default: bool = False) -> bool:
        return bool(self._next(message, default))

    def text(self, message: str, default: str = "", required: bool = False) -> str:
        return str(self._next(message, default))

    def checkbox(self, message: str, choices: Sequence[str]) -> list[str]:
        answer = self._next(message, [])
        return [a for a in answer if a in choices]
