"""CLI interface for Nova Calc.

Commands:
- eval: Evaluate an expression locally
- ask: Ask the AI a math question
- history: List, show or clear saved history
- repl: Interactive calculator session
- config: Show configuration
"""

import asyncio
import json
import logging
import sys

import click
import questionary
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from . import __version__
from .ai_solver import GeminiSolver
from .config import load_config, resolve_data_dir
from .controller import Calculator
from .display import render_display, render_history, render_keypad
from .evaluator import unsupported_characters
from .history_store import JsonHistoryStore
from .keypad import AI_SUGGESTIONS
from .models import CalculatorMode


console = Console()


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_calculator(ctx) -> Calculator:
    """Create a calculator wired to the on-disk store and the AI solver."""
    data_dir = ctx.obj["data_dir"]
    config = ctx.obj["config"]
    return Calculator(JsonHistoryStore(data_dir), GeminiSolver(config), config)


@click.group()
@click.version_option(version=__version__, prog_name="nova-calc")
@click.option(
    "--data-dir",
    "-d",
    type=click.Path(file_okay=False),
    help="Data directory (default: $NOVA_CALC_HOME or ~/.nova-calc)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx, data_dir: str, verbose: bool):
    """Nova Calc - basic, scientific and AI-assisted calculator.

    Evaluate expressions locally, ask natural-language questions,
    and keep a persistent history of results.
    """
    _setup_logging(verbose)
    resolved = resolve_data_dir(data_dir)
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = resolved
    ctx.obj["config"] = load_config(resolved)


# --- Eval Command ---


@main.command("eval")
@click.argument("expression", nargs=-1, required=True)
@click.pass_context
def eval_command(ctx, expression: tuple):
    """Evaluate an expression and record it in history.

    Examples:
        nova-calc eval "2+2"
        nova-calc eval "sqrt(16) * sin(π/2)"
    """
    text = " ".join(expression)
    dropped = unsupported_characters(text)
    if dropped:
        console.print(f"[red]Error: Unsupported characters: {escape(dropped)}[/red]")
        sys.exit(1)

    calculator = _build_calculator(ctx)
    calculator.set_input(text)
    state = calculator.compute_local()

    if state.error:
        console.print(f"[red]Error: {state.error}[/red]")
        sys.exit(1)

    console.print(state.result, markup=False, highlight=False)


# --- Ask Command ---


@main.command()
@click.argument("query", nargs=-1, required=True)
@click.pass_context
def ask(ctx, query: tuple):
    """Ask the AI a math question.

    Examples:
        nova-calc ask "volume of a sphere with radius 5"
        nova-calc ask convert 150 lbs to kg
    """
    calculator = _build_calculator(ctx)
    calculator.set_mode(CalculatorMode.AI)
    calculator.set_input(" ".join(query))

    with console.status("[magenta]Asking Gemini...[/magenta]"):
        state = asyncio.run(calculator.compute())

    if state.error:
        console.print(f"[red]Error: {state.error}[/red]")
        sys.exit(1)

    console.print(state.result, markup=False, highlight=False)


# --- History Commands ---


@main.group()
@click.pass_context
def history(ctx):
    """View and manage saved history."""
    pass


@history.command("list")
@click.option("--limit", "-l", default=20, help="Number of entries to show (0 = all)")
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
@click.pass_context
def history_list(ctx, limit: int, as_json: bool):
    """List saved history, newest first."""
    items = JsonHistoryStore(ctx.obj["data_dir"]).load()

    if as_json:
        shown = items[:limit] if limit > 0 else items
        click.echo(json.dumps([item.to_dict() for item in shown], indent=2))
        return

    console.print(render_history(items, limit=limit))


@history.command("show")
@click.argument("index", type=int)
@click.pass_context
def history_show(ctx, index: int):
    """Show one history entry (1 = most recent)."""
    items = JsonHistoryStore(ctx.obj["data_dir"]).load()

    if not 1 <= index <= len(items):
        console.print(f"[red]Error: No history entry {index} ({len(items)} saved)[/red]")
        sys.exit(1)

    item = items[index - 1]
    source = "[magenta]AI[/magenta]" if item.is_ai else "local"
    console.print(
        Panel.fit(
            f"[bold]{escape(item.expression)}[/bold]\n= {escape(item.result)}\n\n[dim]id {item.id} | {source}[/dim]",
            title=f"History #{index}",
            border_style="blue",
        )
    )


@history.command("clear")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def history_clear(ctx, yes: bool):
    """Delete all saved history."""
    if not yes and not click.confirm("Clear all history?", default=False):
        console.print("[yellow]Aborted.[/yellow]")
        return

    calculator = _build_calculator(ctx)
    count = len(calculator.state.history)
    calculator.clear_history()
    console.print(f"[green]Cleared {count} history entries.[/green]")


# --- Config Command ---


@main.group()
def config():
    """Inspect configuration."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx):
    """Show the active configuration."""
    cfg = ctx.obj["config"]
    console.print(f"[bold]Data directory:[/bold] {ctx.obj['data_dir']}")
    for key, value in cfg.to_dict().items():
        console.print(f"  {key}: {value}")
    key_status = "[green]set[/green]" if cfg.api_key() else "[yellow]not set[/yellow]"
    console.print(f"  api key ({cfg.api_key_env}): {key_status}")


# --- REPL ---


REPL_HELP = """[bold]Commands[/bold]
  <expression>     type keys, Enter computes (free text in AI mode)
  (empty line)     compute the current input
  :mode <name>     switch mode (basic, sci, ai)
  :del             delete last character
  :ac              clear input and result
  :history         pick a history entry
  :clear-history   delete all history
  :suggest         pick an AI suggestion
  :help            show this help
  :quit            leave"""


class Repl:
    """Interactive terminal session around a Calculator."""

    def __init__(self, calculator: Calculator, out: Console = console):
        self.calculator = calculator
        self.console = out

    def render(self):
        state = self.calculator.state
        self.console.print(render_display(state, width=48))
        keypad = render_keypad(state.mode)
        if keypad is not None:
            self.console.print(keypad)

    def compute(self):
        if self.calculator.state.mode == CalculatorMode.AI:
            with self.console.status("[magenta]Asking Gemini...[/magenta]"):
                asyncio.run(self.calculator.compute())
        else:
            asyncio.run(self.calculator.compute())

    def pick_history(self):
        items = self.calculator.state.history
        if not items:
            self.console.print("[dim]No history yet[/dim]")
            return
        choices = [
            questionary.Choice(
                title=f"{'✦ ' if item.is_ai else ''}{item.expression} = {item.result}",
                value=item,
            )
            for item in items
        ]
        item = questionary.select("History:", choices=choices).ask()
        if item is not None:
            self.calculator.select_history(item)

    def pick_suggestion(self):
        choices = [questionary.Choice(title=title, value=text) for title, text in AI_SUGGESTIONS]
        text = questionary.select("Suggestion:", choices=choices).ask()
        if text is not None:
            self.calculator.set_mode(CalculatorMode.AI)
            self.calculator.set_input(text)

    def handle(self, line: str) -> bool:
        """Handle one line of input.

        Returns:
            False when the session should end.
        """
        command, _, argument = line.strip().partition(" ")

        if command in (":quit", ":q", ":exit"):
            return False
        if command == ":help":
            self.console.print(REPL_HELP)
        elif command == ":mode":
            try:
                self.calculator.set_mode(CalculatorMode.parse(argument))
            except ValueError as e:
                self.console.print(f"[red]Error: {escape(str(e))}[/red]")
        elif command == ":del":
            self.calculator.delete()
        elif command == ":ac":
            self.calculator.clear()
        elif command == ":history":
            self.pick_history()
        elif command == ":clear-history":
            self.calculator.clear_history()
            self.console.print("[green]History cleared.[/green]")
        elif command == ":suggest":
            self.pick_suggestion()
        elif command.startswith(":"):
            self.console.print(f"[yellow]Unknown command: {escape(command)}[/yellow] (try :help)")
        else:
            if line.strip():
                dropped = unsupported_characters(line)
                if self.calculator.state.mode == CalculatorMode.AI:
                    self.calculator.set_input(line.strip())
                elif dropped:
                    self.console.print(f"[red]Error: Unsupported characters: {escape(dropped)}[/red]")
                    return True
                else:
                    for char in line.strip():
                        if not char.isspace():
                            self.calculator.press(char)
            self.compute()
        return True

    def run(self):
        self.console.print(REPL_HELP)
        while True:
            self.render()
            try:
                line = self.console.input("[bold]› [/bold]")
            except (EOFError, KeyboardInterrupt):
                self.console.print()
                break
            if not self.handle(line):
                break


@main.command()
@click.option(
    "--mode",
    "-m",
    type=click.Choice(["basic", "scientific", "ai"], case_sensitive=False),
    help="Starting mode (default from config)",
)
@click.pass_context
def repl(ctx, mode: str):
    """Start an interactive calculator session."""
    calculator = _build_calculator(ctx)
    if mode:
        calculator.set_mode(CalculatorMode.parse(mode))
    Repl(calculator).run()


if __name__ == "__main__":
    main()
