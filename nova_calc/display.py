"""Terminal rendering for Nova Calc.

Builds rich renderables for:
- The display panel (mode badge, input, result or loading indicator)
- The keypad grid
- The history panel
"""

from datetime import datetime
from typing import Iterable, Optional

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .keypad import ButtonVariant, column_count, keypad_layout
from .models import CalculatorMode, CalculatorState, HistoryItem


MODE_STYLES = {
    CalculatorMode.BASIC: "grey70 on grey23",
    CalculatorMode.SCIENTIFIC: "bold blue",
    CalculatorMode.AI: "bold magenta",
}

VARIANT_STYLES = {
    ButtonVariant.DEFAULT: "white",
    ButtonVariant.PRIMARY: "bold white on blue",
    ButtonVariant.SECONDARY: "grey85",
    ButtonVariant.ACCENT: "bold dark_orange",
    ButtonVariant.DANGER: "bold red",
    ButtonVariant.GHOST: "dim",
}

# Input sizes shrink as the expression grows
SIZE_STYLES = {"large": "bold", "medium": "", "small": "dim"}


def mode_label(mode: CalculatorMode) -> str:
    """Badge text for a mode."""
    return "Gemini AI" if mode == CalculatorMode.AI else mode.value


def input_size(text: str) -> str:
    """Size tier for the input line: large, medium or small."""
    if len(text) > 20:
        return "small"
    if len(text) > 12:
        return "medium"
    return "large"


def render_display(state: CalculatorState, width: Optional[int] = None) -> Panel:
    """Render the calculator display."""
    badge = Text(f" {mode_label(state.mode)} ", style=MODE_STYLES[state.mode])

    shown = state.input or "0"
    input_line = Text(shown, style=SIZE_STYLES[input_size(state.input)], justify="right")

    if state.is_loading:
        status_line = Text("● ● ●", style="blink blue", justify="right")
    elif state.result:
        status_line = Text(f"= {state.result}", style="grey62", justify="right")
    else:
        status_line = Text("")

    lines = [badge, input_line, status_line]
    if state.error:
        lines.append(Text(state.error, style="bold red", justify="right"))

    return Panel(Group(*lines), border_style="grey35", width=width)


def render_keypad(mode: CalculatorMode) -> Optional[Table]:
    """Render the keypad grid, or None in AI mode."""
    rows = keypad_layout(mode)
    if not rows:
        return None

    columns = column_count(mode)
    table = Table.grid(padding=(0, 1))
    for _ in range(columns):
        table.add_column(justify="center", min_width=5)

    for row in rows:
        cells = []
        for button in row:
            label = f"[{button.label}]"
            if button.span > 1:
                label = label.center(5 * button.span + button.span - 1)
            cells.append(Text(label, style=VARIANT_STYLES[button.variant]))
            cells.extend(Text("") for _ in range(button.span - 1))
        table.add_row(*cells)

    return table


def format_timestamp(timestamp_ms: int) -> str:
    """Local time of a history entry."""
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M")


def render_history(items: Iterable[HistoryItem], limit: int = 0) -> Panel:
    """Render the history panel, newest first."""
    items = list(items)
    if not items:
        return Panel(
            Text("No history yet", style="dim", justify="center"),
            title="History",
            border_style="grey35",
        )

    shown = items[:limit] if limit > 0 else items

    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Expression", overflow="ellipsis")
    table.add_column("Result", justify="right", style="white")
    table.add_column("When", style="dim")

    for index, item in enumerate(shown, 1):
        expression = Text()
        if item.is_ai:
            expression.append("✦ ", style="magenta")
        expression.append(item.expression)
        table.add_row(str(index), expression, Text(f"= {item.result}"), format_timestamp(item.timestamp))

    renderables = [table]
    if len(shown) < len(items):
        renderables.append(Text(f"... and {len(items) - len(shown)} more", style="dim"))

    return Panel(Group(*renderables), title="History", border_style="grey35")
