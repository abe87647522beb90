"""Keypad layouts for Nova Calc.

Describes the buttons the presentation layer renders for BASIC and
SCIENTIFIC modes, plus the quick suggestions offered in AI mode.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .controller import Calculator
from .keyboard import KeyAction
from .models import CalculatorMode


class ButtonVariant(Enum):
    """Visual style of a keypad button."""

    DEFAULT = "default"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    ACCENT = "accent"
    DANGER = "danger"
    GHOST = "ghost"


@dataclass(frozen=True)
class KeypadButton:
    """A single keypad button."""

    label: str
    action: KeyAction = KeyAction.INPUT
    token: Optional[str] = None
    variant: ButtonVariant = ButtonVariant.DEFAULT
    span: int = 1

    def activate(self, calculator: Calculator) -> None:
        """Apply the button's non-compute action to a calculator.

        Compute is asynchronous and left to the caller.
        """
        if self.action is KeyAction.INPUT:
            calculator.press(self.token or self.label)
        elif self.action is KeyAction.DELETE:
            calculator.delete()
        elif self.action is KeyAction.CLEAR:
            calculator.clear()


AI_SUGGESTIONS = (
    ("Solve Equation", "Solve 2x + 5 = 15"),
    ("Unit Conversion", "Convert 150 lbs to kg"),
    ("Calculus", "Derivative of x^2"),
)


def _digit(label: str, span: int = 1) -> KeypadButton:
    return KeypadButton(label, token=label, span=span)


def _op(label: str, token: str) -> KeypadButton:
    return KeypadButton(label, token=token, variant=ButtonVariant.ACCENT)


def _sci(label: str, token: str) -> KeypadButton:
    return KeypadButton(label, token=token, variant=ButtonVariant.SECONDARY)


CLEAR = KeypadButton("AC", KeyAction.CLEAR, variant=ButtonVariant.DANGER)
DELETE = KeypadButton("⌫", KeyAction.DELETE, variant=ButtonVariant.SECONDARY)
EQUALS = KeypadButton("=", KeyAction.COMPUTE, variant=ButtonVariant.PRIMARY)


def keypad_layout(mode: CalculatorMode) -> List[List[KeypadButton]]:
    """Return keypad rows for a mode.

    BASIC is a 4-column grid, SCIENTIFIC adds a function column and a
    bottom row (5 columns). AI mode has no keypad.
    """
    if mode == CalculatorMode.AI:
        return []

    sci = mode == CalculatorMode.SCIENTIFIC

    rows = [
        [CLEAR] + ([_sci("sin", "sin("), _sci("cos", "cos(")] if sci else []) + [DELETE, _op("÷", "/")],
        ([_sci("tan", "tan(")] if sci else []) + [_digit("7"), _digit("8"), _digit("9"), _op("×", "*")],
        ([_sci("ln", "ln(")] if sci else []) + [_digit("4"), _digit("5"), _digit("6"), _op("-", "-")],
        ([_sci("log", "log(")] if sci else []) + [_digit("1"), _digit("2"), _digit("3"), _op("+", "+")],
        ([_sci("π", "π")] if sci else []) + [_digit("0", span=2), _digit("."), EQUALS],
    ]

    if sci:
        rows.append([
            _sci("(", "("),
            _sci(")", ")"),
            _sci("^", "^"),
            _sci("√", "sqrt("),
            _sci("e", "e"),
        ])

    return rows


def column_count(mode: CalculatorMode) -> int:
    """Grid width for a mode."""
    return 5 if mode == CalculatorMode.SCIENTIFIC else 4


def find_button(mode: CalculatorMode, label: str) -> Optional[KeypadButton]:
    """Find a button by its label."""
    for row in keypad_layout(mode):
        for button in row:
            if button.label == label:
                return button
    return None
