"""Keyboard bindings for Nova Calc.

Maps key names (as reported by the terminal or a browser ``KeyboardEvent``)
to calculator actions. Bindings are inactive in AI mode, where keys go to
free-text entry instead.
"""

from enum import Enum
from typing import Optional, Tuple

from .controller import Calculator
from .models import CalculatorMode


DIGIT_KEYS = frozenset("0123456789.")
OPERATOR_KEYS = frozenset("+-*/()%^")


class KeyAction(Enum):
    """Action a key is bound to."""

    INPUT = "input"
    COMPUTE = "compute"
    DELETE = "delete"
    CLEAR = "clear"


def resolve_key(key: str, mode: CalculatorMode) -> Optional[Tuple[KeyAction, Optional[str]]]:
    """Resolve a key to its action and input token.

    Returns:
        (action, token) or None if the key is unbound in this mode.
    """
    if mode == CalculatorMode.AI:
        return None

    if key in DIGIT_KEYS or key in OPERATOR_KEYS:
        return KeyAction.INPUT, key
    if key == "Enter":
        return KeyAction.COMPUTE, None
    if key == "Backspace":
        return KeyAction.DELETE, None
    if key == "Escape":
        return KeyAction.CLEAR, None
    return None


async def dispatch(calculator: Calculator, key: str) -> bool:
    """Apply a key press to the calculator.

    Returns:
        True if the key was handled and its default action should be
        suppressed.
    """
    binding = resolve_key(key, calculator.state.mode)
    if binding is None:
        return False

    action, token = binding
    if action is KeyAction.INPUT:
        calculator.press(token)
    elif action is KeyAction.COMPUTE:
        await calculator.compute()
    elif action is KeyAction.DELETE:
        calculator.delete()
    else:
        calculator.clear()
    return True
