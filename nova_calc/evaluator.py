"""Expression evaluator for Nova Calc.

Turns a typed expression into a display string:
- Sanitizes the text down to the permitted character set
- Tokenizes and evaluates with a small recursive-descent parser
- Rounds to 12 significant digits and formats for the display

Grammar (lowest to highest precedence):

    expression := term (('+' | '-') term)*
    term       := unary (('*' | '/' | '%') unary)*
    unary      := ('-' | '+') unary | power
    power      := primary ('^' unary)?
    primary    := NUMBER | CONSTANT | FUNCTION '(' expression ')'
                | '(' expression ')'
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from .errors import EvaluationError


ERROR = "Error"
SIGNIFICANT_DIGITS = 12

# Display operators and constants are kept so they can be substituted below.
_DISALLOWED = re.compile(r"[^0-9+\-*/().^%×÷πA-Za-z\s]")

FUNCTIONS: Dict[str, Callable[[float], float]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "log": math.log10,
    "ln": math.log,
    "sqrt": math.sqrt,
}

CONSTANTS: Dict[str, float] = {
    "π": math.pi,
    "pi": math.pi,
    "e": math.e,
}

SYMBOLS = {"×": "*", "÷": "/"}


@dataclass
class Token:
    """A lexical token."""

    kind: str  # number, name, op, lparen, rparen
    text: str
    pos: int

    @property
    def value(self) -> float:
        return float(self.text)


def sanitize(expression: str) -> str:
    """Drop every character outside the permitted set."""
    return _DISALLOWED.sub("", expression)


def unsupported_characters(expression: str) -> str:
    """Characters sanitize would drop, each listed once."""
    return "".join(dict.fromkeys(_DISALLOWED.findall(expression)))


def tokenize(expression: str) -> List[Token]:
    """Split a sanitized expression into tokens.

    Raises:
        EvaluationError: On a malformed number or stray character.
    """
    tokens: List[Token] = []
    i = 0
    n = len(expression)

    while i < n:
        ch = expression[i]

        if ch.isspace():
            i += 1
            continue

        if ch.isdigit() or ch == ".":
            start = i
            while i < n and (expression[i].isdigit() or expression[i] == "."):
                i += 1
            text = expression[start:i]
            if text.count(".") > 1 or text == ".":
                raise EvaluationError(f"Malformed number '{text}' at {start}")
            tokens.append(Token("number", text, start))
            continue

        if ch == "π":
            tokens.append(Token("name", ch, i))
            i += 1
            continue

        if ch.isalpha():
            start = i
            while i < n and expression[i].isalpha() and expression[i] != "π":
                i += 1
            tokens.append(Token("name", expression[start:i], start))
            continue

        if ch in SYMBOLS:
            tokens.append(Token("op", SYMBOLS[ch], i))
        elif ch in "+-*/%^":
            tokens.append(Token("op", ch, i))
        elif ch == "(":
            tokens.append(Token("lparen", ch, i))
        elif ch == ")":
            tokens.append(Token("rparen", ch, i))
        else:
            raise EvaluationError(f"Unexpected character '{ch}' at {i}")
        i += 1

    return tokens


class Parser:
    """Recursive-descent evaluator over a token list."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.index = 0

    def parse(self) -> float:
        """Evaluate the whole token list."""
        if not self.tokens:
            raise EvaluationError("Empty expression")
        value = self.expression()
        leftover = self._peek()
        if leftover is not None:
            raise EvaluationError(f"Unexpected '{leftover.text}' at {leftover.pos}")
        return value

    def _peek(self) -> Optional[Token]:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _next(self) -> Token:
        token = self._peek()
        if token is None:
            raise EvaluationError("Unexpected end of expression")
        self.index += 1
        return token

    def _accept_op(self, *ops: str) -> Optional[str]:
        token = self._peek()
        if token is not None and token.kind == "op" and token.text in ops:
            self.index += 1
            return token.text
        return None

    def _expect(self, kind: str) -> Token:
        token = self._next()
        if token.kind != kind:
            raise EvaluationError(f"Expected {kind} at {token.pos}, got '{token.text}'")
        return token

    def expression(self) -> float:
        value = self.term()
        while True:
            op = self._accept_op("+", "-")
            if op is None:
                return value
            right = self.term()
            value = value + right if op == "+" else value - right

    def term(self) -> float:
        value = self.unary()
        while True:
            op = self._accept_op("*", "/", "%")
            if op is None:
                return value
            right = self.unary()
            if op == "*":
                value = value * right
            elif op == "/":
                value = value / right
            else:
                # Remainder keeps the sign of the dividend
                value = math.fmod(value, right)

    def unary(self) -> float:
        op = self._accept_op("-", "+")
        if op == "-":
            return -self.unary()
        if op == "+":
            return self.unary()
        return self.power()

    def power(self) -> float:
        base = self.primary()
        if self._accept_op("^"):
            # Right associative: 2^3^2 == 2^(3^2)
            exponent = self.unary()
            return math.pow(base, exponent)
        return base

    def primary(self) -> float:
        token = self._next()

        if token.kind == "number":
            return token.value

        if token.kind == "lparen":
            value = self.expression()
            self._expect("rparen")
            return value

        if token.kind == "name":
            if token.text in FUNCTIONS:
                self._expect("lparen")
                argument = self.expression()
                self._expect("rparen")
                return FUNCTIONS[token.text](argument)
            if token.text in CONSTANTS:
                return CONSTANTS[token.text]
            raise EvaluationError(f"Unknown name '{token.text}' at {token.pos}")

        raise EvaluationError(f"Unexpected '{token.text}' at {token.pos}")


def evaluate_number(expression: str) -> float:
    """Evaluate an expression to a finite float.

    Raises:
        EvaluationError: On any syntax, domain or non-finite result.
    """
    try:
        value = Parser(tokenize(sanitize(expression))).parse()
    except (ZeroDivisionError, OverflowError, ValueError, RecursionError) as e:
        raise EvaluationError(str(e)) from e

    if not math.isfinite(value):
        raise EvaluationError("Result is not a finite number")
    return value


def format_number(value: float, digits: int = SIGNIFICANT_DIGITS) -> str:
    """Format a float for the display.

    Rounds to ``digits`` significant digits, then renders a plain decimal
    literal (exponent form outside [1e-6, 1e21)), without trailing zeros.
    """
    rounded = float(f"{value:.{digits}g}")
    if rounded == 0:
        return "0"

    magnitude = abs(rounded)
    if magnitude >= 1e21 or magnitude < 1e-6:
        mantissa, _, exponent = repr(rounded).partition("e")
        exp = int(exponent)
        return f"{_strip_zeros(mantissa)}e{'+' if exp >= 0 else '-'}{abs(exp)}"

    return _strip_zeros(format(Decimal(repr(rounded)), "f"))


def _strip_zeros(text: str) -> str:
    if "." not in text:
        return text
    return text.rstrip("0").rstrip(".")


def evaluate(expression: str) -> str:
    """Evaluate an expression to a display string, or ``"Error"``."""
    try:
        return format_number(evaluate_number(expression))
    except EvaluationError:
        return ERROR
