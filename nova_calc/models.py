"""Data model for Nova Calc.

Provides:
- CalculatorMode (BASIC, SCIENTIFIC, AI)
- HistoryItem records, persisted as JSON objects
- CalculatorState, replaced as a whole on every transition
"""

import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple


SYNTAX_ERROR = "Syntax Error"
AI_ERROR = "AI Error"


class CalculatorMode(str, Enum):
    """Active input surface and compute path."""

    BASIC = "BASIC"
    SCIENTIFIC = "SCIENTIFIC"
    AI = "AI"

    @classmethod
    def parse(cls, value: str) -> "CalculatorMode":
        """Parse a mode name, accepting short aliases like 'sci'."""
        key = value.strip().upper()
        aliases = {"SCI": "SCIENTIFIC", "B": "BASIC", "S": "SCIENTIFIC", "A": "AI"}
        key = aliases.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown mode: {value}") from None


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class HistoryItem:
    """One completed computation."""

    id: str
    expression: str
    result: str
    timestamp: int
    is_ai: bool = False

    @classmethod
    def create(cls, expression: str, result: str, is_ai: bool = False) -> "HistoryItem":
        """Stamp a new item with the current time."""
        stamp = now_ms()
        return cls(
            id=f"{stamp}-{uuid.uuid4().hex[:6]}",
            expression=expression,
            result=result,
            timestamp=stamp,
            is_ai=is_ai,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "expression": self.expression,
            "result": self.result,
            "timestamp": self.timestamp,
            "isAi": self.is_ai,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryItem":
        return cls(
            id=str(data["id"]),
            expression=str(data["expression"]),
            result=str(data["result"]),
            timestamp=int(data.get("timestamp", 0)),
            is_ai=data.get("isAi") is True,
        )


@dataclass(frozen=True)
class CalculatorState:
    """Complete calculator state.

    History is ordered newest first, by insertion.
    """

    input: str = ""
    result: str = ""
    history: Tuple[HistoryItem, ...] = field(default_factory=tuple)
    mode: CalculatorMode = CalculatorMode.BASIC
    error: Optional[str] = None
    is_loading: bool = False

    def evolve(self, **changes) -> "CalculatorState":
        """Return a copy with the given fields replaced."""
        if "history" in changes:
            changes["history"] = tuple(changes["history"])
        return replace(self, **changes)
