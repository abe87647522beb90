"""Nova Calc - Basic, scientific and AI-assisted calculator.

A calculator core with:
- Local expression evaluation (recursive-descent, 12 significant digits)
- Natural-language solving through the Gemini API
- Persistent history of results
- Keyboard bindings and keypad layouts for front ends
"""

__version__ = "1.0.0"

from .models import (
    CalculatorMode,
    CalculatorState,
    HistoryItem,
    SYNTAX_ERROR,
    AI_ERROR,
)
from .errors import (
    NovaCalcError,
    EvaluationError,
    AiQueryError,
)
from .evaluator import evaluate
from .history_store import (
    HistoryStore,
    JsonHistoryStore,
    MemoryHistoryStore,
)
from .controller import Calculator

__all__ = [
    # Model
    "CalculatorMode",
    "CalculatorState",
    "HistoryItem",
    "SYNTAX_ERROR",
    "AI_ERROR",
    # Errors
    "NovaCalcError",
    "EvaluationError",
    "AiQueryError",
    # Evaluation
    "evaluate",
    # Persistence
    "HistoryStore",
    "JsonHistoryStore",
    "MemoryHistoryStore",
    # State machine
    "Calculator",
]
