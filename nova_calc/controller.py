"""Calculator state machine for Nova Calc.

The Calculator owns the single CalculatorState and replaces it as a whole on
every user action:
- press/delete/clear edit the input
- set_mode switches between BASIC, SCIENTIFIC and AI
- compute runs the local evaluator or the AI solver
- select_history/clear_history work on the history list

History is loaded from the injected store on construction and saved back
after every change to it.
"""

import logging
import re
from typing import Callable, List, Optional

from .config import CalcConfig
from .evaluator import ERROR, evaluate
from .history_store import HistoryStore
from .models import (
    AI_ERROR,
    SYNTAX_ERROR,
    CalculatorMode,
    CalculatorState,
    HistoryItem,
)


logger = logging.getLogger(__name__)

Listener = Callable[[CalculatorState], None]

# Digits and decimal points at the end of the input
_TRAILING_NUMBER = re.compile(r"[0-9.]*$")


class Calculator:
    """Owns calculator state and applies user actions to it."""

    def __init__(self, store: HistoryStore, solver=None, config: Optional[CalcConfig] = None):
        """Initialize the calculator.

        Args:
            store: History persistence (load on start, save on change).
            solver: AI collaborator with an async ``solve(query)`` method.
            config: Calculator configuration.
        """
        self.config = config or CalcConfig()
        self.store = store
        self.solver = solver
        self._listeners: List[Listener] = []
        # Advanced by actions that make an in-flight AI answer stale
        self._generation = 0
        self._state = CalculatorState(
            history=self._trim(store.load()),
            mode=self.config.default_mode,
        )

    @property
    def state(self) -> CalculatorState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback invoked with every new state.

        Returns:
            A function that removes the callback again.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _trim(self, items) -> tuple:
        items = tuple(items)
        if self.config.max_history > 0:
            return items[: self.config.max_history]
        return items

    def _update(self, **changes) -> CalculatorState:
        """Replace the state and persist history if it changed."""
        previous = self._state
        if "history" in changes:
            changes["history"] = self._trim(changes["history"])
        self._state = previous.evolve(**changes)

        if self._state.history != previous.history:
            self.store.save(self._state.history)

        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    # --- Input ---

    def press(self, token: str) -> bool:
        """Append a keypad token (digit, operator or function) to the input.

        Ignored in AI mode, where free-text entry is used instead. A decimal
        point is rejected when the current number already has one.

        Returns:
            True if the token was accepted.
        """
        if not token or self._state.mode == CalculatorMode.AI:
            return False

        current = self._state.input
        if token == "." and "." in _TRAILING_NUMBER.search(current).group(0):
            return False

        self._update(input=current + token, error=None)
        return True

    def set_input(self, text: str) -> None:
        """Replace the input with free text (AI mode entry and suggestions)."""
        self._generation += 1
        self._update(input=text, error=None)

    def delete(self) -> None:
        """Remove the last character of the input."""
        self._update(input=self._state.input[:-1])

    def clear(self) -> None:
        """Reset input, result and error."""
        self._generation += 1
        self._update(input="", result="", error=None)

    def set_mode(self, mode: CalculatorMode) -> None:
        """Switch mode; input, result and history are kept."""
        mode = CalculatorMode(mode)
        if mode != self._state.mode:
            self._generation += 1
        self._update(mode=mode)

    # --- History ---

    def select_history(self, item: HistoryItem) -> None:
        """Load a history entry's expression back into the input.

        AI entries switch the calculator into AI mode.
        """
        self._generation += 1
        mode = CalculatorMode.AI if item.is_ai else self._state.mode
        self._update(input=item.expression, mode=mode, error=None)

    def clear_history(self) -> None:
        """Remove every history entry."""
        was_empty = not self._state.history
        self._update(history=())
        # Persist even if history was already empty
        if was_empty:
            self.store.save(())

    # --- Compute ---

    async def compute(self) -> CalculatorState:
        """Compute the current input with the active mode's engine.

        Never raises for evaluation or AI failures; they set ``error``.
        """
        state = self._state
        if not state.input:
            return state

        if state.mode == CalculatorMode.AI:
            return await self._compute_ai(state.input)
        return self.compute_local()

    def compute_local(self) -> CalculatorState:
        """Evaluate the input locally (BASIC and SCIENTIFIC modes)."""
        expression = self._state.input
        if not expression:
            return self._state

        result = evaluate(expression)
        if result == ERROR:
            logger.debug("Rejected expression %r", expression)
            return self._update(error=SYNTAX_ERROR)

        item = HistoryItem.create(expression, result)
        return self._update(
            input="",
            result=result,
            error=None,
            history=(item,) + self._state.history,
        )

    async def _compute_ai(self, query: str) -> CalculatorState:
        if self._state.is_loading:
            logger.debug("AI query already in flight, ignoring compute")
            return self._state

        generation = self._generation
        self._update(is_loading=True, error=None)

        try:
            if self.solver is None:
                raise RuntimeError("No AI solver configured")
            answer = await self.solver.solve(query)
        except Exception as e:
            logger.warning("AI query failed: %s", e)
            if generation != self._generation:
                return self._update(is_loading=False)
            return self._update(is_loading=False, error=AI_ERROR)

        item = HistoryItem.create(query, answer.result, is_ai=True)
        history = (item,) + self._state.history

        if generation != self._generation:
            # The user moved on; keep the answer in history only
            logger.debug("Stale AI answer for %r recorded in history only", query)
            return self._update(is_loading=False, history=history)

        return self._update(
            input="",
            result=answer.result,
            is_loading=False,
            history=history,
        )
