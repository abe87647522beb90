"""Shared fixtures for Nova Calc tests."""

import pytest

from nova_calc.ai_solver import AiAnswer
from nova_calc.controller import Calculator
from nova_calc.errors import AiQueryError
from nova_calc.history_store import MemoryHistoryStore


class FakeSolver:
    """Stand-in for the AI service.

    Answers with ``result`` or raises ``error``. When ``gate`` is set, each
    query waits for it before answering.
    """

    def __init__(self, result="42", error=None, gate=None):
        self.result = result
        self.error = error
        self.gate = gate
        self.queries = []

    async def solve(self, query):
        self.queries.append(query)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return AiAnswer(result=self.result)


@pytest.fixture
def store():
    """Empty in-memory history store."""
    return MemoryHistoryStore()


@pytest.fixture
def solver():
    """Solver answering every query with '42'."""
    return FakeSolver()


@pytest.fixture
def failing_solver():
    """Solver failing every query."""
    return FakeSolver(error=AiQueryError("service unavailable"))


@pytest.fixture
def calculator(store, solver):
    """Calculator wired to in-memory fakes."""
    return Calculator(store, solver)


@pytest.fixture
def make_solver():
    """Factory for solvers with custom answers, errors or gates."""
    return FakeSolver
