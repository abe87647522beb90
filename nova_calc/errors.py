"""Exception types for Nova Calc.

Neither error crosses the calculator controller: both are mapped to the
display strings in :mod:`nova_calc.models`.
"""


class NovaCalcError(Exception):
    """Base class for all Nova Calc errors."""


class EvaluationError(NovaCalcError):
    """Raised when an expression cannot be tokenized, parsed or computed."""


class AiQueryError(NovaCalcError):
    """Raised when the remote AI service cannot answer a query."""
