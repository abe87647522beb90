"""AI query service for Nova Calc.

Sends natural-language math questions to the Gemini REST API:
- One single-turn generateContent request per query
- Fixed system instruction keeping answers calculator-displayable
- Low sampling temperature

Any failure surfaces as AiQueryError; the controller maps it to "AI Error".
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

import requests
from jinja2 import Environment, PackageLoader, select_autoescape

from .config import CalcConfig
from .errors import AiQueryError


logger = logging.getLogger(__name__)

SYSTEM_RULES = (
    'If the input is a direct calculation (e.g., "5 + 5", "sqrt(25)"), return just the number.',
    'If the input is a word problem, return the numeric answer followed by a very brief unit (e.g., "15.4 kg").',
    "If the input asks for a concept, explain it in one short sentence.",
    "Do not wrap output in markdown code blocks.",
    "Prioritize returning a result that can be displayed on a calculator screen.",
)

_jinja_env = Environment(
    loader=PackageLoader("nova_calc", "templates"),
    autoescape=select_autoescape(),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class AiAnswer:
    """Answer returned by the AI service."""

    result: str
    explanation: Optional[str] = None


def render_system_instruction(extra_rules: Iterable[str] = ()) -> str:
    """Render the system instruction sent with every query."""
    template = _jinja_env.get_template("system_instruction.txt.j2")
    rules: List[str] = list(SYSTEM_RULES) + [r for r in extra_rules if r.strip()]
    return template.render(rules=rules).strip()


def extract_text(payload: dict) -> str:
    """Join the text parts of the first candidate.

    Returns an empty string when the response carries no text, e.g. when
    the prompt was blocked.

    Raises:
        AiQueryError: If the payload is not a generateContent response.
    """
    if not isinstance(payload, dict):
        raise AiQueryError("Unexpected response from AI service")

    candidates = payload.get("candidates") or []
    if not candidates:
        return ""

    try:
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(part.get("text", "") for part in parts)
    except (AttributeError, TypeError) as e:
        raise AiQueryError(f"Malformed response from AI service: {e}") from e


class GeminiSolver:
    """Answers queries with a Gemini model."""

    def __init__(self, config: Optional[CalcConfig] = None, session: Optional[requests.Session] = None):
        """Initialize the solver.

        Args:
            config: Model, endpoint and timeout settings.
            session: Optional requests session (one is created lazily).
        """
        self.config = config or CalcConfig()
        self._session = session
        self.system_instruction = render_system_instruction(self.config.ai_extra_rules)

    @property
    def endpoint(self) -> str:
        return f"{self.config.api_base}/models/{self.config.model}:generateContent"

    def build_request(self, query: str) -> dict:
        """Build the generateContent request body for a query."""
        return {
            "systemInstruction": {"parts": [{"text": self.system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": query}]}],
            "generationConfig": {"temperature": self.config.temperature},
        }

    def solve_sync(self, query: str) -> AiAnswer:
        """Send a query and wait for the answer.

        Raises:
            AiQueryError: On missing credentials, network or service errors.
        """
        api_key = self.config.api_key()
        if not api_key:
            raise AiQueryError(
                f"No API key configured. Set {self.config.api_key_env} in the environment."
            )

        if self._session is None:
            self._session = requests.Session()

        try:
            response = self._session.post(
                self.endpoint,
                headers={"x-goog-api-key": api_key, "Content-Type": "application/json"},
                json=self.build_request(query),
                timeout=self.config.timeout,
            )
        except requests.RequestException as e:
            logger.error("AI service request failed: %s", e)
            raise AiQueryError(f"Failed to reach AI service: {e}") from e

        if response.status_code != 200:
            message = _error_message(response)
            logger.error("AI service error %s: %s", response.status_code, message)
            raise AiQueryError(f"AI service error {response.status_code}: {message}")

        try:
            payload = response.json()
        except ValueError as e:
            raise AiQueryError("AI service returned invalid JSON") from e

        text = extract_text(payload)
        logger.debug("AI answer for %r: %r", query, text)
        return AiAnswer(result=text.strip())

    async def solve(self, query: str) -> AiAnswer:
        """Send a query without blocking the event loop."""
        return await asyncio.to_thread(self.solve_sync, query)


def _error_message(response: requests.Response) -> str:
    """Best description of a failed response."""
    try:
        error = response.json().get("error", {})
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
    except (ValueError, AttributeError):
        pass
    return response.reason or "Failed to calculate with AI"
