"""Configuration for Nova Calc.

Settings live in ``<data dir>/config.json``. The data directory defaults to
``~/.nova-calc`` and can be moved with the NOVA_CALC_HOME environment
variable or the ``--data-dir`` CLI option.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Optional

from .models import CalculatorMode


logger = logging.getLogger(__name__)

HOME_ENV_VAR = "NOVA_CALC_HOME"
DEFAULT_DATA_DIR = "~/.nova-calc"
CONFIG_FILE = "config.json"


@dataclass
class CalcConfig:
    """Calculator configuration options."""

    model: str = "gemini-2.5-flash"
    temperature: float = 0.1  # Low temperature for deterministic answers
    api_key_env: str = "GEMINI_API_KEY"
    api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: float = 30.0  # Seconds
    max_history: int = 0  # 0 = unlimited
    default_mode: CalculatorMode = CalculatorMode.BASIC
    ai_extra_rules: List[str] = field(default_factory=list)

    def api_key(self) -> Optional[str]:
        """Read the API key from the configured environment variable.

        Falls back to API_KEY, which is what hosted environments inject.
        """
        return os.environ.get(self.api_key_env) or os.environ.get("API_KEY")

    def to_dict(self) -> dict:
        data = asdict(self)
        data["default_mode"] = self.default_mode.value
        return data


def resolve_data_dir(override: Optional[str] = None) -> Path:
    """Resolve the data directory.

    Args:
        override: Explicit directory, e.g. from ``--data-dir``.

    Returns:
        Absolute path of the data directory (not created).
    """
    raw = override or os.environ.get(HOME_ENV_VAR) or DEFAULT_DATA_DIR
    return Path(raw).expanduser().resolve()


def load_config(data_dir: Path) -> CalcConfig:
    """Load configuration from the data directory.

    Args:
        data_dir: Directory holding config.json.

    Returns:
        CalcConfig with settings from config.json or defaults.
    """
    config_file = Path(data_dir) / CONFIG_FILE
    defaults = CalcConfig()

    if not config_file.exists():
        return defaults

    try:
        with open(config_file) as f:
            data = json.load(f)
        return CalcConfig(
            model=data.get("model", defaults.model),
            temperature=float(data.get("temperature", defaults.temperature)),
            api_key_env=data.get("api_key_env", defaults.api_key_env),
            api_base=data.get("api_base", defaults.api_base).rstrip("/"),
            timeout=float(data.get("timeout", defaults.timeout)),
            max_history=int(data.get("max_history", defaults.max_history)),
            default_mode=CalculatorMode.parse(
                data.get("default_mode", defaults.default_mode.value)
            ),
            ai_extra_rules=list(data.get("ai_extra_rules", [])),
        )
    except (json.JSONDecodeError, IOError, AttributeError, TypeError, ValueError) as e:
        logger.warning("Ignoring invalid config file %s: %s", config_file, e)

    return defaults


def save_config(data_dir: Path, config: CalcConfig) -> Path:
    """Write configuration to the data directory."""
    config_file = Path(data_dir) / CONFIG_FILE
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w") as f:
        json.dump(config.to_dict(), f, indent=2)
    return config_file
