"""
Configuration module for loading and validating environment variables.
"""

import math
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


EXECUTION_MODES = ("local", "remote")
LOG_FORMATS = ("text", "json")

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_OUTPUT_BYTES = 5 * 1024 * 1024
DEFAULT_REMOTE_URL = "https://emkc.org/api/v2/piston/execute"


@dataclass(frozen=True)
class ExecutionSettings:
    """
    Process-wide execution limits, fixed at startup.

    Injected into the runner, the remote client and the orchestrator.
    """
    execution_mode: str = "local"
    temp_root: str = tempfile.gettempdir()
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES
    remote_url: str = DEFAULT_REMOTE_URL
    remote_compile_timeout_ms: int = 10000
    remote_run_timeout_ms: int = 3000
    remote_http_timeout_seconds: float = 30.0

    @property
    def remote_enabled(self) -> bool:
        return self.execution_mode == "remote"


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self):
        # Load .env file from project root
        env_path = Path(__file__).parent.parent / ".env"
        load_dotenv(dotenv_path=env_path)

        self._problems: List[str] = []

        # Execution settings
        mode = os.getenv("EXECUTION_MODE", "local").strip().lower()
        if mode not in EXECUTION_MODES:
            self._problems.append(
                f"EXECUTION_MODE must be one of {', '.join(EXECUTION_MODES)} (got {mode!r})"
            )
            mode = "local"

        self.execution = ExecutionSettings(
            execution_mode=mode,
            temp_root=os.getenv("EXECUTION_TEMP_ROOT") or tempfile.gettempdir(),
            timeout_seconds=self._positive("EXECUTION_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, float),
            max_output_bytes=self._positive("EXECUTION_MAX_OUTPUT_BYTES", DEFAULT_MAX_OUTPUT_BYTES, int),
            remote_url=os.getenv("REMOTE_EXECUTION_URL", DEFAULT_REMOTE_URL),
            remote_compile_timeout_ms=self._positive("REMOTE_COMPILE_TIMEOUT_MS", 10000, int),
            remote_run_timeout_ms=self._positive("REMOTE_RUN_TIMEOUT_MS", 3000, int),
            remote_http_timeout_seconds=self._positive("REMOTE_HTTP_TIMEOUT_SECONDS", 30.0, float),
        )

        # Logging settings
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_format = os.getenv("LOG_FORMAT", "text").lower()
        if self.log_format not in LOG_FORMATS:
            self._problems.append(
                f"LOG_FORMAT must be one of {', '.join(LOG_FORMATS)} (got {self.log_format!r})"
            )

        # Validate collected settings
        self._validate()

    def _positive(self, name: str, default, cast):
        """Read a positive number from the environment, recording bad values."""
        raw = os.getenv(name)
        if raw is None or raw.strip() == "":
            return default
        try:
            value = cast(raw)
        except ValueError:
            self._problems.append(f"{name} must be a number (got {raw!r})")
            return default
        if not math.isfinite(value):
            self._problems.append(f"{name} must be a finite number (got {raw!r})")
            return default
        if value <= 0:
            self._problems.append(f"{name} must be positive (got {raw!r})")
            return default
        return value

    def _validate(self):
        """Raise a single ConfigError listing every invalid variable."""
        if self._problems:
            raise ConfigError(
                "Invalid configuration:\n- " + "\n- ".join(self._problems) + "\n"
                "Please fix your environment or .env file. See .env.example for reference."
            )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
