"""
Language Classifier - Resolve a language token to an execution strategy.

Strategies:
- PREVIEW: rendered in the browser, never executed on the host
- LOCAL_TOOLCHAIN: compiled/run by a toolchain installed on the host
- REMOTE_ONLY: sent to the hosted execution API
- UNSUPPORTED: terminal, answered with the list of supported languages
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.sandbox.registry import (
    LANGUAGE_ALIASES,
    PREVIEW_LANGUAGES,
    RemoteEngine,
    Toolchain,
    get_remote_engine,
    get_toolchain,
)


class StrategyKind(str, Enum):
    PREVIEW = "preview"
    LOCAL_TOOLCHAIN = "local_toolchain"
    REMOTE_ONLY = "remote_only"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class ExecutionStrategy:
    """Resolved plan for one request. Immutable once classified."""
    kind: StrategyKind
    language: str
    toolchain: Optional[Toolchain] = None
    remote_engine: Optional[RemoteEngine] = None


def normalize_language(token: Optional[str]) -> str:
    """Lowercase a language token and resolve common aliases."""
    language = (token or "").strip().lower()
    return LANGUAGE_ALIASES.get(language, language)


def classify(token: Optional[str], execution_mode: str = "local") -> ExecutionStrategy:
    """
    Resolve a free-form language token to an execution strategy.

    Args:
        token: Language as declared by the caller ("Py", "c++", "tsx", ...)
        execution_mode: Deployment switch, "local" or "remote"

    Returns:
        The ExecutionStrategy for this request
    """
    language = normalize_language(token)

    if language in PREVIEW_LANGUAGES:
        return ExecutionStrategy(StrategyKind.PREVIEW, language)

    toolchain = get_toolchain(language)
    engine = get_remote_engine(language)

    if toolchain is not None and execution_mode != "remote":
        return ExecutionStrategy(
            StrategyKind.LOCAL_TOOLCHAIN, language, toolchain=toolchain, remote_engine=engine
        )

    if engine is not None:
        return ExecutionStrategy(
            StrategyKind.REMOTE_ONLY, language, toolchain=toolchain, remote_engine=engine
        )

    return ExecutionStrategy(StrategyKind.UNSUPPORTED, language)
