"""
Utility functions for the execution service.
"""

from pathlib import Path
from typing import Optional


# Mapping of file extensions to language names
EXTENSION_LANGUAGE_MAP = {
    # Python
    ".py": "python",
    # JavaScript/TypeScript
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "jsx",
    ".ts": "typescript",
    ".tsx": "tsx",
    # Web
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    # Systems
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
}


def guess_language_from_filename(path: str) -> str:
    """
    Guess the language of a file from its name.

    Args:
        path: File path or filename

    Returns:
        Language name, defaults to "text"
    """
    suffix = Path(path).suffix.lower()
    return EXTENSION_LANGUAGE_MAP.get(suffix, "text")


def lowered(value: Optional[str]) -> str:
    """Lowercase an optional string, treating None as empty."""
    return (value or "").strip().lower()
