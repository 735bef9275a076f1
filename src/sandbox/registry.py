"""
Language Registry - Static tables describing how each language is run.

Responsibilities:
- Map alias tokens to canonical language identifiers
- Hold the per-language toolchain command templates (local execution)
- Hold the engine/version pairs understood by the hosted execution API

Adding a language is a data change: one row in the relevant table.
"""

import os
import sys
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


# =============================================================================
# CONFIGURATION
# =============================================================================

# Executable suffix for compiled artifacts
BINARY_SUFFIX = ".exe" if os.name == "nt" else ""

# Alias token -> canonical language id
LANGUAGE_ALIASES = {
    "js": "javascript",
    "node": "javascript",
    "nodejs": "javascript",
    "node.js": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "ts": "typescript",
    "py": "python",
    "python3": "python",
    "c++": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "htm": "html",
    "golang": "go",
    "rs": "rust",
}

# Languages rendered in the browser instead of executed
PREVIEW_LANGUAGES = ("html", "css", "jsx", "tsx", "react")

# Display names for the "unsupported language" message
DISPLAY_NAMES = {
    "cpp": "C++",
    "c": "C",
    "java": "Java",
    "javascript": "JavaScript",
    "typescript": "TypeScript",
    "python": "Python",
    "go": "Go",
    "rust": "Rust",
    "html": "HTML",
    "css": "CSS",
}


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class Toolchain:
    """
    Command template for running one language locally.

    Placeholders in commands: {source} (absolute source path),
    {binary} (absolute compiled artifact path), {workdir} (workspace path).
    """
    source_file: str
    run_command: Tuple[str, ...]
    compile_command: Optional[Tuple[str, ...]] = None

    def expand(self, command: Tuple[str, ...], workdir: str) -> Tuple[str, ...]:
        """Fill the placeholders of a command for a concrete workspace."""
        values = {
            "source": os.path.join(workdir, self.source_file),
            "binary": os.path.join(workdir, "main" + BINARY_SUFFIX),
            "workdir": workdir,
        }
        return tuple(part.format(**values) for part in command)


@dataclass(frozen=True)
class RemoteEngine:
    """Language/version pair understood by the hosted execution API."""
    name: str
    version: str


# =============================================================================
# TABLES
# =============================================================================

TOOLCHAINS: Dict[str, Toolchain] = {
    "python": Toolchain(
        source_file="main.py",
        run_command=(sys.executable, "{source}"),
    ),
    "javascript": Toolchain(
        source_file="main.js",
        run_command=("node", "{source}"),
    ),
    # Lowered to CommonJS without type checking, then run by node.
    # --noCheck needs TypeScript 5.6 or newer on the host.
    "typescript": Toolchain(
        source_file="main.ts",
        compile_command=(
            "tsc", "--noCheck", "--target", "ES2020", "--module", "commonjs",
            "--esModuleInterop", "--skipLibCheck", "{source}",
        ),
        run_command=("node", "{workdir}/main.js"),
    ),
    "c": Toolchain(
        source_file="main.c",
        compile_command=("gcc", "{source}", "-o", "{binary}"),
        run_command=("{binary}",),
    ),
    "cpp": Toolchain(
        source_file="main.cpp",
        compile_command=("g++", "{source}", "-o", "{binary}"),
        run_command=("{binary}",),
    ),
    # javac requires the public class to match the file name
    "java": Toolchain(
        source_file="Main.java",
        compile_command=("javac", "{source}"),
        run_command=("java", "-cp", "{workdir}", "Main"),
    ),
}

REMOTE_ENGINES: Dict[str, RemoteEngine] = {
    "python": RemoteEngine("python", "3.10.0"),
    "javascript": RemoteEngine("javascript", "18.15.0"),
    "typescript": RemoteEngine("typescript", "5.0.3"),
    "c": RemoteEngine("c", "10.2.0"),
    "cpp": RemoteEngine("c++", "10.2.0"),
    "java": RemoteEngine("java", "15.0.2"),
    "go": RemoteEngine("go", "1.16.2"),
    "rust": RemoteEngine("rust", "1.68.2"),
}


def get_toolchain(language: str) -> Optional[Toolchain]:
    """Look up the local toolchain for a canonical language id."""
    return TOOLCHAINS.get(language)


def get_remote_engine(language: str) -> Optional[RemoteEngine]:
    """Look up the remote engine for a canonical language id."""
    return REMOTE_ENGINES.get(language)


def supported_languages() -> str:
    """Human-readable list of every language the service accepts."""
    names = []
    for language in list(TOOLCHAINS) + list(REMOTE_ENGINES) + ["html", "css"]:
        name = DISPLAY_NAMES.get(language, language)
        if name not in names:
            names.append(name)
    names.append("React (JSX/TSX)")
    return ", ".join(names)
