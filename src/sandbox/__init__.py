"""
Sandbox module for executing and previewing untrusted code.

Components:
- classifier: Resolve a language token to an execution strategy
- registry: Static toolchain and remote engine tables
- workspace: Single-use directories with guaranteed cleanup
- executor: Run code with local toolchains (timeout + output cap)
- remote: Run code on the hosted execution API
- preview: Build preview documents for HTML, CSS and React
"""

from src.sandbox.classifier import ExecutionStrategy, StrategyKind, classify, normalize_language
from src.sandbox.executor import (
    Executor,
    LocalExecutor,
    LocalToolchainRunner,
    ProcessOutput,
    RemoteExecutor,
    select_executor,
)
from src.sandbox.preview import compose_preview
from src.sandbox.remote import RemoteExecutionClient
from src.sandbox.workspace import (
    Workspace,
    acquire_workspace,
    release_workspace,
    scoped_workspace,
)

__all__ = [
    # Classifier
    "ExecutionStrategy",
    "StrategyKind",
    "classify",
    "normalize_language",
    # Executor
    "Executor",
    "LocalExecutor",
    "LocalToolchainRunner",
    "ProcessOutput",
    "RemoteExecutor",
    "select_executor",
    # Remote
    "RemoteExecutionClient",
    # Preview
    "compose_preview",
    # Workspace
    "Workspace",
    "acquire_workspace",
    "release_workspace",
    "scoped_workspace",
]
