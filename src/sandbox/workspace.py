"""
Workspace Manager - Single-use directories for one execution request.

Each workspace is a uniquely named directory under the temp root, so
concurrent requests never see each other's files. Release is best-effort:
a failed removal is logged, never raised.
"""

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from src.errors import InfrastructureError

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "code-run-"


@dataclass(frozen=True)
class Workspace:
    """An exclusive directory bound to one in-flight request."""
    path: str

    def file(self, name: str) -> str:
        """Absolute path of a file inside the workspace."""
        return os.path.join(self.path, name)


def acquire_workspace(root: str) -> Workspace:
    """
    Create a fresh workspace directory.

    Args:
        root: Parent directory shared by all workspaces

    Returns:
        The new Workspace

    Raises:
        InfrastructureError: If the root is missing or unwritable
    """
    try:
        path = tempfile.mkdtemp(prefix=WORKSPACE_PREFIX, dir=root)
    except OSError as e:
        logger.error("Cannot create workspace under %s: %s", root, e)
        raise InfrastructureError("Could not allocate an execution workspace.") from e

    logger.debug("Acquired workspace %s", path)
    return Workspace(path=path)


def release_workspace(workspace: Workspace) -> None:
    """Remove a workspace and everything in it, logging any failure."""
    try:
        shutil.rmtree(workspace.path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Failed to remove workspace %s: %s", workspace.path, e)
    else:
        logger.debug("Released workspace %s", workspace.path)


@contextmanager
def scoped_workspace(root: str) -> Iterator[Workspace]:
    """Acquire a workspace and release it on every exit path."""
    workspace = acquire_workspace(root)
    try:
        yield workspace
    finally:
        release_workspace(workspace)
