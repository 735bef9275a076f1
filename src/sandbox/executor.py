"""
Sandbox Executor - Run untrusted source with a local toolchain or remotely.

Lifecycle of a local run:
1. Acquire a single-use workspace directory
2. Write the source to the language's entry file
3. Run the compile step, if the toolchain has one
4. Run the program
5. Release the workspace, whatever happened

Limits (per subprocess step):
- Wall-clock timeout (default 15s), enforced by killing the process group
- Combined stdout+stderr cap (default 5 MiB)

Not an isolation boundary: anything stronger than a private directory
(namespaces, seccomp, cgroups) must be layered underneath by the deployment.
"""

import asyncio
import logging
import os
import signal
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

import httpx

from src.config import ExecutionSettings
from src.errors import CompileError, InfrastructureError, RuntimeFailure
from src.schemas import clean_output
from src.sandbox.classifier import ExecutionStrategy, StrategyKind
from src.sandbox.registry import Toolchain
from src.sandbox.remote import RemoteExecutionClient
from src.sandbox.workspace import Workspace, scoped_workspace

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

READ_CHUNK_SIZE = 64 * 1024

# How long to wait for a killed process to exit and close its pipes
KILL_GRACE_SECONDS = 5.0

# Own process group so a timeout kills the program's children too
NEW_SESSION = os.name == "posix"


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class ProcessOutput:
    """Captured result of one subprocess step."""
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0


class OutputLimitExceeded(Exception):
    """Raised by a stream reader once the output budget is spent."""
    pass


class _OutputBudget:
    """Byte budget shared by the stdout and stderr readers of one process."""

    def __init__(self, limit: int):
        self.limit = limit
        self.used = 0

    def consume(self, size: int) -> None:
        self.used += size
        if self.used > self.limit:
            raise OutputLimitExceeded()


# =============================================================================
# LOCAL TOOLCHAIN RUNNER
# =============================================================================

async def _drain(stream: asyncio.StreamReader, budget: _OutputBudget) -> bytes:
    """Read a pipe to EOF, charging every chunk to the budget."""
    chunks: List[bytes] = []
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        budget.consume(len(chunk))
        chunks.append(chunk)
    return b"".join(chunks)


async def _communicate(process, budget: _OutputBudget) -> Tuple[bytes, bytes, int]:
    readers = [
        asyncio.ensure_future(_drain(process.stdout, budget)),
        asyncio.ensure_future(_drain(process.stderr, budget)),
    ]
    try:
        stdout, stderr = await asyncio.gather(*readers)
    finally:
        for reader in readers:
            reader.cancel()
    returncode = await process.wait()
    return stdout, stderr, returncode


def _kill(process) -> None:
    """Forcibly stop a process and, on POSIX, its whole process group."""
    try:
        if NEW_SESSION:
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
    except ProcessLookupError:
        pass


async def _reap(process) -> None:
    """Discard leftover output of a killed process and wait for it to exit."""

    async def discard(stream: asyncio.StreamReader) -> None:
        while await stream.read(READ_CHUNK_SIZE):
            pass

    try:
        await asyncio.wait_for(
            asyncio.gather(discard(process.stdout), discard(process.stderr), process.wait()),
            timeout=KILL_GRACE_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.warning("Process %s did not exit within %ss of being killed", process.pid, KILL_GRACE_SECONDS)


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


class LocalToolchainRunner:
    """Writes source into a workspace and runs its toolchain steps."""

    def __init__(self, settings: ExecutionSettings):
        self.settings = settings

    async def run(self, workspace: Workspace, toolchain: Toolchain, code: str) -> ProcessOutput:
        """
        Compile (if needed) and run code inside a workspace.

        Args:
            workspace: Directory owned by this request
            toolchain: Command template for the language
            code: Source text, written verbatim

        Returns:
            ProcessOutput of the run step

        Raises:
            CompileError: Compile step exited nonzero
            RuntimeFailure: Run step exited nonzero, timed out, or flooded output
            InfrastructureError: Source could not be written or toolchain is missing
        """
        source_path = workspace.file(toolchain.source_file)
        try:
            with open(source_path, "w", encoding="utf-8", newline="") as f:
                f.write(code)
        except OSError as e:
            raise InfrastructureError("Could not write source file to the workspace.") from e

        if toolchain.compile_command:
            argv = toolchain.expand(toolchain.compile_command, workspace.path)
            compiled = await self._run_process(argv, workspace.path, step="compile")
            if compiled.returncode != 0:
                raise CompileError(
                    compiled.stderr.strip()
                    or compiled.stdout.strip()
                    or f"Compilation failed with exit status {compiled.returncode}."
                )

        argv = toolchain.expand(toolchain.run_command, workspace.path)
        result = await self._run_process(argv, workspace.path, step="run")
        if result.returncode != 0:
            raise RuntimeFailure(
                result.stderr.strip() or f"Process exited with status {result.returncode}."
            )
        return result

    async def _run_process(self, argv: Tuple[str, ...], cwd: str, step: str) -> ProcessOutput:
        """Run one command under the timeout and output cap."""
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=NEW_SESSION,
            )
        except FileNotFoundError as e:
            raise InfrastructureError(
                f"'{os.path.basename(argv[0])}' is not installed on this host. "
                "Ensure the required runtime/compiler is installed."
            ) from e

        timeout = self.settings.timeout_seconds
        budget = _OutputBudget(self.settings.max_output_bytes)
        try:
            stdout, stderr, returncode = await asyncio.wait_for(
                _communicate(process, budget), timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.info("%s step timed out after %ss (pid %s)", step, timeout, process.pid)
            raise RuntimeFailure(f"Execution timed out after {timeout:g} seconds.")
        except OutputLimitExceeded:
            logger.info("%s step exceeded %d output bytes (pid %s)", step, budget.limit, process.pid)
            raise RuntimeFailure(
                f"Output limit of {budget.limit} bytes exceeded; execution was stopped."
            )
        finally:
            if process.returncode is None:
                _kill(process)
                await _reap(process)

        logger.debug("%s step exited with %s", step, returncode)
        return ProcessOutput(stdout=_decode(stdout), stderr=_decode(stderr), returncode=returncode)


# =============================================================================
# EXECUTORS
# =============================================================================

class Executor(ABC):
    """Runs a classified request and returns its text output."""

    @abstractmethod
    async def execute(self, strategy: ExecutionStrategy, code: str) -> str:
        """Execute code and return trimmed output ("No output" when empty)."""
        pass


class LocalExecutor(Executor):
    """Runs code with toolchains installed on this host."""

    def __init__(self, settings: ExecutionSettings):
        self.settings = settings
        self.runner = LocalToolchainRunner(settings)

    async def execute(self, strategy: ExecutionStrategy, code: str) -> str:
        with scoped_workspace(self.settings.temp_root) as workspace:
            result = await self.runner.run(workspace, strategy.toolchain, code)
        return clean_output(result.stdout)


class RemoteExecutor(Executor):
    """Delegates execution to the hosted execution API."""

    def __init__(
        self,
        settings: ExecutionSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = RemoteExecutionClient(settings, transport=transport)

    async def execute(self, strategy: ExecutionStrategy, code: str) -> str:
        return await self.client.run_remote(
            strategy.language, code, engine=strategy.remote_engine
        )


def select_executor(
    strategy: ExecutionStrategy,
    settings: ExecutionSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Executor:
    """Pick the executor for a classified strategy, once per request."""
    if strategy.kind is StrategyKind.REMOTE_ONLY:
        return RemoteExecutor(settings, transport=transport)
    if strategy.kind is StrategyKind.LOCAL_TOOLCHAIN:
        return LocalExecutor(settings)
    raise ValueError(f"No executor for strategy {strategy.kind.value}")
