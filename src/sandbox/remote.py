"""
Remote Execution Client - Run code on a hosted execution API.

Used when the deployment has no local toolchains (EXECUTION_MODE=remote)
or for languages that only have a remote engine. Speaks the Piston-style
execute contract:

    POST {language, version, files: [{name, content}], stdin,
          compile_timeout, run_timeout, compile_memory_limit, run_memory_limit}
    -> {language, version, compile?: {stdout, stderr, output, code},
        run: {stdout, stderr, output, code}, message?}

A fresh HTTP client is opened per request; nothing is pooled.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from src.config import ExecutionSettings
from src.errors import RemoteExecutionError, ValidationError
from src.schemas import clean_output
from src.sandbox.registry import (
    DISPLAY_NAMES,
    REMOTE_ENGINES,
    RemoteEngine,
    get_remote_engine,
    get_toolchain,
)

logger = logging.getLogger(__name__)

# Memory ceiling is left to the remote service
UNLIMITED_MEMORY = -1

OUTPUT_STAGES = ("compile", "run")
OUTPUT_FIELDS = ("stderr", "stdout", "output")


def build_payload(
    language: str,
    code: str,
    settings: ExecutionSettings,
    engine: Optional[RemoteEngine] = None,
) -> Dict[str, Any]:
    """Build the execute request body; the engine is looked up when not given."""
    engine = engine or get_remote_engine(language)
    if engine is None:
        supported = ", ".join(DISPLAY_NAMES.get(name, name) for name in REMOTE_ENGINES)
        raise ValidationError(
            f"Language '{language}' is not supported for remote execution. Supported: {supported}."
        )

    # Keep the local entry-file name so e.g. Java finds its Main class
    toolchain = get_toolchain(language)
    file_name = toolchain.source_file if toolchain else "main"

    return {
        "language": engine.name,
        "version": engine.version,
        "files": [{"name": file_name, "content": code}],
        "stdin": "",
        "compile_timeout": settings.remote_compile_timeout_ms,
        "run_timeout": settings.remote_run_timeout_ms,
        "compile_memory_limit": UNLIMITED_MEMORY,
        "run_memory_limit": UNLIMITED_MEMORY,
    }


def format_remote_output(data: Dict[str, Any]) -> str:
    """
    Flatten an execute response into plain output text.

    A top-level ``message`` (quota, validation, unknown runtime) wins over any
    partial output and is raised. Otherwise the compile then run stage fields
    are joined in order, skipping blank ones.
    """
    message = data.get("message")
    if message:
        raise RemoteExecutionError(str(message).strip())

    parts: List[str] = []
    for stage in OUTPUT_STAGES:
        stage_data = data.get(stage) or {}
        for field in OUTPUT_FIELDS:
            value = stage_data.get(field)
            if isinstance(value, str) and value.strip():
                parts.append(value.strip())

    return clean_output("\n".join(parts))


class RemoteExecutionClient:
    """Submits code to the hosted execution API and normalizes its answer."""

    def __init__(
        self,
        settings: ExecutionSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.transport = transport

    async def run_remote(
        self, language: str, code: str, engine: Optional[RemoteEngine] = None
    ) -> str:
        """
        Run code remotely.

        Args:
            language: Canonical language id
            code: Source text
            engine: Engine resolved by the classifier, if any

        Returns:
            Output text, "No output" when the program printed nothing

        Raises:
            ValidationError: Language has no remote engine (no request is sent)
            RemoteExecutionError: Transport failure, non-success status, or fatal message
        """
        payload = build_payload(language, code, self.settings, engine=engine)

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.remote_http_timeout_seconds,
                transport=self.transport,
            ) as client:
                response = await client.post(self.settings.remote_url, json=payload)
        except httpx.HTTPError as e:
            logger.error("Remote execution request to %s failed: %s", self.settings.remote_url, e)
            raise RemoteExecutionError("Remote execution service is unreachable.") from e

        if not response.is_success:
            detail = _error_message(response)
            message = f"Remote execution failed with status {response.status_code}"
            raise RemoteExecutionError(f"{message}: {detail}" if detail else message)

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteExecutionError("Remote execution service returned an invalid response.") from e

        if not isinstance(data, dict):
            raise RemoteExecutionError("Remote execution service returned an invalid response.")

        return format_remote_output(data)


def _error_message(response: httpx.Response) -> Optional[str]:
    """Pull the ``message`` field out of an error response, if any."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"]).strip()
    return None
