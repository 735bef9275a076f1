"""
Orchestrator for run requests.

Drives one request through its states:

    Received -> Classified -> PreviewComposed                      -> ResultReturned
                           -> WorkspaceAcquired -> SourceWritten
                              -> [Compiled] -> Executed
                              -> WorkspaceReleased                 -> ResultReturned

Every failure is terminal for the request and is converted here into a
text-mode result with a status code; nothing escapes to the HTTP layer.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from src.config import ExecutionSettings
from src.errors import ExecutionError, InfrastructureError, ValidationError
from src.schemas import PreviewResult, RunRequest, RunResponse, TextResult
from src.sandbox.classifier import StrategyKind, classify
from src.sandbox.executor import select_executor
from src.sandbox.preview import compose_preview, preview_message
from src.sandbox.registry import supported_languages

logger = logging.getLogger(__name__)

EMPTY_CODE_MESSAGE = "No code to run."
GENERIC_FAILURE_MESSAGE = "Execution failed. Ensure the required runtime/compiler is installed."


@dataclass
class RunOutcome:
    """HTTP status plus response body for one run request."""
    status_code: int
    response: RunResponse

    def to_dict(self):
        return self.response.model_dump(by_alias=True, exclude_none=True)


def unsupported_language_message() -> str:
    return f"Unsupported language. Supported: {supported_languages()}."


def _failure(error: ExecutionError) -> RunOutcome:
    return RunOutcome(error.status_code, TextResult(output=error.message))


async def execute_request(
    request: RunRequest,
    settings: ExecutionSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RunOutcome:
    """
    Handle one run request end to end.

    Args:
        request: Validated request body
        settings: Execution limits and deployment mode
        transport: Optional HTTP transport for the remote client (tests)

    Returns:
        RunOutcome with the status code and response model
    """
    started = time.monotonic()

    if not request.code.strip():
        return _failure(ValidationError(EMPTY_CODE_MESSAGE))

    strategy = classify(request.language, settings.execution_mode)
    logger.info(
        "Run request language=%s strategy=%s",
        strategy.language or "<empty>",
        strategy.kind.value,
    )

    if strategy.kind is StrategyKind.UNSUPPORTED:
        return _failure(ValidationError(unsupported_language_message()))

    if strategy.kind is StrategyKind.PREVIEW:
        document = compose_preview(strategy, request.code, request.files)
        return RunOutcome(
            200,
            PreviewResult(preview_html=document, output=preview_message(strategy.language)),
        )

    try:
        executor = select_executor(strategy, settings, transport=transport)
        output = await executor.execute(strategy, request.code)
    except InfrastructureError as e:
        logger.error("Run failed (%s) language=%s: %s", e.category, strategy.language, e.message)
        return _failure(e)
    except ExecutionError as e:
        logger.info("Run failed (%s) language=%s", e.category, strategy.language)
        return _failure(e)
    except Exception:
        logger.exception("Unexpected failure running language=%s", strategy.language)
        return RunOutcome(500, TextResult(output=GENERIC_FAILURE_MESSAGE))

    logger.info(
        "Run succeeded language=%s in %.0fms",
        strategy.language,
        (time.monotonic() - started) * 1000,
    )
    return RunOutcome(200, TextResult(output=output))
