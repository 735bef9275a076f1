"""
Code Runner - HTTP entry point

Exposes the execution service to the editor front end:
- POST /api/run: run code, or build a preview for HTML/CSS/React
- GET /api/health: liveness plus the active execution mode

Authentication happens upstream; this service only sees the request body.

Run with:  python app.py   or   uvicorn app:create_app --factory
"""

import logging
import os
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.config import ExecutionSettings, get_config
from src.logger import setup_logging
from src.orchestrator import execute_request
from src.schemas import RunRequest, TextResult
from src.sandbox.registry import supported_languages

logger = logging.getLogger(__name__)

MALFORMED_REQUEST_MESSAGE = "Malformed run request. Expected JSON with 'code' and 'language'."


def create_app(
    settings: Optional[ExecutionSettings] = None,
    remote_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Execution settings; loaded from the environment when omitted
        remote_transport: HTTP transport for the remote client (tests)

    Returns:
        Configured FastAPI app
    """
    if settings is None:
        config = get_config()
        setup_logging(config.log_level, json_format=config.log_format == "json")
        settings = config.execution

    app = FastAPI(title="Code Runner", version="0.1.0")
    app.state.settings = settings
    app.state.remote_transport = remote_transport

    @app.exception_handler(RequestValidationError)
    async def malformed_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Rejected malformed run request: %s", exc.errors())
        return JSONResponse(
            status_code=400,
            content=TextResult(output=MALFORMED_REQUEST_MESSAGE).model_dump(),
        )

    @app.post("/api/run")
    async def run(body: RunRequest, request: Request) -> JSONResponse:
        outcome = await execute_request(
            body,
            request.app.state.settings,
            transport=request.app.state.remote_transport,
        )
        return JSONResponse(status_code=outcome.status_code, content=outcome.to_dict())

    @app.get("/api/health")
    async def health(request: Request):
        return {
            "status": "ok",
            "executionMode": request.app.state.settings.execution_mode,
            "supportedLanguages": supported_languages(),
        }

    return app


if __name__ == "__main__":
    uvicorn.run(
        "app:create_app",
        factory=True,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )
