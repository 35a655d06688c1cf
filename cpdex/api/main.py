"""FastAPI application for the pool program.

Every request runs one instruction against the process-wide ledger. A
rejected instruction answers 400 with the program error name and code; a
missing pool or account answers 404.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cpdex import __version__
from cpdex.api.endpoints import router
from cpdex.api.schemas import ErrorResponse
from cpdex.errors import AccountNotFound, DexError
from cpdex.log import configure_logging

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("CPDEX_HOST", "0.0.0.0")
PORT = int(os.environ.get("CPDEX_PORT", "8000"))
DEBUG = os.environ.get("CPDEX_DEBUG", "false").lower() in ("true", "1", "yes")

logger = structlog.get_logger()

app = FastAPI(
    title="Constant-product DEX",
    description="Two-token constant-product pools on an in-memory ledger",
    version=__version__,
)


@app.exception_handler(DexError)
async def dex_error_handler(request: Request, exc: DexError) -> JSONResponse:
    """Map program errors to 400 (404 for missing accounts)."""
    status_code = 404 if isinstance(exc, AccountNotFound) else 400
    logger.info(
        "instruction_rejected",
        path=request.url.path,
        error=exc.name,
        code=exc.code,
        detail=exc.detail,
    )
    body = ErrorResponse(error=exc.name, code=exc.code, detail=exc.detail)
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the pool API server.

    Configuration via environment variables:
    - CPDEX_HOST: Host to bind to (default: 0.0.0.0)
    - CPDEX_PORT: Port to bind to (default: 8000)
    - CPDEX_DEBUG: Enable debug logging and reload mode (default: false)
    - CPDEX_PROGRAM_ID: Program id pools are derived under
    """
    configure_logging(debug=DEBUG)
    uvicorn.run(
        "cpdex.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
