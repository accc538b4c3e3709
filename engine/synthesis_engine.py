"""
synthesis_engine.py -- FastAPI application for therapeutic content generation.

Runs on ENGINE_PORT (default 3002). STATELESS -- no caching, no storage.
Each POST /generate runs one synthesis request end to end and returns the
assembled record. Provider failures come back as success=false with the
kind that failed, so the caller can retry that request alone.
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from synthesis.client import AnthropicClient, GenerativeClient
from synthesis.config import GenerationSettings, load_settings
from synthesis.errors import GenerationError
from synthesis.models import GENERATION_KINDS, GenerationKind, ProfileContext
from synthesis.pipeline import synthesize

load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("synthesis_engine")

ENGINE_PORT: int = int(os.getenv("ENGINE_PORT", "3002"))
ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
VERSION: str = "0.1.0"


class GenerateRequest(BaseModel):
    """Request body for the /generate endpoint."""
    profile: ProfileContext
    request: GenerationKind


class EngineResponse(BaseModel):
    """Standard engine API response envelope."""
    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    kind: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""
    success: bool
    version: str = VERSION
    providerConfigured: bool = False


class KindListResponse(BaseModel):
    """Response for /kinds listing."""
    success: bool
    data: dict[str, Any]


settings: GenerationSettings = GenerationSettings()
claude_client: AnthropicClient | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage the Claude client lifecycle."""
    global settings, claude_client
    settings = load_settings()
    if ANTHROPIC_API_KEY:
        claude_client = AnthropicClient(api_key=ANTHROPIC_API_KEY, settings=settings)
    else:
        logger.warning("ANTHROPIC_API_KEY not set -- /generate will return 503")
    logger.info("Synthesis Engine started (model=%s)", settings.model)
    yield
    if claude_client is not None:
        await claude_client.aclose()
        claude_client = None
    logger.info("Synthesis Engine shut down")


app = FastAPI(
    title="TheraSynth Engine",
    description="Personalized therapeutic content generation",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_client() -> GenerativeClient:
    """The provider client for this request. 503 when none is configured."""
    if claude_client is None:
        raise HTTPException(status_code=503, detail="Text-generation provider not configured")
    return claude_client


def get_settings() -> GenerationSettings:
    return settings


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(success=True, providerConfigured=claude_client is not None)


@app.get("/kinds", response_model=KindListResponse)
async def list_kinds() -> KindListResponse:
    """List the five generation kinds and their parameters."""
    kinds = [
        {
            "id": kid,
            "label": info["label"],
            "description": info["description"],
            "parameters": info["parameters"],
        }
        for kid, info in GENERATION_KINDS.items()
    ]
    return KindListResponse(success=True, data={"kinds": kinds, "total": len(kinds)})


@app.post("/generate", response_model=EngineResponse)
async def generate(
    body: GenerateRequest,
    client: GenerativeClient = Depends(get_client),
    request_settings: GenerationSettings = Depends(get_settings),
) -> Any:
    """Generate one record for the given profile and request."""
    kind = body.request.kind
    logger.info("Generate request: kind='%s', profile='%s'", kind, body.profile.id or "anonymous")

    try:
        record = await synthesize(client, body.profile, body.request, settings=request_settings)
    except GenerationError as exc:
        logger.error("Generation failed for %s: %s", exc.kind, exc.message)
        failed = EngineResponse(success=False, error=exc.message, kind=exc.kind or kind)
        return JSONResponse(status_code=502, content=failed.model_dump())

    logger.info("Generated %s record %s", kind, record.id)
    return EngineResponse(
        success=True,
        data=record.model_dump(mode="json", by_alias=True),
        kind=kind,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("engine.synthesis_engine:app", host="0.0.0.0", port=ENGINE_PORT, reload=True)
