"""
Health check endpoints for monitoring system status.
"""

from fastapi import APIRouter

from services_llm import llm_gateway
import config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "ok", "service": "kflow-backend"}


@router.get("/llm")
async def llm_health_check():
    """Report whether an LLM backend is configured. Makes no network call."""
    return {
        "configured": llm_gateway.is_configured(),
        "default_model": config.MODEL_CONCEPT_OPS,
        "base_url": config.OPENAI_BASE_URL,
    }
