import os
import logging
from typing import Any, Dict, Optional

from openai import AsyncOpenAI
from pydantic import BaseModel

from config import (
    LLM_MAX_TOKENS,
    MODEL_CONCEPT_OPS,
    OPENAI_API_KEY,
    OPENAI_API_KEY_PLACEHOLDER,
    OPENAI_BASE_URL,
)
from errors import GatewayError

logger = logging.getLogger("kflow")

# Prefix on every backend failure so callers can tell "gateway failed" apart
# from "response malformed".
GATEWAY_ERROR_PREFIX = "LLM API call failed: "

# ---------------------------------------------------------------------------
# Task type constants, one per concept operation
# ---------------------------------------------------------------------------
TASK_EXPAND             = "expand"
TASK_EXPAND_LIST        = "expand_list"
TASK_SYNTHESIZE         = "synthesize"
TASK_DERIVE_PARENTS     = "derive_parents"
TASK_EXPLORE            = "explore"
TASK_REFOCUS            = "refocus"
TASK_VALIDATE_LINKS     = "validate_links"
TASK_TRACE_PATH         = "trace_path"
TASK_DERIVE_SUMMARY     = "derive_summary"
TASK_PROGRESSIVE_EXPAND = "progressive_expand"

# ---------------------------------------------------------------------------
# Model mapping: every task is overridable via MODEL_<TASK>.
# ---------------------------------------------------------------------------
DEFAULT_MODELS: Dict[str, str] = {
    task: os.getenv(f"MODEL_{task.upper()}", MODEL_CONCEPT_OPS)
    for task in (
        TASK_EXPAND,
        TASK_EXPAND_LIST,
        TASK_SYNTHESIZE,
        TASK_DERIVE_PARENTS,
        TASK_EXPLORE,
        TASK_REFOCUS,
        TASK_VALIDATE_LINKS,
        TASK_TRACE_PATH,
        TASK_DERIVE_SUMMARY,
        TASK_PROGRESSIVE_EXPAND,
    )
}


class LLMRequest(BaseModel):
    system_prompt: str
    user_prompt: str
    model: Optional[str] = None
    task_type: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


class LLMResponse(BaseModel):
    content: str
    raw: Any = None


def _clean_api_key(api_key: Optional[str]) -> Optional[str]:
    if not api_key:
        return None
    cleaned = api_key.strip().strip('"').strip("'")
    if not cleaned or cleaned == OPENAI_API_KEY_PLACEHOLDER:
        return None
    return cleaned


class LLMGateway:
    """Thin wrapper around OpenAI chat completions with task-based model routing."""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None) -> None:
        self.api_key = _clean_api_key(api_key)
        self.base_url = base_url
        self._client: Optional[AsyncOpenAI] = None
        if not self.api_key:
            logger.warning("[llm] OPENAI_API_KEY not set or invalid; concept operations will fail.")

    def is_configured(self) -> bool:
        return self.api_key is not None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise GatewayError(
                    "OpenAI API key not configured. Please set OPENAI_API_KEY in your environment variables."
                )
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    def get_model_for_task(self, task_type: Optional[str]) -> str:
        return DEFAULT_MODELS.get(task_type or "", MODEL_CONCEPT_OPS)

    async def complete(self, request: LLMRequest) -> LLMResponse:
        # Raises before any network attempt when no key is configured.
        client = self.client

        model = request.model or self.get_model_for_task(request.task_type)
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        max_tokens = request.max_tokens if request.max_tokens is not None else LLM_MAX_TOKENS
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        try:
            completion = await client.chat.completions.create(**kwargs)
        except Exception as e:
            logger.error(f"[llm] completion failed (task={request.task_type} model={model}): {e}")
            raise GatewayError(f"{GATEWAY_ERROR_PREFIX}{e}") from e

        content = ""
        if completion.choices:
            content = completion.choices[0].message.content or ""
        if not content:
            logger.error(f"[llm] empty completion (task={request.task_type} model={model})")
            raise GatewayError(f"{GATEWAY_ERROR_PREFIX}Empty response from LLM")

        return LLMResponse(content=content, raw=completion)


# Singleton, import this everywhere
llm_gateway = LLMGateway(api_key=OPENAI_API_KEY, base_url=OPENAI_BASE_URL)


async def call_llm(request: LLMRequest) -> LLMResponse:
    """Send a system/user prompt pair to the backend and return the raw text reply."""
    return await llm_gateway.complete(request)
