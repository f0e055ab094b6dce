"""
Pytest configuration and fixtures for testing the KFlow API.

This module provides:
- Test client fixture for FastAPI app
- A scripted stand-in for the LLM gateway so no test reaches OpenAI
- Sample concept fixtures
- Environment variable overrides to prevent real API calls and log writes
"""
import json
import pytest
import os
from fastapi.testclient import TestClient
from typing import Any, Dict, List, Union

# Override environment variables before anything reads config
os.environ.setdefault("OPENAI_API_KEY", "test-key-sk-1234567890")
os.environ.setdefault("ENABLE_OPERATION_EVENT_LOG", "false")

# Import app after env vars are set
from main import app  # noqa: E402
from models import Concept  # noqa: E402
from services_llm import LLMRequest, LLMResponse  # noqa: E402


@pytest.fixture
def test_app():
    return app


@pytest.fixture
def client(test_app):
    """
    Create a test client for the FastAPI app.

    Set raise_server_exceptions=False so that exceptions are caught by
    exception handlers and returned as responses (matching production behavior),
    rather than being raised and causing tests to fail.
    """
    return TestClient(test_app, raise_server_exceptions=False)


class FakeLLM:
    """Deterministic stand-in for LLMGateway.complete.

    Replies are consumed in order. A reply that is an Exception is raised
    instead of returned; a list/dict reply is sent back as JSON text.
    """

    def __init__(self):
        self.requests: List[LLMRequest] = []
        self.replies: List[Union[str, Exception, list, dict]] = []

    def reply_with(self, *replies: Union[str, Exception, list, dict]) -> "FakeLLM":
        self.replies.extend(replies)
        return self

    @property
    def last_request(self) -> LLMRequest:
        return self.requests[-1]

    async def __call__(self, request: LLMRequest) -> LLMResponse:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError("FakeLLM called with no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if not isinstance(reply, str):
            reply = json.dumps(reply)
        return LLMResponse(content=reply)


@pytest.fixture
def fake_llm(monkeypatch):
    """Patch the gateway singleton so operations get scripted replies."""
    import services_llm

    fake = FakeLLM()
    monkeypatch.setattr(services_llm.llm_gateway, "complete", fake)
    return fake


@pytest.fixture
def event_log_dir(tmp_path, monkeypatch):
    """Enable the JSONL operation log and point it at a temp directory."""
    import config

    monkeypatch.setattr(config, "ENABLE_OPERATION_EVENT_LOG", True)
    monkeypatch.setattr(config, "OPERATION_LOG_DIR", tmp_path / "logs")
    return tmp_path / "logs"


@pytest.fixture
def machine_learning():
    return Concept(
        name="Machine Learning",
        description="Algorithms that learn patterns from data.",
        parents=["Artificial Intelligence"],
        children=["Supervised Learning"],
        layer=1,
    )


@pytest.fixture
def sample_concept_data() -> Dict[str, Any]:
    """Plain-dict concept, as sent over HTTP."""
    return {
        "name": "Linear Algebra",
        "description": "Vectors, matrices and linear maps.",
        "parents": ["Mathematics"],
        "children": [],
    }
