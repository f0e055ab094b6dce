import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables in priority order:
# 1. backend/.env (lowest priority)
# 2. repo_root/.env (overrides backend)
# 3. repo_root/.env.local (highest priority - overrides everything)
repo_root = Path(__file__).parent.parent
env_local = repo_root / ".env.local"
env_file = repo_root / ".env"
backend_env = Path(__file__).parent / ".env"

if backend_env.exists():
    load_dotenv(dotenv_path=backend_env, override=False)
if env_file.exists():
    load_dotenv(dotenv_path=env_file, override=True)
if env_local.exists():
    load_dotenv(dotenv_path=env_local, override=True)

# -----------------------------------------------------------------------------
# LLM backend
# -----------------------------------------------------------------------------
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
# Optional OpenAI-compatible endpoint (proxy, local server)
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None

# Value shipped in .env.example; treated the same as a missing key
OPENAI_API_KEY_PLACEHOLDER = "your_openai_api_key_here"

# Default model for every concept operation; per-task overrides use MODEL_<TASK>
MODEL_CONCEPT_OPS = os.getenv("MODEL_CONCEPT_OPS", "gpt-4o-mini")

# Unset means "let the backend decide"
_max_tokens = os.getenv("LLM_MAX_TOKENS", "").strip()
LLM_MAX_TOKENS = int(_max_tokens) if _max_tokens else None

# -----------------------------------------------------------------------------
# Operation event log (JSONL)
# -----------------------------------------------------------------------------
ENABLE_OPERATION_EVENT_LOG = os.getenv("ENABLE_OPERATION_EVENT_LOG", "true").lower() in ("true", "1", "yes")
OPERATION_LOG_DIR = Path(os.getenv("OPERATION_LOG_DIR", str(Path(__file__).parent / "logs")))

# -----------------------------------------------------------------------------
# HTTP API
# -----------------------------------------------------------------------------
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]
