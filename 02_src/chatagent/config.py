"""Project-level configuration and path helpers."""

import os
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
CONTEXT_LOGS_DIR = LOGS_DIR / "contexts"
DEFAULT_DB_PATH = DATA_DIR / "chatagent.db"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_AGENT_ID = "00000000-0000-0000-0000-000000000000"
DEFAULT_AGENT_NAME = "Ada"
DEFAULT_LLM_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_MAX_ACTION_CHAIN = 3

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def agent_id() -> str:
    return os.getenv("AGENT_ID", DEFAULT_AGENT_ID)


def agent_name() -> str:
    return os.getenv("AGENT_NAME", DEFAULT_AGENT_NAME)


def llm_model() -> str:
    return os.getenv("LLM_MODEL", DEFAULT_LLM_MODEL)


def max_action_chain() -> int:
    return int(os.getenv("MAX_ACTION_CHAIN", str(DEFAULT_MAX_ACTION_CHAIN)))


def context_log_dir() -> Path | None:
    """Directory for per-call prompt logs, or None when CONTEXT_LOGGING is off."""
    if os.getenv("CONTEXT_LOGGING", "1").lower() in ("0", "false", "no"):
        return None
    return CONTEXT_LOGS_DIR
