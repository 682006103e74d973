import os
import re
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .errors import InvalidAPIKeyError, MissingAPIKeyError
from .logging import get_logger

log = get_logger("config")

DEFAULT_MODEL = "gemini-2.0-flash"
# Gemini's OpenAI-compatible endpoint
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_TIMEOUT_SEC = 60.0

_API_KEY_RE = re.compile(r"\A[A-Za-z0-9_-]+\Z")


@dataclass(frozen=True)
class LLMSettings:
    api_key: str
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SEC


def load_env_file() -> Optional[str]:
    """Load the nearest .env (walking up from the cwd) without overriding the environment.

    Returns the path that was loaded, or None when no .env exists.
    """
    path = find_dotenv(usecwd=True)
    if not path:
        log.debug(f"No .env found starting from: {os.getcwd()}")
        return None
    load_dotenv(dotenv_path=path, override=False)
    log.debug(f"Loaded .env from {path}")
    return path


def load_gemini_key() -> Optional[str]:
    key = os.environ.get("GEMINI_API_KEY")
    if key is None or not key.strip():
        log.debug("GEMINI_API_KEY not found in env or .env")
        return None
    return key.strip()


def valid_api_key(key: Optional[str]) -> bool:
    """Reject keys pasted with quotes, line breaks or other stray characters."""
    if not key:
        return False
    if key[0] in "\"'" or key[-1] in "\"'":
        return False
    if "\n" in key or "\r" in key:
        return False
    return bool(_API_KEY_RE.match(key))


def llm_configured() -> bool:
    load_env_file()
    return valid_api_key(load_gemini_key())


def _float_env(name: str, fallback: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return fallback
    try:
        return float(raw)
    except ValueError:
        log.warning(f"{name}={raw!r} is not a number; using {fallback}")
        return fallback


def load_llm_settings() -> LLMSettings:
    """Build LLM settings from env/.env; raises ConfigurationError subclasses."""
    load_env_file()
    key = load_gemini_key()
    if key is None:
        raise MissingAPIKeyError("No API key configured. Set GEMINI_API_KEY")
    if not valid_api_key(key):
        raise InvalidAPIKeyError("Invalid API key format. Remove quotes and ensure no extra spaces.")
    model = (os.environ.get("POCKET_KNIFE_MODEL") or DEFAULT_MODEL).strip()
    base_url = (os.environ.get("POCKET_KNIFE_LLM_BASE_URL") or DEFAULT_BASE_URL).strip()
    timeout = _float_env("POCKET_KNIFE_LLM_TIMEOUT", DEFAULT_TIMEOUT_SEC)
    return LLMSettings(api_key=key, model=model, base_url=base_url, timeout=timeout)
