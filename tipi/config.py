"""
config.py
---------
Central configuration for the TIPI travel assistant.
All secrets loaded from environment variables, never hard-coded.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (if it exists). Won't override vars already
# set in the shell.
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ── LLM (Google Gemini) ───────────────────────────────────────────────────────
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
# Ordered model tiers: the first is tried, the next one on failure, and so on.
LLM_MODEL_TIERS: list[str] = [
    m.strip()
    for m in os.getenv("LLM_MODEL_TIERS", "gemini-2.0-flash,gemini-1.5-flash").split(",")
    if m.strip()
]
LLM_TIMEOUT_S: int = int(os.getenv("LLM_TIMEOUT_S", "60"))

# Skeleton output budget scales with trip length, capped by the provider
SKELETON_TEMPERATURE: float = float(os.getenv("SKELETON_TEMPERATURE", "0.2"))
SKELETON_BASE_TOKENS: int = int(os.getenv("SKELETON_BASE_TOKENS", "3000"))
SKELETON_TOKENS_PER_DAY: int = int(os.getenv("SKELETON_TOKENS_PER_DAY", "3000"))
SKELETON_MAX_TOKENS_CAP: int = int(os.getenv("SKELETON_MAX_TOKENS_CAP", "16000"))

# Chat
CHAT_TEMPERATURE: float = float(os.getenv("CHAT_TEMPERATURE", "0.7"))
CHAT_MAX_TOKENS: int = int(os.getenv("CHAT_MAX_TOKENS", "500"))
CHAT_ITINERARY_CHAR_BUDGET: int = int(os.getenv("CHAT_ITINERARY_CHAR_BUDGET", "2500"))

# ── Google Places / Directions ────────────────────────────────────────────────
# Enable: Places API + Directions API on the same key.
GOOGLE_PLACES_API_KEY: str = os.getenv("GOOGLE_PLACES_API_KEY", "") or os.getenv("GOOGLE_API_KEY", "")
PROVIDER_TIMEOUT_S: int = int(os.getenv("PROVIDER_TIMEOUT_S", "15"))
PLACES_MAX_RESULTS: int = int(os.getenv("PLACES_MAX_RESULTS", "20"))
PHOTO_MAX_WIDTH: int = int(os.getenv("PHOTO_MAX_WIDTH", "1400"))
# Pause between consecutive provider calls within one generation (seconds)
PLACES_REQUEST_DELAY_S: float = float(os.getenv("PLACES_REQUEST_DELAY_S", "0.2"))

# ── Pipeline toggles ──────────────────────────────────────────────────────────
GEO_SEQUENCING_ENABLED: bool = _flag("GEO_SEQUENCING_ENABLED", "true")
HOTEL_RECOMMENDATION_ENABLED: bool = _flag("HOTEL_RECOMMENDATION_ENABLED", "true")

# ── Session stores ────────────────────────────────────────────────────────────
STORE_BACKEND: str = os.getenv("STORE_BACKEND", "in_memory")    # "in_memory" | "redis"
REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))
REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")
SESSION_TTL: int = int(os.getenv("SESSION_TTL", "86400"))       # 24 hours

# ── Observability ─────────────────────────────────────────────────────────────
EVENT_LOG_ENABLED: bool = _flag("EVENT_LOG_ENABLED", "true")
LOGS_DIR: str = os.getenv("LOGS_DIR", "")                       # "" = <project>/logs
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

PORT: int = int(os.getenv("PORT", "3000"))
