"""
modules/conversation/chat_handler.py
-------------------------------------
Follow-up chat grounded on the user's stored profile and itinerary.

The system turn carries the profile and a size-bounded JSON dump of the
itinerary; the user's message goes in as its own turn. The model's reply is
returned verbatim. An unreachable store degrades to the "unknown" placeholders.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional

from tipi import config
from tipi.db.store import SessionStores, StoreError
from tipi.llm import LLMClient, LLMError
from tipi.modules.observability.logger import StructuredLogger

logger = logging.getLogger(__name__)

CHAT_FALLBACK_MESSAGE = "Sorry, I couldn't reach the travel assistant. Please try again in a moment."
NO_ITINERARY = "No itinerary available yet."
UNKNOWN = "unknown"

_PROFILE_FIELDS: tuple[tuple[str, str], ...] = (
    ("destination",    "Destination"),
    ("days",           "Trip length (days)"),
    ("experiences",    "Experiences"),
    ("dietary",        "Dietary"),
    ("transportation", "Transportation"),
    ("accommodation",  "Accommodation"),
    ("budget",         "Budget"),
    ("pacing",         "Pace"),
    ("avoid",          "Avoid"),
    ("mustSee",        "Must-see"),
)


@dataclass
class ChatResult:
    success: bool
    response: Optional[str] = None
    error: Optional[str] = None


def _profile_lines(profile: Optional[dict], destination: Optional[str]) -> str:
    profile = profile or {}
    lines = []
    for key, label in _PROFILE_FIELDS:
        value = profile.get(key)
        if key == "destination" and not value:
            value = destination
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        lines.append(f"- {label}: {value if value not in (None, '') else UNKNOWN}")
    return "\n".join(lines)


def build_system_prompt(
    profile: Optional[dict],
    itinerary: Optional[dict],
    destination: Optional[str] = None,
    char_budget: Optional[int] = None,
) -> str:
    budget = config.CHAT_ITINERARY_CHAR_BUDGET if char_budget is None else char_budget
    if itinerary:
        itinerary_text = json.dumps(itinerary, ensure_ascii=False)[:budget]
    else:
        itinerary_text = NO_ITINERARY
    return (
        "You are a helpful travel assistant.\n\n"
        f"User profile:\n{_profile_lines(profile, destination)}\n\n"
        f"Itinerary:\n{itinerary_text}\n\n"
        "Reply naturally and help with follow-up questions about this trip."
    )


class ConversationHandler:

    def __init__(
        self,
        llm: LLMClient,
        stores: SessionStores,
        event_logger: Optional[StructuredLogger] = None,
    ) -> None:
        self._llm = llm
        self._stores = stores
        self._events = event_logger or StructuredLogger()

    def reply(self, user_id: str, message: str, destination: Optional[str] = None) -> ChatResult:
        """Answer ``message`` for ``user_id``. Never raises on model or store failure."""
        message = (message or "").strip()
        if not message:
            return ChatResult(success=False, error="Please type a message.")

        try:
            profile = self._stores.profiles.get(user_id)
            itinerary = self._stores.load_itinerary_dict(user_id)
        except StoreError as exc:
            logger.warning("Session store unavailable for %s, answering ungrounded: %s", user_id, exc)
            profile, itinerary = None, None
        system = build_system_prompt(profile, itinerary, destination)

        try:
            text = self._llm.complete(
                message,
                system=system,
                temperature=config.CHAT_TEMPERATURE,
                max_output_tokens=config.CHAT_MAX_TOKENS,
            )
        except LLMError as exc:
            logger.error("Chat reply failed for %s: %s", user_id, exc)
            self._events.log(user_id, "CHAT_FAILED", {"error": str(exc)})
            return ChatResult(success=False, error=CHAT_FALLBACK_MESSAGE)

        self._events.log(user_id, "CHAT_REPLY", {
            "message_chars": len(message),
            "reply_chars": len(text),
            "grounded": itinerary is not None,
        })
        return ChatResult(success=True, response=text)
