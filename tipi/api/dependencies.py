"""
api/dependencies.py
-------------------
Process-wide collaborators shared by the routes, built lazily on first use.
Tests swap them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from tipi.db.store import SessionStores, build_stores
from tipi.google_places_client import GooglePlacesClient
from tipi.llm import LLMClient
from tipi.modules.conversation.chat_handler import ConversationHandler
from tipi.modules.observability.logger import StructuredLogger
from tipi.modules.planning.orchestrator import ItineraryOrchestrator


@lru_cache(maxsize=1)
def get_stores() -> SessionStores:
    return build_stores()


@lru_cache(maxsize=1)
def get_llm() -> LLMClient:
    return LLMClient()


@lru_cache(maxsize=1)
def get_places() -> GooglePlacesClient:
    return GooglePlacesClient()


@lru_cache(maxsize=1)
def get_event_logger() -> StructuredLogger:
    return StructuredLogger()


def get_orchestrator() -> ItineraryOrchestrator:
    return ItineraryOrchestrator(
        llm=get_llm(),
        places=get_places(),
        stores=get_stores(),
        event_logger=get_event_logger(),
    )


def get_conversation_handler() -> ConversationHandler:
    return ConversationHandler(llm=get_llm(), stores=get_stores(), event_logger=get_event_logger())
