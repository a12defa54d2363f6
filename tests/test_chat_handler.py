import json
from unittest.mock import MagicMock

import redis

from conftest import FakeLLM
from tipi.db.store import RedisStore, SessionStores
from tipi.llm import LLMError
from tipi.modules.conversation.chat_handler import (
    CHAT_FALLBACK_MESSAGE,
    NO_ITINERARY,
    ConversationHandler,
    build_system_prompt,
)
from tipi.schemas.itinerary import ActivityKind, DayPlan, Itinerary, ResolvedActivity


def _itinerary():
    activity = ResolvedActivity(name="Time Out Market", kind=ActivityKind.lunch, category="food hall")
    return Itinerary(destination="Lisbon", summary="Tiles and tascas", days=[DayPlan(1, "Baixa", [activity])])


def test_prompt_without_state_uses_placeholders():
    prompt = build_system_prompt(None, None)
    assert "- Destination: unknown" in prompt
    assert "- Dietary: unknown" in prompt
    assert NO_ITINERARY in prompt


def test_prompt_falls_back_to_request_destination():
    assert "- Destination: Porto" in build_system_prompt(None, None, destination="Porto")


def test_prompt_embeds_profile_and_itinerary(profile):
    itinerary = {"destination": "Lisbon", "days": [{"day": 1, "activities": []}]}
    prompt = build_system_prompt(profile.to_dict(), itinerary)
    assert "- Experiences: nightlife, culture" in prompt
    assert "- Pace: balanced" in prompt
    assert json.dumps(itinerary) in prompt


def test_itinerary_dump_is_truncated():
    itinerary = {"blob": "x" * 10_000}
    prompt = build_system_prompt(None, itinerary, char_budget=100)
    dumped = prompt.split("Itinerary:\n", 1)[1].split("\n\n", 1)[0]
    assert len(dumped) == 100


def test_reply_is_grounded_and_verbatim(profile, stores, events):
    stores.save_profile(profile)
    stores.save_itinerary(profile.user_id, _itinerary())
    llm = FakeLLM("  Try the pastéis de nata.  ")
    result = ConversationHandler(llm, stores, events).reply("user-1", "Where should I eat?")

    assert result.success
    assert result.response == "  Try the pastéis de nata.  "
    call = llm.calls[0]
    assert call["prompt"] == "Where should I eat?"
    assert "Time Out Market" in call["system"]
    assert "- Destination: Lisbon" in call["system"]
    assert call["max_output_tokens"] == 500


def test_reply_without_stored_state_still_answers(stores, events):
    llm = FakeLLM("Happy to help!")
    result = ConversationHandler(llm, stores, events).reply("nobody", "hi", destination="Rome")
    assert result.success
    assert NO_ITINERARY in llm.calls[0]["system"]
    assert "- Destination: Rome" in llm.calls[0]["system"]


def test_model_failure_returns_fallback(stores, events, tmp_path):
    result = ConversationHandler(FakeLLM(error=LLMError("down")), stores, events).reply("user-1", "hello")
    assert not result.success
    assert result.error == CHAT_FALLBACK_MESSAGE
    lines = (tmp_path / "logs" / "user-1.jsonl").read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[-1])["event_type"] == "CHAT_FAILED"


def test_empty_message_makes_no_model_call(stores, events):
    llm = FakeLLM("unused")
    result = ConversationHandler(llm, stores, events).reply("user-1", "   ")
    assert not result.success
    assert llm.calls == []


def test_chat_sees_latest_itinerary(profile, stores, events):
    stores.save_itinerary(profile.user_id, _itinerary())
    newer = _itinerary()
    newer.summary = "Second plan"
    stores.save_itinerary(profile.user_id, newer)
    llm = FakeLLM("ok")
    ConversationHandler(llm, stores, events).reply("user-1", "what's the plan?")
    assert "Second plan" in llm.calls[0]["system"]
    assert "Tiles and tascas" not in llm.calls[0]["system"]


def test_store_outage_answers_with_placeholders(events):
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("redis down")
    stores = SessionStores(RedisStore("p", client=client), RedisStore("i", client=client))
    llm = FakeLLM("Still here to help.")

    result = ConversationHandler(llm, stores, events).reply("user-1", "hi", destination="Porto")
    assert result.success
    assert result.response == "Still here to help."
    assert NO_ITINERARY in llm.calls[0]["system"]
    assert "- Destination: Porto" in llm.calls[0]["system"]
    assert "- Dietary: unknown" in llm.calls[0]["system"]
