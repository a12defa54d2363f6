"""
modules/planning/skeleton_generator.py
---------------------------------------
Asks the language model for a category-only schedule and repairs whatever
comes back into a Skeleton with the requested number of days.

The model never names real places. It returns place *categories*
("rooftop bar", "vegan breakfast café"), which the place resolver later turns
into real venues. It does not assign times either; the time-slot engine does.

repair_skeleton() is deterministic and total: any string in, a Skeleton out.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from tipi import config
from tipi.llm import LLMClient
from tipi.modules.planning.time_slots import policy_for
from tipi.schemas.itinerary import ActivityKind, ActivitySkeleton, DaySkeleton, Skeleton
from tipi.schemas.profile import TravelProfile

logger = logging.getLogger(__name__)


# ── Experience tag → category vocabulary ──────────────────────────────────────
EXPERIENCE_CATEGORIES: dict[str, list[str]] = {
    "culture":    ["historical museum", "heritage landmark", "art gallery", "cultural center"],
    "nightlife":  ["rooftop bar", "music lounge", "nightclub", "live music venue", "cocktail bar"],
    "adventure":  ["hiking trail", "zipline park", "water sports", "adventure park"],
    "shopping":   ["shopping district", "premium mall", "local market", "boutique stores"],
    "nature":     ["national park", "botanical garden", "scenic viewpoint", "beach"],
    "food":       ["food market", "cooking class", "food tour", "local specialty restaurant"],
    "relaxation": ["spa", "public garden", "waterfront promenade", "tea house"],
    "history":    ["historic site", "castle", "war memorial", "old town walking route"],
    "art":        ["art museum", "street art district", "contemporary gallery", "design museum"],
    "family":     ["aquarium", "zoo", "science museum", "amusement park"],
    "romance":    ["sunset viewpoint", "river cruise", "wine bar", "scenic garden"],
}

# Default category text when the model leaves placeCategory empty
_DEFAULT_CATEGORY: dict[ActivityKind, str] = {
    ActivityKind.breakfast:  "breakfast café",
    ActivityKind.lunch:      "local restaurant",
    ActivityKind.dinner:     "dinner restaurant",
    ActivityKind.attraction: "popular tourist attraction",
    ActivityKind.night:      "evening entertainment venue",
    ActivityKind.hotel:      "hotel",
}

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

# Unparseable replies are surfaced as the summary, cut to this length
_FALLBACK_SUMMARY_CHARS = 500
UNREADABLE_NOTICE = "The planner's reply could not be read, so every day follows a standard plan."


# ─────────────────────────────────────────────────────────────────────────────
# Prompt
# ─────────────────────────────────────────────────────────────────────────────

def max_output_tokens(days: int) -> int:
    budget = config.SKELETON_BASE_TOKENS + max(days, 1) * config.SKELETON_TOKENS_PER_DAY
    return min(config.SKELETON_MAX_TOKENS_CAP, budget)


def _vocabulary_lines(experiences: tuple[str, ...]) -> str:
    lines = []
    for tag in experiences:
        categories = EXPERIENCE_CATEGORIES.get(tag)
        if categories:
            lines.append(f'   If user selected "{tag}": → ' + ", ".join(f'"{c}"' for c in categories))
        else:
            lines.append(f'   If user selected "{tag}": → categories that clearly match "{tag}"')
    return "\n".join(lines)


def _schema_example(profile: TravelProfile) -> str:
    diet = profile.dietary_tag
    night = "rooftop bar" if profile.wants_nightlife else "evening entertainment venue"
    example = {
        "days": [
            {
                "day": 1,
                "area": "Area name for Day 1",
                "activities": [
                    {"activityType": "breakfast", "placeCategory": f"{diet} breakfast café".strip(), "notes": "Why this fits the user"},
                    {"activityType": "attraction", "placeCategory": "art museum", "notes": "Aligns with culture preference"},
                    {"activityType": "lunch", "placeCategory": "local restaurant", "notes": "Dietary match"},
                    {"activityType": "attraction", "placeCategory": "scenic viewpoint", "notes": "Afternoon activity"},
                    {"activityType": "dinner", "placeCategory": "fine dining restaurant", "notes": "Budget appropriate"},
                    {"activityType": "night activity", "placeCategory": night, "notes": "Evening experience"},
                ],
            }
        ],
        "summary": f"Short overview of the {profile.days}-day trip",
    }
    return json.dumps(example, indent=2, ensure_ascii=False)


def build_prompt(profile: TravelProfile) -> str:
    days = profile.days
    policy = policy_for(profile.pacing)
    if profile.wants_nightlife:
        night_rule = (
            f"   • Night activities ({min(2, policy.night)}) - NIGHTLIFE IS SELECTED: bars, clubs, "
            "live music, rooftop venues, night markets"
        )
    else:
        night_rule = "   • Night activity (1) - an evening show, night market or scenic night view"
    per_day = 3 + policy.morning + policy.afternoon + (min(2, policy.night) if profile.wants_nightlife else 1)

    return f"""
You are a world-class travel planner.

CRITICAL: You MUST generate EXACTLY {days} day objects in the "days" array:
day 1, day 2, ... up to day {days}. No more, no fewer.

DO NOT invent place names. The backend fills real places from Google Maps.
You ONLY output place CATEGORIES.

STRICT RULES:

1. Each day stays in ONE AREA / NEIGHBORHOOD of {profile.destination}
   (e.g. "Paris Left Bank"). Use a different area on each day.

2. Follow the user's preferences EXACTLY:
   Destination: {profile.destination}
   Experiences: {", ".join(profile.experiences)}
   Dietary: {profile.dietary or "None"}
   Avoid: {profile.avoid or "None"}
   Must-See: {profile.must_see or "None"}
   Pace: {profile.pacing}
   Budget: {profile.budget or "Any"}
   Transportation: {profile.transportation or "Any"}
   Accommodation: {profile.accommodation or "Any"}

3. DAILY STRUCTURE (for EACH of the {days} days, {per_day} activities, in this order):
   • Breakfast (1)
   • Morning attractions ({policy.morning})
   • Lunch (1)
   • Afternoon attractions ({policy.afternoon})
   • Dinner (1)
{night_rule}

4. Allowed activityType values:
   "breakfast", "lunch", "dinner", "attraction", "night activity"

5. Use the user's experiences to choose categories:
{_vocabulary_lines(profile.experiences)}

6. Never repeat the same type of attraction within a day.
7. Meal categories must respect the dietary restriction.
8. DO NOT assign times. The backend assigns them.

OUTPUT FORMAT (JSON only, ALL {days} DAYS):
{_schema_example(profile)}

RETURN ONLY JSON. NO EXPLANATIONS. NO MARKDOWN.
"""


# ─────────────────────────────────────────────────────────────────────────────
# Repair
# ─────────────────────────────────────────────────────────────────────────────

def parse_model_json(raw: str) -> Optional[Any]:
    """Strip code fences and parse; None when no JSON can be recovered."""
    text = _FENCE_RE.sub("", raw or "").strip().strip("`").strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        match = _OBJECT_RE.search(text)
        if match:
            try:
                return json.loads(match.group())
            except json.JSONDecodeError:
                pass
    return None


def template_day(number: int, profile: TravelProfile) -> DaySkeleton:
    """Fixed 8-slot day used to pad short or empty model output."""
    diet = profile.dietary_tag
    night = (
        ("rooftop bar", "nightlife")
        if profile.wants_nightlife
        else ("evening entertainment venue", "evening activity")
    )

    def meal(kind: ActivityKind) -> ActivitySkeleton:
        return ActivitySkeleton(
            kind=kind,
            category=f"{diet} {kind.value} restaurant".strip(),
            notes=f"Day {number} {kind.value}",
        )

    return DaySkeleton(
        number=number,
        area=f"{profile.destination} - Day {number} Area",
        activities=[
            meal(ActivityKind.breakfast),
            ActivitySkeleton(ActivityKind.attraction, "popular tourist attraction", f"Day {number} morning activity 1"),
            ActivitySkeleton(ActivityKind.attraction, "historic landmark", f"Day {number} morning activity 2"),
            meal(ActivityKind.lunch),
            ActivitySkeleton(ActivityKind.attraction, "cultural center", f"Day {number} afternoon activity 1"),
            ActivitySkeleton(ActivityKind.attraction, "scenic viewpoint", f"Day {number} afternoon activity 2"),
            meal(ActivityKind.dinner),
            ActivitySkeleton(ActivityKind.night, night[0], f"Day {number} {night[1]}"),
        ],
    )


def _parse_activity(item: Any) -> Optional[ActivitySkeleton]:
    if not isinstance(item, dict):
        return None
    kind = ActivityKind.parse(item.get("activityType") or item.get("type"))
    category = str(item.get("placeCategory") or item.get("category") or "").strip()
    return ActivitySkeleton(
        kind=kind,
        category=category or _DEFAULT_CATEGORY[kind],
        notes=str(item.get("notes") or "").strip(),
    )


def _day_sort_key(indexed: tuple[int, dict]) -> tuple[int, float, int]:
    position, day = indexed
    try:
        return (0, float(day.get("day")), position)
    except (TypeError, ValueError):
        return (1, 0.0, position)


def _parse_days(data: Any) -> list[DaySkeleton]:
    raw_days = data.get("days") if isinstance(data, dict) else None
    if not isinstance(raw_days, list):
        return []
    dict_days = [d for d in raw_days if isinstance(d, dict)]
    days = []
    for _, day in sorted(enumerate(dict_days), key=_day_sort_key):
        activities = day.get("activities")
        if not isinstance(activities, list):
            activities = []
        area = day.get("area")
        days.append(
            DaySkeleton(
                number=0,
                area=str(area).strip() if area else None,
                activities=[a for a in map(_parse_activity, activities) if a is not None],
            )
        )
    return days


def repair_skeleton(raw: str, profile: TravelProfile) -> Skeleton:
    """Parse and repair model output into exactly-shaped days (never raises)."""
    requested = max(profile.days, 1)
    data = parse_model_json(raw)
    skeleton = Skeleton()

    if data is None:
        logger.warning("Model output is not valid JSON; building the itinerary from the template")
        skeleton.raw_text = raw
        skeleton.summary = (raw or "").strip()[:_FALLBACK_SUMMARY_CHARS] or None
        skeleton.notices.append(UNREADABLE_NOTICE)
    elif isinstance(data, dict) and isinstance(data.get("summary"), str):
        skeleton.summary = data["summary"].strip() or None

    days = _parse_days(data)

    for i, day in enumerate(days):
        if not day.activities:
            days[i] = template_day(i + 1, profile)

    if len(days) < requested:
        logger.warning(
            "Only %d of %d days generated; filling the rest from the template",
            len(days), requested,
        )
        days.extend(template_day(n, profile) for n in range(len(days) + 1, requested + 1))
    elif len(days) > requested:
        logger.warning("Model produced %d days but %d were requested", len(days), requested)
        skeleton.notices.append(
            f"The planner produced {len(days)} days but {requested} were requested; "
            f"only the first {requested} are shown."
        )

    for index, day in enumerate(days):
        day.number = index + 1
        if not day.area:
            day.area = f"{profile.destination} - Day {day.number}"

    skeleton.days = days
    return skeleton


# ─────────────────────────────────────────────────────────────────────────────
# Generator
# ─────────────────────────────────────────────────────────────────────────────

class SkeletonGenerator:
    """Prompt → model → repaired Skeleton. LLMError propagates to the caller."""

    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    def generate(self, profile: TravelProfile) -> Skeleton:
        raw = self._llm.complete(
            build_prompt(profile),
            temperature=config.SKELETON_TEMPERATURE,
            max_output_tokens=max_output_tokens(profile.days),
        )
        return repair_skeleton(raw, profile)
