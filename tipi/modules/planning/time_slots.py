"""
modules/planning/time_slots.py
-------------------------------
Deterministic clock-time assignment for one day.

Slot table:
    breakfast 08:00 | morning 09:30, 11:00 | lunch 12:30
    afternoon 14:00, 15:30, 17:00 | dinner 18:30 | night 20:00, 21:30

Rules (applied as a fold over the activities in model order):
  - one breakfast, one lunch, one dinner; later duplicates are dropped
  - an attraction before breakfast has no slot and is dropped
  - attractions after breakfast and before lunch fill the morning band,
    after lunch the afternoon band; overflow is dropped
  - night activities fill the night slots in arrival order
  - anything without a slot (hotel, overflow) is discarded

The pacing tier caps how many band slots are usable. The output is sorted by
time, so running the engine on its own output changes nothing.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import time
from typing import Iterable, Optional, Union

from tipi.schemas.itinerary import ActivityKind, ActivitySkeleton, ResolvedActivity

MEAL_SLOTS: dict[ActivityKind, time] = {
    ActivityKind.breakfast: time(8, 0),
    ActivityKind.lunch:     time(12, 30),
    ActivityKind.dinner:    time(18, 30),
}
MORNING_SLOTS: tuple[time, ...] = (time(9, 30), time(11, 0))
AFTERNOON_SLOTS: tuple[time, ...] = (time(14, 0), time(15, 30), time(17, 0))
NIGHT_SLOTS: tuple[time, ...] = (time(20, 0), time(21, 30))


@dataclass(frozen=True)
class PacingPolicy:
    morning: int
    afternoon: int
    night: int


# relaxed keeps the first slot of each band; the others use the full table
PACING_POLICIES: dict[str, PacingPolicy] = {
    "relaxed":    PacingPolicy(morning=1, afternoon=2, night=1),
    "balanced":   PacingPolicy(morning=2, afternoon=3, night=2),
    "fast-paced": PacingPolicy(morning=2, afternoon=3, night=2),
}


def policy_for(pacing: Optional[str]) -> PacingPolicy:
    return PACING_POLICIES.get(pacing or "", PACING_POLICIES["balanced"])


@dataclass
class SlotState:
    """Per-day progress through the slot table."""
    meals_seen: set[ActivityKind] = field(default_factory=set)
    morning: int = 0
    afternoon: int = 0
    night: int = 0


def next_slot(state: SlotState, kind: ActivityKind, policy: PacingPolicy) -> Optional[time]:
    """Claim the slot for one activity of ``kind``; None means it is dropped."""
    if kind.is_meal:
        if kind in state.meals_seen:
            return None
        state.meals_seen.add(kind)
        return MEAL_SLOTS[kind]

    if kind is ActivityKind.attraction:
        if ActivityKind.breakfast not in state.meals_seen:
            return None
        if ActivityKind.lunch not in state.meals_seen:
            if state.morning >= min(policy.morning, len(MORNING_SLOTS)):
                return None
            state.morning += 1
            return MORNING_SLOTS[state.morning - 1]
        if state.afternoon >= min(policy.afternoon, len(AFTERNOON_SLOTS)):
            return None
        state.afternoon += 1
        return AFTERNOON_SLOTS[state.afternoon - 1]

    if kind is ActivityKind.night:
        if state.night >= min(policy.night, len(NIGHT_SLOTS)):
            return None
        state.night += 1
        return NIGHT_SLOTS[state.night - 1]

    return None


def _as_resolved(activity: Union[ActivitySkeleton, ResolvedActivity], slot: time) -> ResolvedActivity:
    if isinstance(activity, ResolvedActivity):
        return replace(activity, time=slot)
    return ResolvedActivity(
        name=activity.category or activity.kind.value.title(),
        kind=activity.kind,
        category=activity.category,
        notes=activity.notes,
        time=slot,
    )


def assign_times(
    activities: Iterable[Union[ActivitySkeleton, ResolvedActivity]],
    pacing: Optional[str] = "balanced",
) -> list[ResolvedActivity]:
    """Return the timed activities of one day, sorted by clock time."""
    policy = policy_for(pacing)
    state = SlotState()
    timed: list[ResolvedActivity] = []
    for activity in activities:
        slot = next_slot(state, activity.kind, policy)
        if slot is not None:
            timed.append(_as_resolved(activity, slot))
    # sorted() is stable: equal times keep model order
    return sorted(timed, key=lambda a: a.time)
