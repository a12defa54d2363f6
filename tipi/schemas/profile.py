"""
schemas/profile.py
------------------
The traveller's submitted preferences. Immutable for the lifetime of one
generation request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional


class ProfileValidationError(ValueError):
    """Raised when a profile cannot be used to plan a trip."""


# Pacing tiers and the aliases accepted from clients
PACING_TIERS: tuple[str, ...] = ("relaxed", "balanced", "fast-paced")
_PACING_ALIASES: dict[str, str] = {
    "relaxed":    "relaxed",
    "slow":       "relaxed",
    "balanced":   "balanced",
    "moderate":   "balanced",
    "medium":     "balanced",
    "fast-paced": "fast-paced",
    "fast paced": "fast-paced",
    "fast":       "fast-paced",
    "packed":     "fast-paced",
}


def normalize_pacing(value: Optional[str]) -> str:
    key = (value or "").strip().lower().replace("_", "-")
    return _PACING_ALIASES.get(key, _PACING_ALIASES.get(key.replace("-", " "), "balanced"))


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _parse_days(value: Any) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class TravelProfile:
    """
    User-submitted preferences.

    experiences is a tuple of lower-cased tags ("culture", "nightlife", ...).
    days is 0 when the client sent something that is not an integer; validate()
    rejects it.
    """
    user_id: str
    destination: str
    days: int
    experiences: tuple[str, ...] = field(default_factory=tuple)
    dietary: str = ""
    transportation: str = ""
    accommodation: str = ""
    budget: str = ""
    pacing: str = "balanced"
    avoid: str = ""
    must_see: str = ""

    @classmethod
    def from_request(
        cls,
        *,
        user_id: Any,
        destination: Any,
        days: Any,
        experiences: Optional[Iterable[Any]] = None,
        dietary: Any = "",
        transportation: Any = "",
        accommodation: Any = "",
        budget: Any = "",
        pacing: Any = "",
        avoid: Any = "",
        must_see: Any = "",
    ) -> "TravelProfile":
        tags = tuple(
            dict.fromkeys(_clean(t).lower() for t in (experiences or []) if _clean(t))
        )
        return cls(
            user_id=_clean(user_id) or "anonymous",
            destination=_clean(destination),
            days=_parse_days(days),
            experiences=tags,
            dietary=_clean(dietary),
            transportation=_clean(transportation),
            accommodation=_clean(accommodation),
            budget=_clean(budget),
            pacing=normalize_pacing(_clean(pacing)),
            avoid=_clean(avoid),
            must_see=_clean(must_see),
        )

    @property
    def wants_nightlife(self) -> bool:
        return "nightlife" in self.experiences

    @property
    def dietary_tag(self) -> str:
        """Dietary restriction usable inside a search query ("" when none)."""
        if self.dietary.lower() in ("", "none", "no restrictions", "no restriction", "n/a"):
            return ""
        return self.dietary

    def validate(self) -> None:
        if not self.destination:
            raise ProfileValidationError("Please choose a destination.")
        if self.days < 1:
            raise ProfileValidationError("Trip length must be at least one day.")
        if not self.experiences:
            raise ProfileValidationError("Please select at least one experience.")

    def to_dict(self) -> dict:
        return {
            "userId":         self.user_id,
            "destination":    self.destination,
            "days":           self.days,
            "experiences":    list(self.experiences),
            "dietary":        self.dietary,
            "transportation": self.transportation,
            "accommodation":  self.accommodation,
            "budget":         self.budget,
            "pacing":         self.pacing,
            "avoid":          self.avoid,
            "mustSee":        self.must_see,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TravelProfile":
        return cls.from_request(
            user_id=data.get("userId"),
            destination=data.get("destination"),
            days=data.get("days"),
            experiences=data.get("experiences") or [],
            dietary=data.get("dietary"),
            transportation=data.get("transportation"),
            accommodation=data.get("accommodation"),
            budget=data.get("budget"),
            pacing=data.get("pacing"),
            avoid=data.get("avoid"),
            must_see=data.get("mustSee"),
        )
