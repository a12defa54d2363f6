"""
modules/planning/orchestrator.py
---------------------------------
Itinerary generation pipeline:

  1. Validate the profile              (no provider call before this)
  2. Skeleton from the language model  (SkeletonGenerator, repaired)
  3. Clock times per day               (time_slots.assign_times)
  4. Real places per activity          (PlaceResolver, strictly sequential)
  5. Geographic reorder + travel times (GeoSequencer)
  6. One trip-wide hotel               (PlaceResolver, kind=hotel)
  7. Persist profile + itinerary       (SessionStores.save_trip, only on success)

Per-activity enrichment never aborts the trip. A failed skeleton call or save
aborts the whole run as GenerationError, as does any unexpected error, and
nothing is stored.
"""

from __future__ import annotations

import logging
import time as _time_mod
from datetime import datetime, timezone
from typing import Optional

from tipi import config
from tipi.db.store import SessionStores, StoreError
from tipi.google_places_client import GooglePlacesClient
from tipi.llm import LLMClient, LLMError
from tipi.modules.observability.logger import StructuredLogger
from tipi.modules.planning.geo_sequencer import GeoSequencer
from tipi.modules.planning.skeleton_generator import SkeletonGenerator
from tipi.modules.planning.time_slots import assign_times
from tipi.modules.tool_usage.place_resolver import PlaceResolver
from tipi.schemas.itinerary import ActivityKind, DayPlan, Itinerary, ResolvedActivity, Skeleton
from tipi.schemas.profile import TravelProfile

logger = logging.getLogger(__name__)

_RAW_RESPONSE_LIMIT = 2000


class GenerationError(RuntimeError):
    """Itinerary generation failed; the message is safe to show to users."""


class ItineraryOrchestrator:

    def __init__(
        self,
        llm: LLMClient,
        places: GooglePlacesClient,
        stores: SessionStores,
        event_logger: Optional[StructuredLogger] = None,
        delay_s: Optional[float] = None,
        geo_sequencing: Optional[bool] = None,
        recommend_hotel: Optional[bool] = None,
    ) -> None:
        self._delay_s = config.PLACES_REQUEST_DELAY_S if delay_s is None else delay_s
        self._skeletons = SkeletonGenerator(llm)
        self._resolver = PlaceResolver(places, delay_s=self._delay_s)
        self._sequencer = GeoSequencer(places, delay_s=self._delay_s)
        self._stores = stores
        self._events = event_logger or StructuredLogger()
        self._geo_sequencing = config.GEO_SEQUENCING_ENABLED if geo_sequencing is None else geo_sequencing
        self._recommend_hotel = (
            config.HOTEL_RECOMMENDATION_ENABLED if recommend_hotel is None else recommend_hotel
        )

    # ── public API ────────────────────────────────────────────────────────

    def generate(self, profile: TravelProfile) -> Itinerary:
        """Build, enrich and store an itinerary for ``profile``."""
        profile.validate()
        user_id = profile.user_id
        self._events.log(user_id, "GENERATION_START", profile.to_dict())
        started = _time_mod.perf_counter()

        try:
            itinerary = self._build(profile)
            self._stores.save_trip(profile, itinerary)
        except LLMError as exc:
            logger.error("Skeleton generation failed for %s: %s", user_id, exc)
            self._events.log(user_id, "GENERATION_FAILED", {"stage": "skeleton", "error": str(exc)})
            raise GenerationError(
                "The trip planner is unavailable right now. Please try again in a moment."
            ) from exc
        except StoreError as exc:
            logger.error("Saving the itinerary failed for %s: %s", user_id, exc)
            self._events.log(user_id, "GENERATION_FAILED", {"stage": "store", "error": str(exc)})
            raise GenerationError(
                "Your itinerary could not be saved right now. Please try again in a moment."
            ) from exc
        except Exception as exc:
            logger.exception("Itinerary generation failed for %s", user_id)
            self._events.log(user_id, "GENERATION_FAILED", {"stage": "pipeline", "error": str(exc)})
            raise GenerationError("Something went wrong while building your itinerary.") from exc

        self._events.log(user_id, "GENERATION_SUCCESS", {
            "days": len(itinerary.days),
            "activities": sum(len(d.activities) for d in itinerary.days),
            "resolved": len(itinerary.place_ids()),
            "elapsed_s": round(_time_mod.perf_counter() - started, 2),
        })
        return itinerary

    # ── pipeline ──────────────────────────────────────────────────────────

    def _build(self, profile: TravelProfile) -> Itinerary:
        skeleton = self._skeletons.generate(profile)
        if skeleton.raw_text is not None or skeleton.notices:
            self._events.log(profile.user_id, "SKELETON_REPAIRED", {
                "unparseable": skeleton.raw_text is not None,
                "notices": skeleton.notices,
            })

        days = self._timed_days(skeleton, profile)
        used: set[str] = set()
        self._enrich(days, profile, used)

        if self._geo_sequencing:
            for day in days:
                day.activities = self._sequencer.sequence_day(day.activities, profile.transportation)

        hotel = self._hotel(profile, used) if self._recommend_hotel else None

        return Itinerary(
            destination=profile.destination,
            days=days,
            summary=skeleton.summary or f"{profile.days}-day trip to {profile.destination}",
            hotel=hotel,
            notices=list(skeleton.notices),
            raw_response=skeleton.raw_text[:_RAW_RESPONSE_LIMIT] if skeleton.raw_text else None,
            generated_at=datetime.now(timezone.utc).isoformat(),
        )

    def _timed_days(self, skeleton: Skeleton, profile: TravelProfile) -> list[DayPlan]:
        """Trim surplus days, assign times and renumber by position."""
        days = []
        for index, day in enumerate(skeleton.days[: profile.days]):
            days.append(
                DayPlan(
                    number=index + 1,
                    area=day.area,
                    activities=assign_times(day.activities, profile.pacing),
                )
            )
        return days

    def _enrich(self, days: list[DayPlan], profile: TravelProfile, used: set[str]) -> None:
        first = True
        for day in days:
            for activity in day.activities:
                if not first:
                    self._pause()
                first = False
                try:
                    found = self._resolver.enrich(activity, profile, used)
                except Exception:
                    logger.exception("Enrichment failed for %r on day %d", activity.category, day.number)
                    found = False
                if not found:
                    self._events.log(profile.user_id, "PLACE_UNRESOLVED", {
                        "day": day.number,
                        "kind": activity.kind.value,
                        "category": activity.category,
                    })

    def _hotel(self, profile: TravelProfile, used: set[str]) -> Optional[ResolvedActivity]:
        hotel = ResolvedActivity(
            name=f"{profile.accommodation or 'Hotel'} stay".strip(),
            kind=ActivityKind.hotel,
            category=" ".join(p for p in (profile.accommodation, "hotel") if p),
            notes="Base for the whole trip",
        )
        self._pause()
        try:
            found = self._resolver.enrich(hotel, profile, used)
        except Exception:
            logger.exception("Hotel lookup failed for %s", profile.destination)
            found = False
        return hotel if found else None

    def _pause(self) -> None:
        if self._delay_s > 0:
            _time_mod.sleep(self._delay_s)
