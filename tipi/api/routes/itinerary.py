"""
api/routes/itinerary.py
------------------------
POST /generate-itinerary
GET  /itinerary/{user_id}

Runs the generation pipeline and returns the itinerary JSON. The result is
stored per user so /chat can answer follow-up questions about it.
"""

from __future__ import annotations

import logging
from typing import Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from tipi.api.dependencies import get_orchestrator, get_stores
from tipi.db.store import SessionStores, StoreError
from tipi.modules.planning.orchestrator import GenerationError, ItineraryOrchestrator
from tipi.schemas.itinerary import itinerary_to_dict
from tipi.schemas.profile import ProfileValidationError, TravelProfile

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request schema ─────────────────────────────────────────────────────────────

class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field("anonymous", alias="userId", description="Unique user identifier")
    destination: str = ""
    days: Union[int, str] = Field(1, description="Trip length in days")
    experiences: list[str] = Field(default_factory=list)
    dietary: str = ""
    transportation: str = ""
    accommodation: str = ""
    budget: str = ""
    pacing: str = "balanced"
    avoid: str = ""
    must_see: str = Field("", alias="mustSee")

    def to_profile(self) -> TravelProfile:
        return TravelProfile.from_request(
            user_id=self.user_id,
            destination=self.destination,
            days=self.days,
            experiences=self.experiences,
            dietary=self.dietary,
            transportation=self.transportation,
            accommodation=self.accommodation,
            budget=self.budget,
            pacing=self.pacing,
            avoid=self.avoid,
            must_see=self.must_see,
        )


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.post("/generate-itinerary", summary="Generate a full multi-day itinerary")
def generate_itinerary(
    req: GenerateRequest,
    orchestrator: ItineraryOrchestrator = Depends(get_orchestrator),
):
    profile = req.to_profile()
    try:
        profile.validate()
    except ProfileValidationError as exc:
        return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})

    try:
        itinerary = orchestrator.generate(profile)
    except GenerationError as exc:
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})

    return {"success": True, "itinerary": itinerary_to_dict(itinerary)}


@router.get("/itinerary/{user_id}", summary="Current itinerary for a user")
def get_itinerary(user_id: str, stores: SessionStores = Depends(get_stores)):
    try:
        data = stores.load_itinerary_dict(user_id)
    except StoreError as exc:
        logger.error("Itinerary lookup failed for %s: %s", user_id, exc)
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "Saved itineraries are unavailable right now."},
        )
    if data is None:
        return JSONResponse(
            status_code=404,
            content={"success": False, "error": "No itinerary found. Generate one first."},
        )
    return {"success": True, "itinerary": data}
