"""
main.py
--------
Command-line entry point: generate one itinerary and print it as JSON.

Run:
  python -m tipi.main --destination Lisbon --days 3 --experiences culture food nightlife

Requires GEMINI_API_KEY; without GOOGLE_PLACES_API_KEY the itinerary keeps its
category labels (no real places).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from tipi import config
from tipi.db.store import build_stores
from tipi.google_places_client import GooglePlacesClient
from tipi.llm import LLMClient
from tipi.modules.planning.orchestrator import GenerationError, ItineraryOrchestrator
from tipi.schemas.itinerary import Itinerary, itinerary_to_dict
from tipi.schemas.profile import ProfileValidationError, TravelProfile


def run_pipeline(profile: TravelProfile) -> Itinerary:
    """Generate with the configured providers and an in-memory store."""
    orchestrator = ItineraryOrchestrator(
        llm=LLMClient(),
        places=GooglePlacesClient(),
        stores=build_stores("in_memory"),
    )
    return orchestrator.generate(profile)


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a travel itinerary.")
    parser.add_argument("--destination", required=True)
    parser.add_argument("--days", type=int, default=3)
    parser.add_argument("--experiences", nargs="+", default=["culture"])
    parser.add_argument("--dietary", default="")
    parser.add_argument("--transportation", default="walking")
    parser.add_argument("--accommodation", default="")
    parser.add_argument("--budget", default="moderate")
    parser.add_argument("--pacing", default="balanced")
    parser.add_argument("--avoid", default="")
    parser.add_argument("--must-see", default="")
    parser.add_argument("--user-id", default="cli")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=config.LOG_LEVEL.upper(), format="%(levelname)s %(name)s: %(message)s")
    args = _parse_args(argv)
    profile = TravelProfile.from_request(
        user_id=args.user_id,
        destination=args.destination,
        days=args.days,
        experiences=args.experiences,
        dietary=args.dietary,
        transportation=args.transportation,
        accommodation=args.accommodation,
        budget=args.budget,
        pacing=args.pacing,
        avoid=args.avoid,
        must_see=args.must_see,
    )
    try:
        itinerary = run_pipeline(profile)
    except (ProfileValidationError, GenerationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(itinerary_to_dict(itinerary), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
