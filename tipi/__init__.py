"""TIPI travel assistant: LLM itinerary skeletons enriched with Google Places data."""

__version__ = "1.0.0"
