from tipi.schemas.itinerary import (
    ActivityKind,
    ActivitySkeleton,
    DayPlan,
    DaySkeleton,
    Itinerary,
    ResolvedActivity,
    Skeleton,
    itinerary_from_dict,
    itinerary_to_dict,
)
from tipi.schemas.profile import ProfileValidationError, TravelProfile

__all__ = [
    "ActivityKind",
    "ActivitySkeleton",
    "DayPlan",
    "DaySkeleton",
    "Itinerary",
    "ProfileValidationError",
    "ResolvedActivity",
    "Skeleton",
    "TravelProfile",
    "itinerary_from_dict",
    "itinerary_to_dict",
]
