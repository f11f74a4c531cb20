"""Python client for the data.police.uk API."""
from .client import Client
from .config import DEFAULT_BASE_URL, DEFAULT_USER_AGENT
from .errors import (
    ApiError, Cancelled, DecodeError, OptionConflictError, Rate,
    RequestBuildError, UKPoliceError,
)
from .options import (
    Option, RequestSpec, build_query, with_crime_category, with_date,
    with_force, with_lat_lng, with_location_id, with_polygon,
)
from .rate_limit import RATE_LIMITER, RateLimiter

__all__ = [
    "Client", "DEFAULT_BASE_URL", "DEFAULT_USER_AGENT",
    "ApiError", "Cancelled", "DecodeError", "OptionConflictError", "Rate",
    "RequestBuildError", "UKPoliceError",
    "Option", "RequestSpec", "build_query", "with_crime_category", "with_date",
    "with_force", "with_lat_lng", "with_location_id", "with_polygon",
    "RATE_LIMITER", "RateLimiter",
]
