# ukpolice/resources.py
"""
Resource table for data.police.uk and the per-family service groupings.

Every upstream resource differs only in its path template and result shape,
so the client dispatches on ENDPOINTS; the service classes are thin,
discoverable wrappers around Client.get().
"""
from __future__ import annotations

import datetime as dt
import string
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional, Tuple, Union, get_origin
from urllib.parse import quote

from .models import (
    AvailabilityInfo, Crime, CrimeCategory, CrimeOutcomes, Force, LastUpdated,
    Location, Neighbourhood, NeighbourhoodEvent, NeighbourhoodPriority,
    NeighbourhoodTeamMember, Outcome, Search, SeniorOfficer,
)
from .options import Option, with_date, with_query

if TYPE_CHECKING:
    from .client import Client


@dataclass(frozen=True)
class Endpoint:
    name: str
    path: str           # relative to the base URL, str.format placeholders
    result: Any         # pydantic-decodable target type

    @property
    def many(self) -> bool:
        return get_origin(self.result) is list

    def format_path(self, **params: str) -> str:
        missing = [k for k in self.placeholders if k not in params]
        if missing:
            raise TypeError(f"{self.name} needs path parameter(s): {', '.join(missing)}")
        return self.path.format(**{k: quote(str(v), safe="") for k, v in params.items()})

    @property
    def placeholders(self) -> Tuple[str, ...]:
        return tuple(f for _, f, _, _ in string.Formatter().parse(self.path) if f)


_TABLE = [
    # availability
    Endpoint("availability", "crimes-street-dates", List[AvailabilityInfo]),
    # crime
    Endpoint("street_level_crimes", "crimes-street/all-crime", List[Crime]),
    Endpoint("street_level_outcomes", "outcomes-at-location", List[Outcome]),
    Endpoint("crimes_at_location", "crimes-at-location", List[Crime]),
    Endpoint("crimes_no_location", "crimes-no-location", List[Crime]),
    Endpoint("crime_categories", "crime-categories", List[CrimeCategory]),
    Endpoint("crime_last_updated", "crime-last-updated", LastUpdated),
    Endpoint("outcomes_for_crime", "outcomes-for-crime/{persistent_id}", CrimeOutcomes),
    # forces
    Endpoint("forces", "forces", List[Force]),
    Endpoint("force", "forces/{force}", Force),
    Endpoint("force_people", "forces/{force}/people", List[SeniorOfficer]),
    # neighbourhoods
    Endpoint("neighbourhoods", "{force}/neighbourhoods", List[Neighbourhood]),
    Endpoint("neighbourhood", "{force}/{neighbourhood_id}", Neighbourhood),
    Endpoint("neighbourhood_boundary", "{force}/{neighbourhood_id}/boundary", List[Location]),
    Endpoint("neighbourhood_team", "{force}/{neighbourhood_id}/people", List[NeighbourhoodTeamMember]),
    Endpoint("neighbourhood_events", "{force}/{neighbourhood_id}/events", List[NeighbourhoodEvent]),
    Endpoint("neighbourhood_priorities", "{force}/{neighbourhood_id}/priorities", List[NeighbourhoodPriority]),
    Endpoint("locate_neighbourhood", "locate-neighbourhood", Neighbourhood),
    # stop and search
    Endpoint("stops_street", "stops-street", List[Search]),
    Endpoint("stops_at_location", "stops-at-location", List[Search]),
    Endpoint("stops_no_location", "stops-no-location", List[Search]),
    Endpoint("stops_force", "stops-force", List[Search]),
]

ENDPOINTS = {e.name: e for e in _TABLE}


def get_endpoint(name: str) -> Endpoint:
    try:
        return ENDPOINTS[name]
    except KeyError:
        raise ValueError(f"unknown resource {name!r}") from None


class _Service:
    def __init__(self, api: "Client") -> None:
        self._api = api


class AvailabilityService(_Service):
    def availability(self, **kw) -> List[AvailabilityInfo]:
        """Months with street-level data, and the forces with stop-and-search data for each."""
        return self._api.get("availability", **kw)


class CrimeService(_Service):
    """Street-level crimes and outcomes.

    Location-based calls take exactly one of with_lat_lng / with_polygon /
    with_location_id, optionally combined with with_date.
    """

    def street_level_crimes(self, *options: Option, **kw) -> List[Crime]:
        return self._api.get("street_level_crimes", *options, **kw)

    def street_level_outcomes(self, *options: Option, **kw) -> List[Outcome]:
        return self._api.get("street_level_outcomes", *options, **kw)

    def crimes_at_location(self, *options: Option, **kw) -> List[Crime]:
        """Crimes at the nearest predefined location rather than within a radius."""
        return self._api.get("crimes_at_location", *options, **kw)

    def crimes_no_location(self, *options: Option, **kw) -> List[Crime]:
        """Crimes a force could not map to a location. with_force is mandatory upstream."""
        return self._api.get("crimes_no_location", *options, **kw)

    def categories(self, date: Union[str, dt.date, None] = None, **kw) -> List[CrimeCategory]:
        options = [with_date(date)] if date else []
        return self._api.get("crime_categories", *options, **kw)

    def last_updated(self, **kw) -> Optional[LastUpdated]:
        return self._api.get("crime_last_updated", **kw)

    def outcomes_for_crime(self, persistent_id: str, **kw) -> Optional[CrimeOutcomes]:
        return self._api.get("outcomes_for_crime", persistent_id=persistent_id, **kw)


class ForceService(_Service):
    def forces(self, **kw) -> List[Force]:
        return self._api.get("forces", **kw)

    def force(self, force: str, **kw) -> Optional[Force]:
        return self._api.get("force", force=force, **kw)

    def senior_officers(self, force: str, **kw) -> List[SeniorOfficer]:
        return self._api.get("force_people", force=force, **kw)


class NeighbourhoodService(_Service):
    def neighbourhoods(self, force: str, **kw) -> List[Neighbourhood]:
        return self._api.get("neighbourhoods", force=force, **kw)

    def neighbourhood(self, force: str, neighbourhood_id: str, **kw) -> Optional[Neighbourhood]:
        return self._api.get("neighbourhood", force=force, neighbourhood_id=neighbourhood_id, **kw)

    def boundary(self, force: str, neighbourhood_id: str, **kw) -> List[Location]:
        return self._api.get("neighbourhood_boundary", force=force, neighbourhood_id=neighbourhood_id, **kw)

    def team(self, force: str, neighbourhood_id: str, **kw) -> List[NeighbourhoodTeamMember]:
        return self._api.get("neighbourhood_team", force=force, neighbourhood_id=neighbourhood_id, **kw)

    def events(self, force: str, neighbourhood_id: str, **kw) -> List[NeighbourhoodEvent]:
        return self._api.get("neighbourhood_events", force=force, neighbourhood_id=neighbourhood_id, **kw)

    def priorities(self, force: str, neighbourhood_id: str, **kw) -> List[NeighbourhoodPriority]:
        return self._api.get("neighbourhood_priorities", force=force, neighbourhood_id=neighbourhood_id, **kw)

    def locate(self, latitude: Union[str, float], longitude: Union[str, float], **kw) -> Optional[Neighbourhood]:
        """Force and neighbourhood id responsible for a point."""
        return self._api.get("locate_neighbourhood", with_query(f"{latitude},{longitude}"), **kw)


class StopAndSearchService(_Service):
    def by_area(self, *options: Option, **kw) -> List[Search]:
        """Within a 1 mile radius of a point, or within a polygon."""
        return self._api.get("stops_street", *options, **kw)

    def by_location(self, *options: Option, **kw) -> List[Search]:
        return self._api.get("stops_at_location", *options, **kw)

    def no_location(self, *options: Option, **kw) -> List[Search]:
        return self._api.get("stops_no_location", *options, **kw)

    def by_force(self, *options: Option, **kw) -> List[Search]:
        return self._api.get("stops_force", *options, **kw)
