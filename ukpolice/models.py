"""Records returned by data.police.uk.

Field names follow the upstream JSON; hyphenated keys are exposed with
underscores and accept either spelling. Every field is optional because the
API freely returns nulls or omits keys.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Street(Record):
    id: Optional[int] = None
    name: Optional[str] = None


class Location(Record):
    """Shared by crimes, searches, boundaries and neighbourhood locations."""

    latitude: Optional[str] = None
    longitude: Optional[str] = None

    # crime and stop-and-search records
    street: Optional[Street] = None

    # neighbourhood records
    name: Optional[str] = None
    postcode: Optional[str] = None
    address: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None


class AvailabilityInfo(Record):
    date: Optional[str] = None
    stop_and_search: List[str] = Field(default_factory=list, alias="stop-and-search")


# ----------------
# Crime
# ----------------
class Crime(Record):
    id: Optional[int] = None
    persistent_id: Optional[str] = None
    category: Optional[str] = None
    month: Optional[str] = None
    context: Optional[str] = None
    location_type: Optional[str] = None
    location_subtype: Optional[str] = None
    location: Optional[Location] = None
    outcome_status: Optional[Dict[str, Optional[str]]] = None


class OutcomeCategory(Record):
    code: Optional[str] = None
    name: Optional[str] = None


class Outcome(Record):
    category: Optional[OutcomeCategory] = None
    date: Optional[str] = None
    person_id: Optional[int] = None
    crime: Optional[Crime] = None


class CrimeCategory(Record):
    url: Optional[str] = None
    name: Optional[str] = None


class LastUpdated(Record):
    date: Optional[str] = None


class CrimeOutcomes(Record):
    """A single crime together with every outcome recorded against it."""

    crime: Optional[Crime] = None
    outcomes: List[Outcome] = Field(default_factory=list)


# ----------------
# Forces
# ----------------
class EngagementMethod(Record):
    url: Optional[str] = None
    description: Optional[str] = None
    title: Optional[str] = None


class Force(Record):
    id: Optional[str] = None
    name: Optional[str] = None
    telephone: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    engagement_methods: List[EngagementMethod] = Field(default_factory=list)


class SeniorOfficer(Record):
    name: Optional[str] = None
    rank: Optional[str] = None
    bio: Optional[str] = None
    contact_details: Dict[str, Optional[str]] = Field(default_factory=dict)


# ----------------
# Neighbourhoods
# ----------------
class Neighbourhood(Record):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    population: Optional[str] = None
    url_force: Optional[str] = None
    contact_details: Dict[str, Optional[str]] = Field(default_factory=dict)
    links: List[Dict[str, Optional[str]]] = Field(default_factory=list)
    centre: Optional[Location] = None
    locations: List[Location] = Field(default_factory=list)

    # only set by locate-neighbourhood
    force: Optional[str] = None
    neighbourhood: Optional[str] = None


class NeighbourhoodTeamMember(Record):
    name: Optional[str] = None
    rank: Optional[str] = None
    bio: Optional[str] = None
    contact_details: Dict[str, Optional[str]] = Field(default_factory=dict)


class NeighbourhoodEvent(Record):
    title: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    type: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    contact_details: Dict[str, Optional[str]] = Field(default_factory=dict)


class NeighbourhoodPriority(Record):
    issue: Optional[str] = None
    issue_date: Optional[str] = Field(default=None, alias="issue-date")
    action: Optional[str] = None
    action_date: Optional[str] = Field(default=None, alias="action-date")


# ----------------
# Stop and search
# ----------------
class OutcomeObject(Record):
    id: Optional[str] = None
    name: Optional[str] = None


class Search(Record):
    type: Optional[str] = None
    datetime: Optional[str] = None
    involved_person: Optional[bool] = None
    gender: Optional[str] = None
    age_range: Optional[str] = None
    self_defined_ethnicity: Optional[str] = None
    officer_defined_ethnicity: Optional[str] = None
    legislation: Optional[str] = None
    object_of_search: Optional[str] = None
    # a string on most records, occasionally false or an object
    outcome: Any = None
    outcome_object: Optional[OutcomeObject] = None
    outcome_linked_to_object_of_search: Optional[bool] = None
    removal_of_more_than_outer_clothing: Optional[bool] = None
    operation: Optional[bool] = None
    operation_name: Optional[str] = None
    location: Optional[Location] = None
