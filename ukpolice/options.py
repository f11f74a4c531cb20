# ukpolice/options.py
"""
Query options accepted by the crime, outcome and stop-and-search calls.

Options are plain callables applied in order to a QueryParams accumulator.
The three location selectors (lat/lng point, polygon, location id) are
mutually exclusive: a selector refuses to write when a different one is
already present. Everything else combines freely and the last write wins.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, Sequence, Tuple, Union
from urllib.parse import urlencode

from .errors import OptionConflictError
from .utils import to_ym

# selector name -> keys it writes
LOCATION_SELECTORS: Dict[str, Tuple[str, ...]] = {
    "lat/lng": ("lat", "lng"),
    "poly": ("poly",),
    "location_id": ("location_id",),
}

Number = Union[str, int, float]
PolygonPoints = Union[str, Iterable[Tuple[Number, Number]]]


class QueryParams:
    """Accumulator of query parameters; absent keys read as ''."""

    def __init__(self) -> None:
        self._values: Dict[str, str] = {}

    def get(self, key: str) -> str:
        return self._values.get(key, "")

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def items(self):
        return self._values.items()

    def selector(self) -> str:
        """Name of the location selector already written, or ''."""
        for name, keys in LOCATION_SELECTORS.items():
            if any(k in self._values for k in keys):
                return name
        return ""

    def encode(self) -> str:
        return urlencode(sorted(self._values.items()))


Option = Callable[[QueryParams], None]


def _claim_selector(q: QueryParams, name: str) -> None:
    current = q.selector()
    if current and current != name:
        raise OptionConflictError(
            f"location selectors are mutually exclusive: {name} given after {current}"
        )


def with_date(date: Union[str, dt.date]) -> Option:
    """Restrict to one month ('YYYY-MM' or a date)."""
    value = to_ym(date)

    def apply(q: QueryParams) -> None:
        q.set("date", value)

    return apply


def with_lat_lng(latitude: Number, longitude: Number) -> Option:
    """Centre the request on a point. Location selector."""
    lat, lng = str(latitude), str(longitude)

    def apply(q: QueryParams) -> None:
        _claim_selector(q, "lat/lng")
        q.set("lat", lat)
        q.set("lng", lng)

    return apply


def format_polygon(points: PolygonPoints) -> str:
    if isinstance(points, str):
        return points
    return ":".join(f"{lat},{lng}" for lat, lng in points)


def with_polygon(points: PolygonPoints) -> Option:
    """Restrict to a custom area, either 'lat,lng:lat,lng:...' or (lat, lng) pairs. Location selector."""
    poly = format_polygon(points)

    def apply(q: QueryParams) -> None:
        _claim_selector(q, "poly")
        q.set("poly", poly)

    return apply


def with_location_id(location_id: Union[str, int]) -> Option:
    """Use one of the upstream's predefined locations. Location selector."""
    value = str(location_id)

    def apply(q: QueryParams) -> None:
        _claim_selector(q, "location_id")
        q.set("location_id", value)

    return apply


def with_crime_category(category: str) -> Option:
    def apply(q: QueryParams) -> None:
        q.set("category", category)

    return apply


def with_force(force: str) -> Option:
    def apply(q: QueryParams) -> None:
        q.set("force", force)

    return apply


def with_query(value: str) -> Option:
    # free-text 'q' parameter; only locate-neighbourhood uses it
    def apply(q: QueryParams) -> None:
        q.set("q", value)

    return apply


def apply_options(options: Sequence[Option]) -> QueryParams:
    q = QueryParams()
    for opt in options:
        opt(q)
    return q


@dataclass(frozen=True)
class RequestSpec:
    path: str
    query: str = ""

    @property
    def url(self) -> str:
        if not self.query:
            return self.path
        sep = "&" if "?" in self.path else "?"
        return f"{self.path}{sep}{self.query}"

    @classmethod
    def build(cls, path: str, *options: Option) -> "RequestSpec":
        return cls(path=path, query=apply_options(options).encode())


def build_query(path: str, *options: Option) -> str:
    """Apply options in order and join the encoded query to path.

    >>> build_query("stops-force", with_force("metropolitan"), with_date("2017-06"))
    'stops-force?date=2017-06&force=metropolitan'

    Raises OptionConflictError if two different location selectors are given.
    """
    return RequestSpec.build(path, *options).url
