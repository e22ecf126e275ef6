"""Building the ordered list of navigation entries for a format."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Optional, Sequence, Union

from navii.models import City, Country, Nav, NavFormat, Query, State, Zip

UNKNOWN_PLACEHOLDER = "Unknown"
PLACEHOLDER_SEPARATOR = "##"

_Source = Literal["zip", "city", "state", "county", "query"]


@dataclass(frozen=True)
class _Spec:
    """What one navigation format draws its entries from and which fields it fills."""

    source: _Source
    needs_query: bool = False
    with_country_short: bool = False
    with_state: bool = False


_SPECS: dict[NavFormat, _Spec] = {
    NavFormat.ZIP: _Spec("zip"),
    NavFormat.ZIP_COUNTRY: _Spec("zip", with_country_short=True),
    NavFormat.QUERY_ZIP: _Spec("zip", needs_query=True),
    NavFormat.QUERY_ZIP_COUNTRY: _Spec("zip", needs_query=True, with_country_short=True),
    NavFormat.CITY: _Spec("city"),
    NavFormat.CITY_STATE: _Spec("city", with_state=True),
    NavFormat.CITY_STATE_COUNTRY: _Spec("city", with_state=True, with_country_short=True),
    NavFormat.QUERY_CITY: _Spec("city", needs_query=True),
    NavFormat.QUERY_CITY_STATE: _Spec("city", needs_query=True, with_state=True),
    NavFormat.QUERY_CITY_STATE_COUNTRY: _Spec(
        "city", needs_query=True, with_state=True, with_country_short=True
    ),
    NavFormat.STATE: _Spec("state"),
    NavFormat.STATE_COUNTRY: _Spec("state", with_country_short=True),
    NavFormat.QUERY_STATE: _Spec("state", needs_query=True),
    NavFormat.QUERY_STATE_COUNTRY: _Spec("state", needs_query=True, with_country_short=True),
    NavFormat.QUERY_COUNTY: _Spec("county", needs_query=True),
    NavFormat.QUERY: _Spec("query", needs_query=True),
    NavFormat.COUNTY: _Spec("county"),
}


def _find_state(state_short: str, states: Iterable[State]) -> Optional[State]:
    return next((s for s in states if s.state_short == state_short), None)


def nav_entries(
    nav_format: Union[NavFormat, str],
    query: Optional[Query],
    country: Country,
    states: Sequence[State],
    cities: Sequence[City],
    zips: Sequence[Zip],
) -> list[Nav]:
    """Return the entries one country (and optionally one query) contributes to a format."""
    spec = _SPECS[NavFormat(nav_format)]
    if spec.needs_query and query is None:
        return []

    code = country.country_short
    base = {
        "query": query.query if spec.needs_query and query is not None else None,
        "country": code,
        "country_short": code if spec.with_country_short else None,
    }

    if spec.source == "zip":
        return [Nav(zip=z.zip, **base) for z in zips]
    if spec.source == "state":
        return [Nav(state=s.state, state_short=s.state_short, **base) for s in states]
    if spec.source == "county":
        return [Nav(county=c.county, **base) for c in cities if c.county is not None]
    if spec.source == "city":
        entries = []
        for city in cities:
            if not spec.with_state:
                entries.append(Nav(city=city.city, **base))
                continue
            state = _find_state(city.state_short, states)
            if state is not None:
                entries.append(
                    Nav(city=city.city, state=state.state, state_short=state.state_short, **base)
                )
        return entries
    return [Nav(**base)]


def generate_nav_order(
    nav_format: Union[NavFormat, str],
    countries: Iterable[Country],
    states: Sequence[State],
    cities: Sequence[City],
    zips: Sequence[Zip],
    queries: Sequence[Query],
) -> list[Nav]:
    """Return every navigation entry, country by country and query by query."""
    fmt = NavFormat(nav_format)
    per_query: Sequence[Optional[Query]] = list(queries) if fmt.is_query_format() else [None]
    order: list[Nav] = []
    for country in countries:
        code = country.country_short
        country_states = [s for s in states if s.country_short == code]
        country_cities = [c for c in cities if c.country_short == code]
        country_zips = [z for z in zips if z.country_short == code]
        for query in per_query:
            order.extend(
                nav_entries(fmt, query, country, country_states, country_cities, country_zips)
            )
    return order


def generate_placeholder(nav: Nav) -> str:
    """Return the query and the most specific place of an entry, joined by "##"."""
    parts = []
    if nav.query is not None:
        parts.append(nav.query)
    place = next(
        (v for v in (nav.city, nav.zip, nav.state, nav.county) if v is not None), None
    )
    if place is not None:
        parts.append(place)
    return PLACEHOLDER_SEPARATOR.join(parts) if parts else UNKNOWN_PLACEHOLDER


def _matches(value: Optional[str], other: Optional[str]) -> bool:
    return value == other if value is not None and other is not None else (
        value is None and other is None
    )


def nav_matches(
    nav: Nav,
    country: Optional[Country],
    query: Optional[Query],
    zip_code: Optional[Zip],
    city: Optional[City],
    state: Optional[State],
) -> bool:
    """True when each field of the entry agrees with the given entity, both absent or equal."""
    return (
        _matches(nav.query, query.query if query is not None else None)
        and _matches(nav.zip, zip_code.zip if zip_code is not None else None)
        and _matches(nav.city, city.city if city is not None else None)
        and _matches(nav.state, state.state if state is not None else None)
        and _matches(nav.country, country.country_short if country is not None else None)
    )