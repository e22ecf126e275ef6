"""Walking through navigation entries with progress kept in the database."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from navii.db import DEFAULT_DB_PATH, Database
from navii.location import get_location_data
from navii.models import (
    COMPLETED,
    City,
    Country,
    InitOptions,
    Nav,
    NavFormat,
    NavResponse,
    NavSession,
    PageNav,
    Query,
    State,
    Zip,
    page_from_json,
    page_to_json,
)
from navii.navigation import generate_nav_order, generate_placeholder, nav_matches


@dataclass
class NewCity:
    """A city supplied from outside, together with its state."""

    city: str
    state: str
    state_short: str
    country_short: str


@dataclass
class NewState:
    """A state supplied from outside."""

    state: str
    state_short: str
    country_short: str
    county: Optional[str] = None


@dataclass
class NewCountry:
    """A country supplied from outside."""

    country: str
    country_short: str


def _split_key(key: str, separator: str) -> Optional[tuple[str, str]]:
    parts = key.split(separator)
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


class StateManager:
    """Keeps track of the current navigation entry and moves through the rest."""

    def __init__(self, db_path: str = "") -> None:
        self.db = Database(db_path or DEFAULT_DB_PATH)
        self.format: Optional[NavFormat] = None
        self.target_country = "all"
        self._current_nav: Optional[NavResponse] = None
        self._countries: list[Country] = []
        self._states: list[State] = []
        self._cities: list[City] = []
        self._zips: list[Zip] = []
        self._queries: list[Query] = []
        self._current_index = 0
        self._nav_order: list[Nav] = []

    @property
    def nav_order(self) -> list[Nav]:
        """The navigation entries in the order they are visited."""
        return list(self._nav_order)

    @property
    def current_index(self) -> int:
        return self._current_index

    # -- setup -----------------------------------------------------------

    def init(self, options: InitOptions) -> None:
        """Load the data for a format and country, then restore or start a session."""
        self.format = NavFormat(options.format)
        self.target_country = options.target_country
        self._set_default()
        self._load_places()
        self._zips = self.db.get_zips([c.country_short for c in self._countries])
        self._queries = self.db.get_queries()
        self._current_index = 0
        self._generate_nav_order()
        self._restore_or_start_session()

    def _set_default(self) -> None:
        """Fill an empty database from the location data file."""
        if self.db.count_total() > 0:
            return

        data = get_location_data()
        countries: list[Country] = []
        states: list[State] = []
        cities: list[City] = []

        for country_key, state_map in data.city_data.items():
            country_parts = _split_key(country_key, "#")
            if country_parts is None:
                continue
            country_short, country_name = country_parts
            countries.append(Country(country=country_name, country_short=country_short))
            for state_key, city_names in state_map.items():
                state_parts = _split_key(state_key, "##")
                if state_parts is None:
                    continue
                state_short, state_name = state_parts
                states.append(
                    State(state=state_name, state_short=state_short, country_short=country_short)
                )
                cities.extend(
                    City(city=name, state_short=state_short, country_short=country_short)
                    for name in city_names
                )

        zips = [
            Zip(zip=code, country_short=country_short)
            for country_short, codes in data.zip_data.items()
            for code in codes
        ]

        self.db.add_countries(countries, False)
        self.db.add_states(states, False)
        self.db.add_cities(cities, False)
        self.db.add_zips(zips, False)

    def _load_places(self) -> None:
        self._countries = self.db.get_countries(self.target_country)
        country_shorts = [c.country_short for c in self._countries]
        self._states = self.db.get_states(country_shorts)
        self._cities = self.db.get_cities(
            country_shorts, [s.state_short for s in self._states]
        )

    def _generate_nav_order(self) -> None:
        if self.format is None:
            self._nav_order = []
            return
        self._nav_order = generate_nav_order(
            self.format, self._countries, self._states, self._cities, self._zips, self._queries
        )

    # -- lookups ---------------------------------------------------------

    def _find_country(self, country_short: Optional[str]) -> Optional[Country]:
        return next((c for c in self._countries if c.country_short == country_short), None)

    def _find_query(self, query_id: int) -> Optional[Query]:
        return next((q for q in self._queries if q.id == query_id), None)

    def _find_zip(self, zip_id: int) -> Optional[Zip]:
        return next((z for z in self._zips if z.id == zip_id), None)

    def _find_city(self, city_id: int) -> Optional[City]:
        return next((c for c in self._cities if c.id == city_id), None)

    def _find_state(self, state_short: str) -> Optional[State]:
        return next((s for s in self._states if s.state_short == state_short), None)

    def _find_query_by_text(self, text: str) -> Optional[Query]:
        return next((q for q in self._queries if q.query == text), None)

    def _find_zip_by_text(self, text: str) -> Optional[Zip]:
        return next((z for z in self._zips if z.zip == text), None)

    def _find_city_by_text(self, text: str) -> Optional[City]:
        return next((c for c in self._cities if c.city == text), None)

    # -- sessions --------------------------------------------------------

    def _restore_or_start_session(self) -> None:
        session = self.db.get_current_nav_session()
        if session is None:
            self._current_nav = self._build_nav_response_from_index(0)
            if self._current_nav is not None:
                self._save_current_session()
            return

        country = self._find_country(session.country_short)
        query = self._find_query(session.query_id) if session.query_id is not None else None
        zip_code = self._find_zip(session.zip_id) if session.zip_id is not None else None
        city = self._find_city(session.city_id) if session.city_id is not None else None
        state = (
            self._find_state(session.state_short) if session.state_short is not None else None
        )

        self._current_index = next(
            (
                index
                for index, nav in enumerate(self._nav_order)
                if nav_matches(nav, country, query, zip_code, city, state)
            ),
            0,
        )
        self._current_nav = self._build_nav_response(
            session, country, query, zip_code, city, state
        )

    def _build_nav_response(
        self,
        session: NavSession,
        country: Optional[Country],
        query: Optional[Query],
        zip_code: Optional[Zip],
        city: Optional[City],
        state: Optional[State],
    ) -> NavResponse:
        nav = Nav()
        if query is not None:
            nav.query = query.query
        if zip_code is not None:
            nav.zip = zip_code.zip
        if city is not None:
            nav.city = city.city
            nav.county = city.county
        if state is not None:
            nav.state = state.state
            nav.state_short = state.state_short
        if country is not None:
            nav.country = country.country
            nav.country_short = country.country_short

        return NavResponse(
            format=NavFormat(session.format),
            nav=nav,
            country=country.country_short if country is not None else "",
            placeholder=generate_placeholder(nav),
            page=page_from_json(session.page),
            has_next=self._current_index < len(self._nav_order) - 1,
        )

    def _build_nav_response_from_index(self, index: int) -> Optional[NavResponse]:
        if index >= len(self._nav_order) or self.format is None:
            return None
        nav = self._nav_order[index]
        country = self._find_country(nav.country)
        return NavResponse(
            format=self.format,
            nav=nav,
            country=country.country_short if country is not None else "",
            placeholder=generate_placeholder(nav),
            page=None,
            has_next=index < len(self._nav_order) - 1,
        )

    def _save_current_session(self) -> None:
        current = self._current_nav
        if current is None:
            return

        country = self._find_country(current.country)
        if country is None:
            raise LookupError(f"unknown country for navigation entry: {current.country!r}")
        nav = current.nav
        query = self._find_query_by_text(nav.query) if nav.query is not None else None
        zip_code = self._find_zip_by_text(nav.zip) if nav.zip is not None else None
        city = self._find_city_by_text(nav.city) if nav.city is not None else None
        state = self._find_state(nav.state_short) if nav.state_short is not None else None

        session = NavSession(
            format=current.format.value,
            country_short=country.country_short,
            query_id=query.id if query is not None else None,
            zip_id=zip_code.id if zip_code is not None else None,
            city_id=city.id if city is not None else None,
            state_short=state.state_short if state is not None else None,
            page=page_to_json(current.page),
            completed=False,
            external=True,
        )
        self.db.save_nav_session(session)
        self.db.mark_entities_used(country, query, zip_code, city, state)

    # -- navigation ------------------------------------------------------

    def get_nav(self) -> Optional[NavResponse]:
        """Return the current navigation entry."""
        return self._current_nav

    def get_current_nav(self) -> Optional[NavResponse]:
        """Return the current navigation entry."""
        return self._current_nav

    def get_next_nav(self) -> Optional[NavResponse]:
        """Move on once the current entry is complete; until then return it unchanged."""
        session = self.db.get_current_nav_session()
        if session is not None and not session.completed:
            return self._current_nav

        self._current_index += 1
        self._current_nav = self._build_nav_response_from_index(self._current_index)
        if self._current_nav is not None:
            self._save_current_session()
        return self._current_nav

    def set_page_nav(self, total_pages: int, pages: Sequence[int]) -> None:
        """Record how many pages the current entry has and which are done."""
        if self._current_nav is None:
            return
        page_nav = PageNav(pages=list(pages), total=total_pages)
        self._current_nav.page = page_nav
        session = self.db.get_current_nav_session()
        if session is not None:
            self.db.update_nav_session(session.id, {"page": page_to_json(page_nav)})

    def mark_page_as_done(self, page: int) -> None:
        """Mark one page done; the entry completes when every page is done."""
        current = self._current_nav
        if current is None or current.page == COMPLETED:
            return
        if not isinstance(current.page, PageNav):
            return
        if page in current.page.pages:
            return

        page_nav = PageNav(pages=sorted([*current.page.pages, page]), total=current.page.total)
        current.page = page_nav

        session = self.db.get_current_nav_session()
        if session is None:
            return
        self.db.update_nav_session(session.id, {"page": page_to_json(page_nav)})
        if len(page_nav.pages) == page_nav.total:
            self.mark_complete()

    def mark_complete(self) -> None:
        """Mark the current session as completed."""
        session = self.db.get_current_nav_session()
        if session is None:
            return
        self.db.update_nav_session(session.id, {"completed": True})
        if self._current_nav is not None:
            self._current_nav.page = COMPLETED

    def reset_nav(self) -> None:
        """Forget all sessions and start again from the first entry."""
        self.db.reset_nav_sessions()
        self._current_index = 0
        self._current_nav = None
        self._restore_or_start_session()

    # -- queries ---------------------------------------------------------

    def add_search_queries(self, queries: Iterable[str]) -> None:
        """Store search queries and rebuild the navigation order."""
        queries = list(queries)
        if not queries:
            return
        self.db.add_queries(queries, True)
        self._queries = self.db.get_queries()
        self._generate_nav_order()

    def add_search_query(self, query: str) -> None:
        """Store one search query; an empty one is ignored."""
        if not query:
            return
        self.add_search_queries([query])

    def clear_search_queries(self) -> None:
        """Delete the external search queries and rebuild the navigation order."""
        self.db.clear_queries()
        self._queries = []
        self._generate_nav_order()

    # -- places ----------------------------------------------------------

    def add_cities(self, cities: Iterable[NewCity]) -> None:
        """Store cities supplied from outside."""
        cities = list(cities)
        if not cities:
            return
        if any(
            not c.city or not c.state or not c.state_short or not c.country_short for c in cities
        ):
            raise ValueError("all cities must have city, state, stateShort, and countryShort")
        self.db.add_cities(
            [
                City(city=c.city, state_short=c.state_short, country_short=c.country_short,
                     external=True)
                for c in cities
            ],
            True,
        )
        self._refresh_data()

    def add_states(self, states: Iterable[NewState]) -> None:
        """Store states supplied from outside."""
        states = list(states)
        if not states:
            return
        if any(not s.state or not s.state_short or not s.country_short for s in states):
            raise ValueError("all states must have state, stateShort, and countryShort")
        self.db.add_states(
            [
                State(state=s.state, state_short=s.state_short, country_short=s.country_short,
                      external=True)
                for s in states
            ],
            True,
        )
        self._refresh_data()

    def add_countries(self, countries: Iterable[NewCountry]) -> None:
        """Store countries supplied from outside."""
        countries = list(countries)
        if not countries:
            return
        if any(not c.country_short or not c.country for c in countries):
            raise ValueError("all countries must have countryShort and country name")
        self.db.add_countries(
            [Country(country=c.country, country_short=c.country_short, external=True)
             for c in countries],
            True,
        )
        self._refresh_data()

    def _refresh_data(self) -> None:
        self._load_places()
        self._generate_nav_order()

    # -- maintenance -----------------------------------------------------

    def debug(self) -> None:
        """Print a summary of the manager's state."""
        fmt = self.format.value if self.format is not None else None
        print("StateManager Debug Info:")
        print(f"Format: {fmt}")
        print(f"TargetCountry: {self.target_country}")
        print(f"CurrentNav: {self._current_nav}")
        print(f"NavOrderLength: {len(self._nav_order)}")
        print(f"CurrentIndex: {self._current_index}")
        print(f"Queries: {len(self._queries)}")
        print(f"Countries: {len(self._countries)}")
        print(f"States: {len(self._states)}")
        print(f"Cities: {len(self._cities)}")
        print(f"Zips: {len(self._zips)}")

    def populate(self) -> None:
        """Store a small set of sample data."""
        self.db.add_countries(
            [Country(country="United States", country_short="US", external=True)], True
        )
        self.db.add_states(
            [State(state="California", state_short="CA", country_short="US", external=True)],
            True,
        )
        self.db.add_zips([Zip(zip="90001", country_short="US", external=True)], True)
        self.db.add_queries(["Realtor", "Restaurant"], True)
        self._generate_nav_order()

    def reset_database(self) -> None:
        """Clear usage flags and sessions, then reload the data."""
        self.db.reset_database()
        self._refresh_data()

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> "StateManager":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()