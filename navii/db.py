"""SQLite storage for places, search queries and navigation sessions."""

from __future__ import annotations

import sqlite3
from typing import Any, Iterable, Mapping, Optional, Sequence

from navii.models import City, Country, NavSession, Query, State, Zip

DEFAULT_DB_PATH = ".yuniq.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS countries (
    countryShort TEXT PRIMARY KEY,
    country TEXT NOT NULL,
    used BOOLEAN NOT NULL DEFAULT 0,
    external BOOLEAN NOT NULL DEFAULT 0,
    UNIQUE(country, countryShort)
);
CREATE INDEX IF NOT EXISTS idx_countries_countryShort ON countries(countryShort);

CREATE TABLE IF NOT EXISTS states (
    stateShort TEXT NOT NULL,
    state TEXT NOT NULL,
    countryShort TEXT NOT NULL,
    used BOOLEAN NOT NULL DEFAULT 0,
    external BOOLEAN NOT NULL DEFAULT 0,
    PRIMARY KEY (stateShort, countryShort),
    FOREIGN KEY (countryShort) REFERENCES countries(countryShort) ON DELETE CASCADE,
    UNIQUE(state, stateShort, countryShort)
);
CREATE INDEX IF NOT EXISTS idx_states_countryShort ON states(countryShort);

CREATE TABLE IF NOT EXISTS cities (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    city TEXT NOT NULL,
    stateShort TEXT NOT NULL,
    countryShort TEXT NOT NULL,
    county TEXT,
    used BOOLEAN NOT NULL DEFAULT 0,
    external BOOLEAN NOT NULL DEFAULT 0,
    FOREIGN KEY (stateShort, countryShort) REFERENCES states(stateShort, countryShort) ON DELETE CASCADE,
    FOREIGN KEY (countryShort) REFERENCES countries(countryShort) ON DELETE CASCADE,
    UNIQUE(city, stateShort, countryShort)
);
CREATE INDEX IF NOT EXISTS idx_cities_stateShort ON cities(stateShort, countryShort);
CREATE INDEX IF NOT EXISTS idx_cities_countryShort ON cities(countryShort);

CREATE TABLE IF NOT EXISTS zips (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    zip TEXT NOT NULL,
    countryShort TEXT NOT NULL,
    used BOOLEAN NOT NULL DEFAULT 0,
    external BOOLEAN NOT NULL DEFAULT 0,
    FOREIGN KEY (countryShort) REFERENCES countries(countryShort) ON DELETE CASCADE,
    UNIQUE(zip, countryShort)
);
CREATE INDEX IF NOT EXISTS idx_zips_countryShort ON zips(countryShort);

CREATE TABLE IF NOT EXISTS queries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    query TEXT NOT NULL UNIQUE,
    used BOOLEAN NOT NULL DEFAULT 0,
    external BOOLEAN NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS nav_sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    format TEXT NOT NULL,
    countryShort TEXT NOT NULL,
    queryId INTEGER,
    zipId INTEGER,
    cityId INTEGER,
    stateShort TEXT,
    page TEXT,
    completed BOOLEAN NOT NULL DEFAULT 0,
    external BOOLEAN NOT NULL DEFAULT 0,
    FOREIGN KEY (countryShort) REFERENCES countries(countryShort) ON DELETE CASCADE,
    FOREIGN KEY (queryId) REFERENCES queries(id) ON DELETE SET NULL,
    FOREIGN KEY (zipId) REFERENCES zips(id) ON DELETE SET NULL,
    FOREIGN KEY (cityId) REFERENCES cities(id) ON DELETE SET NULL,
    FOREIGN KEY (stateShort, countryShort) REFERENCES states(stateShort, countryShort) ON DELETE SET NULL
);
"""

_SESSION_FIELDS = (
    "id, format, countryShort, queryId, zipId, cityId, stateShort, page, completed, external"
)

# Column names accepted by update_nav_session, with snake_case aliases.
_SESSION_COLUMNS = {
    "format": "format",
    "countryShort": "countryShort",
    "country_short": "countryShort",
    "queryId": "queryId",
    "query_id": "queryId",
    "zipId": "zipId",
    "zip_id": "zipId",
    "cityId": "cityId",
    "city_id": "cityId",
    "stateShort": "stateShort",
    "state_short": "stateShort",
    "page": "page",
    "completed": "completed",
    "external": "external",
}


def _placeholders(count: int) -> str:
    return ",".join("?" * count)


def _session_from_row(row: Sequence[Any]) -> NavSession:
    (sid, fmt, country_short, query_id, zip_id, city_id,
     state_short, page, completed, external) = row
    return NavSession(
        id=sid,
        format=fmt,
        country_short=country_short,
        query_id=query_id,
        zip_id=zip_id,
        city_id=city_id,
        state_short=state_short,
        page=page or "",
        completed=bool(completed),
        external=bool(external),
    )


class Database:
    """A connection to the navigation database, with its tables created."""

    def __init__(self, db_path: str = "") -> None:
        self.path = db_path or DEFAULT_DB_PATH
        self._conn = sqlite3.connect(self.path)
        try:
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.execute("PRAGMA journal_mode = WAL")
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error:
            self._conn.close()
            raise

    # -- inserting -------------------------------------------------------

    def add_countries(self, countries: Iterable[Country], external: bool) -> None:
        """Insert countries, ignoring ones already stored."""
        countries = list(countries)
        if any(not c.country_short or not c.country for c in countries):
            raise ValueError("all countries must have countryShort and country")
        with self._conn:
            self._conn.executemany(
                "INSERT OR IGNORE INTO countries (countryShort, country, used, external) "
                "VALUES (?, ?, ?, ?)",
                [(c.country_short, c.country, c.used, external) for c in countries],
            )

    def add_states(self, states: Iterable[State], external: bool) -> None:
        """Insert states, ignoring ones already stored."""
        states = list(states)
        if any(not s.state_short or not s.state or not s.country_short for s in states):
            raise ValueError("all states must have stateShort, state, and countryShort")
        with self._conn:
            self._conn.executemany(
                "INSERT OR IGNORE INTO states (stateShort, state, countryShort, used, external) "
                "VALUES (?, ?, ?, ?, ?)",
                [(s.state_short, s.state, s.country_short, s.used, external) for s in states],
            )

    def add_cities(self, cities: Iterable[City], external: bool) -> None:
        """Insert cities, ignoring ones already stored."""
        cities = list(cities)
        if any(not c.city or not c.state_short or not c.country_short for c in cities):
            raise ValueError("all cities must have city, stateShort, and countryShort")
        with self._conn:
            self._conn.executemany(
                "INSERT OR IGNORE INTO cities "
                "(city, stateShort, countryShort, county, used, external) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                [
                    (c.city, c.state_short, c.country_short, c.county, c.used, external)
                    for c in cities
                ],
            )

    def add_zips(self, zips: Iterable[Zip], external: bool) -> None:
        """Insert postal codes, ignoring ones already stored."""
        zips = list(zips)
        if any(not z.zip or not z.country_short for z in zips):
            raise ValueError("all zips must have zip and countryShort")
        with self._conn:
            self._conn.executemany(
                "INSERT OR IGNORE INTO zips (zip, countryShort, used, external) "
                "VALUES (?, ?, ?, ?)",
                [(z.zip, z.country_short, z.used, external) for z in zips],
            )

    def add_queries(self, queries: Iterable[str], external: bool) -> None:
        """Insert search queries, ignoring ones already stored."""
        queries = list(queries)
        if any(not q for q in queries):
            raise ValueError("all queries must be non-empty strings")
        with self._conn:
            self._conn.executemany(
                "INSERT OR IGNORE INTO queries (query, used, external) VALUES (?, ?, ?)",
                [(q, False, external) for q in queries],
            )

    def clear_queries(self) -> None:
        """Delete the queries that were added from outside."""
        with self._conn:
            self._conn.execute("DELETE FROM queries WHERE external = 1")

    # -- reading ---------------------------------------------------------

    def get_queries(self) -> list[Query]:
        rows = self._conn.execute("SELECT id, query, used, external FROM queries")
        return [
            Query(id=qid, query=text, used=bool(used), external=bool(ext))
            for qid, text, used, ext in rows
        ]

    def get_countries(self, target_country: str) -> list[Country]:
        """Return every country for "all", otherwise the one with that code."""
        sql = "SELECT countryShort, country, used, external FROM countries"
        if target_country == "all":
            rows = self._conn.execute(sql)
        else:
            rows = self._conn.execute(sql + " WHERE countryShort = ?", (target_country,))
        return [
            Country(country=name, country_short=short, used=bool(used), external=bool(ext))
            for short, name, used, ext in rows
        ]

    def get_states(self, country_shorts: Sequence[str]) -> list[State]:
        codes = list(country_shorts)
        if not codes:
            return []
        rows = self._conn.execute(
            "SELECT stateShort, state, countryShort, used, external FROM states "
            f"WHERE countryShort IN ({_placeholders(len(codes))})",
            codes,
        )
        return [
            State(state=name, state_short=short, country_short=country,
                  used=bool(used), external=bool(ext))
            for short, name, country, used, ext in rows
        ]

    def get_cities(
        self, country_shorts: Sequence[str], state_shorts: Sequence[str]
    ) -> list[City]:
        """Return cities of the given countries, limited to the given states if any."""
        codes = list(country_shorts)
        if not codes:
            return []
        wanted_states = set(state_shorts)
        rows = self._conn.execute(
            "SELECT id, city, stateShort, countryShort, county, used, external FROM cities "
            f"WHERE countryShort IN ({_placeholders(len(codes))}) ORDER BY id",
            codes,
        )
        return [
            City(id=cid, city=name, state_short=state, country_short=country,
                 county=county, used=bool(used), external=bool(ext))
            for cid, name, state, country, county, used, ext in rows
            if not wanted_states or state in wanted_states
        ]

    def get_zips(self, country_shorts: Sequence[str]) -> list[Zip]:
        codes = list(country_shorts)
        if not codes:
            return []
        rows = self._conn.execute(
            "SELECT id, zip, countryShort, used, external FROM zips "
            f"WHERE countryShort IN ({_placeholders(len(codes))})",
            codes,
        )
        return [
            Zip(id=zid, zip=code, country_short=country, used=bool(used), external=bool(ext))
            for zid, code, country, used, ext in rows
        ]

    # -- sessions --------------------------------------------------------

    def save_nav_session(self, session: NavSession) -> int:
        """Store a new session and return its id."""
        with self._conn:
            cursor = self._conn.execute(
                "INSERT INTO nav_sessions (format, countryShort, queryId, zipId, cityId, "
                "stateShort, page, completed, external) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    str(getattr(session.format, "value", session.format)),
                    session.country_short,
                    session.query_id,
                    session.zip_id,
                    session.city_id,
                    session.state_short,
                    session.page,
                    session.completed,
                    session.external,
                ),
            )
        return int(cursor.lastrowid)

    def update_nav_session(self, session_id: int, updates: Mapping[str, Any]) -> None:
        """Set the given columns of one session."""
        if not updates:
            return
        assignments = []
        values = []
        for key, value in updates.items():
            column = _SESSION_COLUMNS.get(key)
            if column is None:
                raise ValueError(f"unknown session column: {key}")
            assignments.append(f"{column} = ?")
            values.append(value)
        values.append(session_id)
        with self._conn:
            self._conn.execute(
                f"UPDATE nav_sessions SET {', '.join(assignments)} WHERE id = ?", values
            )

    def get_current_nav_session(self) -> Optional[NavSession]:
        """Return the first session not yet completed, or None."""
        row = self._conn.execute(
            f"SELECT {_SESSION_FIELDS} FROM nav_sessions WHERE completed = 0 "
            "ORDER BY id LIMIT 1"
        ).fetchone()
        return _session_from_row(row) if row is not None else None

    def get_all_nav_sessions(self) -> list[NavSession]:
        rows = self._conn.execute(f"SELECT {_SESSION_FIELDS} FROM nav_sessions ORDER BY id")
        return [_session_from_row(row) for row in rows]

    def reset_nav_sessions(self) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM nav_sessions")

    def reset_database(self) -> None:
        """Clear every usage flag and delete all sessions."""
        with self._conn:
            for table in ("countries", "states", "cities", "zips", "queries"):
                self._conn.execute(f"UPDATE {table} SET used = 0")
            self._conn.execute("DELETE FROM nav_sessions")

    def mark_entities_used(
        self,
        country: Optional[Country],
        query: Optional[Query],
        zip_code: Optional[Zip],
        city: Optional[City],
        state: Optional[State],
    ) -> None:
        """Flag the given entities as used; None entries are skipped."""
        with self._conn:
            if country is not None:
                self._conn.execute(
                    "UPDATE countries SET used = 1 WHERE countryShort = ?",
                    (country.country_short,),
                )
            if query is not None and query.id is not None:
                self._conn.execute("UPDATE queries SET used = 1 WHERE id = ?", (query.id,))
            if zip_code is not None and zip_code.id is not None:
                self._conn.execute("UPDATE zips SET used = 1 WHERE id = ?", (zip_code.id,))
            if city is not None and city.id is not None:
                self._conn.execute("UPDATE cities SET used = 1 WHERE id = ?", (city.id,))
            if state is not None:
                self._conn.execute(
                    "UPDATE states SET used = 1 WHERE stateShort = ? AND countryShort = ?",
                    (state.state_short, state.country_short),
                )

    def count_total(self) -> int:
        """Return the number of stored countries."""
        (total,) = self._conn.execute("SELECT COUNT(*) FROM countries").fetchone()
        return int(total)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()