"""Loading and querying the downloaded location data file."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

DATA_FILE_NAME = "location_data.json"

_data_file_path: str = ""
_cached: Optional["LocationData"] = None


@dataclass
class LocationData:
    """Cities keyed by "CC#Country" then "ST##State", and postal codes by country."""

    city_data: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    zip_data: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON document form of this data."""
        return {
            "cityData": {
                country: {state: list(cities) for state, cities in states.items()}
                for country, states in self.city_data.items()
            },
            "zipData": {country: list(codes) for country, codes in self.zip_data.items()},
        }


def _string_list(value: Any, what: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{what} must be a list of strings")
    return list(value)


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be an object")
    return value


def parse_location_data(data: Any) -> LocationData:
    """Build LocationData from a decoded JSON document, raising ValueError on bad shape."""
    root = _mapping(data, "location data")
    city_data = {
        country: {
            state: _string_list(cities, "cities")
            for state, cities in _mapping(states, "states").items()
        }
        for country, states in _mapping(root.get("cityData"), "cityData").items()
    }
    zip_data = {
        country: _string_list(codes, "postal codes")
        for country, codes in _mapping(root.get("zipData"), "zipData").items()
    }
    return LocationData(city_data=city_data, zip_data=zip_data)


def set_data_file_path(absolute_path: str) -> None:
    """Point the loader at another data file and drop any cached data."""
    global _data_file_path, _cached
    _data_file_path = absolute_path
    _cached = None


def get_data_file_path() -> str:
    """Return the configured data file, or the default beside this module."""
    if _data_file_path:
        return _data_file_path
    return str(Path(__file__).resolve().parent / DATA_FILE_NAME)


def get_location_data_from_path(absolute_path: str) -> LocationData:
    """Load location data from a file; raises OSError or ValueError."""
    path = os.path.abspath(absolute_path)
    with open(path, "rb") as handle:
        document = json.loads(handle.read())
    return parse_location_data(document)


def get_location_data() -> LocationData:
    """Return cached data, loading the data file once; empty data if it cannot be read."""
    global _cached
    if _cached is not None:
        return _cached
    try:
        _cached = get_location_data_from_path(get_data_file_path())
    except (OSError, ValueError):
        return LocationData()
    return _cached


def is_data_populated() -> bool:
    """True when any cities or postal codes are available."""
    data = get_location_data()
    return bool(data.city_data) or bool(data.zip_data)


def get_cities_for_country_state(country_code: str, state_code: str) -> list[str]:
    """Return the cities of the first state whose key starts with state_code."""
    data = get_location_data()
    for country_key, states in data.city_data.items():
        if len(country_key) >= 2 and country_key[:2] == country_code:
            for state_key, cities in states.items():
                if state_key.startswith(state_code):
                    return list(cities)
    return []


def get_postal_codes_for_country(country_code: str) -> list[str]:
    """Return the postal codes stored for a country."""
    return list(get_location_data().zip_data.get(country_code, []))


def get_available_countries() -> list[str]:
    """Return the distinct two-letter country codes present in the city data."""
    seen: dict[str, None] = {}
    for country_key in get_location_data().city_data:
        if len(country_key) >= 2:
            seen.setdefault(country_key[:2], None)
    return list(seen)