"""Entities, navigation formats and session records."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

COMPLETED = "completed"

VALID_COUNTRY_CODES: tuple[str, ...] = (
    "AD", "AE", "AF", "AG", "AI", "AL", "AM", "AO", "AQ", "AR", "AS", "AT", "AU", "AW", "AX", "AZ",
    "BA", "BB", "BD", "BE", "BF", "BG", "BH", "BI", "BJ", "BL", "BM", "BN", "BO", "BQ", "BR", "BS",
    "BT", "BV", "BW", "BY", "BZ", "CA", "CC", "CD", "CF", "CG", "CH", "CI", "CK", "CL", "CM", "CN",
    "CO", "CR", "CU", "CV", "CW", "CX", "CY", "CZ", "DE", "DJ", "DK", "DM", "DO", "DZ", "EC", "EE",
    "EG", "EH", "ER", "ES", "ET", "FI", "FJ", "FK", "FM", "FO", "FR", "GA", "GB", "GD", "GE", "GF",
    "GG", "GH", "GI", "GL", "GM", "GN", "GP", "GQ", "GR", "GS", "GT", "GU", "GW", "GY", "HK", "HM",
    "HN", "HR", "HT", "HU", "ID", "IE", "IL", "IM", "IN", "IO", "IQ", "IR", "IS", "IT", "JE", "JM",
    "JO", "JP", "KE", "KG", "KH", "KI", "KM", "KN", "KP", "KR", "KW", "KY", "KZ", "LA", "LB", "LC",
    "LI", "LK", "LR", "LS", "LT", "LU", "LV", "LY", "MA", "MC", "MD", "ME", "MF", "MG", "MH", "MK",
    "ML", "MM", "MN", "MO", "MP", "MQ", "MR", "MS", "MT", "MU", "MV", "MW", "MX", "MY", "MZ", "NA",
    "NC", "NE", "NF", "NG", "NI", "NL", "NO", "NP", "NR", "NU", "NZ", "OM", "PA", "PE", "PF", "PG",
    "PH", "PK", "PL", "PM", "PN", "PR", "PS", "PT", "PW", "PY", "QA", "RE", "RO", "RS", "RU", "RW",
    "SA", "SB", "SC", "SD", "SE", "SG", "SH", "SI", "SJ", "SK", "SL", "SM", "SN", "SO", "SR", "SS",
    "ST", "SV", "SX", "SY", "SZ", "TC", "TD", "TF", "TG", "TH", "TJ", "TK", "TL", "TM", "TN", "TO",
    "TR", "TT", "TV", "TW", "TZ", "UA", "UG", "UM", "US", "UY", "UZ", "VA", "VC", "VE", "VG", "VI",
    "VN", "VU", "WF", "WS", "XK", "YE", "YT", "ZA", "ZM", "ZW",
)


class NavFormat(str, Enum):
    """The shape of the navigation entries a session walks through."""

    ZIP = "zip"
    ZIP_COUNTRY = "zip-country"
    QUERY_ZIP = "query-zip"
    QUERY_ZIP_COUNTRY = "query-zip-country"
    CITY = "city"
    CITY_STATE = "city-state"
    CITY_STATE_COUNTRY = "city-state-country"
    QUERY_CITY = "query-city"
    QUERY_CITY_STATE = "query-city-state"
    QUERY_CITY_STATE_COUNTRY = "query-city-state-country"
    STATE = "state"
    STATE_COUNTRY = "state-country"
    QUERY_STATE = "query-state"
    QUERY_STATE_COUNTRY = "query-state-country"
    QUERY_COUNTY = "query-county"
    QUERY = "query"
    COUNTY = "county"

    def is_query_format(self) -> bool:
        """True when entries are generated once per stored search query."""
        return self.value.startswith("query-")


@dataclass
class Country:
    country: str
    country_short: str
    used: bool = False
    external: bool = False
    id: Optional[int] = None


@dataclass
class State:
    state: str
    state_short: str
    country_short: str
    used: bool = False
    external: bool = False
    id: Optional[int] = None


@dataclass
class City:
    city: str
    state_short: str
    country_short: str
    county: Optional[str] = None
    used: bool = False
    external: bool = False
    id: Optional[int] = None


@dataclass
class Zip:
    zip: str
    country_short: str
    used: bool = False
    external: bool = False
    id: Optional[int] = None


@dataclass
class Query:
    query: str
    used: bool = False
    external: bool = False
    id: Optional[int] = None


@dataclass
class NavSession:
    format: str
    country_short: str
    query_id: Optional[int] = None
    zip_id: Optional[int] = None
    city_id: Optional[int] = None
    state_short: Optional[str] = None
    page: str = ""
    completed: bool = False
    external: bool = False
    id: int = 0


@dataclass
class Nav:
    query: Optional[str] = None
    zip: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    state_short: Optional[str] = None
    country: Optional[str] = None
    country_short: Optional[str] = None
    county: Optional[str] = None


@dataclass
class PageNav:
    pages: list[int] = field(default_factory=list)
    total: int = 0


Page = Union[PageNav, str, None]


@dataclass
class NavResponse:
    format: NavFormat
    nav: Nav
    country: str
    placeholder: str
    page: Page = None
    has_next: bool = False


@dataclass
class InitOptions:
    format: NavFormat
    target_country: str = "all"


def page_to_json(page: Page) -> str:
    """Serialise a page value the way it is stored in a session row."""
    if page is None:
        return ""
    if page == COMPLETED:
        return COMPLETED
    if isinstance(page, PageNav):
        return json.dumps(
            {"pages": list(page.pages), "total": page.total}, separators=(",", ":")
        )
    raise TypeError(f"unsupported page value: {page!r}")


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def page_from_json(text: str) -> Page:
    """Read a stored page value; malformed data yields an empty PageNav."""
    if not text:
        return None
    if text == COMPLETED:
        return COMPLETED
    try:
        raw = json.loads(text)
    except ValueError:
        return PageNav()
    if not isinstance(raw, dict):
        return PageNav()
    pages = raw.get("pages") or []
    total = raw.get("total", 0)
    if total is None:
        total = 0
    if not isinstance(pages, list) or not all(_is_int(p) for p in pages) or not _is_int(total):
        return PageNav()
    return PageNav(pages=list(pages), total=total)