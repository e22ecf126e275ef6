import pytest

from navii.models import City, Country, Nav, NavFormat, Query, State, Zip
from navii.navigation import (
    generate_nav_order,
    generate_placeholder,
    nav_entries,
    nav_matches,
)

US = Country(country="United States", country_short="US")
CA_COUNTRY = Country(country="Canada", country_short="CA")
CALIFORNIA = State(state="California", state_short="CA", country_short="US")
TEXAS = State(state="Texas", state_short="TX", country_short="US")
ONTARIO = State(state="Ontario", state_short="ON", country_short="CA")
LA = City(city="Los Angeles", state_short="CA", country_short="US", county="Los Angeles County", id=1)
AUSTIN = City(city="Austin", state_short="TX", country_short="US", id=2)
ORPHAN = City(city="Nowhere", state_short="ZZ", country_short="US", id=3)
TORONTO = City(city="Toronto", state_short="ON", country_short="CA", id=4)
ZIP_US = Zip(zip="90001", country_short="US", id=1)
ZIP_CA = Zip(zip="M5V 2T6", country_short="CA", id=2)
REALTOR = Query(query="Realtor", id=1)
RESTAURANT = Query(query="Restaurant", id=2)

STATES = [CALIFORNIA, TEXAS, ONTARIO]
CITIES = [LA, AUSTIN, ORPHAN, TORONTO]
ZIPS = [ZIP_US, ZIP_CA]
QUERIES = [REALTOR, RESTAURANT]


def test_zip_format_entries():
    entries = nav_entries(NavFormat.ZIP, None, US, [], [], [ZIP_US])
    assert entries == [Nav(zip="90001", country="US")]


def test_zip_country_format_sets_country_short():
    entries = nav_entries("zip-country", None, US, [], [], [ZIP_US])
    assert entries == [Nav(zip="90001", country="US", country_short="US")]


def test_query_format_without_query_gives_nothing():
    assert nav_entries(NavFormat.QUERY_ZIP, None, US, [], [], [ZIP_US]) == []
    assert nav_entries(NavFormat.QUERY_CITY, None, US, [], [LA], []) == []


def test_query_zip_format_carries_query():
    entries = nav_entries(NavFormat.QUERY_ZIP_COUNTRY, REALTOR, US, [], [], [ZIP_US])
    assert entries == [Nav(query="Realtor", zip="90001", country="US", country_short="US")]


def test_non_query_format_ignores_query():
    entries = nav_entries(NavFormat.CITY, REALTOR, US, [], [LA], [])
    assert entries == [Nav(city="Los Angeles", country="US")]


def test_city_state_skips_cities_without_state():
    states = [CALIFORNIA, TEXAS]
    entries = nav_entries(NavFormat.CITY_STATE, None, US, states, [LA, AUSTIN, ORPHAN], [])
    assert [e.city for e in entries] == ["Los Angeles", "Austin"]
    assert entries[0] == Nav(
        city="Los Angeles", state="California", state_short="CA", country="US"
    )
    assert all(e.country_short is None for e in entries)


def test_query_city_state_country_entries():
    entries = nav_entries(
        NavFormat.QUERY_CITY_STATE_COUNTRY, RESTAURANT, US, [TEXAS], [AUSTIN], []
    )
    assert entries == [
        Nav(
            query="Restaurant",
            city="Austin",
            state="Texas",
            state_short="TX",
            country="US",
            country_short="US",
        )
    ]


def test_state_formats():
    plain = nav_entries(NavFormat.STATE, None, US, [CALIFORNIA], [], [])
    with_country = nav_entries(NavFormat.QUERY_STATE_COUNTRY, REALTOR, US, [CALIFORNIA], [], [])
    assert plain == [Nav(state="California", state_short="CA", country="US")]
    assert with_country == [
        Nav(query="Realtor", state="California", state_short="CA", country="US", country_short="US")
    ]


def test_county_formats_only_use_cities_with_county():
    entries = nav_entries(NavFormat.COUNTY, None, US, [], [LA, AUSTIN], [])
    assert entries == [Nav(county="Los Angeles County", country="US")]
    queried = nav_entries(NavFormat.QUERY_COUNTY, REALTOR, US, [], [LA, AUSTIN], [])
    assert queried == [Nav(query="Realtor", county="Los Angeles County", country="US")]


def test_query_format_single_entry_per_query():
    assert nav_entries(NavFormat.QUERY, REALTOR, US, STATES, CITIES, ZIPS) == [
        Nav(query="Realtor", country="US")
    ]


def test_unknown_format_raises():
    with pytest.raises(ValueError):
        nav_entries("nowhere", None, US, [], [], [])
    with pytest.raises(ValueError):
        generate_nav_order("nowhere", [US], [], [], [], [])


def test_generate_order_groups_by_country():
    order = generate_nav_order(NavFormat.ZIP, [US, CA_COUNTRY], STATES, CITIES, ZIPS, QUERIES)
    assert [(n.zip, n.country) for n in order] == [("90001", "US"), ("M5V 2T6", "CA")]


def test_generate_order_filters_states_by_country():
    order = generate_nav_order(NavFormat.CITY_STATE, [CA_COUNTRY], STATES, CITIES, ZIPS, [])
    assert [(n.city, n.state) for n in order] == [("Toronto", "Ontario")]


def test_generate_order_repeats_per_query():
    order = generate_nav_order(NavFormat.QUERY_ZIP, [US, CA_COUNTRY], STATES, CITIES, ZIPS, QUERIES)
    assert [(n.query, n.zip) for n in order] == [
        ("Realtor", "90001"),
        ("Restaurant", "90001"),
        ("Realtor", "M5V 2T6"),
        ("Restaurant", "M5V 2T6"),
    ]


def test_generate_order_query_format_needs_queries():
    assert generate_nav_order(NavFormat.QUERY_CITY, [US], STATES, CITIES, ZIPS, []) == []


def test_plain_query_format_is_not_expanded_by_queries():
    # "query" lacks the "query-" prefix, so it is walked without a query.
    assert generate_nav_order(NavFormat.QUERY, [US], STATES, CITIES, ZIPS, QUERIES) == []


def test_generate_order_length_matches_entries():
    order = generate_nav_order(NavFormat.STATE, [US, CA_COUNTRY], STATES, CITIES, ZIPS, QUERIES)
    assert len(order) == len(STATES)


def test_placeholder_unknown_for_empty_nav():
    assert generate_placeholder(Nav(country="US")) == "Unknown"


def test_placeholder_prefers_city_then_zip_state_county():
    nav = Nav(query="Realtor", city="Austin", zip="90001", state="Texas", county="Travis")
    assert generate_placeholder(nav) == "Realtor##Austin"
    assert generate_placeholder(Nav(zip="90001", state="Texas")) == "90001"
    assert generate_placeholder(Nav(state="Texas", county="Travis")) == "Texas"
    assert generate_placeholder(Nav(county="Travis")) == "Travis"
    assert generate_placeholder(Nav(query="Realtor")) == "Realtor"


def test_nav_matches_generated_entry():
    order = generate_nav_order(NavFormat.QUERY_CITY_STATE, [US], STATES, CITIES, ZIPS, QUERIES)
    target = order[-1]
    assert nav_matches(target, US, RESTAURANT, None, AUSTIN, TEXAS)
    assert not nav_matches(target, US, REALTOR, None, AUSTIN, TEXAS)


def test_nav_matches_requires_both_absent_or_equal():
    nav = Nav(zip="90001", country="US")
    assert nav_matches(nav, US, None, ZIP_US, None, None)
    assert not nav_matches(nav, US, REALTOR, ZIP_US, None, None)
    assert not nav_matches(nav, None, None, ZIP_US, None, None)
    assert not nav_matches(nav, US, None, ZIP_CA, None, None)
    assert not nav_matches(Nav(country="US"), US, None, ZIP_US, None, None)