import json

import pytest

from navii.location import set_data_file_path
from navii.models import COMPLETED, InitOptions, NavFormat, PageNav
from navii.state_manager import NewCity, NewCountry, NewState, StateManager

LOCATION = {
    "cityData": {
        "US#United States": {
            "CA##California": ["Los Angeles", "San Diego"],
            "NY##New York": ["Buffalo"],
        }
    },
    "zipData": {"US": ["90001", "10001"]},
}


@pytest.fixture
def location_file(tmp_path):
    path = tmp_path / "location_data.json"
    path.write_text(json.dumps(LOCATION), encoding="utf-8")
    set_data_file_path(str(path))
    yield path
    set_data_file_path("")


@pytest.fixture
def no_location(tmp_path):
    set_data_file_path(str(tmp_path / "missing.json"))
    yield
    set_data_file_path("")


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "nav.db")


def test_init_starts_first_city_state(location_file, db_path):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY_STATE, target_country="US"))
        nav = sm.get_nav()
        assert nav.nav.city == "Los Angeles"
        assert nav.nav.state == "California"
        assert nav.nav.state_short == "CA"
        assert nav.country == "US"
        assert nav.placeholder == "Los Angeles"
        assert nav.has_next is True
        assert sm.get_current_nav() is nav
        assert [n.city for n in sm.nav_order] == ["Los Angeles", "San Diego", "Buffalo"]


def test_init_saves_session_and_marks_used(location_file, db_path):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY_STATE, target_country="US"))
        session = sm.db.get_current_nav_session()
        assert session.format == "city-state"
        assert session.country_short == "US"
        assert session.state_short == "CA"
        assert session.city_id is not None
        assert session.external is True
        assert sm.db.get_countries("US")[0].used is True
        states = {s.state_short: s.used for s in sm.db.get_states(["US"])}
        assert states["CA"] is True
        assert states["NY"] is False


def test_next_nav_waits_for_completion(location_file, db_path):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY, target_country="US"))
        first = sm.get_nav()
        assert sm.get_next_nav() is first
        sm.mark_complete()
        assert first.page == COMPLETED
        second = sm.get_next_nav()
        assert second.nav.city == "San Diego"
        assert len(sm.db.get_all_nav_sessions()) == 2


def test_walks_to_end(location_file, db_path):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.STATE, target_country="US"))
        seen = [sm.get_nav().nav.state]
        while True:
            sm.mark_complete()
            nxt = sm.get_next_nav()
            if nxt is None:
                break
            seen.append(nxt.nav.state)
        assert seen == ["California", "New York"]
        assert sm.get_nav() is None


def test_pages_complete_session(location_file, db_path):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY, target_country="US"))
        sm.set_page_nav(2, [])
        assert sm.get_nav().page == PageNav(pages=[], total=2)
        sm.mark_page_as_done(2)
        assert sm.get_nav().page == PageNav(pages=[2], total=2)
        sm.mark_page_as_done(2)
        assert sm.get_nav().page == PageNav(pages=[2], total=2)
        stored = sm.db.get_current_nav_session()
        assert json.loads(stored.page) == {"pages": [2], "total": 2}
        sm.mark_page_as_done(1)
        assert sm.get_nav().page == COMPLETED
        assert sm.db.get_current_nav_session() is None


def test_restore_session_in_new_manager(location_file, db_path):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY_STATE, target_country="US"))
        sm.mark_complete()
        sm.get_next_nav()
        sm.set_page_nav(3, [1])
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY_STATE, target_country="US"))
        nav = sm.get_nav()
        assert nav.nav.city == "San Diego"
        assert nav.nav.country == "United States"
        assert nav.nav.country_short == "US"
        assert nav.page == PageNav(pages=[1], total=3)
        assert sm.current_index == 1
        assert nav.format is NavFormat.CITY_STATE


def test_populate_and_query_zip(no_location, db_path):
    with StateManager(db_path) as sm:
        sm.populate()
        sm.init(InitOptions(format=NavFormat.QUERY_ZIP, target_country="US"))
        nav = sm.get_nav()
        assert nav.placeholder == "Realtor##90001"
        assert [n.query for n in sm.nav_order] == ["Realtor", "Restaurant"]
        sm.clear_search_queries()
        assert sm.nav_order == []
        assert sm.db.get_queries() == []


def test_empty_database_without_data(no_location, db_path):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY, target_country="all"))
        assert sm.get_nav() is None
        assert sm.get_next_nav() is None
        assert sm.db.get_all_nav_sessions() == []


def test_reset_nav_returns_to_first(location_file, db_path):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY, target_country="US"))
        sm.mark_complete()
        sm.get_next_nav()
        sm.reset_nav()
        assert sm.get_nav().nav.city == "Los Angeles"
        assert sm.current_index == 0
        assert len(sm.db.get_all_nav_sessions()) == 1


def test_reset_database_clears_usage(location_file, db_path):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY, target_country="US"))
        sm.reset_database()
        assert sm.db.get_all_nav_sessions() == []
        assert all(not c.used for c in sm.db.get_countries("all"))
        assert all(not c.used for c in sm.db.get_cities(["US"], []))


def test_add_states_and_cities(location_file, db_path):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY_STATE, target_country="US"))
        sm.add_states([NewState(state="Texas", state_short="TX", country_short="US")])
        sm.add_cities(
            [NewCity(city="Austin", state="Texas", state_short="TX", country_short="US")]
        )
        assert sm.nav_order[-1].city == "Austin"
        assert sm.nav_order[-1].state == "Texas"
        austin = [c for c in sm.db.get_cities(["US"], []) if c.city == "Austin"]
        assert austin[0].external is True


def test_add_countries(location_file, db_path):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.STATE, target_country="all"))
        sm.add_countries([NewCountry(country="Canada", country_short="CA")])
        codes = {c.country_short for c in sm.db.get_countries("all")}
        assert codes == {"US", "CA"}


@pytest.mark.parametrize(
    "call",
    [
        lambda sm: sm.add_cities(
            [NewCity(city="", state="Texas", state_short="TX", country_short="US")]
        ),
        lambda sm: sm.add_states([NewState(state="Texas", state_short="", country_short="US")]),
        lambda sm: sm.add_countries([NewCountry(country="", country_short="CA")]),
    ],
)
def test_add_rejects_missing_fields(location_file, db_path, call):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY, target_country="US"))
        with pytest.raises(ValueError):
            call(sm)


def test_debug_output(location_file, db_path, capsys):
    with StateManager(db_path) as sm:
        sm.init(InitOptions(format=NavFormat.CITY, target_country="US"))
        sm.debug()
    out = capsys.readouterr().out
    assert "StateManager Debug Info:" in out
    assert "TargetCountry: US" in out
    assert "Format: city" in out
    assert "Zips: 2" in out