# navii

navii goes through geographical locations one at a time. A location can be a
country, state, city, postal code or county, alone or paired with your own
search queries. Progress is kept in a SQLite database, so an interrupted run
carries on where it stopped.

## Installation

```
pip install navii
```

## Location data

When its database holds no countries yet, navii fills it from a JSON file of
countries, states, cities and postal codes:

```json
{
  "cityData": {
    "US#United States": {
      "CA##California": ["Los Angeles", "San Diego"]
    }
  },
  "zipData": {
    "US": ["90001", "90002"]
  }
}
```

Country keys have the form `CODE#Name` and state keys the form `CODE##Name`.
Keys that do not split into exactly two parts are skipped. By default the file
is `location_data.json` in the package directory. Point navii at another file
with `navii.location.set_data_file_path`. If the file is missing or cannot be
read, the data is treated as empty.

## Using the state manager

```python
from navii.location import set_data_file_path
from navii.models import InitOptions, NavFormat
from navii.state_manager import StateManager

set_data_file_path("/path/to/location_data.json")

with StateManager("example.db") as manager:
    manager.init(InitOptions(format=NavFormat.CITY_STATE, target_country="US"))

    nav = manager.get_nav()
    print(nav.placeholder)          # the city name, e.g. "Los Angeles"

    manager.set_page_nav(3, [])     # this location has three pages of results
    for page in (1, 2, 3):
        manager.mark_page_as_done(page)   # completes the session after the last page

    nav = manager.get_next_nav()    # moves on to the next location
```

`target_country` is a two-letter code, or `"all"` for every stored country.
`get_next_nav` returns the current entry unchanged until its session has been
completed, either through `mark_page_as_done` or `mark_complete`. It returns
`None` once every entry has been visited.

Formats whose names start with `query-` pair every stored search query with
every location:

```python
manager.add_search_queries(["Realtor", "Restaurant"])
manager.add_search_query("Dentist")
```

`NavFormat` covers `zip`, `zip-country`, `city`, `city-state`,
`city-state-country`, `state`, `state-country`, `county`, `query`, and the
`query-` variants `query-zip`, `query-zip-country`, `query-city`,
`query-city-state`, `query-city-state-country`, `query-state`,
`query-state-country` and `query-county`.

Other operations:

- `add_countries`, `add_states` and `add_cities` store your own entries,
  given as `NewCountry`, `NewState` and `NewCity`.
- `clear_search_queries` deletes the queries you added.
- `reset_nav` forgets all navigation sessions and starts again from the first
  location.
- `reset_database` clears every "used" flag and all sessions.
- `populate` stores a small set of sample data.
- `debug` prints a summary of the manager's state.

## Lower-level pieces

- `navii.db.Database` is the SQLite store. It holds countries, states, cities,
  postal codes, queries and navigation sessions, and can be used as a context
  manager.
- `navii.navigation.generate_nav_order` builds the ordered list of `Nav`
  entries for a format. `generate_placeholder` and `nav_matches` work on
  single entries.
- `navii.models` holds the entity dataclasses, `NavFormat`, `NavResponse`, and
  `page_to_json` / `page_from_json` for stored page progress.

## Location data helpers

`navii.location` reads the JSON file:

```python
from navii.location import (
    set_data_file_path,
    get_available_countries,
    get_cities_for_country_state,
    get_postal_codes_for_country,
    is_data_populated,
)

set_data_file_path("/path/to/location_data.json")
print(is_data_populated())
print(get_available_countries())
print(get_cities_for_country_state("US", "CA"))
print(get_postal_codes_for_country("US"))
```

## What navii does not do

navii does not download location data and has no command-line tool. You
supply the JSON file yourself and use the package from Python.