from datetime import datetime, time, timedelta

import pytest

from conftest import future, past
from setlist.core.errors import InvalidParameter
from setlist.services.dates import local_timezone, today_window, weekend_window
from setlist.services.shows import ShowFilterKind, resolve_show_filter


@pytest.mark.parametrize(
    "kwargs,kind",
    [
        ({"filter_name": "tonight", "venues": ["a"]}, ShowFilterKind.TONIGHT),
        ({"filter_name": "this-weekend", "genres": ["rock"]}, ShowFilterKind.THIS_WEEKEND),
        ({"filter_name": "free", "regions": ["West"]}, ShowFilterKind.FREE),
        ({"venues": ["a"], "regions": ["West"], "genres": ["rock"]}, ShowFilterKind.VENUE),
        ({"regions": ["West"], "genres": ["rock"], "date_from": "2030-01-01"}, ShowFilterKind.REGION),
        ({"genres": ["rock"], "date_from": "2030-01-01"}, ShowFilterKind.GENRE),
        ({"date_to": "2030-01-01"}, ShowFilterKind.DATE_RANGE),
        ({}, ShowFilterKind.UPCOMING),
        ({"filter_name": "unknown"}, ShowFilterKind.UPCOMING),
        ({"venues": [""]}, ShowFilterKind.UPCOMING),
    ],
)
def test_first_matching_filter_wins(kwargs, kind):
    assert resolve_show_filter(**kwargs).kind is kind


def test_filter_values_are_kept():
    show_filter = resolve_show_filter(venues=["orange-peel", "grey-eagle"])
    assert show_filter.values == ("orange-peel", "grey-eagle")


def test_malformed_range_fails_during_resolution():
    with pytest.raises(InvalidParameter):
        resolve_show_filter(date_from="not-a-date")


def ids(res):
    assert res.status_code == 200, res.text
    return [show["id"] for show in res.json()["data"]]


def test_default_lists_upcoming_only_in_date_order(client, seed):
    venue = seed.venue()
    later = seed.show(venue, date=future(days=5))
    sooner = seed.show(venue, date=future(days=1))
    seed.show(venue, date=past(days=1))

    res = client.get("/api/shows")

    assert ids(res) == [sooner.id, later.id]
    assert res.json()["meta"]["total"] == 2


def test_tonight_ignores_pagination(client, seed):
    venue = seed.venue()
    start, _ = today_window()
    noon = datetime.combine(start.date(), time(12), tzinfo=local_timezone())
    shows = [seed.show(venue, date=noon + timedelta(minutes=m)) for m in range(3)]
    seed.show(venue, date=noon + timedelta(days=2))

    res = client.get("/api/shows", params={"filter": "tonight", "per_page": 1})

    assert ids(res) == [show.id for show in shows]
    assert res.json()["meta"]["total"] == 3


def test_this_weekend(client, seed):
    venue = seed.venue()
    start, end = weekend_window()
    inside = seed.show(venue, date=end - timedelta(hours=2))
    seed.show(venue, date=end + timedelta(days=3))

    res = client.get("/api/shows", params={"filter": "this-weekend"})

    assert ids(res) == [inside.id]


def test_empty_window_is_an_empty_list(client):
    res = client.get("/api/shows", params={"filter": "this-weekend"})
    assert res.status_code == 200
    assert res.json()["data"] == []


def test_free_shows(client, seed):
    venue = seed.venue()
    no_price = seed.show(venue, date=future(days=1))
    zero = seed.show(venue, date=future(days=2), price_min=0, price_max=0)
    seed.show(venue, date=future(days=3), price_min=5, price_max=10)

    assert ids(client.get("/api/shows", params={"filter": "free"})) == [no_price.id, zero.id]


def test_venue_filter_is_or(client, seed):
    a, b, c = seed.venue(slug="a"), seed.venue(slug="b"), seed.venue(slug="c")
    show_a = seed.show(a, date=future(days=1))
    show_b = seed.show(b, date=future(days=2))
    seed.show(c, date=future(days=3))

    res = client.get("/api/shows", params=[("venue", "a"), ("venue", "b"), ("region", "ignored")])

    assert ids(res) == [show_a.id, show_b.id]


def test_region_filter(client, seed):
    west = seed.venue(region="West")
    seed.show(seed.venue(region="South"), date=future(days=1))
    show = seed.show(west, date=future(days=2))

    assert ids(client.get("/api/shows", params={"region": "West"})) == [show.id]


def test_genre_filter_by_slug_or_id_with_separate_count(client, seed):
    rock, jazz, folk = seed.genre("Rock"), seed.genre("Jazz"), seed.genre("Folk")
    rocker = seed.band(genres=[rock, folk])
    jazzer = seed.band(genres=[jazz])
    venue = seed.venue()
    rock_show = seed.show(venue, date=future(days=1), bands=[rocker])
    jazz_show = seed.show(venue, date=future(days=2), bands=[jazzer])
    seed.show(venue, date=future(days=3), bands=[seed.band()])

    res = client.get("/api/shows", params=[("genre", "rock"), ("genre", str(jazz.id)), ("per_page", "1")])

    assert ids(res) == [rock_show.id]
    assert res.json()["meta"]["total"] == 2

    res = client.get("/api/shows", params=[("genre", "rock"), ("genre", "folk")])
    assert ids(res) == [rock_show.id]
    assert jazz_show.id not in ids(res)


@pytest.mark.parametrize("value", ["\u00b2", "99999999999999999999"])
def test_genre_value_that_is_not_an_id_matches_nothing(client, seed, value):
    seed.show(seed.venue(), date=future(days=1), bands=[seed.band(genres=[seed.genre("Rock")])])

    res = client.get("/api/shows", params={"genre": value})

    assert res.status_code == 200
    assert res.json()["data"] == []
    assert res.json()["meta"]["total"] == 0


def test_date_range_includes_whole_end_day(client, seed):
    venue = seed.venue()
    tz = local_timezone()
    day = (future(days=10)).astimezone(tz).date()
    late = seed.show(venue, date=datetime.combine(day, time(23, 30), tzinfo=tz))
    seed.show(venue, date=datetime.combine(day + timedelta(days=1), time(1), tzinfo=tz))

    res = client.get("/api/shows", params={"date_from": day.isoformat(), "date_to": day.isoformat()})

    assert ids(res) == [late.id]


def test_bad_date_range_names_both_fields(client):
    res = client.get("/api/shows", params={"date_from": "yesterday"})
    assert res.status_code == 400
    assert res.json()["error"] == {
        "code": "INVALID_PARAMETER",
        "message": "invalid date format, use ISO 8601",
        "details": {"parameter": "date_from/date_to"},
    }


def test_list_items_carry_venue_and_lineup(client, seed):
    venue = seed.venue(name="Orange Peel", slug="orange-peel", address="101 Biltmore Ave")
    opener, headliner = seed.band(name="Opener"), seed.band(name="Headliner")
    seed.show(venue, title="Big Night", bands=[(headliner, True, 1), (opener, False, 0)])

    show = client.get("/api/shows").json()["data"][0]

    assert show["venue"]["slug"] == "orange-peel"
    assert show["venue"]["address"] == "101 Biltmore Ave"
    assert [band["name"] for band in show["bands"]] == ["Opener", "Headliner"]
    assert [band["is_headliner"] for band in show["bands"]] == [False, True]
