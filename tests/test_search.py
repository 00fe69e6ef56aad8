import pytest
from sqlalchemy.exc import OperationalError

from conftest import future
from setlist.core.errors import InvalidParameter, MissingParameter
from setlist.db.queries import Queries
from setlist.services.search import validate_search_params


def boom(*args, **kwargs):
    raise OperationalError("SELECT", {}, Exception("connection lost"))


def test_validation_rules():
    with pytest.raises(MissingParameter):
        validate_search_params(None, None)
    with pytest.raises(MissingParameter):
        validate_search_params("", None)
    with pytest.raises(InvalidParameter):
        validate_search_params(" a ", None)
    assert validate_search_params(" ab ", None) == ("ab", 20)
    assert validate_search_params("ab", "999") == ("ab", 50)


def test_missing_q(client):
    res = client.get("/api/search")
    assert res.status_code == 400
    assert res.json()["error"] == {
        "code": "MISSING_PARAMETER",
        "message": "Required parameter missing: q",
        "details": {"parameter": "q"},
    }


def test_short_q(client):
    res = client.get("/api/search", params={"q": "a"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_PARAMETER"
    assert res.json()["error"]["message"] == "must be at least 2 characters"


def test_invalid_limit(client):
    res = client.get("/api/search", params={"q": "rock", "limit": "zero"})
    assert res.status_code == 400
    assert res.json()["error"]["details"] == {"parameter": "limit"}


def test_no_matches_returns_three_empty_lists(client):
    res = client.get("/api/search", params={"q": "nothing here"})
    assert res.status_code == 200
    assert res.json() == {"data": {"shows": [], "bands": [], "venues": []}}


@pytest.fixture
def catalog(seed):
    venue = seed.venue(name="Orange Peel", slug="orange-peel", address="101 Biltmore Ave", region="South Slope")
    owls = seed.band(name="Night Owls", slug="night-owls", hometown="Black Mountain")
    show = seed.show(venue, title="Summer Kickoff", date=future(days=4), bands=[owls])
    return {"venue": venue, "band": owls, "show": show}


def test_matches_in_every_category(client, catalog):
    res = client.get("/api/search", params={"q": "owls"})

    data = res.json()["data"]
    assert data["bands"] == [{"id": catalog["band"].id, "name": "Night Owls", "slug": "night-owls"}]
    # band names on the bill count for show matches
    assert [show["id"] for show in data["shows"]] == [catalog["show"].id]
    assert data["shows"][0]["venue_name"] == "Orange Peel"
    assert data["venues"] == []


def test_venue_match_by_region(client, catalog):
    data = client.get("/api/search", params={"q": "south slope"}).json()["data"]
    assert [venue["slug"] for venue in data["venues"]] == ["orange-peel"]


def test_limit_applies_per_category(client, seed):
    venue = seed.venue()
    for n in range(3):
        seed.band(name=f"Echo {n}")
        seed.show(venue, title=f"Echo night {n}", date=future(days=n + 1))

    data = client.get("/api/search", params={"q": "echo", "limit": 2}).json()["data"]

    assert len(data["bands"]) == 2
    assert len(data["shows"]) == 2


def test_one_failing_category_does_not_break_the_others(client, catalog, monkeypatch):
    monkeypatch.setattr(Queries, "global_search_bands", boom)

    res = client.get("/api/search", params={"q": "owls"})

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["bands"] == []
    assert [show["id"] for show in data["shows"]] == [catalog["show"].id]
