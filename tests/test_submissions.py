import json
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from setlist.db.models import Band, Show
from setlist.db.queries import Queries
from setlist.services.submissions import generate_slug


def in_days(days):
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def submission(venue_id, /, **overrides):
    body = {
        "venue_id": venue_id,
        "date": in_days(14),
        "bands": [
            {"name": "Night Owls", "is_headliner": True, "performance_order": 2},
            {"name": "Early Birds", "performance_order": 1},
        ],
    }
    body.update(overrides)
    return body


@pytest.mark.parametrize(
    "name,slug",
    [
        ("The Night Owls", "the-night-owls"),
        ("AC/DC", "acdc"),
        ("  Sigur   Rós ", "sigur-rs"),
        ("--Dash--", "dash"),
        ("!!!", "band"),
    ],
)
def test_generate_slug(name, slug):
    assert generate_slug(name) == slug


def test_submission_creates_show_and_links_bands(client, seed):
    venue = seed.venue()

    res = client.post("/api/shows", json=submission(venue.id, doors_time="19:00", show_time="8pm", price_min=10))

    assert res.status_code == 201
    data = res.json()["data"]
    assert data["status"] == "scheduled"
    assert data["created_at"]

    detail = client.get(f"/api/shows/{data['id']}").json()["data"]
    assert detail["title"] is None
    assert detail["doors_time"] == "19:00:00"
    assert detail["show_time"] is None
    assert detail["price_min"] == 10.0
    assert [band["name"] for band in detail["bands"]] == ["Early Birds", "Night Owls"]
    assert [band["is_headliner"] for band in detail["bands"]] == [False, True]
    assert detail["bands"][1]["slug"] == "night-owls"


def test_submitted_show_is_marked_band_submitted(client, seed, db):
    venue = seed.venue()
    show_id = client.post("/api/shows", json=submission(venue.id)).json()["data"]["id"]
    show = db.execute(select(Show).where(Show.id == show_id)).scalar_one()
    assert show.source == "band_submitted"


def test_band_resolution_is_idempotent(client, seed, db):
    venue = seed.venue()
    existing = seed.band(name="Night Owls", slug="night-owls-original")
    body = submission(venue.id, bands=[{"name": "  Night Owls  "}])

    assert client.post("/api/shows", json=body).status_code == 201
    assert client.post("/api/shows", json=body).status_code == 201

    count = db.execute(select(func.count(Band.id)).where(Band.name == "Night Owls")).scalar_one()
    assert count == 1
    for show in client.get("/api/shows").json()["data"]:
        assert [band["id"] for band in show["bands"]] == [existing.id]


def test_bare_date_is_accepted(client, seed):
    venue = seed.venue()
    day = (datetime.now(timezone.utc) + timedelta(days=30)).date().isoformat()
    res = client.post("/api/shows", json=submission(venue.id, date=day))
    assert res.status_code == 201


def test_unknown_venue_is_404(client):
    res = client.post("/api/shows", json=submission(9999))
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Venue not found"


@pytest.mark.parametrize(
    "overrides,message,details",
    [
        ({"date": "next friday"}, "Invalid date format", {"date": "must be valid ISO 8601 date"}),
        ({"date": "2001-01-01T20:00:00Z"}, "Invalid date", {"date": "must be a future date"}),
        ({"price_min": -1}, "Invalid price", {"price_min": "must be >= 0"}),
        ({"price_max": -5}, "Invalid price", {"price_max": "must be >= 0"}),
        ({"price_min": 20, "price_max": 10}, "Invalid price range", {"price_max": "must be >= price_min"}),
        (
            {"age_restriction": "16+"},
            "Invalid age restriction",
            {"age_restriction": "must be one of: All Ages, 18+, 21+"},
        ),
        (
            {"bands": [{"name": "Fine"}, {"name": "   "}]},
            "Invalid band",
            {"bands": {"index": 1, "name": "must not be empty"}},
        ),
    ],
)
def test_business_rule_violations(client, seed, overrides, message, details):
    venue = seed.venue()
    res = client.post("/api/shows", json=submission(venue.id, **overrides))
    assert res.status_code == 400
    assert res.json()["error"] == {"code": "VALIDATION_ERROR", "message": message, "details": details}


@pytest.mark.parametrize(
    "body",
    [
        {"date": "2030-01-01", "bands": [{"name": "x"}]},
        {"venue_id": 1, "bands": [{"name": "x"}]},
        {"venue_id": 1, "date": "2030-01-01"},
        {"venue_id": 1, "date": "2030-01-01", "bands": []},
        {"venue_id": 1, "date": "2030-01-01", "bands": [{"is_headliner": True}]},
    ],
)
def test_schema_violations_are_validation_errors(client, body):
    res = client.post("/api/shows", json=body)
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"] == "Invalid request body"
    assert error["details"]["error"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"venue_id": 99999999999999999999},
        {"bands": [{"name": "Loud", "performance_order": 99999999999999999999}]},
    ],
)
def test_integers_beyond_column_range_are_validation_errors(client, seed, db, overrides):
    venue = seed.venue()
    res = client.post("/api/shows", json=submission(venue.id, **overrides))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"
    assert db.scalar(select(func.count()).select_from(Show)) == 0


@pytest.mark.parametrize("field", ["price_min", "price_max"])
@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_non_finite_prices_are_rejected(client, seed, db, field, value):
    venue = seed.venue()
    body = json.dumps(submission(venue.id, **{field: value}))

    res = client.post("/api/shows", content=body, headers={"Content-Type": "application/json"})

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"
    assert field in res.json()["error"]["details"]["error"]
    assert db.scalar(select(func.count()).select_from(Show)) == 0


def test_malformed_json(client):
    res = client.post("/api/shows", content=b"{not json", headers={"Content-Type": "application/json"})
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Invalid request body"


def test_duplicate_band_in_one_submission_is_skipped(client, seed):
    venue = seed.venue()
    body = submission(venue.id, bands=[{"name": "Echo"}, {"name": "Echo"}])

    res = client.post("/api/shows", json=body)

    assert res.status_code == 201
    detail = client.get(f"/api/shows/{res.json()['data']['id']}").json()["data"]
    assert [band["name"] for band in detail["bands"]] == ["Echo"]


def test_band_creation_failure_skips_band(client, seed, monkeypatch):
    venue = seed.venue()
    real_create = Queries.create_band

    def flaky(self, name, slug):
        if name == "Broken":
            raise OperationalError("INSERT", {}, Exception("disk full"))
        return real_create(self, name, slug)

    monkeypatch.setattr(Queries, "create_band", flaky)
    body = submission(venue.id, bands=[{"name": "Broken"}, {"name": "Works"}])

    res = client.post("/api/shows", json=body)

    assert res.status_code == 201
    detail = client.get(f"/api/shows/{res.json()['data']['id']}").json()["data"]
    assert [band["name"] for band in detail["bands"]] == ["Works"]
