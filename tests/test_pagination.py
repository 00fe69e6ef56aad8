import pytest

from conftest import future
from setlist.core.errors import InvalidParameter
from setlist.services.pagination import build_meta, parse_limit, resolve_pagination, total_pages


def test_defaults():
    pagination = resolve_pagination(None, None)
    assert (pagination.page, pagination.per_page, pagination.offset) == (1, 50, 0)


def test_offset_is_derived_from_page():
    pagination = resolve_pagination("3", "20")
    assert pagination.offset == 40


@pytest.mark.parametrize("raw", ["0", "-1", "abc", "1.5", "+2", " 2"])
def test_bad_page_is_rejected(raw):
    with pytest.raises(InvalidParameter) as err:
        resolve_pagination(raw, None)
    assert err.value.param == "page"
    assert err.value.message == "must be a positive integer"


def test_page_is_bounded():
    assert resolve_pagination("2147483647", "100").offset == (2**31 - 2) * 100
    with pytest.raises(InvalidParameter) as err:
        resolve_pagination("99999999999999999999", None)
    assert err.value.param == "page"
    assert err.value.message == "cannot exceed 2147483647"


def test_huge_page_over_http_is_400(client):
    res = client.get("/api/shows", params={"page": "99999999999999999999"})
    assert res.status_code == 400
    assert res.json()["error"]["details"] == {"parameter": "page"}


def test_per_page_above_maximum_is_rejected_not_clamped():
    with pytest.raises(InvalidParameter) as err:
        resolve_pagination(None, "101")
    assert err.value.param == "per_page"
    assert err.value.message == "cannot exceed 100"
    assert resolve_pagination(None, "100").per_page == 100


def test_total_pages():
    assert total_pages(0, 50) == 0
    assert total_pages(50, 50) == 1
    assert total_pages(51, 50) == 2
    assert total_pages(10, 0) == 0


def test_build_meta():
    meta = build_meta(resolve_pagination("2", "10"), 25)
    assert meta.model_dump() == {"page": 2, "per_page": 10, "total": 25, "total_pages": 3}


def test_limit_is_clamped_above_maximum_but_rejects_invalid():
    assert parse_limit(None, 10, 50) == 10
    assert parse_limit("500", 10, 50) == 50
    with pytest.raises(InvalidParameter) as err:
        parse_limit("0", 10, 50)
    assert err.value.param == "limit"


def test_list_meta_matches_request(client, seed):
    venue = seed.venue()
    for day in range(1, 6):
        seed.show(venue, date=future(days=day))

    res = client.get("/api/shows", params={"page": 2, "per_page": 2})
    assert res.status_code == 200
    body = res.json()
    assert body["meta"] == {"page": 2, "per_page": 2, "total": 5, "total_pages": 3}
    assert len(body["data"]) == 2


@pytest.mark.parametrize(
    "params,param",
    [({"per_page": "101"}, "per_page"), ({"page": "0"}, "page"), ({"page": "x"}, "page"), ({"per_page": "y"}, "per_page")],
)
def test_bad_pagination_is_a_400_before_any_filter(client, params, param):
    res = client.get("/api/shows", params={**params, "filter": "tonight"})
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "INVALID_PARAMETER"
    assert error["details"] == {"parameter": param}
