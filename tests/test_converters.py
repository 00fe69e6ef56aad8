from datetime import datetime, time, timezone
from decimal import Decimal
from types import SimpleNamespace

from setlist.services.converters import (
    bands_to_list_items,
    shows_to_list_items,
    window_shows_to_list_items,
)


def show_row(show_id, total_count=None, **overrides):
    row = dict(
        id=show_id,
        title=f"Show {show_id}",
        image_url=None,
        date=datetime(2030, 6, 1, 20, tzinfo=timezone.utc),
        doors_time=time(19, 0),
        show_time=None,
        price_min=Decimal("10.50"),
        price_max=None,
        ticket_url=None,
        age_restriction="21+",
        status="scheduled",
        venue_id=7,
        venue_name="The Grey Eagle",
        venue_slug="grey-eagle",
        venue_region="River Arts",
        venue_address="185 Clingman Ave",
        venue_image_url=None,
        total_count=total_count,
    )
    row.update(overrides)
    return SimpleNamespace(**row)


def test_empty_rows_give_empty_list_and_zero_total():
    assert shows_to_list_items([]) == ([], 0)
    assert window_shows_to_list_items([]) == ([], 0)
    assert bands_to_list_items([]) == ([], 0)


def test_total_is_read_from_first_row():
    items, total = shows_to_list_items([show_row(1, total_count=42), show_row(2, total_count=42)])
    assert total == 42
    assert [item.id for item in items] == [1, 2]


def test_show_item_shape():
    items, _ = shows_to_list_items([show_row(1, total_count=1)])
    item = items[0]
    assert item.price_min == 10.5
    assert item.price_max is None
    assert item.bands == []
    assert item.venue.slug == "grey-eagle"
    dumped = item.model_dump(mode="json")
    assert dumped["doors_time"] == "19:00:00"
    assert dumped["show_time"] is None
    assert dumped["date"] == "2030-06-01T20:00:00Z"


def test_window_rows_count_themselves():
    items, total = window_shows_to_list_items([show_row(1), show_row(2), show_row(3)])
    assert total == 3
    assert len(items) == 3


def test_band_items_default_to_no_genres():
    row = SimpleNamespace(id=1, name="Tall Pines", slug="tall-pines", bio=None, hometown="Asheville", image_url=None, total_count=9)
    items, total = bands_to_list_items([row])
    assert total == 9
    assert items[0].genres == []
