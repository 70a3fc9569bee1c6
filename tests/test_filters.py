"""Tests for the listing filter composer."""

from datetime import UTC, datetime

import pytest

from eventhub.models import EventStatus, EventVisibility
from eventhub.schemas import EventQuery
from eventhub.services.filters import PageWindow, page_window, pagination, search_terms

NFT = {"type": "wallet-nft", "mintAddress": "M" * 44, "metadata": {"name": "T"}}


def titles(result) -> list[str]:
    return [event.title for event in result["data"]]


class TestPageWindow:
    """Tests for page and limit clamping."""

    def test_defaults(self):
        window = page_window(None, None)
        assert (window.page, window.limit, window.offset) == (1, 20, 0)

    def test_clamps_low_values(self):
        window = page_window(0, 0)
        assert (window.page, window.limit) == (1, 1)

    def test_clamps_limit_to_maximum(self):
        assert page_window(1, 1000).limit == 100

    def test_offset(self):
        assert page_window(3, 10).offset == 20


class TestPagination:
    """Tests for pagination metadata."""

    def test_empty_result(self):
        info = pagination(PageWindow(page=1, limit=10), 0)
        assert info["total_pages"] == 0
        assert info["has_next"] is False
        assert info["has_prev"] is False

    def test_middle_page(self):
        info = pagination(PageWindow(page=2, limit=10), 25)
        assert info["total_pages"] == 3
        assert info["has_next"] is True
        assert info["has_prev"] is True

    def test_last_page(self):
        info = pagination(PageWindow(page=3, limit=10), 25)
        assert info["has_next"] is False


def test_search_terms_split_on_whitespace():
    assert search_terms("  tech \t conference  ") == ["tech", "conference"]
    assert search_terms(None) == []


class TestFilterComposition:
    """Tests for filters applied against stored events."""

    def test_every_filter_must_hold(self, service, make_event):
        make_event(title="Match", category_id="music", capacity=100)
        make_event(title="Wrong Category", category_id="sports", capacity=100)
        make_event(title="Too Small", category_id="music", capacity=10)
        make_event(title="Draft", category_id="music", capacity=100, status=EventStatus.DRAFT)

        result = service.find_many(
            EventQuery(status=EventStatus.PUBLISHED, category="music", min_capacity=50)
        )

        assert titles(result) == ["Match"]
        assert result["pagination"]["total"] == 1

    def test_search_requires_every_term(self, service, make_event):
        make_event(title="Python Tech Meetup")
        make_event(title="Tech Conference")
        make_event(title="Python Workshop")

        result = service.find_many(EventQuery(search="python tech"))

        assert titles(result) == ["Python Tech Meetup"]

    def test_search_checks_description_and_excerpt(self, service, make_event):
        make_event(title="Saturday Build", excerpt="Hands-on robotics workshop")
        make_event(title="Sunday Talk", description="An afternoon about robotics and AI.")
        make_event(title="Monday Chat")

        result = service.find_many(EventQuery(search="ROBOTICS"))

        assert titles(result) == ["Saturday Build", "Sunday Talk"]

    def test_search_wildcards_are_literal(self, service, make_event):
        make_event(title="100% Fun", slug="fun-100")
        make_event(title="1000 Fun", slug="fun-1000")

        result = service.find_many(EventQuery(search="100%"))

        assert titles(result) == ["100% Fun"]

    def test_free_includes_events_without_price(self, service, make_event):
        make_event(title="No Price")
        make_event(title="Free", price={"amount": 0, "currency": "EUR", "type": "free"})
        make_event(title="Paid", price={"amount": 25, "currency": "EUR", "type": "paid"})

        assert titles(service.find_many(EventQuery(price_type="free"))) == ["No Price", "Free"]
        assert titles(service.find_many(EventQuery(price_type="paid"))) == ["Paid"]

    def test_price_bounds(self, service, make_event):
        make_event(title="Cheap", price={"amount": 10, "currency": "EUR", "type": "paid"})
        make_event(title="Mid", price={"amount": 50, "currency": "EUR", "type": "paid"})
        make_event(title="Pricey", price={"amount": 200, "currency": "EUR", "type": "paid"})
        make_event(title="No Price")

        result = service.find_many(EventQuery(min_price=20, max_price=100))

        assert titles(result) == ["Mid"]

    @pytest.mark.parametrize("has_nft,expected", [(True, ["With NFT"]), (False, ["Without NFT"])])
    def test_has_nft(self, service, make_event, has_nft, expected):
        make_event(title="With NFT", nft_metadata=NFT)
        make_event(title="Without NFT")

        assert titles(service.find_many(EventQuery(has_nft=has_nft))) == expected

    def test_date_range(self, service, make_event):
        make_event(
            title="Inside",
            start_datetime=datetime(2025, 7, 10, 9, tzinfo=UTC),
            end_datetime=datetime(2025, 7, 10, 17, tzinfo=UTC),
        )
        make_event(
            title="Starts Too Early",
            start_datetime=datetime(2025, 6, 30, 9, tzinfo=UTC),
            end_datetime=datetime(2025, 7, 2, 17, tzinfo=UTC),
        )
        make_event(
            title="Ends Too Late",
            start_datetime=datetime(2025, 7, 30, 9, tzinfo=UTC),
            end_datetime=datetime(2025, 8, 2, 17, tzinfo=UTC),
        )

        result = service.find_many(
            EventQuery(from_date="2025-07-01T00:00:00Z", to_date="2025-07-31T23:59:59Z")
        )

        assert titles(result) == ["Inside"]

    def test_capacity_range(self, service, make_event):
        make_event(title="Small", capacity=10)
        make_event(title="Medium", capacity=100)
        make_event(title="Large", capacity=1000)
        make_event(title="Unlimited")

        result = service.find_many(EventQuery(min_capacity=50, max_capacity=500))

        assert titles(result) == ["Medium"]

    def test_visibility_filter(self, service, make_event):
        make_event(title="Open")
        make_event(title="Hidden", visibility=EventVisibility.UNLISTED)

        result = service.find_many(EventQuery(visibility=EventVisibility.UNLISTED))

        assert titles(result) == ["Hidden"]


class TestPagingAndSorting:
    """Tests for the page window and ordering of results."""

    def test_total_counts_all_matches(self, service, make_event):
        for _ in range(5):
            make_event()
        make_event(status=EventStatus.DRAFT)

        result = service.find_many(EventQuery(status=EventStatus.PUBLISHED, page=3, limit=2))

        assert len(result["data"]) == 1
        assert result["pagination"] == {
            "page": 3,
            "limit": 2,
            "total": 5,
            "total_pages": 3,
            "has_next": False,
            "has_prev": True,
        }

    def test_page_past_the_end_is_empty(self, service, make_event):
        make_event()

        result = service.find_many(EventQuery(page=5, limit=10))

        assert result["data"] == []
        assert result["pagination"]["total"] == 1

    def test_default_sort_is_start_date_ascending(self, service, make_event):
        make_event(title="Later", start_datetime=datetime(2025, 9, 1, tzinfo=UTC), end_datetime=datetime(2025, 9, 2, tzinfo=UTC))
        make_event(title="Sooner", start_datetime=datetime(2025, 8, 1, tzinfo=UTC), end_datetime=datetime(2025, 8, 2, tzinfo=UTC))

        assert titles(service.find_many(EventQuery())) == ["Sooner", "Later"]

    def test_sort_by_title_descending(self, service, make_event):
        for title in ("Beta", "Alpha", "Gamma"):
            make_event(title=title)

        result = service.find_many(EventQuery(sort_by="title", sort_order="desc"))

        assert titles(result) == ["Gamma", "Beta", "Alpha"]

    def test_sort_by_capacity(self, service, make_event):
        make_event(title="Big", capacity=500)
        make_event(title="Tiny", capacity=5)

        result = service.find_many(EventQuery(sort_by="capacity"))

        assert titles(result) == ["Tiny", "Big"]
