"""Rankers and record filters."""

from datetime import date

import pytest

from app.analyzer.normalizer import extract_description_options
from app.analyzer.selectors import (
    brand_to_slug,
    exclude_blocked_brands,
    filter_by_brands,
    filter_by_date_range,
    filter_by_descriptions,
    filter_hide_unknown,
    list_brands,
    paginate,
    search_accounts,
    search_posts,
    slug_to_brand,
    top_n,
)
from app.core.metric_registry import (
    ACCOUNT_SORT_FIELDS,
    BRAND_SORT_FIELDS,
    POST_SORT_FIELDS,
    SortField,
    parse_sort_field,
)
from app.models.dashboard_models import CombineMode, MatchMode


def test_top_n_orders_descending(post):
    records = [post(plays=5), post(plays=50), post(plays=20)]
    top = top_n(records, SortField.PLAYS, 2)
    assert [r.plays for r in top] == [50, 20]
    assert [r.plays for r in records] == [5, 50, 20]


def test_top_n_more_than_available(post):
    records = [post(plays=1), post(plays=2)]
    assert len(top_n(records, "plays", 10)) == 2


def test_top_n_ties_keep_source_order(post):
    records = [post(plays=5, username="first"), post(plays=5, username="second")]
    assert [r.username for r in top_n(records, SortField.PLAYS, 2)] == [
        "first",
        "second",
    ]


def test_top_n_accepts_extractor_and_missing_is_zero():
    items = [{"score": 3}, {}, {"score": None}, {"score": 7}]
    top = top_n(items, SortField.TOTAL_VIEWS, 4)
    assert top == items  # nothing has total_views → all tie at 0
    assert top_n(items, lambda i: i.get("score") or 0, 1) == [{"score": 7}]


def test_parse_sort_field_rejects_unknown():
    assert parse_sort_field("avg_views") is SortField.AVG_VIEWS
    with pytest.raises(ValueError):
        parse_sort_field("nope")


def test_parse_sort_field_limits_to_table_fields():
    assert parse_sort_field("plays", POST_SORT_FIELDS) is SortField.PLAYS
    with pytest.raises(ValueError, match="Cannot sort"):
        parse_sort_field("total_views", POST_SORT_FIELDS)
    with pytest.raises(ValueError, match="Cannot sort"):
        parse_sort_field("plays", ACCOUNT_SORT_FIELDS)
    assert parse_sort_field("active_accounts", BRAND_SORT_FIELDS) is SortField.ACTIVE_ACCOUNTS


def test_filter_by_brands_empty_selection_keeps_all(post):
    records = [post(brand="Acme"), post(brand="Globex")]
    assert filter_by_brands(records, []) == records


def test_filter_by_brands(post):
    records = [post(brand="Acme"), post(brand="Globex"), post(brand="Initech")]
    kept = filter_by_brands(records, ["Acme", "Initech"])
    assert [r.brand for r in kept] == ["Acme", "Initech"]


def test_filter_hide_unknown(post):
    records = [post(brand="Acme"), post(brand=""), post(brand="Unknown")]
    assert [r.brand for r in filter_hide_unknown(records)] == ["Acme"]


def test_filter_by_date_range_inclusive(post):
    records = [
        post(date_posted="2024-01-01"),
        post(date_posted="2024-01-05"),
        post(date_posted="2024-01-10"),
    ]
    kept = filter_by_date_range(records, date(2024, 1, 5), date(2024, 1, 10))
    assert [r.date_posted for r in kept] == ["2024-01-05", "2024-01-10"]
    assert filter_by_date_range(records) == records


@pytest.fixture
def described(post):
    return [
        post(description="Summer sale"),
        post(description="summer SALE is here"),
        post(description="Winter drop"),
        post(description="summer sale winter drop"),
    ]


def _ids(options, *texts):
    return [o.id for o in options if o.normalized_text in texts]


def test_filter_by_descriptions_no_selection(described):
    options = extract_description_options(described)
    assert filter_by_descriptions(described, [], options) == described


def test_filter_exact_or(described):
    options = extract_description_options(described)
    ids = _ids(options, "summer sale", "winter drop")
    kept = filter_by_descriptions(
        described, ids, options, MatchMode.EXACT, CombineMode.OR
    )
    assert [r.description for r in kept] == ["Summer sale", "Winter drop"]


def test_filter_exact_and_with_two_texts_is_empty(described):
    options = extract_description_options(described)
    ids = _ids(options, "summer sale", "winter drop")
    kept = filter_by_descriptions(
        described, ids, options, MatchMode.EXACT, CombineMode.AND
    )
    assert kept == []


def test_filter_contains_or(described):
    options = extract_description_options(described)
    ids = _ids(options, "summer sale")
    kept = filter_by_descriptions(
        described, ids, options, MatchMode.CONTAINS, CombineMode.OR
    )
    assert len(kept) == 3


def test_filter_contains_and(described):
    options = extract_description_options(described)
    ids = _ids(options, "summer sale", "winter drop")
    kept = filter_by_descriptions(
        described, ids, options, MatchMode.CONTAINS, CombineMode.AND
    )
    assert [r.description for r in kept] == ["summer sale winter drop"]


def test_exclude_blocked_brands():
    assert exclude_blocked_brands(["Acme", "0", " ", "Unknown"]) == ["Acme"]
    assert exclude_blocked_brands([" PLEASEEE ", "2", "3", "Globex"]) == ["Globex"]
    assert exclude_blocked_brands(["Acme", "x"], blocked={"x"}) == ["Acme"]


def test_list_brands_distinct_in_first_seen_order(post):
    records = [
        post(brand="Globex"),
        post(brand="Acme"),
        post(brand="Globex"),
        post(brand="Unknown"),
        post(brand=""),
    ]
    assert list_brands(records) == ["Globex", "Acme"]


def test_brand_slugs():
    assert brand_to_slug("Café Niño & Co.") == "cafe-nino-co"
    assert brand_to_slug("  Acme  Labs ") == "acme-labs"
    assert slug_to_brand("CAFE-NINO-CO", ["Acme", "Café Niño & Co."]) == "Café Niño & Co."
    assert slug_to_brand("missing", ["Acme"]) is None


def test_search_posts(post):
    records = [
        post(description="Big launch", username="x", plays=5),
        post(description="nothing", username="launchpad", plays=50),
        post(description="other", username="y", video_id="LAUNCH1", plays=1),
        post(description="unrelated", username="z", plays=100),
    ]
    hits = search_posts(records, "Launch")
    assert [h.plays for h in hits] == [50, 5, 1]
    assert search_posts(records, "   ") == []


def test_search_accounts(post):
    records = [
        post(username="alpha", plays=10),
        post(username="alphabet", plays=30),
        post(username="beta", plays=99),
    ]
    hits = search_accounts(records, "ALPHA")
    assert [a.username for a in hits] == ["alphabet", "alpha"]


def test_paginate():
    items = list(range(25))
    page, total = paginate(items, 3, 10)
    assert page == [20, 21, 22, 23, 24]
    assert total == 3
    assert paginate([], 1, 10) == ([], 0)
