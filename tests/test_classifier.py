# tests/test_classifier.py
from src.domain.classifier import ALL_TARGETS, FALLBACK_TARGET, classify, is_past, unique_targets
from src.domain.models import Listing
from tests.conftest import make_listing


def _ids(groups):
    return {key: [l.id for l in items] for key, items in groups.items()}


def test_active_listing_sorts_before_expired(now):
    a = make_listing("A", days=-1)
    b = make_listing("B", days=1)
    assert _ids(classify([a, b], now)) == {"Teachers": ["B", "A"]}


def test_expired_listings_most_recent_first(now):
    c = make_listing("C", days=-10)
    d = make_listing("D", days=-3)
    assert _ids(classify([c, d], now)) == {"Teachers": ["D", "C"]}


def test_active_listings_soonest_deadline_first(now):
    far = make_listing("far", days=30)
    soon = make_listing("soon", days=2)
    assert _ids(classify([far, soon], now)) == {"Teachers": ["soon", "far"]}


def test_deadline_today_is_still_active(now):
    today = make_listing("today", days=0)
    assert not is_past(today, now)
    assert _ids(classify([make_listing("old", days=-1), today], now)) == {"Teachers": ["today", "old"]}


def test_dated_active_before_undated_then_expired(now):
    undated = make_listing("undated")
    dated = make_listing("dated", days=90)
    expired = make_listing("expired", days=-1)
    assert _ids(classify([expired, undated, dated], now)) == {"Teachers": ["dated", "undated", "expired"]}


def test_undated_listings_newest_upload_first(now):
    older = make_listing("older", created_minute=1)
    newer = make_listing("newer", created_minute=5)
    missing = Listing(id="missing", target="Teachers")
    assert _ids(classify([older, missing, newer], now)) == {"Teachers": ["newer", "older", "missing"]}


def test_undated_listing_is_never_past(now):
    assert not is_past(make_listing("x"), now)
    assert not is_past(Listing(id="y", application_period="상시"), now)


def test_groups_keep_first_seen_order(now):
    listings = [
        make_listing("1", days=5, target="B"),
        make_listing("2", days=6, target="A"),
        make_listing("3", days=7, target="B"),
    ]
    groups = classify(listings, now)
    assert list(groups) == ["B", "A"]
    assert _ids(groups) == {"B": ["1", "3"], "A": ["2"]}


def test_missing_target_goes_to_fallback_bucket(now):
    listings = [make_listing("1", days=1, target=None), make_listing("2", days=2, target="")]
    assert _ids(classify(listings, now)) == {FALLBACK_TARGET: ["1", "2"]}


def test_filter_by_target(now):
    listings = [make_listing("1", target="Teachers"), make_listing("2", target="Staff")]
    assert _ids(classify(listings, now, filter_target="Staff")) == {"Staff": ["2"]}
    assert _ids(classify(listings, now, filter_target="Nobody")) == {}


def test_filter_matches_literal_target_only(now):
    listings = [
        make_listing("none", target=None),
        make_listing("empty", target=""),
        make_listing("lit", target=FALLBACK_TARGET),
    ]
    assert _ids(classify(listings, now, filter_target=FALLBACK_TARGET)) == {FALLBACK_TARGET: ["lit"]}


def test_search_skips_non_text_fields(now):
    odd = Listing(id="n", summary=123, target="T")  # type: ignore[arg-type]
    assert _ids(classify([odd], now, search_term="x")) == {}
    assert _ids(classify([odd], now, search_term="t")) == {"T": ["n"]}


def test_search_is_case_insensitive_over_summary_and_target(now):
    listings = [
        make_listing("1", summary="Python for Beginners", target="Teachers"),
        make_listing("2", summary="Safety training", target="Science Dept"),
        make_listing("3", summary=None, target=None),
    ]
    assert _ids(classify(listings, now, search_term="PYTHON")) == {"Teachers": ["1"]}
    assert _ids(classify(listings, now, search_term="science")) == {"Science Dept": ["2"]}


def test_every_filtered_listing_appears_exactly_once(now):
    listings = [make_listing(str(i), days=(i % 7) - 3 if i % 3 else None, target=["X", "Y", None][i % 3]) for i in range(20)]
    groups = classify(listings, now, ALL_TARGETS, "")
    seen = [l.id for items in groups.values() for l in items]
    assert sorted(seen) == sorted(l.id for l in listings)
    assert len(seen) == len(set(seen))


def test_unique_targets(now):
    listings = [make_listing("1", target="B"), make_listing("2", target=None), make_listing("3", target="B")]
    assert unique_targets(listings) == [ALL_TARGETS, "B", FALLBACK_TARGET]
    assert unique_targets([]) == [ALL_TARGETS]
