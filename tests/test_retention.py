from datetime import datetime, timedelta

import pytest

from conftest import NOW, make_season, make_series, watched
from prunarr.errors import InventoryError
from prunarr.models import Tag, WatchedSeason
from prunarr.retention import (
    NormalizedTitleMatcher,
    decide,
    get_matcher,
    watched_keys,
)

RETAIN = Tag(id=7, label="retain")
SIXTY_DAYS = timedelta(days=60)


def _decide(serieses, watched_seasons, tag=None, retain=SIXTY_DAYS, now=NOW):
    return decide(serieses, watched_keys(watched_seasons), tag, retain, now)


def _eligible(decision):
    return {(series.title, s.season_number) for series, seasons in decision.items() for s in seasons}


def test_scenario_a_old_watched_season_is_eligible():
    series = make_series()
    decision = _decide([series], watched(("Show X", 1)))
    assert decision == {series: [series.seasons[0]]}


def test_scenario_b_season_inside_retention_is_kept():
    decision = _decide(
        [make_series()], watched(("Show X", 1)), retain=timedelta(days=90)
    )
    assert decision == {}


def test_scenario_c_exempt_series_is_never_eligible():
    series = make_series(
        tags=[RETAIN.id],
        seasons=[make_season(1), make_season(2, aired_days_ago=400)],
    )
    decision = _decide([series], watched(("Show X", 1), ("Show X", 2)), tag=RETAIN)
    assert decision == {}


def test_scenario_d_still_airing_season_is_kept():
    season = make_season(next_airing=NOW + timedelta(days=7))
    decision = _decide([make_series(seasons=[season])], watched(("Show X", 1)))
    assert decision == {}


def test_next_airing_in_the_past_still_counts_as_airing():
    season = make_season(next_airing=NOW - timedelta(days=1))
    assert _decide([make_series(seasons=[season])], watched(("Show X", 1))) == {}


def test_unwatched_season_is_kept():
    series = make_series(seasons=[make_season(1), make_season(2)])
    decision = _decide([series], watched(("Show X", 2)))
    assert _eligible(decision) == {("Show X", 2)}


def test_partially_watched_season_is_kept():
    partial = [WatchedSeason("Show X", "Season 1", fully_watched=False)]
    assert _decide([make_series()], partial) == {}


def test_empty_season_is_kept():
    season = make_season(size=0, files=0)
    assert _decide([make_series(seasons=[season])], watched(("Show X", 1))) == {}


def test_season_without_previous_airing_is_kept():
    season = make_season(aired_days_ago=None)
    assert _decide([make_series(seasons=[season])], watched(("Show X", 1))) == {}


def test_retention_deadline_is_exclusive():
    season = make_season(aired_days_ago=60)
    assert _decide([make_series(seasons=[season])], watched(("Show X", 1))) == {}


def test_zero_retention_allows_anything_already_aired():
    season = make_season(aired_days_ago=0.01)
    series = make_series(seasons=[season])
    decision = _decide([series], watched(("Show X", 1)), retain=timedelta(0))
    assert decision == {series: [season]}


def test_tag_only_applies_when_configured():
    series = make_series(tags=[RETAIN.id])
    assert _decide([series], watched(("Show X", 1)), tag=None) == {series: series.seasons}


def test_other_tags_do_not_exempt():
    series = make_series(tags=[3, 4])
    assert _decide([series], watched(("Show X", 1)), tag=RETAIN) == {series: series.seasons}


def test_series_without_eligible_seasons_are_left_out():
    kept = make_series("Kept", series_id=1)
    gone = make_series("Gone", series_id=2)
    decision = _decide([kept, gone], watched(("Gone", 1)))
    assert list(decision) == [gone]


def test_inventory_order_is_preserved():
    serieses = [
        make_series(
            title,
            series_id=i,
            seasons=[make_season(3), make_season(1), make_season(2)],
        )
        for i, title in enumerate(["B", "A", "C"])
    ]
    seen = [(t, n) for t in ["A", "B", "C"] for n in (1, 2, 3)]
    decision = _decide(serieses, watched(*seen))
    assert [s.title for s in decision] == ["B", "A", "C"]
    assert [s.season_number for s in decision[serieses[0]]] == [3, 1, 2]


def test_decision_is_repeatable():
    serieses = [
        make_series("One", series_id=1, seasons=[make_season(1), make_season(2, size=0)]),
        make_series("Two", series_id=2, tags=[RETAIN.id]),
        make_series("Three", series_id=3, seasons=[make_season(1, aired_days_ago=5)]),
    ]
    seen = watched(("One", 1), ("One", 2), ("Two", 1), ("Three", 1))
    first = _decide(serieses, seen, tag=RETAIN)
    second = _decide(serieses, seen, tag=RETAIN)
    assert first == second
    assert _eligible(first) == {("One", 1)}


@pytest.mark.parametrize("aired_days_ago", [None, 1, 59, 61, 365])
@pytest.mark.parametrize("airing", [False, True])
@pytest.mark.parametrize("size", [0, 1])
@pytest.mark.parametrize("tagged", [False, True])
@pytest.mark.parametrize("is_watched", [False, True])
def test_eligible_exactly_when_every_rule_passes(
    aired_days_ago, airing, size, tagged, is_watched
):
    season = make_season(
        aired_days_ago=aired_days_ago,
        next_airing=NOW + timedelta(days=1) if airing else None,
        size=size,
    )
    series = make_series(seasons=[season], tags=[RETAIN.id] if tagged else [])
    seen = watched(("Show X", 1)) if is_watched else []

    decision = _decide([series], seen, tag=RETAIN)

    expected = (
        not tagged
        and is_watched
        and not airing
        and aired_days_ago is not None
        and aired_days_ago > 60
        and size > 0
    )
    assert (decision == {series: [season]}) is expected


def test_huge_sizes_are_fine():
    season = make_season(size=2**80)
    series = make_series(seasons=[season])
    assert _decide([series], watched(("Show X", 1))) == {series: [season]}


def test_negative_size_is_rejected_with_context():
    series = make_series(title="Broken", seasons=[make_season(4, size=-1)])
    with pytest.raises(InventoryError, match="'Broken'.*season 4"):
        _decide([series], watched(("Broken", 4)))


def test_naive_airing_timestamp_is_rejected():
    season = make_season()
    season.statistics.previous_airing = datetime(2024, 1, 1)
    with pytest.raises(InventoryError, match="previous_airing"):
        _decide([make_series(seasons=[season])], [])


def test_naive_now_is_rejected():
    with pytest.raises(ValueError):
        _decide([make_series()], [], now=datetime(2024, 6, 1))


def test_negative_retention_is_rejected():
    with pytest.raises(ValueError):
        _decide([make_series()], [], retain=timedelta(days=-1))


def test_skip_reasons_are_logged(caplog):
    airing = make_season(2, next_airing=NOW + timedelta(days=1))
    young = make_season(3, aired_days_ago=10)
    series = make_series(seasons=[make_season(1), airing, young])

    with caplog.at_level("DEBUG", logger="prunarr.retention"):
        _decide([series], watched(("Show X", 2), ("Show X", 3)))

    messages = [r.getMessage() for r in caplog.records]
    assert "Skipping Show X - Season 1 because unwatched" in messages
    assert "Skipping Show X - Season 2 because still airing" in messages
    assert any(
        m.startswith("Skipping Show X - Season 3 because retained for another 50days")
        for m in messages
    )


def test_watched_keys_only_include_fully_watched():
    seasons = [
        WatchedSeason("Show X", "Season 1", True),
        WatchedSeason("Show X", "Season 2", False),
    ]
    assert watched_keys(seasons) == {("Show X", "Season 1")}


def test_exact_matching_is_the_default():
    series = make_series(title="Marvel's Agents of S.H.I.E.L.D.")
    seen = watched(("Marvels Agents of SHIELD", 1))
    assert _decide([series], seen) == {}


def test_normalized_matching_ignores_case_and_punctuation():
    matcher = NormalizedTitleMatcher()
    series = make_series(title="The Office (US)")
    seen = [WatchedSeason("the office  us", "Season 1", True)]

    decision = decide(
        [series], watched_keys(seen, matcher), None, SIXTY_DAYS, NOW, matcher
    )

    assert decision == {series: series.seasons}


def test_get_matcher():
    assert get_matcher("normalized").name == "normalized"
    with pytest.raises(ValueError):
        get_matcher("fuzzy")
