import threading

import pytest

from achievements import AchievementEngine, ActivityCounters, AwardResult
from badges import BadgeDefinition
from errors import ValidationFailure


def ids(result):
    return [b.id for b in result]


def test_threshold_crossing_is_exact(store):
    badge = BadgeDefinition('ten', 'Ten', 'Search 10', 'searches', 10)
    engine = AchievementEngine(store, badges=[badge])
    assert ids(engine.evaluate_badges('ash', {'searches': 9})) == []
    assert ids(engine.evaluate_badges('ash', {'searches': 10})) == ['ten']
    assert ids(engine.evaluate_badges('ash', {'searches': 10})) == []
    assert ids(engine.evaluate_badges('ash', {'searches': 50})) == []


def test_water_badge_catch_scenario(store):
    engine = AchievementEngine(store)
    store.set('trainerStats', 'ash', {'searches': 0, 'catches': 4, 'favorites': 0})
    result = engine.report_catch('ash')
    assert ids(result) == ['water']
    assert engine.get_stats('ash').catches == 5
    again = engine.report_catch('ash')
    assert ids(again) == []
    assert not again.failed
    assert engine.get_stats('ash').catches == 6


def test_report_search_initializes_counters(store):
    engine = AchievementEngine(store)
    result = engine.report_search('misty')
    assert isinstance(result, AwardResult)
    assert ids(result) == []
    stats = engine.get_stats('misty')
    assert stats == ActivityCounters(searches=1, catches=0, favorites=0)
    doc = store.get('trainerStats', 'misty')
    assert 'created_at' in doc and 'last_search_at' in doc


def test_ten_searches_award_boulder_once(store):
    engine = AchievementEngine(store)
    earned = []
    for _ in range(12):
        earned.extend(ids(engine.report_search('brock')))
    assert earned == ['boulder']
    assert [b.id for b in engine.earned_badges('brock')] == ['boulder']


def test_multiple_badges_in_declaration_order(store):
    engine = AchievementEngine(store)
    result = engine.evaluate_badges('gary', {'searches': 60, 'catches': 0, 'favorites': 0})
    assert ids(result) == ['boulder', 'rainbow', 'volcano']
    doc = store.get('trainers', 'gary')
    assert doc['badges'] == ['boulder', 'rainbow', 'volcano']
    assert set(doc['awarded_at']) == {'boulder', 'rainbow', 'volcano'}


def test_favorites_total_is_absolute_and_badges_never_revert(store):
    engine = AchievementEngine(store)
    assert ids(engine.report_favorites_total('ash', 2)) == []
    assert ids(engine.report_favorites_total('ash', 3)) == ['thunder']
    assert engine.get_stats('ash').favorites == 3
    # un-favoriting drops the counter but the badge stays earned
    assert ids(engine.report_favorites_total('ash', 1)) == []
    assert engine.get_stats('ash').favorites == 1
    assert ids(engine.report_favorites_total('ash', 3)) == []
    assert 'thunder' in [b.id for b in engine.earned_badges('ash')]


def test_favorites_total_keeps_other_counters(store):
    engine = AchievementEngine(store)
    engine.report_search('ash')
    engine.report_favorites_total('ash', 4)
    assert engine.get_stats('ash') == ActivityCounters(searches=1, catches=0, favorites=4)


def test_favorites_total_validation(store):
    engine = AchievementEngine(store)
    for bad in (-1, 1.5, '3', True):
        with pytest.raises(ValidationFailure):
            engine.report_favorites_total('ash', bad)
    assert store.get('trainerStats', 'ash') is None


def test_missing_user_is_skipped(broken_store):
    engine = AchievementEngine(broken_store)
    for result in (engine.report_search(None), engine.report_catch(''),
                   engine.report_favorites_total(None, 3), engine.evaluate_badges('', {'searches': 99})):
        assert result.skipped
        assert not result.failed
        assert list(result) == []


def test_persistence_failure_returns_failed_empty_result(broken_store):
    engine = AchievementEngine(broken_store)
    for result in (engine.report_search('ash'), engine.report_catch('ash'),
                   engine.report_favorites_total('ash', 5), engine.evaluate_badges('ash', {'catches': 99})):
        assert result.failed
        assert result.error
        assert len(result) == 0
        assert not result
    assert engine.get_stats('ash') == ActivityCounters()
    assert engine.earned_badges('ash') == []


def test_fallback_without_atomic_primitives(dict_store):
    engine = AchievementEngine(dict_store)
    dict_store.set('trainerStats', 'ash', {'searches': 0, 'catches': 4, 'favorites': 0})
    assert ids(engine.report_catch('ash')) == ['water']
    assert ids(engine.report_catch('ash')) == []
    assert dict_store.get('trainers', 'ash')['badges'] == ['water']
    for _ in range(4):
        engine.report_catch('ash')
    assert ids(engine.report_catch('ash')) == []
    assert engine.get_stats('ash').catches == 11
    assert dict_store.get('trainers', 'ash')['badges'] == ['water', 'soul']


def test_fallback_awards_soul_after_water(dict_store):
    engine = AchievementEngine(dict_store)
    dict_store.set('trainerStats', 'ash', {'catches': 9})
    dict_store.set('trainers', 'ash', {'badges': ['water']})
    assert ids(engine.report_catch('ash')) == ['soul']
    assert dict_store.get('trainers', 'ash')['badges'] == ['water', 'soul']


def test_catalog_lookups_and_progress(store):
    engine = AchievementEngine(store)
    assert engine.get_badge_by_id('earth').threshold == 25
    assert engine.get_badge_by_id('missing') is None
    assert len(engine.get_all_badges()) == 8
    badge = engine.get_badge_by_id('rainbow')
    assert engine.progress(badge, ActivityCounters(searches=10)) == {
        'current': 10, 'required': 25, 'percentage': 40, 'earned': False,
    }


def test_concurrent_catches_announce_each_badge_once(store):
    engine = AchievementEngine(store)
    store.set('trainerStats', 'ash', {'searches': 0, 'catches': 0, 'favorites': 0})
    results = []

    def catch():
        results.append(engine.report_catch('ash'))

    threads = [threading.Thread(target=catch) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(results) == 20
    assert not any(r.failed for r in results)
    announced = [b.id for r in results for b in r]
    assert sorted(announced) == ['soul', 'water']
    assert engine.get_stats('ash').catches == 20
    assert ids(engine.earned_badges('ash')) == ['water', 'soul']
