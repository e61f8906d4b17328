"""
Integration Tests for SqlItemStore.

Runs the store and the engine against a temporary SQLite file, so no
database server is needed.
"""

from dataclasses import replace

import pytest
from sqlalchemy.exc import IntegrityError

from krypto.engine import ReviewEngine
from krypto.srs.models import ItemType, ReviewItem, ReviewLogEntry
from krypto.srs.quality import MAX_RESPONSE_MS
from krypto.store.base import ItemStore
from krypto.store.sql import SqlItemStore

pytestmark = pytest.mark.integration


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'nested' / 'state.db'}"


@pytest.fixture
def sql_store(db_url):
    store = SqlItemStore(db_url)
    yield store
    store.close()


def log_entry(item_id, now, quality=5):
    return ReviewLogEntry(
        item_id=item_id,
        item_type=ItemType.LETTER,
        correct=quality >= 3,
        response_time_ms=1500,
        quality=quality,
        reviewed_at=now,
    )


class TestSqlItemStore:
    def test_satisfies_protocol(self, sql_store):
        assert isinstance(sql_store, ItemStore)

    def test_put_and_get(self, sql_store, sample_item):
        sql_store.put(sample_item)
        assert sql_store.get("letter-alpha") == sample_item
        assert sql_store.get("letter-omega") is None

    def test_upsert(self, sql_store, sample_item):
        sql_store.put(sample_item)
        sql_store.put(replace(sample_item, interval_days=6, repetitions=2))
        assert sql_store.count() == 1
        assert sql_store.get("letter-alpha").interval_days == 6

    def test_order_and_filters(self, sql_store, small_catalog, now):
        sql_store.put_many(small_catalog.materialize(now))
        assert [i.id for i in sql_store.list_all()] == list(small_catalog)
        nouns = sql_store.list_by_type(ItemType.NOUN_ENDING)
        assert [i.id for i in nouns] == ["noun-2d-masc-nom-s", "noun-2d-masc-gen-s"]
        assert len(sql_store.list_due(as_of=now)) == 6
        assert sql_store.list_due(as_of=now - 1) == []
        assert len(sql_store.list_due(ItemType.LETTER, as_of=now)) == 3

    def test_review_log(self, sql_store, sample_item, now):
        sql_store.save_review(sample_item, log_entry("letter-alpha", now))
        sql_store.save_review(
            replace(sample_item, id="letter-beta"), log_entry("letter-beta", now + 1, quality=1)
        )
        sql_store.save_review(sample_item, log_entry("letter-alpha", now + 2, quality=4))

        assert [e.reviewed_at for e in sql_store.list_reviews()] == [now + 2, now + 1, now]
        alpha = sql_store.list_reviews("letter-alpha", limit=1)
        assert len(alpha) == 1
        assert alpha[0].quality == 4

    def test_failed_save_leaves_item_unchanged(self, sql_store, sample_item, now):
        sql_store.put(sample_item)
        bad_entry = replace(log_entry("letter-alpha", now), quality=None)

        with pytest.raises(IntegrityError):
            sql_store.save_review(replace(sample_item, total_reviews=1), bad_entry)

        assert sql_store.get("letter-alpha").total_reviews == 0
        assert sql_store.list_reviews() == []

    def test_clear(self, sql_store, sample_item, now):
        sql_store.save_review(sample_item, log_entry("letter-alpha", now))
        sql_store.clear()
        assert sql_store.count() == 0
        assert sql_store.list_reviews() == []

    def test_duplicate_review_key_rejected(self, sql_store, sample_item, now):
        sql_store.save_review(sample_item, log_entry("letter-alpha", now))
        with pytest.raises(IntegrityError):
            sql_store.save_review(sample_item, log_entry("letter-alpha", now, quality=1))
        assert len(sql_store.list_reviews()) == 1

    def test_import_snapshot_skips_known_reviews(self, sql_store, sample_item, now):
        entries = [log_entry("letter-alpha", now), log_entry("letter-alpha", now + 5)]
        assert sql_store.import_snapshot([sample_item], entries) == 2
        assert sql_store.import_snapshot([sample_item], entries) == 0
        assert sql_store.count() == 1
        assert len(sql_store.list_reviews()) == 2

    def test_import_snapshot_is_all_or_nothing(self, sql_store, sample_item, now):
        bad_entry = replace(log_entry("letter-alpha", now), quality=None)
        with pytest.raises(IntegrityError):
            sql_store.import_snapshot([sample_item], [bad_entry])
        assert sql_store.count() == 0
        assert sql_store.list_reviews() == []

    def test_persists_across_instances(self, db_url, sample_item):
        first = SqlItemStore(db_url)
        first.put(replace(sample_item, easiness_factor=2.36))
        first.close()

        second = SqlItemStore(db_url)
        assert second.get("letter-alpha").easiness_factor == pytest.approx(2.36)
        second.close()


class TestEngineWithSqlStore:
    def test_full_review_cycle(self, sql_store, small_catalog, rng, now):
        engine = ReviewEngine(sql_store, catalog=small_catalog, rng=rng)
        assert engine.initialize(now) == 6

        batch = engine.get_queue(now)
        assert len(batch) == 6

        updated = engine.grade_review("letter-alpha", True, 1500, now)
        stored = sql_store.get("letter-alpha")
        assert stored == updated
        assert stored.interval_days == 1

        history = engine.review_history("letter-alpha")
        assert len(history) == 1
        assert history[0].quality == 5

        stats = engine.get_stats(ItemType.LETTER, now)
        assert stats.learning == 1
        assert stats.not_started == 2
        assert stats.due_now == 2

    def test_export_to_sql_import(self, sql_store, small_catalog, now):
        source = ReviewEngine(sql_store, catalog=small_catalog)
        source.initialize(now)
        source.grade_review("letter-beta", False, 7000, now)
        data = source.export_data(now)

        source.reset(now)
        assert sql_store.get("letter-beta").total_reviews == 0

        source.import_data(data)
        restored = sql_store.get("letter-beta")
        assert restored.total_reviews == 1
        assert restored.correct_reviews == 0
        assert isinstance(restored, ReviewItem)

        source.import_data(data)
        assert len(source.review_history()) == 1
        assert sql_store.get("letter-beta") == restored

    def test_extreme_latency_is_stored_clamped(self, sql_store, small_catalog, now):
        engine = ReviewEngine(sql_store, catalog=small_catalog)
        engine.initialize(now)

        engine.grade_review("letter-alpha", False, float("inf"), now)
        engine.grade_review("letter-beta", True, 10**30, now)

        entries = {e.item_id: e for e in engine.review_history()}
        assert entries["letter-alpha"].response_time_ms == MAX_RESPONSE_MS
        assert entries["letter-beta"].response_time_ms == MAX_RESPONSE_MS
        assert sql_store.get("letter-alpha").average_response_time == MAX_RESPONSE_MS
