"""Tests for the bundled content store."""

from datetime import date

from griot.content import ContentStore, quiz_seed


class TestContentStore:
    def test_quiz_seed(self):
        assert quiz_seed(date(2025, 2, 13)) == 20250213

    def test_daily_quiz_order_is_stable_for_the_day(self):
        store = ContentStore()

        picked = store.daily_quiz(date(2025, 2, 13))

        # (id * 20250213) % 100 == (id * 13) % 100, so id 8 (104 -> 4) sorts first
        assert [q["id"] for q in picked] == [8, 1, 2, 3, 4]
        assert store.daily_quiz(date(2025, 2, 13)) == picked

    def test_daily_quiz_count(self):
        assert len(ContentStore().daily_quiz(date(2025, 2, 1), count=3)) == 3

    def test_timeline_falls_back_to_default(self):
        store = ContentStore()

        assert store.timeline(None) == store.timeline("12-31")
        assert store.timeline("2-21")[0]["title"] == "Malcolm X Assassinated"

    def test_returned_lists_are_copies(self):
        store = ContentStore()
        store.facts().clear()

        assert store.facts()
