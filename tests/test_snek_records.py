"""
Tests for snek_records.py - persisted high score and top records.
"""

import json
import os
import sys
import time

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from snek_game import RIGHT, SnekGame
from snek_records import HIGH_SCORE_KEY, RECORDS_KEY, RECORDS_LIMIT, JsonStore, Record, Records


class TestJsonStore:
    def test_missing_key_returns_default(self, tmp_path):
        store = JsonStore(tmp_path)
        assert store.get("nothing", 7) == 7

    def test_set_then_get(self, tmp_path):
        store = JsonStore(tmp_path / "nested")
        assert store.set("k", {"a": [1, 2]}) is True
        assert store.get("k") == {"a": [1, 2]}
        assert not list((tmp_path / "nested").glob("*.tmp"))

    def test_malformed_json_returns_default(self, tmp_path):
        store = JsonStore(tmp_path)
        store.path_for("k").write_text("{not json", encoding="utf-8")
        assert store.get("k", "fallback") == "fallback"

    def test_unwritable_root_does_not_raise(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        store = JsonStore(blocker)
        assert store.set("k", 1) is False


class TestHighScore:
    def test_absent_is_zero(self, tmp_path):
        assert Records.at(tmp_path).load_high_score() == 0

    def test_saved_value_is_loaded(self, tmp_path):
        records = Records.at(tmp_path)
        records.save_high_score(150)
        assert Records.at(tmp_path).load_high_score() == 150

    def test_corrupt_value_is_zero(self, tmp_path):
        (tmp_path / f"{HIGH_SCORE_KEY}.json").write_text('"abc"', encoding="utf-8")
        assert Records.at(tmp_path).load_high_score() == 0

    def test_garbage_file_is_zero(self, tmp_path):
        (tmp_path / f"{HIGH_SCORE_KEY}.json").write_bytes(b"\xff\x00\x12")
        assert Records.at(tmp_path).load_high_score() == 0

    @pytest.mark.parametrize("text", ["NaN", "Infinity", "-Infinity", "1e400", "-5"])
    def test_non_finite_or_negative_is_zero(self, tmp_path, text):
        (tmp_path / f"{HIGH_SCORE_KEY}.json").write_text(text, encoding="utf-8")
        assert Records.at(tmp_path).load_high_score() == 0

    def test_non_finite_high_score_does_not_stop_a_game(self, tmp_path):
        (tmp_path / f"{HIGH_SCORE_KEY}.json").write_text("Infinity", encoding="utf-8")
        assert SnekGame(records=Records.at(tmp_path)).high_score == 0


class TestRecords:
    def test_empty_when_absent(self, tmp_path):
        assert Records.at(tmp_path).load() == []

    def test_ties_keep_earlier_first(self, tmp_path):
        records = Records.at(tmp_path)
        records.submit(150, 1000.0)
        records.submit(90, 2000.0)
        records.submit(150, 3000.0)
        assert records.load() == [
            Record(150, 1000.0),
            Record(150, 3000.0),
            Record(90, 2000.0),
        ]

    def test_truncates_to_limit(self, tmp_path):
        records = Records.at(tmp_path)
        for i in range(RECORDS_LIMIT + 2):
            records.submit(10 * (i + 1), float(i))
        loaded = records.load()
        assert len(loaded) == RECORDS_LIMIT
        assert loaded[0].score == 10 * (RECORDS_LIMIT + 2)
        assert loaded[-1].score == 30

    def test_low_score_falls_off_full_table(self, tmp_path):
        records = Records.at(tmp_path)
        for i in range(RECORDS_LIMIT):
            records.submit(100, float(i))
        result = records.submit(10, 99.0)
        assert len(result) == RECORDS_LIMIT
        assert all(r.score == 100 for r in result)

    def test_persisted_as_array_of_objects(self, tmp_path):
        Records.at(tmp_path).submit(40, 5.0)
        raw = json.loads((tmp_path / f"{RECORDS_KEY}.json").read_text(encoding="utf-8"))
        assert raw == [{"score": 40, "time": 5.0}]

    def test_malformed_document_is_empty(self, tmp_path):
        (tmp_path / f"{RECORDS_KEY}.json").write_text('{"score": 1}', encoding="utf-8")
        assert Records.at(tmp_path).load() == []

    def test_malformed_entries_are_dropped(self, tmp_path):
        doc = [{"score": 20, "time": 1}, {"score": "x", "time": 2}, {"time": 3}, 5]
        (tmp_path / f"{RECORDS_KEY}.json").write_text(json.dumps(doc), encoding="utf-8")
        assert Records.at(tmp_path).load() == [Record(20, 1.0)]

    @pytest.mark.parametrize("stamp", ["Infinity", "-Infinity", "NaN", "1e400", "1e300", "-1"])
    def test_unusable_timestamps_are_dropped(self, tmp_path, stamp):
        text = f'[{{"score": 10, "time": {stamp}}}, {{"score": 5, "time": 2}}]'
        (tmp_path / f"{RECORDS_KEY}.json").write_text(text, encoding="utf-8")
        loaded = Records.at(tmp_path).load()
        assert loaded == [Record(5, 2.0)]
        for record in loaded:
            time.localtime(record.time)

    def test_submit_survives_corrupt_file(self, tmp_path):
        (tmp_path / f"{RECORDS_KEY}.json").write_text("[[[", encoding="utf-8")
        records = Records.at(tmp_path)
        assert records.submit(30, 1.0) == [Record(30, 1.0)]


class TestWithGame:
    def test_game_persists_through_records(self, tmp_path):
        records = Records.at(tmp_path)
        game = SnekGame(records=records, clock=lambda: 42.0)
        game.set_food((6, 10))
        game.start()
        game.step()
        game.arrange([(20, 10)], direction=RIGHT, food=(0, 0))
        game.step()

        assert records.load_high_score() == 10
        assert records.load() == [Record(10, 42.0)]
        assert SnekGame(records=Records.at(tmp_path)).high_score == 10
