from __future__ import annotations

import json
import os
import tempfile
import unittest
from functools import partial

from trayclock.settings import (
    HOUR_FORMAT_KEY,
    LEGACY_COLOR_INDEX_KEY,
    LEGACY_HOUR_FORMAT_KEY,
    PreferenceStore,
    PreferenceWriter,
    color_index_key,
    load_initial_state,
    migrate_legacy_preferences,
    read_color_index,
    read_hour12,
)
from trayclock.state import ClockState, change_color, reduce, system_color_scheme_change, toggle_hour_format
from trayclock.store import Store
from trayclock.theme import Theme

from tests.fakes import MemoryPrefs


class TestPreferenceStore(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "prefs.json")

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_reads_as_empty(self):
        prefs = PreferenceStore(self.path)
        self.assertIsNone(prefs.get("colorIndex-dark"))

    def test_value_survives_restart(self):
        PreferenceStore(self.path).set(color_index_key(Theme.DARK), "2")
        reopened = PreferenceStore(self.path)
        self.assertEqual(read_color_index(reopened, Theme.DARK), 2)
        self.assertIsNone(read_color_index(reopened, Theme.LIGHT))

    def test_corrupt_file_reads_as_empty(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{not json")
        with self.assertLogs("trayclock.settings", level="WARNING"):
            prefs = PreferenceStore(self.path)
        self.assertIsNone(prefs.get("hourFormat"))

    def test_non_object_file_reads_as_empty(self):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump([1, 2], f)
        with self.assertLogs("trayclock.settings", level="WARNING"):
            prefs = PreferenceStore(self.path)
        self.assertIsNone(prefs.get("0"))

    def test_write_failure_is_logged_and_keeps_old_value(self):
        prefs = PreferenceStore(os.path.join(self._tmp.name, "missing-dir", "prefs.json"))
        with self.assertLogs("trayclock.settings", level="WARNING"):
            prefs.set("hourFormat", "24")
        self.assertIsNone(prefs.get("hourFormat"))

    def test_file_is_plain_json(self):
        prefs = PreferenceStore(self.path)
        prefs.set("hourFormat", "24")
        prefs.set("colorIndex-light", "3")
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(json.load(f), {"hourFormat": "24", "colorIndex-light": "3"})


class TestReadHelpers(unittest.TestCase):
    def test_non_numeric_color_is_absent(self):
        prefs = MemoryPrefs({"colorIndex-dark": "blue"})
        self.assertIsNone(read_color_index(prefs, Theme.DARK))

    def test_out_of_range_color_is_absent(self):
        prefs = MemoryPrefs({"colorIndex-dark": "7", "colorIndex-light": "-1"})
        self.assertIsNone(read_color_index(prefs, Theme.DARK, 4))
        self.assertIsNone(read_color_index(prefs, Theme.LIGHT, 4))

    def test_hour_format(self):
        self.assertTrue(read_hour12(MemoryPrefs()))
        self.assertTrue(read_hour12(MemoryPrefs({HOUR_FORMAT_KEY: "12"})))
        self.assertTrue(read_hour12(MemoryPrefs({HOUR_FORMAT_KEY: "garbage"})))
        self.assertFalse(read_hour12(MemoryPrefs({HOUR_FORMAT_KEY: "24"})))

    def test_initial_state_falls_back_to_theme_default(self):
        palette = ("white", "grey", "black")
        self.assertEqual(load_initial_state(MemoryPrefs(), Theme.DARK, palette), ClockState(0, True, Theme.DARK))
        self.assertEqual(load_initial_state(MemoryPrefs(), Theme.LIGHT, palette), ClockState(2, True, Theme.LIGHT))

    def test_initial_state_from_saved_values(self):
        prefs = MemoryPrefs({"colorIndex-light": "1", HOUR_FORMAT_KEY: "24"})
        self.assertEqual(load_initial_state(prefs, Theme.LIGHT), ClockState(1, False, Theme.LIGHT))


class TestMigration(unittest.TestCase):
    def test_legacy_keys_move_to_current_theme(self):
        prefs = MemoryPrefs({LEGACY_COLOR_INDEX_KEY: "2", LEGACY_HOUR_FORMAT_KEY: "24"})
        migrate_legacy_preferences(prefs, Theme.LIGHT)
        self.assertEqual(prefs.get("colorIndex-light"), "2")
        self.assertIsNone(prefs.get("colorIndex-dark"))
        self.assertEqual(prefs.get(HOUR_FORMAT_KEY), "24")

    def test_theme_key_wins_over_legacy(self):
        prefs = MemoryPrefs({LEGACY_COLOR_INDEX_KEY: "2", "colorIndex-dark": "1"})
        migrate_legacy_preferences(prefs, Theme.DARK)
        self.assertEqual(prefs.get("colorIndex-dark"), "1")
        self.assertEqual(prefs.writes, [])

    def test_invalid_legacy_values_are_ignored(self):
        prefs = MemoryPrefs({LEGACY_COLOR_INDEX_KEY: "NaN", LEGACY_HOUR_FORMAT_KEY: "13"})
        migrate_legacy_preferences(prefs, Theme.DARK)
        self.assertEqual(prefs.writes, [])


class TestPreferenceWriter(unittest.TestCase):
    def setUp(self):
        self.prefs = MemoryPrefs()
        self.store = Store(partial(reduce, palette_size=3), ClockState(0, True, Theme.DARK))
        self.store.subscribe(PreferenceWriter(self.store, self.prefs))

    def test_color_change_writes_theme_key(self):
        self.store.dispatch(change_color())
        self.store.dispatch(change_color())
        self.assertEqual(self.prefs.writes, [("colorIndex-dark", "1"), ("colorIndex-dark", "2")])

    def test_hour_format_change_writes_flag(self):
        self.store.dispatch(toggle_hour_format())
        self.store.dispatch(toggle_hour_format())
        self.assertEqual(self.prefs.writes, [(HOUR_FORMAT_KEY, "24"), (HOUR_FORMAT_KEY, "12")])

    def test_theme_switch_does_not_write(self):
        self.store.dispatch(system_color_scheme_change(Theme.LIGHT))
        self.assertEqual(self.prefs.writes, [])
        self.store.dispatch(change_color())
        self.assertEqual(self.prefs.writes, [("colorIndex-light", "0")])


if __name__ == "__main__":
    unittest.main()
