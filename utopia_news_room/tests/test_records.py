import os
import sys
import unittest

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import records

MARCH = "{date}\tDuke Silverhand (3:12) invaded Baron Ashgrove (6:7) and captured {acres} acres of land!"


class BuildRecordTests(unittest.TestCase):
    def test_spec_line_becomes_record(self):
        record = records.build_record(MARCH.format(date="July 1 of YR3", acres=55), index=4)
        self.assertEqual(record.date, "July 1 of YR3")
        self.assertEqual(record.category, "Traditional March")
        self.assertEqual(record.type, "land")
        self.assertEqual(record.acres, 55)
        self.assertEqual(record.attacker_kingdom, "3:12")
        self.assertEqual(record.defender_province, "Baron Ashgrove")
        self.assertEqual(record.index, 4)
        self.assertFalse(record.type_conflict)
        self.assertTrue(record.involves("6:7"))
        self.assertFalse(record.involves(None))

    def test_unmatched_line_is_skipped(self):
        self.assertIsNone(records.build_record("July 1 of YR3"))
        self.assertEqual(records.build_records(["July 1 of YR3", "hello there"]), [])

    def test_to_dict_carries_conflict_flag(self):
        row = records.build_record(MARCH.format(date="July 1 of YR3", acres=5)).to_dict()
        self.assertEqual(row["acres"], 5)
        self.assertIn("type_conflict", row)


class OrderingTests(unittest.TestCase):
    def test_sorted_by_day_then_input_order_undated_last(self):
        lines = [
            MARCH.format(date="January 2 of YR1", acres=2),
            "Duke Silverhand (3:12) invaded Baron Ashgrove (6:7) and captured 9 acres of land!",
            MARCH.format(date="January 1 of YR1", acres=1),
            MARCH.format(date="January 1 of YR1", acres=3),
        ]
        built = records.build_records(lines)
        self.assertEqual([r.acres for r in built], [1, 3, 2, 9])

        day_one = 168 * 24
        self.assertEqual([r.tick for r in built], [day_one, day_one + 1, day_one + 24, day_one + 25])
        self.assertEqual([r.index for r in built], [2, 3, 0, 1])

    def test_ticks_never_step_backwards_on_busy_days(self):
        lines = [MARCH.format(date="January 1 of YR1", acres=n) for n in range(30)]
        lines.append(MARCH.format(date="January 2 of YR1", acres=99))
        ticks = [r.tick for r in records.build_records(lines)]
        self.assertEqual(len(ticks), 31)
        self.assertTrue(all(later > earlier for earlier, later in zip(ticks, ticks[1:])))

    def test_split_lines_tolerates_crlf(self):
        self.assertEqual(records.split_lines("a\r\n\r\n b \nc"), ["a", "b", "c"])
        self.assertEqual(records.split_lines(None), [])


class KingdomResolutionTests(unittest.TestCase):
    def test_normalize_kingdom_key(self):
        self.assertEqual(records.normalize_kingdom_key(" (03:12) "), "3:12")
        self.assertIsNone(records.normalize_kingdom_key("3-12"))
        self.assertIsNone(records.normalize_kingdom_key(None))

    def test_explicit_input_wins(self):
        built = records.build_records([MARCH.format(date="July 1 of YR3", acres=5)])
        pair = records.resolve_kingdoms(built, [], home="1:1", enemy="2:2")
        self.assertEqual((pair.home, pair.enemy), ("1:1", "2:2"))
        self.assertEqual((pair.home_source, pair.enemy_source), ("input", "input"))

    def test_phrases(self):
        lines = [
            "July 1 of YR3\tShadow Realm (5:5) has declared WAR with our kingdom (4:4)!",
        ]
        pair = records.resolve_kingdoms([], lines)
        self.assertEqual((pair.home, pair.enemy), ("4:4", "5:5"))
        self.assertEqual((pair.home_source, pair.enemy_source), ("phrase", "phrase"))

    def test_frequency_prefers_most_defended(self):
        lines = [
            MARCH.format(date="July 1 of YR3", acres=5),
            MARCH.format(date="July 2 of YR3", acres=5),
            "July 3 of YR3\tBaron Ashgrove (6:7) attempted to invade Duke Silverhand (3:12), but was repelled.",
        ]
        built = records.build_records(lines)
        pair = records.resolve_kingdoms(built, lines)
        self.assertEqual((pair.home, pair.enemy), ("6:7", "3:12"))
        self.assertEqual(pair.home_source, "frequency")

    def test_fallback_defaults(self):
        pair = records.resolve_kingdoms([], [])
        self.assertEqual((pair.home, pair.enemy), (records.DEFAULT_HOME_KINGDOM, records.DEFAULT_ENEMY_KINGDOM))
        pair = records.resolve_kingdoms([], [], default_home="7:7", default_enemy="8:8")
        self.assertEqual((pair.home, pair.enemy, pair.home_source), ("7:7", "8:8", "default"))


class FilterTests(unittest.TestCase):
    def test_drop_duplicate_outgoing(self):
        line = MARCH.format(date="July 1 of YR3", acres=5)
        built = records.build_records([line, line])
        self.assertEqual(len(records.drop_duplicate_outgoing(built, "3:12")), 1)
        self.assertEqual(len(records.drop_duplicate_outgoing(built, "6:7")), 2)

    def test_filter_lines_by_date(self):
        lines = [
            MARCH.format(date="May 1 of YR3", acres=1),
            MARCH.format(date="May 5 of YR3", acres=2),
            MARCH.format(date="May 9 of YR3", acres=3),
            "undated line",
        ]
        kept = records.filter_lines_by_date(lines, since="May 2 of YR3", until="May 9 of YR3")
        self.assertEqual(kept, lines[1:3])
        self.assertEqual(records.filter_lines_by_date(lines), lines)

    def test_filter_rejects_bad_dates(self):
        with self.assertRaises(ValueError):
            records.filter_lines_by_date(["x"], since="Smarch 1 of YR3")


if __name__ == "__main__":
    unittest.main()
