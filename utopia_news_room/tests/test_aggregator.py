import os
import sys
import unittest

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import aggregator
from records import AttackRecord

HOME = "3:12"
ENEMY = "6:7"


def strike(tick, province="Duke Silverhand", category="Traditional March", acres=10, **kwargs):
    fields = {
        "raw": f"{province} ({HOME}) captured {acres} acres of land from Baron Ashgrove ({ENEMY}).",
        "date": "",
        "type": "land",
        "category": category,
        "tick": tick,
        "attacker_province": province,
        "attacker_kingdom": HOME,
        "defender_province": "Baron Ashgrove",
        "defender_kingdom": ENEMY,
        "acres": acres,
    }
    fields.update(kwargs)
    return AttackRecord(**fields)


SAMPLE = [
    "July 1 of YR3\tDuke Silverhand (3:12) invaded Baron Ashgrove (6:7) and successfully captured 55 acres of land!",
    "July 2 of YR3\tBaron Ashgrove (6:7) attempted to invade Duke Silverhand (3:12), but was repelled.",
    "July 3 of YR3\tCount Ember (3:12) razed 40 acres of Baron Ashgrove (6:7).",
    "July 4 of YR3\tWe have declared WAR on Shadow Realm (6:7)!",
]


class UniquesTests(unittest.TestCase):
    def test_window_collapses_nearby_strikes(self):
        rows = [strike(tick) for tick in (1, 2, 3, 20)]
        self.assertEqual(aggregator.count_uniques(rows, HOME, "made", window=5), 2)
        self.assertEqual(aggregator.count_uniques(rows, HOME, "made", window=1), 4)

    def test_gap_equal_to_window_counts(self):
        rows = [strike(0), strike(5)]
        self.assertEqual(aggregator.count_uniques(rows, HOME, "made", window=5), 2)

    def test_ambush_never_counts(self):
        rows = [strike(1, category="Ambush"), strike(30, category="Ambush")]
        self.assertEqual(aggregator.count_uniques(rows, HOME, "made"), 0)

    def test_missing_province_is_excluded(self):
        rows = [strike(1, attacker_province=None), strike(10)]
        self.assertEqual(aggregator.count_uniques(rows, HOME, "made"), 1)

    def test_suffered_side_groups_by_defender(self):
        rows = [
            strike(1, defender_province="Baron Ashgrove"),
            strike(2, province="Count Ember", defender_province="Baron Ashgrove"),
            strike(3, defender_province="Lady Thorn"),
        ]
        breakdown = aggregator.unique_breakdown(rows, ENEMY, "suffered", window=5)
        self.assertEqual(breakdown, [("Baron Ashgrove", 1), ("Lady Thorn", 1)])

    def test_breakdown_sorted_descending(self):
        rows = [strike(1, province="A"), strike(2, province="B"), strike(20, province="B")]
        self.assertEqual(aggregator.unique_breakdown(rows, HOME, "made"), [("B", 2), ("A", 1)])

    def test_unknown_side_rejected(self):
        with self.assertRaises(ValueError):
            aggregator.count_uniques([strike(1)], HOME, "sideways")


class LedgerTests(unittest.TestCase):
    def test_acreage_is_conserved(self):
        rows = [strike(1, acres=55)]
        home = aggregator.province_ledger(rows, HOME)
        enemy = aggregator.province_ledger(rows, ENEMY)
        self.assertEqual((home[0].province, home[0].acres, home[0].made), ("Duke Silverhand", 55, 1))
        self.assertEqual((enemy[0].province, enemy[0].acres, enemy[0].suffered), ("Baron Ashgrove", -55, 1))

    def test_raze_moves_no_acres(self):
        rows = [strike(1, category="Raze", acres=40, type="raze")]
        home = aggregator.province_ledger(rows, HOME)
        enemy = aggregator.province_ledger(rows, ENEMY)
        self.assertEqual((home[0].acres, home[0].made), (0, 1))
        self.assertEqual((enemy[0].acres, enemy[0].suffered), (0, 1))

    def test_display_variants_merge(self):
        rows = [strike(1, province="12 - Duke", acres=5), strike(9, province=" 12 -Duke", acres=7)]
        ledger = aggregator.province_ledger(rows, HOME)
        self.assertEqual([(e.province, e.acres, e.made) for e in ledger], [("12 - Duke", 12, 2)])

    def test_unknown_provinces_merge(self):
        rows = [
            strike(1, province="An unknown province from Shadowvale", acres=5),
            strike(9, province="An Unknown Province from Elsewhere", acres=7),
        ]
        ledger = aggregator.province_ledger(rows, HOME)
        self.assertEqual([(e.province, e.acres) for e in ledger], [(aggregator.UNKNOWN_PROVINCE, 12)])

    def test_noise_names_are_filtered(self):
        rows = [strike(1, province="- stray fragment"), strike(2, province="Topaz Dragon"), strike(3)]
        ledger = aggregator.province_ledger(rows, HOME)
        self.assertEqual([e.province for e in ledger], ["Duke Silverhand"])

    def test_sorted_by_net_acres(self):
        rows = [strike(1, province="Small", acres=3), strike(2, province="Big", acres=30)]
        self.assertEqual([e.province for e in aggregator.province_ledger(rows, HOME)], ["Big", "Small"])


class TotalsTests(unittest.TestCase):
    def test_overall_acres_excludes_raze(self):
        rows = [
            strike(1, acres=10),
            strike(2, category="Ambush", acres=5),
            strike(3, category="Conquest", acres=7),
            strike(4, category="Raze", acres=100),
            strike(5, category="Failed Attack", acres=None, type="fail"),
        ]
        totals = aggregator.category_totals(rows)
        self.assertEqual(totals.overall_acres, 22)
        self.assertEqual(totals.overall_count, 5)
        self.assertEqual(totals.get("Raze").acres, 100)
        self.assertEqual(totals.failure_rate(), 20.0)

    def test_empty_totals(self):
        totals = aggregator.category_totals([])
        self.assertEqual((totals.overall_acres, totals.overall_count, totals.failure_rate()), (0, 0, 0.0))


class AnalyzeTests(unittest.TestCase):
    def setUp(self):
        self.analysis = aggregator.analyze(SAMPLE)

    def test_resolves_kingdoms(self):
        self.assertEqual((self.analysis.home, self.analysis.enemy), (HOME, ENEMY))

    def test_made_and_suffered(self):
        self.assertEqual([r.category for r in self.analysis.made], ["Traditional March", "Raze"])
        self.assertEqual([r.category for r in self.analysis.suffered], ["Failed Attack"])
        self.assertEqual(self.analysis.made_totals.overall_acres, 55)
        self.assertEqual(self.analysis.made_uniques, 2)
        self.assertEqual(self.analysis.event_stats.bounces_suffered, 1)

    def test_kingdom_ledgers_home_first(self):
        ledgers = self.analysis.kingdom_ledgers
        self.assertEqual([ledger.kingdom for ledger in ledgers], [HOME, ENEMY])
        self.assertEqual((ledgers[0].net_acres, ledgers[0].made_count, ledgers[0].suffered_count), (55, 2, 1))
        self.assertEqual((ledgers[1].net_acres, ledgers[1].made_count, ledgers[1].suffered_count), (-55, 1, 2))

    def test_time_window(self):
        self.assertEqual((self.analysis.date_from, self.analysis.date_to), ("July 1 of YR3", "July 4 of YR3"))
        self.assertEqual(self.analysis.elapsed_hours, 4)

    def test_relations(self):
        self.assertEqual(self.analysis.relations, ["July 4 of YR3\tWe have declared WAR on Shadow Realm (6:7)!"])

    def test_suffered_heuristic_without_parsed_defender(self):
        analysis = aggregator.analyze(
            ["July 1 of YR3\tBaron Ashgrove (6:7) attacked and pillaged the lands of Duke Silverhand (3:12)."],
            home=HOME,
        )
        self.assertEqual(len(analysis.suffered), 1)
        self.assertIsNone(analysis.suffered[0].defender_kingdom)

    def test_analysis_to_dict(self):
        data = aggregator.analysis_to_dict(self.analysis)
        self.assertEqual(data["home_kingdom"], HOME)
        self.assertEqual(data["totals"]["made"]["overall_acres"], 55)
        self.assertEqual(len(data["records"]), 4)
        self.assertEqual(data["kingdoms"][0]["provinces"][0]["province"], "Duke Silverhand")

    def test_record_index_is_input_position(self):
        pasted = [SAMPLE[2], SAMPLE[0], SAMPLE[3], SAMPLE[1]]
        analysis = aggregator.analyze(pasted)
        self.assertEqual([r.date for r in analysis.records], ["July 1 of YR3", "July 2 of YR3", "July 3 of YR3", "July 4 of YR3"])
        self.assertEqual([r.index for r in analysis.records], [1, 3, 0, 2])
        data = aggregator.analysis_to_dict(analysis)
        self.assertEqual([row["index"] for row in data["records"]], [1, 3, 0, 2])

    def test_province_records(self):
        rows = aggregator.province_records(self.analysis.records, HOME, "Duke Silverhand")
        self.assertEqual([r.category for r in rows], ["Traditional March", "Failed Attack"])

    def test_empty_input(self):
        analysis = aggregator.analyze_text("")
        self.assertEqual(analysis.records, [])
        self.assertEqual(analysis.home, "3:12")


class EventTests(unittest.TestCase):
    LINES = [
        "May 1 of YR3\tOur kingdom has begun the Ruby Dragon project, Ignis, targeted at Shadow Realm (6:7).",
        "May 2 of YR3\tShadow Realm (6:7) has begun the Emerald Dragon project, Vex, targeted at us.",
        "May 3 of YR3\tOur dragon, Ignis, has set flight to ravage Shadow Realm (6:7).",
        "May 4 of YR3\tA Emerald Dragon, Vex, from Shadow Realm (6:7) has begun ravaging our lands!",
        "May 5 of YR3\tCount Ember (3:12) has slain the dragon, Vex, ravaging our lands!",
        "May 6 of YR3\tWe have started developing a ritual! (Barrier)",
        "May 9 of YR3\tA ritual is covering our lands! (Barrier)",
    ]

    def test_event_stats(self):
        stats = aggregator.collect_event_stats(self.LINES, [], HOME)
        self.assertEqual(stats.dragons_started_us, 1)
        self.assertEqual(stats.dragons_started_enemy, 1)
        self.assertEqual(stats.dragons_completed_us, 1)
        self.assertEqual(stats.enemy_dragons_killed, 1)
        self.assertEqual((stats.rituals_started, stats.rituals_completed), (1, 1))

    def test_dragon_news(self):
        news = aggregator.collect_dragon_news(self.LINES)
        self.assertEqual(len(news.started), 1)
        self.assertEqual(len(news.enemy_started), 1)
        self.assertEqual(news.sent, [{"date": "May 3 of YR3", "name": "Ignis", "kd": "6:7"}])
        self.assertEqual(news.received, [{"date": "May 4 of YR3", "type": "Emerald", "name": "Vex", "kd": "6:7"}])
        self.assertEqual(news.received_breakdown(), [("Emerald", 1)])
        self.assertEqual(len(news.slain), 1)
        self.assertFalse(news.empty)
        self.assertTrue(aggregator.collect_dragon_news(["nothing here"]).empty)

    def test_highlights(self):
        rows = [
            strike(1, acres=10, date="July 1 of YR3"),
            strike(2, province="Count Ember", acres=90, date="July 2 of YR3"),
            strike(3, category="Failed Attack", acres=None, type="fail"),
            strike(4, province="Count Ember", category="Failed Attack", acres=None, type="fail"),
            strike(5, province="Count Ember", category="Failed Attack", acres=None, type="fail"),
        ]
        highlights = aggregator.collect_highlights(rows, HOME)
        self.assertEqual(highlights.most_gained_march.acres, 90)
        self.assertEqual(highlights.least_gained_march.acres, 10)
        self.assertIsNone(highlights.most_lost_march)
        self.assertEqual((highlights.bounces_made_by, highlights.bounces_made_max), (["Count Ember"], 2))
        self.assertEqual(highlights.bounces_received_by, [])


if __name__ == "__main__":
    unittest.main()
