import re
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from calendar_ticks import date_prefix_text, elapsed_hours
from classifier import ATTACK_CATEGORIES, LAND_CATEGORIES, strip_date_prefix
from extractor import clean_coordinates
from records import (
    DEFAULT_ENEMY_KINGDOM,
    DEFAULT_HOME_KINGDOM,
    AttackRecord,
    KingdomPair,
    build_records,
    drop_duplicate_outgoing,
    kingdom_counts,
    order_lines,
    resolve_kingdoms,
    split_lines,
)

DEFAULT_UNIQUE_WINDOW = 5
UNKNOWN_PROVINCE = "An unknown Province"

ATTACK_VERB_RE = re.compile(
    r"invaded|attacked|captured|killed|looted|recaptured|razed|pillag|ambush|massacre",
    re.IGNORECASE,
)
SUFFERED_VERB_RE = re.compile(
    r"invaded|attacked|attempted|captured|razed|recaptured|ambush|killed|looted|pillag",
    re.IGNORECASE,
)
NOISE_PROVINCE_RE = re.compile(r"dragon|topaz|our kingdom|world divided", re.IGNORECASE)
LEADING_HYPHEN_RE = re.compile(r"^\s*-")
SLOT_NAME_RE = re.compile(r"^\s*(\d+)\s*-\s*(.*)$")
UNKNOWN_PROVINCE_RE = re.compile(r"an unknown province", re.IGNORECASE)
BOUNCE_RE = re.compile(r"attempted|repelled", re.IGNORECASE)

DRAGON_STARTED_RE = re.compile(r"(has begun|begun)", re.IGNORECASE)
OUR_DRAGON_FLIGHT_RE = re.compile(
    r"our dragon.*(sets flight|has set flight|has set .*flight|has completed our dragon)",
    re.IGNORECASE,
)
DRAGON_SLAIN_RE = re.compile(r"slain the dragon|has slain.*dragon", re.IGNORECASE)
RITUAL_STARTED_RE = re.compile(r"(started|begun) developing a ritual", re.IGNORECASE)
RITUAL_COMPLETED_RE = re.compile(r"ritual is covering our lands|ritual (?:has been )?completed", re.IGNORECASE)

RELATION_RE = re.compile(
    r"\b(declared\s+WAR|withdrawn\s+from\s+war|has\s+withdrawn|withdraw\s+from\s+war|surrender\w*"
    r"|Mutual\s+Peace|accepted\s+an\s+offer|accepted\s+our\s+ceasefire|formal\s+ceasefire"
    r"|post-?\s?war|ceasefire|withdrew|terminated|broken)\b",
    re.IGNORECASE,
)

DRAGON_LINE_RE = re.compile(r"dragon", re.IGNORECASE)
DRAGON_CANCEL_RE = re.compile(r"cancelled|canceled", re.IGNORECASE)
DRAGON_AT_US_RE = re.compile(r"targeted at (?:us|our)\b", re.IGNORECASE)
DRAGON_BEGIN_RE = re.compile(r"begun (?:the|a) .*dragon", re.IGNORECASE)
DRAGON_SENT_RE = re.compile(r"set flight|set sail|set.*flight|sending.*dragon", re.IGNORECASE)
DRAGON_SLAY_RE = re.compile(r"\bslain\b|\bslays\b|\bhas\s+slay(?:ed)?\b", re.IGNORECASE)
DRAGON_RAVAGE_RE = re.compile(
    r"has\s+begun\s+(?:ravaging|to\s+ravage)|began\s+ravaging|ravaging\s+our|has\s+started\s+ravaging",
    re.IGNORECASE,
)
DRAGON_FLOWN_RE = re.compile(r"flown away|flies away|flown off", re.IGNORECASE)
DRAGON_PROJECT_RE = re.compile(r"project|begun|started", re.IGNORECASE)
OUR_DRAGON_NAME_RE = re.compile(r"Our\s+dragon,?\s*([^,]+),", re.IGNORECASE)
RECEIVED_DRAGON_RE = re.compile(r"A\s+([A-Za-z0-9]+)\s+Dragon,?\s*([^,]+?),?\s*from\s+[^()]*\((\d+:\d+)\)", re.IGNORECASE)
DRAGON_TYPE_RE = re.compile(r"A\s+([A-Za-z0-9]+)\s+Dragon", re.IGNORECASE)
COORD_RE = re.compile(r"\((\d+:\d+)\)")


@dataclass
class CategoryTotal:
    count: int = 0
    acres: int = 0
    books: int = 0
    kills: int = 0


@dataclass
class SideTotals:
    categories: Dict[str, CategoryTotal]
    overall_acres: int = 0
    overall_count: int = 0

    def get(self, category: str) -> CategoryTotal:
        return self.categories.get(category) or CategoryTotal()

    def failure_rate(self) -> float:
        if not self.overall_count:
            return 0.0
        return round(self.get("Failed Attack").count / self.overall_count * 100.0, 1)


@dataclass
class LedgerEntry:
    province: str
    acres: int = 0
    made: int = 0
    suffered: int = 0

    @property
    def times(self) -> int:
        return self.made + self.suffered


@dataclass
class KingdomLedger:
    kingdom: str
    entries: List[LedgerEntry]
    made_count: int = 0
    suffered_count: int = 0
    uniques: List[Tuple[str, int]] = field(default_factory=list)

    @property
    def net_acres(self) -> int:
        return sum(entry.acres for entry in self.entries)


@dataclass
class EventStats:
    bounces_made: int = 0
    bounces_suffered: int = 0
    dragons_started_us: int = 0
    dragons_started_enemy: int = 0
    dragons_completed_us: int = 0
    dragons_completed_enemy: int = 0
    enemy_dragons_killed: int = 0
    rituals_started: int = 0
    rituals_completed: int = 0


@dataclass
class Highlights:
    most_gained_march: Optional[AttackRecord] = None
    least_gained_march: Optional[AttackRecord] = None
    most_lost_march: Optional[AttackRecord] = None
    least_lost_march: Optional[AttackRecord] = None
    most_regained_ambush: Optional[AttackRecord] = None
    least_regained_ambush: Optional[AttackRecord] = None
    most_lost_ambush: Optional[AttackRecord] = None
    least_lost_ambush: Optional[AttackRecord] = None
    bounces_made_by: List[str] = field(default_factory=list)
    bounces_made_max: int = 0
    bounces_received_by: List[str] = field(default_factory=list)
    bounces_received_max: int = 0


@dataclass
class DragonNews:
    started: List[str] = field(default_factory=list)
    enemy_started: List[str] = field(default_factory=list)
    cancelled: List[str] = field(default_factory=list)
    enemy_cancelled: List[str] = field(default_factory=list)
    sent: List[Dict[str, Optional[str]]] = field(default_factory=list)
    received: List[Dict[str, Optional[str]]] = field(default_factory=list)
    slain: List[str] = field(default_factory=list)
    flown_away: List[str] = field(default_factory=list)
    other: List[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not any(
            (
                self.started,
                self.enemy_started,
                self.cancelled,
                self.enemy_cancelled,
                self.sent,
                self.received,
                self.slain,
                self.flown_away,
                self.other,
            )
        )

    def received_breakdown(self) -> List[Tuple[str, int]]:
        counts = Counter(row.get("type") or row.get("name") or "Unknown" for row in self.received)
        return list(counts.items())


@dataclass
class Analysis:
    lines: List[str]
    records: List[AttackRecord]
    kingdoms: KingdomPair
    window: int
    made: List[AttackRecord]
    suffered: List[AttackRecord]
    made_totals: SideTotals
    suffered_totals: SideTotals
    made_uniques: int
    suffered_uniques: int
    kingdom_ledgers: List[KingdomLedger]
    event_stats: EventStats
    highlights: Highlights
    relations: List[str]
    dragon_news: DragonNews
    date_from: str = ""
    date_to: str = ""
    elapsed_hours: Optional[int] = None

    @property
    def home(self) -> str:
        return self.kingdoms.home

    @property
    def enemy(self) -> str:
        return self.kingdoms.enemy

    @property
    def divergent(self) -> List[AttackRecord]:
        return [record for record in self.records if record.type_conflict]


def normalize_province_key(raw_name: Optional[str]) -> Optional[str]:
    if not raw_name:
        return None
    text = raw_name.strip()
    match = SLOT_NAME_RE.match(text)
    if match:
        return f"{match.group(1)} - {match.group(2).strip()}"
    if UNKNOWN_PROVINCE_RE.search(text):
        return UNKNOWN_PROVINCE
    return text or None


def display_province(key: str) -> str:
    match = SLOT_NAME_RE.match(key)
    if match:
        return f"{match.group(1)} - {match.group(2).strip()}"
    if UNKNOWN_PROVINCE_RE.search(key):
        return UNKNOWN_PROVINCE
    return key.strip()


def is_noise_province(name: Optional[str]) -> bool:
    if not name or not name.strip():
        return True
    return bool(NOISE_PROVINCE_RE.search(name) or LEADING_HYPHEN_RE.match(name))


def is_attack_like(record: AttackRecord) -> bool:
    return record.category in ATTACK_CATEGORIES or bool(ATTACK_VERB_RE.search(record.raw))


def is_suffered(record: AttackRecord, home: str) -> bool:
    if record.defender_kingdom == home:
        return True
    if record.attacker_kingdom == home:
        return False

    raw = clean_coordinates(record.raw)
    kd = re.escape(home)
    if not re.search(rf"\(\s*{kd}\s*\)", raw):
        return False

    # Extraction missed the defender, but home's coordinate sits on the receiving end of the verb.
    defender_side = re.compile(
        rf"(?:captured|invaded|attacked|attempted|razed|recaptured|ambush|killed|looted|pillag)[\s\S]*\(\s*{kd}\s*\)",
        re.IGNORECASE,
    )
    attacker_side = re.compile(rf"\(\s*{kd}\s*\)\s*(?:captured|invaded|attacked|attempted|set|sent)", re.IGNORECASE)
    if defender_side.search(raw):
        return True
    return not attacker_side.search(raw) and bool(SUFFERED_VERB_RE.search(raw))


def split_made_suffered(records: List[AttackRecord], home: str) -> Tuple[List[AttackRecord], List[AttackRecord]]:
    made = [record for record in records if record.attacker_kingdom == home]
    suffered = [record for record in records if is_suffered(record, home)]
    return made, suffered


def category_totals(records: Iterable[AttackRecord]) -> SideTotals:
    categories: Dict[str, CategoryTotal] = {category: CategoryTotal() for category in ATTACK_CATEGORIES}
    for record in records:
        row = categories.setdefault(record.category, CategoryTotal())
        row.count += 1
        row.acres += record.acres or 0
        row.books += record.books or 0
        row.kills += record.kills or 0

    return SideTotals(
        categories=categories,
        # Razes destroy land rather than transfer it, so they stay out of the headline.
        overall_acres=sum(categories[category].acres for category in LAND_CATEGORIES),
        overall_count=sum(categories[category].count for category in ATTACK_CATEGORIES),
    )


def _side_fields(record: AttackRecord, side: str) -> Tuple[Optional[str], Optional[str]]:
    if side == "made":
        return record.attacker_kingdom, record.attacker_province
    if side == "suffered":
        return record.defender_kingdom, record.defender_province
    raise ValueError(f"Unknown side: {side!r}")


def unique_breakdown(
    records: Iterable[AttackRecord],
    kingdom: str,
    side: str = "made",
    window: int = DEFAULT_UNIQUE_WINDOW,
) -> List[Tuple[str, int]]:
    """
    Windowed unique strikes per province. The made side groups by attacking
    province, the suffered side by the province that was hit. Only attacks
    count and ambushes never consume a unique; a strike inside `window` ticks of the last counted one
    for the same province collapses into it.
    """
    last_by_key: Dict[str, int] = {}
    count_by_key: Dict[str, int] = {}

    for record in sorted(records, key=lambda row: row.tick):
        record_kingdom, province = _side_fields(record, side)
        if record_kingdom != kingdom or record.category == "Ambush" or not is_attack_like(record):
            continue
        key = normalize_province_key(province)
        if not key:
            continue

        last = last_by_key.get(key)
        if last is None or record.tick - last >= window:
            count_by_key[key] = count_by_key.get(key, 0) + 1
            last_by_key[key] = record.tick

    return sorted(count_by_key.items(), key=lambda item: -item[1])


def count_uniques(
    records: Iterable[AttackRecord],
    kingdom: str,
    side: str = "made",
    window: int = DEFAULT_UNIQUE_WINDOW,
) -> int:
    return sum(count for _, count in unique_breakdown(records, kingdom, side, window))


def province_ledger(records: Iterable[AttackRecord], kingdom: str) -> List[LedgerEntry]:
    by_key: Dict[str, LedgerEntry] = {}

    for record in records:
        attack_like = is_attack_like(record)
        transfer = 0 if record.category == "Raze" else (record.acres or 0)

        if record.attacker_kingdom == kingdom and record.attacker_province:
            key = normalize_province_key(record.attacker_province)
            entry = by_key.setdefault(key, LedgerEntry(province=key))
            entry.acres += transfer
            if attack_like:
                entry.made += 1

        if record.defender_kingdom == kingdom and record.defender_province:
            key = normalize_province_key(record.defender_province)
            entry = by_key.setdefault(key, LedgerEntry(province=key))
            entry.acres -= transfer
            if attack_like:
                entry.suffered += 1

    combined: Dict[str, LedgerEntry] = {}
    for key, entry in by_key.items():
        if is_noise_province(key) or not (entry.acres or entry.times):
            continue
        name = display_province(key)
        target = combined.setdefault(name, LedgerEntry(province=name))
        target.acres += entry.acres
        target.made += entry.made
        target.suffered += entry.suffered

    return sorted(combined.values(), key=lambda entry: -entry.acres)


def kingdom_order(records: List[AttackRecord], home: str) -> List[str]:
    counts = kingdom_counts(records)
    others = sorted(
        (kingdom for kingdom in counts if kingdom != home),
        key=lambda kingdom: (-counts[kingdom]["total"], counts[kingdom]["order"]),
    )
    return [home] + others


def build_kingdom_ledger(records: List[AttackRecord], kingdom: str, window: int) -> KingdomLedger:
    return KingdomLedger(
        kingdom=kingdom,
        entries=province_ledger(records, kingdom),
        made_count=sum(1 for r in records if r.attacker_kingdom == kingdom and r.category in ATTACK_CATEGORIES),
        suffered_count=sum(1 for r in records if r.defender_kingdom == kingdom and r.category in ATTACK_CATEGORIES),
        uniques=unique_breakdown(records, kingdom, "made", window),
    )


def is_bounce_suffered(record: AttackRecord, home: str) -> bool:
    if record.category != "Failed Attack":
        return False
    if record.defender_kingdom == home:
        return True
    return (
        record.attacker_kingdom != home
        and not record.defender_kingdom
        and bool(BOUNCE_RE.search(record.raw))
        and f"({home})" in clean_coordinates(record.raw)
    )


def collect_event_stats(lines: Iterable[str], records: List[AttackRecord], home: str) -> EventStats:
    stats = EventStats()
    for line in lines:
        lower = line.lower()
        if "dragon project" in lower and DRAGON_STARTED_RE.search(lower):
            if "our kingdom" in lower:
                stats.dragons_started_us += 1
            else:
                stats.dragons_started_enemy += 1
        if OUR_DRAGON_FLIGHT_RE.search(lower):
            stats.dragons_completed_us += 1
        if DRAGON_SLAIN_RE.search(lower):
            stats.enemy_dragons_killed += 1
            stats.dragons_completed_enemy += 1
        if "ritual" in lower:
            if RITUAL_STARTED_RE.search(lower):
                stats.rituals_started += 1
            if RITUAL_COMPLETED_RE.search(lower):
                stats.rituals_completed += 1

    stats.bounces_made = sum(1 for r in records if r.category == "Failed Attack" and r.attacker_kingdom == home)
    stats.bounces_suffered = sum(1 for r in records if is_bounce_suffered(r, home))
    return stats


def _top_bouncers(records: Iterable[AttackRecord]) -> Tuple[List[str], int]:
    counts: Dict[str, int] = {}
    for record in records:
        key = record.attacker_province or record.attacker_kingdom or UNKNOWN_PROVINCE
        counts[key] = counts.get(key, 0) + 1
    if not counts:
        return [], 0
    top = max(counts.values())
    return [name for name, count in counts.items() if count == top], top


def collect_highlights(records: List[AttackRecord], home: str) -> Highlights:
    def with_acres(category: str, attacker: bool) -> List[AttackRecord]:
        return [
            r
            for r in records
            if r.category == category
            and r.acres
            and (r.attacker_kingdom == home if attacker else r.defender_kingdom == home)
        ]

    highlights = Highlights()
    gained = with_acres("Traditional March", attacker=True)
    lost = with_acres("Traditional March", attacker=False)
    regained = with_acres("Ambush", attacker=True)
    ambushed = with_acres("Ambush", attacker=False)

    def by_acres(record: AttackRecord) -> int:
        return record.acres or 0

    if gained:
        highlights.most_gained_march = max(gained, key=by_acres)
        highlights.least_gained_march = min(gained, key=by_acres)
    if lost:
        highlights.most_lost_march = max(lost, key=by_acres)
        highlights.least_lost_march = min(lost, key=by_acres)
    if regained:
        highlights.most_regained_ambush = max(regained, key=by_acres)
        highlights.least_regained_ambush = min(regained, key=by_acres)
    if ambushed:
        highlights.most_lost_ambush = max(ambushed, key=by_acres)
        highlights.least_lost_ambush = min(ambushed, key=by_acres)

    highlights.bounces_made_by, highlights.bounces_made_max = _top_bouncers(
        r for r in records if r.category == "Failed Attack" and r.attacker_kingdom == home
    )
    highlights.bounces_received_by, highlights.bounces_received_max = _top_bouncers(
        r for r in records if r.category == "Failed Attack" and r.defender_kingdom == home
    )
    return highlights


def dated_text(line: str) -> str:
    date = date_prefix_text(line)
    text = " ".join(strip_date_prefix(line).split())
    return f"{date}\t{text}" if date else text


def collect_relations(lines: Iterable[str]) -> List[str]:
    return [dated_text(line) for line in lines if RELATION_RE.search(line)]


def collect_dragon_news(lines: Iterable[str]) -> DragonNews:
    news = DragonNews()
    for line in lines:
        if not DRAGON_LINE_RE.search(line):
            continue

        date = date_prefix_text(line) or None
        text = " ".join(strip_date_prefix(line).split())
        entry = dated_text(line)

        if DRAGON_CANCEL_RE.search(text):
            if DRAGON_AT_US_RE.search(text):
                news.enemy_cancelled.append(entry)
            else:
                news.cancelled.append(entry)
        elif DRAGON_BEGIN_RE.search(text):
            if text.lower().startswith("our kingdom"):
                news.started.append(entry)
            else:
                news.enemy_started.append(entry)
        elif DRAGON_SENT_RE.search(text):
            name = OUR_DRAGON_NAME_RE.search(text)
            coord = COORD_RE.search(text)
            news.sent.append(
                {
                    "date": date,
                    "name": name.group(1).strip() if name else None,
                    "kd": coord.group(1) if coord else None,
                }
            )
        elif DRAGON_SLAY_RE.search(text):
            news.slain.append(entry)
        elif DRAGON_RAVAGE_RE.search(text):
            match = RECEIVED_DRAGON_RE.search(text)
            if match:
                dragon_type, name, kd = match.group(1), match.group(2).strip(), match.group(3)
            else:
                type_match = DRAGON_TYPE_RE.search(text)
                coord = COORD_RE.search(text)
                dragon_type = type_match.group(1) if type_match else None
                name = None
                kd = coord.group(1) if coord else None
            news.received.append({"date": date, "type": dragon_type, "name": name, "kd": kd})
        elif DRAGON_FLOWN_RE.search(text):
            news.flown_away.append(entry)
        elif DRAGON_PROJECT_RE.search(text):
            news.started.append(entry)
        else:
            news.other.append(entry)
    return news


def province_records(records: Iterable[AttackRecord], kingdom: str, province: str) -> List[AttackRecord]:
    wanted = normalize_province_key(province)
    out = []
    for record in records:
        as_attacker = record.attacker_kingdom == kingdom and normalize_province_key(record.attacker_province) == wanted
        as_defender = record.defender_kingdom == kingdom and normalize_province_key(record.defender_province) == wanted
        if as_attacker or as_defender:
            out.append(record)
    return out


def analyze(
    lines: List[str],
    home: Optional[str] = None,
    enemy: Optional[str] = None,
    window: int = DEFAULT_UNIQUE_WINDOW,
    dedupe_outgoing: bool = True,
    default_home: str = DEFAULT_HOME_KINGDOM,
    default_enemy: str = DEFAULT_ENEMY_KINGDOM,
) -> Analysis:
    ordered = [line for _, _, line in order_lines(lines)]
    records = build_records(lines)
    kingdoms = resolve_kingdoms(
        records,
        ordered,
        home=home,
        enemy=enemy,
        default_home=default_home,
        default_enemy=default_enemy,
    )
    if dedupe_outgoing:
        records = drop_duplicate_outgoing(records, kingdoms.home)

    made, suffered = split_made_suffered(records, kingdoms.home)
    date_from = records[0].date if records else ""
    date_to = records[-1].date if records else ""

    return Analysis(
        lines=ordered,
        records=records,
        kingdoms=kingdoms,
        window=window,
        made=made,
        suffered=suffered,
        made_totals=category_totals(made),
        suffered_totals=category_totals(suffered),
        made_uniques=count_uniques(records, kingdoms.home, "made", window),
        suffered_uniques=count_uniques(records, kingdoms.home, "suffered", window),
        kingdom_ledgers=[build_kingdom_ledger(records, kd, window) for kd in kingdom_order(records, kingdoms.home)],
        event_stats=collect_event_stats(ordered, records, kingdoms.home),
        highlights=collect_highlights(records, kingdoms.home),
        relations=collect_relations(ordered),
        dragon_news=collect_dragon_news(ordered),
        date_from=date_from,
        date_to=date_to,
        elapsed_hours=elapsed_hours(date_from, date_to),
    )


def analyze_text(text: Optional[str], **kwargs: Any) -> Analysis:
    return analyze(split_lines(text), **kwargs)


def _record_brief(record: Optional[AttackRecord]) -> Optional[Dict[str, Any]]:
    return record.to_dict() if record else None


def analysis_to_dict(analysis: Analysis) -> Dict[str, Any]:
    highlights = analysis.highlights
    return {
        "home_kingdom": analysis.home,
        "enemy_kingdom": analysis.enemy,
        "kingdom_sources": {"home": analysis.kingdoms.home_source, "enemy": analysis.kingdoms.enemy_source},
        "window": analysis.window,
        "time_window": {
            "from": analysis.date_from,
            "to": analysis.date_to,
            "hours": analysis.elapsed_hours,
        },
        "totals": {
            "made": {
                "overall_count": analysis.made_totals.overall_count,
                "overall_acres": analysis.made_totals.overall_acres,
                "uniques": analysis.made_uniques,
                "categories": {k: asdict(v) for k, v in analysis.made_totals.categories.items()},
            },
            "suffered": {
                "overall_count": analysis.suffered_totals.overall_count,
                "overall_acres": analysis.suffered_totals.overall_acres,
                "uniques": analysis.suffered_uniques,
                "categories": {k: asdict(v) for k, v in analysis.suffered_totals.categories.items()},
            },
        },
        "kingdoms": [
            {
                "kingdom": ledger.kingdom,
                "net_acres": ledger.net_acres,
                "made": ledger.made_count,
                "suffered": ledger.suffered_count,
                "provinces": [
                    {
                        "province": entry.province,
                        "acres": entry.acres,
                        "made": entry.made,
                        "suffered": entry.suffered,
                        "times": entry.times,
                    }
                    for entry in ledger.entries
                ],
                "uniques": [{"province": name, "count": count} for name, count in ledger.uniques],
            }
            for ledger in analysis.kingdom_ledgers
        ],
        "events": asdict(analysis.event_stats),
        "highlights": {
            "most_gained_march": _record_brief(highlights.most_gained_march),
            "least_gained_march": _record_brief(highlights.least_gained_march),
            "most_lost_march": _record_brief(highlights.most_lost_march),
            "least_lost_march": _record_brief(highlights.least_lost_march),
            "most_regained_ambush": _record_brief(highlights.most_regained_ambush),
            "least_regained_ambush": _record_brief(highlights.least_regained_ambush),
            "most_lost_ambush": _record_brief(highlights.most_lost_ambush),
            "least_lost_ambush": _record_brief(highlights.least_lost_ambush),
            "bounces_made_by": highlights.bounces_made_by,
            "bounces_made_max": highlights.bounces_made_max,
            "bounces_received_by": highlights.bounces_received_by,
            "bounces_received_max": highlights.bounces_received_max,
        },
        "relations": analysis.relations,
        "dragon_news": asdict(analysis.dragon_news),
        "divergent": [record.to_dict() for record in analysis.divergent],
        "records": [record.to_dict() for record in analysis.records],
    }
