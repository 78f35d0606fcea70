import re
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from calendar_ticks import HOURS_PER_DAY, date_prefix_text, date_tick, day_in_range
from classifier import classify_line, type_conflicts
from extractor import extract_parties, extract_payload

KINGDOM_KEY_RE = re.compile(r"^\s*\(?\s*(\d+)\s*:\s*(\d+)\s*\)?\s*$")
COORD_RE = re.compile(r"\((\d+:\d+)\)")
HOME_PHRASE_RE = re.compile(r"our\s+kingdom\s*\((\d+:\d+)\)", re.IGNORECASE)
ENEMY_PHRASE_PATTERNS = [
    re.compile(r"we\s+have\s+declared\s+WAR\s+on", re.IGNORECASE),
    re.compile(r"has\s+declared\s+WAR\s+with\s+our\s+kingdom", re.IGNORECASE),
    re.compile(r"against\s+us", re.IGNORECASE),
    re.compile(r"targeted\s+at\s+us", re.IGNORECASE),
    re.compile(r"ravaging\s+our\s+lands", re.IGNORECASE),
    re.compile(r"our\s+kingdom\s+has\s+cancelled\s+the\s+dragon\s+project\s+to", re.IGNORECASE),
    re.compile(r"our\s+kingdom\s+has\s+begun\s+the\s+.*dragon\s+project", re.IGNORECASE),
    re.compile(r"our\s+kingdom\s+has\s+withdrawn\s+from\s+war\s+with", re.IGNORECASE),
]

DEFAULT_HOME_KINGDOM = "3:12"
DEFAULT_ENEMY_KINGDOM = "6:7"


@dataclass
class AttackRecord:
    raw: str
    date: str
    type: str
    category: str
    index: int = 0
    tick: int = 0
    attacker_province: Optional[str] = None
    attacker_kingdom: Optional[str] = None
    defender_province: Optional[str] = None
    defender_kingdom: Optional[str] = None
    acres: Optional[int] = None
    books: Optional[int] = None
    kills: Optional[int] = None

    @property
    def type_conflict(self) -> bool:
        return type_conflicts(self.category, self.type)

    def involves(self, kingdom: Optional[str]) -> bool:
        return bool(kingdom) and kingdom in (self.attacker_kingdom, self.defender_kingdom)

    def to_dict(self) -> Dict[str, Any]:
        row = asdict(self)
        row["type_conflict"] = self.type_conflict
        return row


@dataclass(frozen=True)
class KingdomPair:
    home: str
    enemy: str
    home_source: str = "default"
    enemy_source: str = "default"


def normalize_kingdom_key(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    match = KINGDOM_KEY_RE.match(str(value))
    if not match:
        return None
    return f"{int(match.group(1))}:{int(match.group(2))}"


def split_lines(text: Optional[str]) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def build_record(line: str, index: int = 0, tick: int = 0) -> Optional[AttackRecord]:
    classification = classify_line(line)
    if not classification:
        return None

    parties = extract_parties(classification.content)
    payload = extract_payload(classification.content)
    return AttackRecord(
        raw=line.strip(),
        date=date_prefix_text(line),
        type=classification.type,
        category=classification.category,
        index=index,
        tick=tick,
        attacker_province=parties.attacker_province,
        attacker_kingdom=parties.attacker_kingdom,
        defender_province=parties.defender_province,
        defender_kingdom=parties.defender_kingdom,
        acres=payload.acres,
        books=payload.books,
        kills=payload.kills,
    )


def order_lines(lines: Iterable[str]) -> List[Tuple[Optional[int], int, str]]:
    """
    Stable sort of (day_tick, original_index, line); undated lines go last.
    """
    entries = []
    for index, line in enumerate(lines):
        trimmed = (line or "").strip()
        if not trimmed:
            continue
        entries.append((date_tick(trimmed), index, trimmed))
    return sorted(entries, key=lambda entry: (entry[0] is None, entry[0] or 0, entry[1]))


def build_records(lines: Iterable[str]) -> List[AttackRecord]:
    records: List[AttackRecord] = []
    seq_by_day: Dict[int, int] = defaultdict(int)
    last_tick: Optional[int] = None

    for day, index, line in order_lines(lines):
        record = build_record(line, index=index)
        if not record:
            continue

        if day is not None:
            tick = day * HOURS_PER_DAY + seq_by_day[day]
            seq_by_day[day] += 1
            # A busy day can overflow its 24 slots; ticks must never step backwards.
            if last_tick is not None and tick <= last_tick:
                tick = last_tick + 1
        else:
            tick = (last_tick or 0) + 1

        record.tick = tick
        last_tick = tick
        records.append(record)

    return records


def drop_duplicate_outgoing(records: List[AttackRecord], home: str) -> List[AttackRecord]:
    seen = set()
    out: List[AttackRecord] = []
    for record in records:
        if record.attacker_kingdom == home:
            if record.raw in seen:
                continue
            seen.add(record.raw)
        out.append(record)
    return out


def infer_home_from_lines(lines: Iterable[str]) -> Optional[str]:
    for line in lines:
        match = HOME_PHRASE_RE.search(line)
        if match:
            return match.group(1)
    return None


def infer_enemy_from_lines(lines: Iterable[str], home: Optional[str] = None) -> Optional[str]:
    for line in lines:
        if not any(pattern.search(line) for pattern in ENEMY_PHRASE_PATTERNS):
            continue
        for coord in COORD_RE.findall(line):
            if coord != home:
                return coord
    return None


def kingdom_counts(records: Iterable[AttackRecord]) -> Dict[str, Dict[str, int]]:
    counts: Dict[str, Dict[str, int]] = {}
    for record in records:
        for kingdom, side in ((record.attacker_kingdom, "atk"), (record.defender_kingdom, "def")):
            if not kingdom:
                continue
            row = counts.setdefault(kingdom, {"atk": 0, "def": 0, "total": 0, "order": len(counts)})
            row[side] += 1
            row["total"] += 1
    return counts


def resolve_kingdoms(
    records: List[AttackRecord],
    lines: List[str],
    home: Optional[str] = None,
    enemy: Optional[str] = None,
    default_home: str = DEFAULT_HOME_KINGDOM,
    default_enemy: str = DEFAULT_ENEMY_KINGDOM,
) -> KingdomPair:
    """
    Explicit input wins, then phrasing in the news, then frequency, then the defaults.
    Home frequency prefers the kingdom that was hit the most.
    """
    home = normalize_kingdom_key(home)
    enemy = normalize_kingdom_key(enemy)
    counts = kingdom_counts(records)

    home_source = "input"
    if not home:
        phrase_enemy = enemy or infer_enemy_from_lines(lines)
        home = infer_home_from_lines(lines)
        home_source = "phrase"
        if not home:
            ranked = sorted(
                counts.items(),
                key=lambda item: (-item[1]["def"], -item[1]["total"], -item[1]["atk"], item[1]["order"]),
            )
            home = next((kingdom for kingdom, _ in ranked if kingdom != phrase_enemy), None)
            home_source = "frequency"
        if not home:
            home = default_home
            home_source = "default"

    enemy_source = "input"
    if not enemy:
        enemy = infer_enemy_from_lines(lines, home=home)
        enemy_source = "phrase"
        if not enemy:
            ranked = sorted(counts.items(), key=lambda item: (-item[1]["total"], item[1]["order"]))
            enemy = next((kingdom for kingdom, _ in ranked if kingdom != home), None)
            enemy_source = "frequency"
        if not enemy:
            enemy = default_enemy
            enemy_source = "default"

    return KingdomPair(home=home, enemy=enemy, home_source=home_source, enemy_source=enemy_source)


def filter_lines_by_date(lines: Iterable[str], since: Optional[str] = None, until: Optional[str] = None) -> List[str]:
    lines = list(lines)
    if not since and not until:
        return lines

    start = date_tick(since) if since else None
    end = date_tick(until) if until else None
    if since and start is None:
        raise ValueError(f"Unrecognised Utopian date: {since!r}")
    if until and end is None:
        raise ValueError(f"Unrecognised Utopian date: {until!r}")

    return [line for line in lines if day_in_range(date_tick(line), start, end)]
