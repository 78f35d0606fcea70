import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from calendar_ticks import DATE_PREFIX_RE
from extractor import safe_int

SPELLS: List[Tuple[str, str]] = [
    ("Aggression", r"Aggression"),
    ("Animate Dead", r"Animate Dead"),
    ("Anonymity", r"Anonymity"),
    ("Bloodlust", r"Bloodlust"),
    ("Builders' Boon", r"Builders'? Boon"),
    ("Clear Sight", r"Clear Sight"),
    ("Divine Shield", r"Divine Shield"),
    ("Fanaticism", r"Fanaticism"),
    ("Fertile Lands", r"Fertile Lands"),
    ("Fountain of Knowledge", r"Fountain of Knowledge"),
    ("Greater Protection", r"Greater Protection"),
    ("Guile", r"Guile"),
    ("Illuminate Shadows", r"Illuminate Shadows"),
    ("Inspire Army", r"Inspire Army"),
    ("Invisibility", r"Invisibility"),
    ("Love & Peace", r"Love\s*&\s*Peace|Love\s+and\s+Peace"),
    ("Mage's Fury", r"Mage'?s Fury"),
    ("Magic Shield", r"Magic Shield"),
    ("Mind Focus", r"Mind Focus"),
    ("Miner's Mystique", r"Miner'?s Mystique"),
    ("Minor Protection", r"Minor Protection"),
    ("Mist", r"\bMist\b"),
    ("Nature's Blessing", r"Nature'?s Blessing"),
    ("Paradise", r"Paradise"),
    ("Patriotism", r"Patriotism"),
    ("Quick Feet", r"Quick Feet"),
    ("Reflect Magic", r"Reflect Magic"),
    ("Revelation", r"Revelation"),
    ("Righteous Aggressor", r"Righteous Aggressor"),
    ("Salvation", r"Salvation"),
    ("Shadowlight", r"Shadowlight"),
    ("Town Watch", r"Town Watch"),
    ("Tree of Gold", r"Tree of Gold"),
    ("War Spoils", r"War Spoils"),
    ("Wrath", r"Wrath"),
    ("Abolish Ritual", r"Abolish Ritual"),
    ("Amnesia", r"Amnesia"),
    ("Blizzard", r"Blizzards?"),
    ("Chastity", r"Chastity"),
    ("Crystal Ball", r"Crystal Ball"),
    ("Crystal Eye", r"Crystal Eye"),
    ("Droughts", r"Droughts?"),
    ("Explosions", r"Explosions"),
    ("Expose Thieves", r"Expose Thieves"),
    ("Fireball", r"Fireball"),
    ("Fool's Gold", r"Fool'?s Gold"),
    ("Gluttony", r"Gluttony"),
    ("Greed", r"Greed"),
    ("Lightning Strike", r"Lightning Strike"),
    ("Land Lust", r"Land Lust"),
    ("Magic Ward", r"Magic Ward"),
    ("Meteor Showers", r"Meteor Showers"),
    ("Mystic Vortex", r"Mystic Vortex|Magic Vortex"),
    ("Nightmares", r"Nightmares"),
    ("Nightfall", r"Nightfall"),
    ("Pitfalls", r"Pitfalls"),
    ("Storms", r"Storms"),
    ("Tornadoes", r"Tornadoes"),
    ("Vermin", r"Vermin"),
    ("Barrier of Integrity", r"Barrier of Integrity"),
    ("Fog", r"\bFog\b"),
    ("Ghost Workers", r"Ghost Workers"),
    ("Haste", r"Haste"),
    ("Hero's Inspiration", r"Hero'?s Inspiration"),
    ("Illusionary", r"Illusionary"),
    ("Mystic Aura", r"Mystic Aura"),
    ("Scientific Insights", r"Scientific Insights"),
    ("Sloth", r"Sloth"),
    ("Soul Blight", r"Soul Blight"),
]
THIEVERY_OPS: List[Tuple[str, str]] = [
    ("Spy on Throne", r"Spy on (?:the )?Throne"),
    ("Spy on Defense", r"Spy on Defense"),
    ("Spy on Exploration", r"Spy on Exploration"),
    ("Snatch News", r"Snatch News"),
    ("Infiltrate", r"Infiltrate"),
    ("Survey", r"Survey"),
    ("Spy on Military", r"Spy on Military"),
    ("Spy on Sciences", r"Spy on Sciences"),
    ("Sabotage Wizards", r"Sabotage Wizards"),
    ("Destabilize Guilds", r"Destabilize Guilds"),
    ("Rob the Granaries", r"Rob the Granaries"),
    ("Rob the Vaults", r"Rob the Vaults"),
    ("Rob the Towers", r"Rob the Towers|steal from (?:our )?towers"),
    ("Kidnapping", r"Kidnapping"),
    ("Greater Arson", r"Greater Arson"),
    ("Arson", r"Arson"),
    ("Night Strike", r"Night ?Strike"),
    ("Incite Riots", r"Incite Riots"),
    ("Steal War Horses", r"Steal War Horses"),
    ("Bribe Thieves", r"Bribe Thieves"),
    ("Bribe Generals", r"Bribe Generals"),
    ("Free Prisoners", r"Free Prisoners"),
    ("Assassinate Wizards", r"Assassinate Wizards"),
    ("Propaganda", r"Propaganda"),
]
SPELL_RES = [(name, re.compile(pattern, re.IGNORECASE)) for name, pattern in SPELLS]
THIEVERY_RES = [(name, re.compile(pattern, re.IGNORECASE)) for name, pattern in THIEVERY_OPS]

UNKNOWN_ORIGIN = "Unknown Province"

METEOR_RE = re.compile(r"^Meteors", re.IGNORECASE)
METEOR_FORECAST_RE = re.compile(r"are not expected to stop", re.IGNORECASE)
METEOR_KILL_RE = re.compile(r"kill ([^!]+)", re.IGNORECASE)
COUNT_UNIT_RE = re.compile(r"(\d[\d,]*)\s+([A-Za-z][A-Za-z ]*)")
INCOME_RE = re.compile(r"generate\s+([\d,]+)\s+gold\s+coins.*contributing\s+([\d,]+)\s+books", re.IGNORECASE)
LEAD_RE = re.compile(r"([\d,]+)\s+gold\s+coins\s+have\s+been\s+turned\s+into\s+worthless\s+lead", re.IGNORECASE)
SOLDIER_SHIPMENT_RE = re.compile(r"We have received a shipment of\s+([\d,]+)\s+soldiers?", re.IGNORECASE)
GOLD_SHIPMENT_RE = re.compile(r"We have received a shipment of\s+([\d,]+)\s+gold coins?", re.IGNORECASE)
SETTLED_RE = re.compile(r"settled\s+([\d,]+)\s+acres\s+of\s+new\s+land", re.IGNORECASE)
DISAPPEARED_RE = re.compile(r"([\d,]+)\s+acres\s+of\s+land\s+have\s+disappeared\s+from\s+our\s+control", re.IGNORECASE)
REVEALED_THIEVES_RE = re.compile(r"revealed thieves from\s+(.+?)\s*\(\d+:\d+\)", re.IGNORECASE)
FOUND_THIEVES_RE = re.compile(r"We have found thieves(?: from (.+?) \(\d+:\d+\))?", re.IGNORECASE)
TROOPS_DEAD_RE = re.compile(r"([\d,]+) of our troops were found dead today", re.IGNORECASE)
RAID_RE = re.compile(
    r"Forces from\s+(.+?)\s+came through and ravaged our lands! Their armies killed\s+([\d,]+)"
    r"\s+of our peasants, thieves, and wizards! We lost\s+(.+)",
    re.IGNORECASE,
)
SCIENTIST_RE = re.compile(r"A new scientist,\s*(.+?)\s*\((.+?)\)", re.IGNORECASE)
CREDITS_RE = re.compile(
    r"received\s+([\d,]+)\s+free building credits[\s\S]*received\s+([\d,]+)\s+free specialist credits"
    r"[\s\S]*received\s+([\d,]+)\s+science books",
    re.IGNORECASE,
)
PEASANTS_RE = re.compile(r"([\d,]+) peasants have populated our lands", re.IGNORECASE)
RUNES_RE = re.compile(r"([\d,]+) runes of our runes were stolen", re.IGNORECASE)
FAILED_MAGERY_RE = re.compile(r"Failed magery attempt by\s+(.+?)\s*\(\d+:\d+\)", re.IGNORECASE)
NOTICED_SPELL_RE = re.compile(r"Our mages noticed a possible spell attempt by\s+(.+?)\s+causing trouble", re.IGNORECASE)


@dataclass
class Raid:
    date: str
    attacker: str
    civilians_killed: int
    unit_losses: Dict[str, int]


@dataclass
class ProvinceSummary:
    start: Optional[str] = None
    end: Optional[str] = None
    civilians_killed: int = 0
    peasants_added: int = 0
    unit_losses: Counter = field(default_factory=Counter)
    meteor_events: int = 0
    meteor_forecasts: int = 0
    meteor_kills: Counter = field(default_factory=Counter)
    gold_gained: int = 0
    gold_lost_to_lead: int = 0
    books_gained: int = 0
    building_credits: int = 0
    specialist_credits: int = 0
    soldiers_received: int = 0
    gold_received: int = 0
    land_gained: int = 0
    land_lost: int = 0
    thief_origins: Counter = field(default_factory=Counter)
    thievery_ops: Counter = field(default_factory=Counter)
    troop_deaths_found: int = 0
    runes_stolen: int = 0
    scientists: List[Dict[str, str]] = field(default_factory=list)
    raids: List[Raid] = field(default_factory=list)
    magery_failures: Counter = field(default_factory=Counter)
    spell_effects: Counter = field(default_factory=Counter)
    events: List[str] = field(default_factory=list)
    unknown: List[str] = field(default_factory=list)

    @property
    def period(self) -> str:
        return f"{self.start} -> {self.end}"

    @property
    def thief_incidents(self) -> int:
        return sum(self.thief_origins.values())

    @property
    def meteor_troops(self) -> int:
        return sum(self.meteor_kills.values())

    @property
    def peasants_massacred(self) -> int:
        return sum(raid.civilians_killed for raid in self.raids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "civilians_killed": self.civilians_killed,
            "peasants_added": self.peasants_added,
            "unit_losses": dict(self.unit_losses),
            "meteor_events": self.meteor_events,
            "meteor_forecasts": self.meteor_forecasts,
            "meteor_kills": dict(self.meteor_kills),
            "gold_gained": self.gold_gained,
            "gold_lost_to_lead": self.gold_lost_to_lead,
            "books_gained": self.books_gained,
            "building_credits": self.building_credits,
            "specialist_credits": self.specialist_credits,
            "shipments": {"soldiers": self.soldiers_received, "gold": self.gold_received},
            "land_gained": self.land_gained,
            "land_lost": self.land_lost,
            "thief_incidents": self.thief_incidents,
            "top_thief_origins": self.thief_origins.most_common(5),
            "thievery_ops": dict(self.thievery_ops),
            "troop_deaths_found": self.troop_deaths_found,
            "runes_stolen": self.runes_stolen,
            "scientists": list(self.scientists),
            "raids": [
                {
                    "date": raid.date,
                    "attacker": raid.attacker,
                    "civilians_killed": raid.civilians_killed,
                    "unit_losses": raid.unit_losses,
                }
                for raid in self.raids
            ],
            "magery_failures": dict(self.magery_failures),
            "spell_effects": dict(self.spell_effects),
            "events": list(self.events),
            "unknown": list(self.unknown),
        }


def num(value: Optional[str]) -> int:
    return safe_int((value or "").replace(" ", "")) or 0


def split_dated_line(line: str) -> Optional[Tuple[str, str]]:
    if "\t" in line:
        date, _, event = line.partition("\t")
        return date.strip(), event.strip()
    match = DATE_PREFIX_RE.match(line)
    if not match:
        return None
    return match.group(0), line[match.end():].strip()


def count_units(text: str) -> Counter:
    """Parse '12 soldiers, 3 Pikemen and 40 peasants' into a unit counter."""
    counts: Counter = Counter()
    for piece in re.split(r",|\band\b", text, flags=re.IGNORECASE):
        match = COUNT_UNIT_RE.search(piece.strip())
        if match:
            counts[match.group(2).strip().lower().rstrip(".!")] += num(match.group(1))
    return counts


def _meteors(summary: ProvinceSummary, date: str, event: str) -> bool:
    if not METEOR_RE.match(event):
        return False
    summary.meteor_events += 1
    if METEOR_FORECAST_RE.search(event):
        summary.meteor_forecasts += 1
        summary.spell_effects["Meteors"] += 1
        summary.events.append("Meteors spell effect")
        return True

    match = METEOR_KILL_RE.search(event)
    if match:
        kills = count_units(match.group(1))
        summary.meteor_kills.update(kills)
        total = sum(kills.values())
        summary.civilians_killed += total
        summary.events.append(f"Meteors damage: {total} troops killed ({match.group(1).strip()})")
    return True


def _raid(summary: ProvinceSummary, date: str, event: str) -> bool:
    match = RAID_RE.search(event)
    if not match:
        return False
    attacker = match.group(1).strip()
    killed = num(match.group(2))
    losses = count_units(match.group(3))
    summary.civilians_killed += killed
    summary.unit_losses.update(losses)
    summary.raids.append(Raid(date=date, attacker=attacker, civilians_killed=killed, unit_losses=dict(losses)))
    summary.events.append(f"Incoming massacre from {attacker}: {killed} peasants killed")
    return True


def _economy(summary: ProvinceSummary, date: str, event: str) -> bool:
    match = INCOME_RE.search(event)
    if match:
        summary.gold_gained += num(match.group(1))
        summary.books_gained += num(match.group(2))
        return True

    match = LEAD_RE.search(event)
    if match:
        summary.gold_lost_to_lead += num(match.group(1))
        summary.spell_effects["Fool's Gold"] += 1
        summary.events.append(f"Gold turned to lead: {num(match.group(1))} gold coins")
        return True

    match = SOLDIER_SHIPMENT_RE.search(event)
    if match:
        summary.soldiers_received += num(match.group(1))
        summary.events.append(f"Received aid: {num(match.group(1))} soldiers")
        return True

    match = GOLD_SHIPMENT_RE.search(event)
    if match:
        summary.gold_received += num(match.group(1))
        summary.gold_gained += num(match.group(1))
        summary.events.append(f"Received aid: {num(match.group(1))} gold coins")
        return True

    match = CREDITS_RE.search(event)
    if match:
        summary.building_credits += num(match.group(1))
        summary.specialist_credits += num(match.group(2))
        summary.books_gained += num(match.group(3))
        return True

    match = PEASANTS_RE.search(event)
    if match:
        summary.peasants_added += num(match.group(1))
        return True
    return False


def _land(summary: ProvinceSummary, date: str, event: str) -> bool:
    match = SETTLED_RE.search(event)
    if match:
        summary.land_gained += num(match.group(1))
        summary.events.append(f"Daily bonus: {num(match.group(1))} acres settled")
        return True

    match = DISAPPEARED_RE.search(event)
    if match:
        summary.land_lost += num(match.group(1))
        summary.events.append(f"Land lust: {num(match.group(1))} acres lost")
        return True
    return False


def _thieves(summary: ProvinceSummary, date: str, event: str) -> bool:
    match = REVEALED_THIEVES_RE.search(event) or FOUND_THIEVES_RE.search(event)
    if match:
        origin = (match.group(1) or "").strip() or UNKNOWN_ORIGIN
        summary.thief_origins[origin] += 1
        summary.events.append(f"Failed thievery attempt by {origin}")
        return True

    match = TROOPS_DEAD_RE.search(event)
    if match:
        summary.troop_deaths_found += num(match.group(1))
        summary.events.append(f"Nightstrike: {num(match.group(1))} troops killed")
        return True

    match = RUNES_RE.search(event)
    if match:
        summary.runes_stolen += num(match.group(1))
        summary.events.append(f"Stolen runes: {num(match.group(1))} runes")
        return True
    return False


def _scientist(summary: ProvinceSummary, date: str, event: str) -> bool:
    match = SCIENTIST_RE.search(event)
    if not match:
        return False
    name, science = match.group(1).strip(), match.group(2).strip()
    summary.scientists.append({"name": name, "field": science, "date": date})
    summary.events.append(f"New scientist: {name} ({science})")
    return True


def _magic(summary: ProvinceSummary, date: str, event: str) -> bool:
    match = FAILED_MAGERY_RE.search(event) or NOTICED_SPELL_RE.search(event)
    if match:
        who = match.group(1).strip()
        summary.magery_failures[who] += 1
        summary.events.append(f"Failed magery attempt by {who}")
        return True

    for name, pattern in SPELL_RES:
        if pattern.search(event):
            summary.spell_effects[name] += 1
            summary.events.append(f"{name} spell effect")
            return True
    return False


def _thievery_op(summary: ProvinceSummary, date: str, event: str) -> bool:
    for name, pattern in THIEVERY_RES:
        if pattern.search(event):
            summary.thievery_ops[name] += 1
            summary.thief_origins[UNKNOWN_ORIGIN] += 1
            summary.events.append(f"Thievery operation detected: {name}")
            return True
    return False


# Order matters: the spell and operation name lists are loose and must only see what the specific phrasings miss.
HANDLERS = [_meteors, _economy, _land, _thieves, _raid, _scientist, _magic, _thievery_op]


def parse_province_news(source: Union[str, Iterable[str]]) -> ProvinceSummary:
    """
    Fold province news lines ('<date>\\t<event>' or '<date> <event>') into a
    ProvinceSummary. Lines without a date are ignored; dated lines that no
    handler recognises are kept in `unknown`.
    """
    lines = source.splitlines() if isinstance(source, str) else source
    summary = ProvinceSummary()

    for raw_line in lines:
        line = (raw_line or "").strip()
        parts = split_dated_line(line) if line else None
        if not parts or not parts[1]:
            continue

        date, event = parts
        summary.start = summary.start or date
        summary.end = date

        if not any(handler(summary, date, event) for handler in HANDLERS):
            summary.unknown.append(f"{date} {event}")

    return summary


def _named_losses(losses: Dict[str, int]) -> List[str]:
    parts = []
    for label, stem in (("soldiers", "soldier"), ("Pikemen", "pik"), ("Golems", "golem"), ("Quickblades", "quick")):
        total = sum(count for unit, count in losses.items() if stem in unit)
        if total:
            parts.append(f"{total:,} {label}")
    return parts


def format_province_report(summary: ProvinceSummary) -> str:
    lines = [f"Province news {summary.period}", ""]

    lines.append("Damage")
    lines.append(f"Troops Lost (Nightstrike): {summary.troop_deaths_found:,}")
    lines.append(f"Land Lost (Land Lust): {summary.land_lost:,} acres")
    lines.append(f"Peasants Killed (Massacres): {summary.peasants_massacred:,}")
    lines.append(f"Troops Lost (Meteors): {summary.meteor_troops:,}")
    lines.append("")

    lines.append("Thievery Operations")
    lines.append("Failed Thievery Attempts:")
    lines.extend(f"{origin}: {count}x" for origin, count in summary.thief_origins.most_common())
    if summary.thievery_ops:
        lines.append("Operations Detected:")
        lines.extend(f"{name}: {count}x" for name, count in summary.thievery_ops.most_common())
    if summary.runes_stolen:
        lines.append("Stolen Resources:")
        lines.append(f"Runes: {summary.runes_stolen:,}")
    lines.append("")

    lines.append("Spells Operations")
    lines.append("Failed Spells Attempts:")
    lines.extend(f"{who}: {count}x" for who, count in summary.magery_failures.items())
    lines.append("Spell Effects:")
    if summary.spell_effects:
        lines.extend(f"{name}: {count}x" for name, count in summary.spell_effects.items())
    else:
        lines.append(f"Meteors: {summary.meteor_forecasts}x")
    lines.append("")

    lines.append("Received Aid")
    lines.append(f"soldiers: {summary.soldiers_received:,}")
    lines.append(f"gold coins: {summary.gold_received:,}")
    lines.append("")

    lines.append("Massacre Attack Results")
    for raid in sorted(summary.raids, key=lambda row: -row.civilians_killed):
        lines.append(raid.attacker)
        lines.append(f"Lost {raid.civilians_killed:,} peasants, thieves, and wizards")
        losses = _named_losses(raid.unit_losses)
        if losses:
            lines.append(f"Troops lost: {', '.join(losses)}")
    lines.append("")

    lines.append("Other Events")
    lines.append(f"New Scientists: {len(summary.scientists)}x")
    return "\n".join(lines)
