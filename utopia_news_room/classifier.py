import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

DATE_ONLY_RE = re.compile(r"^[A-Za-z]+\s+\d+\s+of\s+YR\d+$", re.IGNORECASE)
DATE_STRIP_RE = re.compile(r"^[A-Za-z]+\s+\d+\s+of\s+YR\d+\s*\t?", re.IGNORECASE)

# Ordered so LineSignals can be built straight from this table.
SIGNAL_PATTERNS = {
    "invaded": re.compile(r"invaded", re.IGNORECASE),
    "attacked": re.compile(r"attacked", re.IGNORECASE),
    "looted": re.compile(r"looted", re.IGNORECASE),
    "captured": re.compile(r"captured", re.IGNORECASE),
    "razed": re.compile(r"razed", re.IGNORECASE),
    "killed": re.compile(r"killed", re.IGNORECASE),
    "ambushed": re.compile(r"\bambush", re.IGNORECASE),
    "attempted": re.compile(r"attempted to invade|attempted an invasion", re.IGNORECASE),
    "recaptured": re.compile(r"recaptured", re.IGNORECASE),
    "pillaged": re.compile(r"pillag", re.IGNORECASE),
    "conquest_style": re.compile(r"^.*?,\s*captured\s+\d", re.IGNORECASE),
    "dragon": re.compile(r"dragon project|begun the .*dragon", re.IGNORECASE),
    "war": re.compile(r"declared\s+war", re.IGNORECASE),
    "ceasefire": re.compile(r"ceasefire", re.IGNORECASE),
    "aid": re.compile(r"aid shipment|has sent an aid", re.IGNORECASE),
    "defection": re.compile(r"defected", re.IGNORECASE),
    "collapse": re.compile(r"collapsed|lies in ruins", re.IGNORECASE),
}

# conquest_style only refines "captured"; it never makes a line interesting on its own.
EVENT_SIGNALS = tuple(name for name in SIGNAL_PATTERNS if name != "conquest_style")

DEFECTED_TO_US_RE = re.compile(r"defected to us", re.IGNORECASE)
DRAGON_BEGUN_RE = re.compile(r"begun", re.IGNORECASE)
WE_DECLARED_RE = re.compile(r"we have declared", re.IGNORECASE)
WITHDRAW_RE = re.compile(r"withdraw|withdrew", re.IGNORECASE)

LAND_CATEGORIES = ("Traditional March", "Ambush", "Conquest")
ATTACK_CATEGORIES = (
    "Traditional March",
    "Ambush",
    "Conquest",
    "Raze",
    "Massacre",
    "Plunder",
    "Learn",
    "Failed Attack",
)
ALL_CATEGORIES = ATTACK_CATEGORIES + (
    "Starting a Dragon",
    "Dragon Update",
    "War Declaration",
    "Enemy Declaration",
    "Ceasefire",
    "Withdrew Proposal",
    "Defected in",
    "Defected out",
    "Aid",
    "Killed",
    "Other",
)
OUTCOME_TYPES = ("land", "plunder", "raze", "massacre", "fail", "other")

# Categories without an entry here (diplomacy, dragons, Plunder) carry no expectation.
EXPECTED_TYPE = {
    "Traditional March": "land",
    "Conquest": "land",
    "Ambush": "land",
    "Raze": "raze",
    "Massacre": "massacre",
    "Learn": "plunder",
    "Failed Attack": "fail",
}


@dataclass(frozen=True)
class LineSignals:
    invaded: bool = False
    attacked: bool = False
    looted: bool = False
    captured: bool = False
    razed: bool = False
    killed: bool = False
    ambushed: bool = False
    attempted: bool = False
    recaptured: bool = False
    pillaged: bool = False
    conquest_style: bool = False
    dragon: bool = False
    war: bool = False
    ceasefire: bool = False
    aid: bool = False
    defection: bool = False
    collapse: bool = False

    def any_event(self) -> bool:
        return any(getattr(self, name) for name in EVENT_SIGNALS)


@dataclass(frozen=True)
class Classification:
    content: str
    signals: LineSignals
    category: str
    type: str


Label = Union[str, Callable[[str], str]]


def _choose(pattern: "re.Pattern[str]", matched: str, otherwise: str) -> Callable[[str], str]:
    def pick(content: str) -> str:
        return matched if pattern.search(content) else otherwise

    return pick


# Phrasings overlap (an ambush line also says "captured"), so the first rule that fires wins.
CATEGORY_RULES: List[Tuple[Callable[[LineSignals], bool], Label]] = [
    (lambda s: s.collapse, "Killed"),
    (lambda s: s.defection, _choose(DEFECTED_TO_US_RE, "Defected in", "Defected out")),
    (lambda s: s.aid, "Aid"),
    (lambda s: s.dragon, _choose(DRAGON_BEGUN_RE, "Starting a Dragon", "Dragon Update")),
    (lambda s: s.war, _choose(WE_DECLARED_RE, "War Declaration", "Enemy Declaration")),
    (lambda s: s.ceasefire, _choose(WITHDRAW_RE, "Withdrew Proposal", "Ceasefire")),
    (lambda s: s.recaptured or s.ambushed, "Ambush"),
    (lambda s: s.pillaged, "Plunder"),
    (lambda s: s.looted and not s.captured, "Learn"),
    (lambda s: s.razed, "Raze"),
    (lambda s: s.captured and s.conquest_style, "Conquest"),
    (lambda s: s.captured, "Traditional March"),
    (lambda s: s.killed, "Massacre"),
    (lambda s: s.attempted, "Failed Attack"),
]

TYPE_RULES: List[Tuple[Callable[[LineSignals], bool], str]] = [
    (lambda s: s.attempted, "fail"),
    (lambda s: s.razed, "raze"),
    (lambda s: s.looted and not s.captured, "plunder"),
    (lambda s: s.captured or s.ambushed, "land"),
    (lambda s: s.killed, "massacre"),
]


def is_date_only(line: str) -> bool:
    return bool(DATE_ONLY_RE.match((line or "").strip()))


def strip_date_prefix(line: str) -> str:
    return DATE_STRIP_RE.sub("", (line or "").strip(), count=1).strip()


def detect_signals(content: str) -> LineSignals:
    text = content or ""
    return LineSignals(**{name: bool(pattern.search(text)) for name, pattern in SIGNAL_PATTERNS.items()})


def categorize(content: str, signals: LineSignals) -> str:
    for test, label in CATEGORY_RULES:
        if test(signals):
            return label if isinstance(label, str) else label(content)
    return "Other"


def outcome_type(signals: LineSignals) -> str:
    for test, label in TYPE_RULES:
        if test(signals):
            return label
    return "other"


def type_conflicts(category: str, outcome: str) -> bool:
    expected = EXPECTED_TYPE.get(category)
    return expected is not None and expected != outcome


def classify_line(line: str) -> Optional[Classification]:
    """
    Return the classification of one news line, or None when the line is blank,
    a bare date separator, or carries no combat/diplomatic signal.
    """
    trimmed = (line or "").strip()
    if not trimmed or is_date_only(trimmed):
        return None

    content = strip_date_prefix(trimmed)
    signals = detect_signals(content)
    if not signals.any_event():
        return None

    return Classification(
        content=content,
        signals=signals,
        category=categorize(content, signals),
        type=outcome_type(signals),
    )
