import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

KD = r"\(\s*(?P<{name}>\d+:\d+)\s*\)"

MARKDOWN_COORD_RE = re.compile(r"\(\[(\d+:\d+)\]\([^)]*\)\)")
BRACKET_COORD_RE = re.compile(r"\(\[(\d+:\d+)\]\)")
TRAILING_HYPHEN_RE = re.compile(r"-\s*$")
ACRES_RE = re.compile(r"(\d[\d,]*)\s+acres", re.IGNORECASE)
BOOKS_RE = re.compile(r"(\d[\d,]*)\s+books", re.IGNORECASE)
KILLS_RE = re.compile(r"killed\s+(\d[\d,]*)\s+people", re.IGNORECASE)

UNKNOWN_PREFIX = "An unknown province from"

# Most specific first. Each pattern names the attacker (a*) and defender (d*) groups.
STRUCTURAL_PATTERNS: List[Tuple[str, "re.Pattern[str]"]] = [
    (
        "unknown_attacker",
        re.compile(
            r"^An unknown province from\s+(?P<aprov>.*?)\s*" + KD.format(name="akd")
            + r"\s*(?:recaptured|captured|invaded|attacked)[\s\S]*?\d[\d,]*\s+acres[\s\S]*?\bfrom\s+(?P<dprov>.*?)\s*"
            + KD.format(name="dkd"),
            re.IGNORECASE,
        ),
    ),
    (
        "acres_from",
        re.compile(
            r"^(?P<aprov>.*?)\s*" + KD.format(name="akd")
            + r"\s*(?:captured|invaded|attacked)[\s\S]*?\d[\d,]*\s+acres[\s\S]*?\bfrom\s+(?P<dprov>.*?)\s*"
            + KD.format(name="dkd"),
            re.IGNORECASE,
        ),
    ),
    (
        "invaded_captured",
        re.compile(
            r"^(?P<aprov>.*?)\s*" + KD.format(name="akd") + r"\s*invaded\s+(?P<dprov>.*?)\s*"
            + KD.format(name="dkd") + r"[\s\S]*?captured\s+\d[\d,]*\s+acres",
            re.IGNORECASE,
        ),
    ),
    (
        "razed_of",
        re.compile(
            r"^(?P<aprov>.*?)\s*" + KD.format(name="akd") + r"\s*razed\s+\d[\d,]*\s+acres\s+of\s+(?P<dprov>.*?)\s*"
            + KD.format(name="dkd"),
            re.IGNORECASE,
        ),
    ),
    (
        "killed_within",
        re.compile(
            r"^(?P<aprov>.*?)\s*" + KD.format(name="akd")
            + r"[\s\S]*?killed\s+\d[\d,]*\s+people\s+within\s+(?P<dprov>.*?)\s*" + KD.format(name="dkd"),
            re.IGNORECASE,
        ),
    ),
]

FALLBACK_ATTACKER_RE = re.compile(r"^(?P<prov>.*?)\(\s*(?P<kd>\d+:\d+)\s*\)")
FALLBACK_DEFENDER_PATTERNS = [
    re.compile(r"\bfrom\s+(?P<prov>.*?)\(\s*(?P<kd>\d+:\d+)\s*\)", re.IGNORECASE),
    re.compile(r"\binvaded\s+(?P<prov>.*?)\(\s*(?P<kd>\d+:\d+)\s*\)", re.IGNORECASE),
    re.compile(r"\battempted\s+to\s+invade\s+(?P<prov>.*?)\(\s*(?P<kd>\d+:\d+)\s*\)", re.IGNORECASE),
    re.compile(r"\binvasion\s+of\s+(?P<prov>.*?)\(\s*(?P<kd>\d+:\d+)\s*\)", re.IGNORECASE),
]


@dataclass(frozen=True)
class Parties:
    attacker_province: Optional[str] = None
    attacker_kingdom: Optional[str] = None
    defender_province: Optional[str] = None
    defender_kingdom: Optional[str] = None
    pattern: Optional[str] = None


@dataclass(frozen=True)
class Payload:
    acres: Optional[int] = None
    books: Optional[int] = None
    kills: Optional[int] = None


def safe_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    cleaned = str(value).replace(",", "").strip()
    try:
        return int(cleaned)
    except ValueError:
        return None


def clean_coordinates(text: str) -> str:
    cleaned = MARKDOWN_COORD_RE.sub(r"(\1)", text or "")
    return BRACKET_COORD_RE.sub(r"(\1)", cleaned)


def clean_province_name(raw_name: Optional[str]) -> Optional[str]:
    if raw_name is None:
        return None
    cleaned = TRAILING_HYPHEN_RE.sub("", raw_name.strip()).strip()
    return cleaned or None


def _from_match(match: "re.Match[str]", pattern_name: str) -> Parties:
    attacker = clean_province_name(match.group("aprov"))
    if pattern_name == "unknown_attacker":
        attacker = f"{UNKNOWN_PREFIX} {attacker}" if attacker else UNKNOWN_PREFIX
    return Parties(
        attacker_province=attacker,
        attacker_kingdom=match.group("akd"),
        defender_province=clean_province_name(match.group("dprov")),
        defender_kingdom=match.group("dkd"),
        pattern=pattern_name,
    )


def _fallback(text: str) -> Parties:
    attacker_province = None
    attacker_kingdom = None
    rest = text

    attacker_match = FALLBACK_ATTACKER_RE.match(text)
    if attacker_match:
        attacker_province = clean_province_name(attacker_match.group("prov"))
        attacker_kingdom = attacker_match.group("kd")
        rest = text[attacker_match.end():]

    defender_province = None
    defender_kingdom = None
    for pattern in FALLBACK_DEFENDER_PATTERNS:
        match = pattern.search(rest)
        if match:
            defender_province = clean_province_name(match.group("prov"))
            defender_kingdom = match.group("kd")
            break

    if not attacker_kingdom and not defender_kingdom:
        return Parties()

    return Parties(
        attacker_province=attacker_province,
        attacker_kingdom=attacker_kingdom,
        defender_province=defender_province,
        defender_kingdom=defender_kingdom,
        pattern="fallback",
    )


def extract_parties(content: str) -> Parties:
    """
    Pull attacker/defender province and kingdom out of a date-stripped news line.
    Specific phrasings are tried before the generic first-coordinate heuristic;
    anything that does not match is left as None.
    """
    text = clean_coordinates(content)
    for pattern_name, pattern in STRUCTURAL_PATTERNS:
        match = pattern.search(text)
        if match:
            return _from_match(match, pattern_name)
    return _fallback(text)


def extract_payload(content: str) -> Payload:
    text = clean_coordinates(content)
    acres = ACRES_RE.search(text)
    books = BOOKS_RE.search(text)
    kills = KILLS_RE.search(text)
    return Payload(
        acres=safe_int(acres.group(1)) if acres else None,
        books=safe_int(books.group(1)) if books else None,
        kills=safe_int(kills.group(1)) if kills else None,
    )
