from typing import List, Optional

from aggregator import UNKNOWN_PROVINCE, Analysis, DragonNews, Highlights, KingdomLedger, SideTotals
from records import AttackRecord

EMPTY_REPORT = "No attacks detected in pasted text."

LAND_ROWS = [
    ("Traditional march", "Traditional March"),
    ("Ambush", "Ambush"),
    ("Conquest", "Conquest"),
    ("Raze", "Raze"),
]


def signed(value: int) -> str:
    return f"+{value}" if value > 0 else str(value)


def format_side(title: str, totals: SideTotals, extra: List[str]) -> List[str]:
    lines = [f"{title}: {totals.overall_count} ({totals.overall_acres} acres)"]
    for label, category in LAND_ROWS:
        row = totals.get(category)
        lines.append(f"-- {label}: {row.count} ({row.acres} acres)")

    massacre = totals.get("Massacre")
    learn = totals.get("Learn")
    lines.append(f"-- Massacre: {massacre.count} ({massacre.kills} population)")
    lines.append(f"-- Plunder: {totals.get('Plunder').count}")
    lines.append(f"-- Learn: {learn.count} ({learn.books} books)")
    lines.append(f"-- Failed: {totals.get('Failed Attack').count} ({totals.failure_rate():.1f}% failure)")
    lines.extend(extra)
    return lines


def format_summary(analysis: Analysis) -> List[str]:
    stats = analysis.event_stats
    made = format_side(
        f"Total attacks made ({analysis.home})",
        analysis.made_totals,
        [
            f"-- Uniques: {analysis.made_uniques}",
            f"-- Bounces: {stats.bounces_made}",
            f"-- DragonsStarted: {stats.dragons_started_us}",
            f"-- DragonsCompleted: {stats.dragons_completed_us}",
            f"-- Enemy Dragons Killed: {stats.enemy_dragons_killed}",
            f"-- Rituals Started: {stats.rituals_started}",
            f"-- Rituals Completed: {stats.rituals_completed}",
        ],
    )
    suffered = format_side(
        f"Total attacks suffered ({analysis.home})",
        analysis.suffered_totals,
        [
            f"-- Uniques: {analysis.suffered_uniques}",
            f"-- Bounces: {stats.bounces_suffered}",
            f"-- DragonsStarted: {stats.dragons_started_enemy}",
            f"-- DragonsCompleted: {stats.dragons_completed_enemy}",
        ],
    )
    return ["** Summary **"] + made + [""] + suffered


def format_kingdom(ledger: KingdomLedger) -> List[str]:
    lines = [
        f"** The kingdom of {ledger.kingdom} **",
        f"Total Acres: {signed(ledger.net_acres)} ({ledger.made_count}/{ledger.suffered_count})",
    ]
    for entry in ledger.entries:
        lines.append(f"{entry.acres} | {entry.province} ({entry.made}/{entry.suffered})")
    return lines


def format_uniques(ledger: KingdomLedger) -> List[str]:
    lines = [f"** Uniques for {ledger.kingdom} **"]
    lines.extend(f"{province} - {count}" for province, count in ledger.uniques)
    return lines


def _party(province: Optional[str], kingdom: Optional[str]) -> str:
    return province or kingdom or UNKNOWN_PROVINCE


def _land_line(label: str, record: Optional[AttackRecord], who: Optional[str]) -> Optional[str]:
    if not record:
        return None
    return f"{label}: {record.date}\t{who}: {record.acres} acres."


def format_highlights(highlights: Highlights) -> List[str]:
    lines = ["** Highlights **"]
    h = highlights

    def attacker(record: Optional[AttackRecord]) -> Optional[str]:
        return record and _party(record.attacker_province, record.attacker_kingdom)

    def defender(record: Optional[AttackRecord]) -> Optional[str]:
        return record and _party(record.defender_province, record.defender_kingdom)

    def ambusher(record: Optional[AttackRecord]) -> Optional[str]:
        if not record:
            return None
        province = record.attacker_province or UNKNOWN_PROVINCE
        return f"{province} from {record.attacker_kingdom}" if record.attacker_kingdom else province

    candidates = [
        _land_line("Most land gained in a single tradmarch", h.most_gained_march, attacker(h.most_gained_march)),
        _land_line("Least land gained in a single tradmarch", h.least_gained_march, attacker(h.least_gained_march)),
        _land_line("Most land lost in a single tradmarch", h.most_lost_march, defender(h.most_lost_march)),
        _land_line("Least land lost in a single tradmarch", h.least_lost_march, defender(h.least_lost_march)),
        _land_line("Most land regained in a single ambush", h.most_regained_ambush, attacker(h.most_regained_ambush)),
        _land_line(
            "Least land regained in a single ambush",
            h.least_regained_ambush,
            attacker(h.least_regained_ambush),
        ),
        _land_line("Most land lost in a single ambush", h.most_lost_ambush, ambusher(h.most_lost_ambush)),
        _land_line("Least land lost in a single ambush", h.least_lost_ambush, ambusher(h.least_lost_ambush)),
    ]
    lines.extend(line for line in candidates if line)

    if h.bounces_made_by:
        lines.append(f"Most bounces made by {', '.join(h.bounces_made_by)}: {h.bounces_made_max} times.")
    if h.bounces_received_by:
        lines.append(f"Most bounces received by {', '.join(h.bounces_received_by)}: {h.bounces_received_max} times.")
    return lines


def format_relations(relations: List[str]) -> List[str]:
    return ["** Relations News **"] + (relations or ["No relation events detected."])


def format_dragon_news(news: DragonNews) -> List[str]:
    lines = ["** Dragon News **"]
    if news.empty:
        lines.append("No dragon events detected.")
        return lines

    for title, rows in (
        ("Dragon Started:", news.started),
        ("Enemy Dragon Started:", news.enemy_started),
        ("Dragon Cancelled:", news.cancelled),
        ("Enemy Dragon Cancelled:", news.enemy_cancelled),
    ):
        if rows:
            lines.append(title)
            lines.extend(rows)

    lines.append(f"Dragon Sent: {len(news.sent)}")
    received = ", ".join(f"{name}({count})" for name, count in news.received_breakdown())
    lines.append(f"Dragon Received: {len(news.received)}" + (f", {received}" if received else ""))

    if news.slain:
        lines.append("Dragon Slain:")
        lines.extend(news.slain)
    if news.flown_away:
        lines.append("Dragon Flies Away:")
        lines.extend(news.flown_away)
    if news.other:
        lines.append("Other Dragon News:")
        lines.extend(news.other)
    return lines


def format_report(analysis: Analysis) -> str:
    """
    Render the fixed-layout kingdom news report. Sections are separated by a
    blank line; the kingdom ledgers follow the order chosen by the aggregator.
    """
    if not analysis.records:
        return EMPTY_REPORT

    hours = analysis.elapsed_hours if analysis.elapsed_hours is not None else "N/A"
    sections: List[List[str]] = [
        [
            "** Kingdom news report **",
            f"For the time from {analysis.date_from} till {analysis.date_to} - {hours} hours",
        ],
        format_summary(analysis),
    ]
    sections.extend(format_kingdom(ledger) for ledger in analysis.kingdom_ledgers)
    sections.extend(format_uniques(ledger) for ledger in analysis.kingdom_ledgers if ledger.uniques)
    sections.append(format_highlights(analysis.highlights))
    sections.append(format_relations(analysis.relations))
    sections.append(format_dragon_news(analysis.dragon_news))

    return "\n\n".join("\n".join(section) for section in sections)
