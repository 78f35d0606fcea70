import argparse
import json
import re
import sys
from typing import List, Optional

from bs4 import BeautifulSoup

from aggregator import Analysis, analysis_to_dict, analyze, province_records
from config import ReportConfig, default_config_path, load_config, parse_kingdom, parse_window
from formatter import format_report
from province_news import format_province_report, parse_province_news
from records import filter_lines_by_date, split_lines

EVENT_LINE_RE = re.compile(
    r"^(?P<time>(January|February|March|April|May|June|July)\s+\d+\s+of\s+YR\d+)\s+(?P<rest>.+)$",
    re.IGNORECASE,
)


def normalize_text(s: str) -> str:
    return " ".join(s.split())


def extract_news_lines(html: str) -> List[str]:
    """
    Extract event lines that begin with '<Month> <day> of YR<year>'.
    Uses table/list candidates first, then falls back to text-line scanning.
    """
    soup = BeautifulSoup(html, "html.parser")
    container = soup.select_one("#content-area") or soup.select_one(".game-content") or soup.body
    if not container:
        return []

    out: List[str] = []
    seen = set()

    for node in container.select("tr, li, p"):
        text = normalize_text(node.get_text(" ", strip=True))
        if text and EVENT_LINE_RE.match(text) and text not in seen:
            seen.add(text)
            out.append(text)

    for raw_line in container.get_text("\n", strip=True).splitlines():
        text = normalize_text(raw_line)
        if text and EVENT_LINE_RE.match(text) and text not in seen:
            seen.add(text)
            out.append(text)

    return out


def load_lines(text: str, html: bool = False) -> List[str]:
    if html:
        return extract_news_lines(text)
    return split_lines(text)


def run_analysis(
    lines: List[str],
    config: ReportConfig,
    since: Optional[str] = None,
    until: Optional[str] = None,
) -> Analysis:
    return analyze(filter_lines_by_date(lines, since=since, until=until), **config.analyze_kwargs())


def build_report(text: str, config: Optional[ReportConfig] = None, html: bool = False) -> str:
    return format_report(run_analysis(load_lines(text, html=html), config or ReportConfig()))


def read_source(path: Optional[str]) -> str:
    if not path or path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8-sig") as f:
        return f.read()


def log(message: str) -> None:
    print(f"[news] {message}", file=sys.stderr)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Format pasted Utopia kingdom news into a war report.")
    parser.add_argument("file", nargs="?", help="news text or saved HTML; stdin when omitted")
    parser.add_argument("--html", action="store_true", help="input is a saved kingdom news page")
    parser.add_argument("--config", default=default_config_path())
    parser.add_argument("--home", help="home kingdom, N:M")
    parser.add_argument("--enemy", help="counterpart kingdom, N:M")
    parser.add_argument("--window", help="unique attack window in ticks")
    parser.add_argument("--since", help="first Utopian date to include, e.g. 'May 1 of YR3'")
    parser.add_argument("--until", help="last Utopian date to include")
    parser.add_argument("--province", help="dump the records of one province, e.g. '12 - Duke Silverhand'")
    parser.add_argument("--kingdom", help="kingdom of --province; defaults to home")
    parser.add_argument("--json", action="store_true", help="print the aggregate as JSON")
    parser.add_argument("--province-news", action="store_true", help="input is province news, not kingdom news")
    return parser


def resolve_config(args: argparse.Namespace) -> ReportConfig:
    config = load_config(args.config)
    overrides = {}
    if args.home:
        overrides["home_kingdom"] = parse_kingdom(args.home, "home")
    if args.enemy:
        overrides["enemy_kingdom"] = parse_kingdom(args.enemy, "enemy")
    if args.window:
        overrides["unique_window"] = parse_window(args.window)
    if not overrides:
        return config
    return ReportConfig(**{**config.to_dict(), **overrides})


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args)
        kingdom = parse_kingdom(args.kingdom, "kingdom")
    except ValueError as exc:
        parser.error(str(exc))

    text = read_source(args.file)
    lines = load_lines(text, html=args.html)

    if args.province_news:
        summary = parse_province_news(lines)
        log(f"lines={len(lines)} events={len(summary.events)}")
        if args.json:
            print(json.dumps(summary.to_dict(), indent=2))
        else:
            print(format_province_report(summary))
        return 0

    try:
        analysis = run_analysis(lines, config, since=args.since, until=args.until)
    except ValueError as exc:
        parser.error(str(exc))

    log(
        f"lines={len(lines)} records={len(analysis.records)} "
        f"home={analysis.home} ({analysis.kingdoms.home_source}) "
        f"enemy={analysis.enemy} ({analysis.kingdoms.enemy_source}) window={analysis.window}"
    )
    if analysis.divergent:
        log(f"type/category divergences={len(analysis.divergent)}")

    if args.province:
        rows = province_records(analysis.records, kingdom or analysis.home, args.province)
        log(f"province={args.province!r} records={len(rows)}")
        print(json.dumps([row.to_dict() for row in rows], indent=2))
    elif args.json:
        print(json.dumps(analysis_to_dict(analysis), indent=2))
    else:
        print(format_report(analysis))
    return 0


if __name__ == "__main__":
    sys.exit(main())
