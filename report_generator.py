"""Analisi offline delle pagine salvate dal crawler.

Legge i JSON di una cartella di crawl, classifica ogni pagina (tipo di evento,
anni citati, luogo, numero di fonti) e produce un report testuale più alcuni
CSV riassuntivi.
"""

import argparse
import re
import sys
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from crawler import DEFAULT_OUTPUT_DIR, INDEX_NAME
from csv_formatter import rows_to_csv
from exceptions import WriteError
from json_formatter import load_page
from models import PageRecord
from utils import save_text, setup_logging

logger = setup_logging()

DEFAULT_REPORTS_DIR = "ANALYSIS_REPORTS"
YEAR_PATTERN = re.compile(r'\b(1[0-9]{3}|20[0-9]{2})\b')
TYPE_KEYWORDS: Sequence[Tuple[str, Sequence[str]]] = (
    ('Pandemic/Disease', ('pandemic', 'flu', 'plague', 'covid', 'disease')),
    ('Famine', ('famine', 'hunger')),
    ('Natural Disaster', ('earthquake', 'flood', 'storm', 'hurricane')),
    ('Terrorist/Violence', ('terrorist', 'attack')),
    ('Industrial/Transport', ('fire', 'accident', 'crash')),
)
LOCATIONS: Sequence[str] = (
    'England', 'Ireland', 'Scotland', 'Wales', 'Britain', 'UK',
    'Europe', 'Asia', 'Africa', 'America', 'London',
)
UNKNOWN_LOCATION = 'Unknown'
BANNER = "═" * 63


@dataclass
class PageAnalysis:
    title: str
    filename: str
    summary: str
    source_count: int
    years: List[int] = field(default_factory=list)
    type: str = 'Other'
    location: str = UNKNOWN_LOCATION


@dataclass
class AnalysisSummary:
    pages: List[PageAnalysis] = field(default_factory=list)
    type_breakdown: Dict[str, int] = field(default_factory=dict)
    timeline: Dict[int, int] = field(default_factory=dict)
    locations: Dict[str, int] = field(default_factory=dict)

    @property
    def total_sources(self) -> int:
        return sum(page.source_count for page in self.pages)

    @property
    def average_sources(self) -> int:
        return round(self.total_sources / len(self.pages)) if self.pages else 0

    @property
    def years(self) -> List[int]:
        return [year for page in self.pages for year in page.years]


def extract_years(text: str) -> List[int]:
    years = sorted({int(match) for match in YEAR_PATTERN.findall(text or '')})
    return [year for year in years if 1000 < year < 3000]


def classify_type(title: str) -> str:
    lowered = (title or '').lower()
    for label, keywords in TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return label
    return 'Other'


def extract_location(text: str) -> str:
    for location in LOCATIONS:
        if location in (text or ''):
            return location
    return UNKNOWN_LOCATION


def analyze_page(page: PageRecord, filename: str) -> PageAnalysis:
    text = f"{page.title} {page.summary}"
    return PageAnalysis(
        title=page.title,
        filename=filename,
        summary=page.summary[:200] or 'No summary',
        source_count=len(page.external_links),
        years=extract_years(text),
        type=classify_type(page.title),
        location=extract_location(text),
    )


def summarize(pages: Sequence[PageAnalysis]) -> AnalysisSummary:
    timeline: Counter = Counter()
    for page in pages:
        if page.years:
            timeline[min(page.years) // 10 * 10] += 1
    return AnalysisSummary(
        pages=list(pages),
        type_breakdown=dict(Counter(page.type for page in pages)),
        timeline=dict(timeline),
        locations=dict(Counter(page.location for page in pages if page.location != UNKNOWN_LOCATION)),
    )


def load_crawled_pages(crawled_dir: Path) -> List[PageAnalysis]:
    """Analizza ogni JSON di pagina; i file illeggibili vengono saltati con un avviso."""
    analyses: List[PageAnalysis] = []
    for json_file in sorted(Path(crawled_dir).glob("*.json")):
        if json_file.stem == INDEX_NAME:
            continue
        try:
            page = load_page(str(json_file))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning(f"Impossibile analizzare {json_file.name}: {exc}")
            continue
        analyses.append(analyze_page(page, json_file.name))
    logger.info(f"Analizzate {len(analyses)} pagine")
    return analyses


def _by_count(counts: Dict, limit: Optional[int] = None) -> List[Tuple]:
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ordered[:limit] if limit else ordered


def _percentage(count: int, total: int) -> int:
    return round(count / total * 100) if total else 0


def _section(title: str, lines: List[str]) -> List[str]:
    return [BANNER, title, BANNER, ""] + (lines or ["• none"]) + [""]


def format_analysis_report(summary: AnalysisSummary, generated_at: Optional[datetime] = None) -> str:
    generated_at = generated_at or datetime.now()
    total = len(summary.pages)
    years = summary.years
    period = f"{min(years)} - {max(years)}" if years else "N/A"
    counts = [page.source_count for page in summary.pages]
    top_type = _by_count(summary.type_breakdown, 1)
    top_location = _by_count(summary.locations, 1)

    lines: List[str] = [
        "DISASTER DATA ANALYSIS REPORT",
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
    ]
    lines += _section("OVERVIEW", [
        "DATASET SUMMARY:",
        f"• Total Disasters Analyzed: {total}",
        f"• Total External Sources: {summary.total_sources}",
        f"• Average Sources per Disaster: {summary.average_sources}",
        f"• Time Period Covered: {period}",
    ])
    lines += _section("DISASTER TYPE BREAKDOWN", [
        f"• {label}: {count} disasters ({_percentage(count, total)}%)"
        for label, count in _by_count(summary.type_breakdown)
    ])
    lines += _section("GEOGRAPHIC DISTRIBUTION", [
        f"• {location}: {count} disasters" for location, count in _by_count(summary.locations, 10)
    ])
    recent = sorted((decade for decade in summary.timeline if decade >= 1900), reverse=True)[:15]
    lines += _section("HISTORICAL TIMELINE (Recent Decades)", [
        f"• {decade}s: {summary.timeline[decade]} disasters" for decade in recent
    ])
    lines += _section("SOURCE QUALITY METRICS", [
        f"• Total External Sources: {summary.total_sources}",
        f"• Average per Disaster: {summary.average_sources}",
        f"• Highest Source Count: {max(counts) if counts else 0}",
        f"• Lowest Source Count: {min(counts) if counts else 0}",
    ])
    ranked = sorted(summary.pages, key=lambda page: page.source_count, reverse=True)[:10]
    lines += _section("TOP DISASTERS BY SOURCE COUNT", [
        f"{position}. {page.title}: {page.source_count} sources"
        for position, page in enumerate(ranked, start=1)
    ])
    lines += _section("KEY INSIGHTS", [
        f"• Most documented type: {top_type[0][0] if top_type else 'N/A'}",
        f"• Geographic focus: {top_location[0][0] if top_location else 'N/A'}",
        f"• Well-sourced events average {summary.average_sources} external references",
    ])
    lines.append("Report generated from crawled Wikipedia data.")
    return "\n".join(lines) + "\n"


def write_reports(summary: AnalysisSummary, reports_dir: Path) -> List[str]:
    total = len(summary.pages)
    types_rows = [
        (label, count, f"{_percentage(count, total)}%") for label, count in _by_count(summary.type_breakdown)
    ]
    timeline_rows = [(f"{decade}s", summary.timeline[decade]) for decade in sorted(summary.timeline)]
    location_rows = _by_count(summary.locations)
    return [
        save_text(format_analysis_report(summary), str(reports_dir / "ANALYSIS_REPORT.txt")),
        save_text(rows_to_csv(("Disaster_Type", "Count", "Percentage"), types_rows),
                  str(reports_dir / "DISASTER_TYPES.csv")),
        save_text(rows_to_csv(("Decade", "Disaster_Count"), timeline_rows),
                  str(reports_dir / "TIMELINE_DATA.csv")),
        save_text(rows_to_csv(("Location", "Disaster_Count"), location_rows),
                  str(reports_dir / "LOCATION_ANALYSIS.csv")),
    ]


def generate_reports(crawled_dir: Path, reports_dir: Path) -> Optional[AnalysisSummary]:
    """Restituisce None se non ci sono dati da analizzare."""
    if not Path(crawled_dir).is_dir():
        logger.error(f"Cartella {crawled_dir} non trovata: eseguire prima crawler.py")
        return None
    pages = load_crawled_pages(crawled_dir)
    if not pages:
        logger.error(f"Nessun file di pagina in {crawled_dir}: eseguire prima crawler.py")
        return None
    summary = summarize(pages)
    for path in write_reports(summary, Path(reports_dir)):
        logger.info(f"Report salvato in: {path}")
    return summary


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Genera report di analisi dalle pagine salvate dal crawler")
    parser.add_argument("--crawled-dir", default=DEFAULT_OUTPUT_DIR, help=f"Cartella delle pagine (default: {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("--reports-dir", default=DEFAULT_REPORTS_DIR, help=f"Cartella dei report (default: {DEFAULT_REPORTS_DIR})")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        summary = generate_reports(Path(args.crawled_dir), Path(args.reports_dir))
    except WriteError as exc:
        logger.error(f"Impossibile salvare i report: {exc}")
        return 1
    return 0 if summary else 1


if __name__ == "__main__":
    sys.exit(main())
