"""Report testuali leggibili per una pagina e per un'intera esecuzione."""

from typing import List

from models import PageRecord, RunIndex

RULE = "=" * 32


def format_page_report(page: PageRecord) -> str:
    lines: List[str] = [
        "WIKIPEDIA SCRAPING REPORT",
        RULE,
        "",
        f"Page: {page.title}",
        f"URL: {page.url}",
        f"Scraped: {page.scraped_at}",
        "",
        "SUMMARY:",
        f"- Tables found: {len(page.tables)}",
        f"- Total references: {len(page.references)}",
        f"- Sections: {len(page.sections)}",
        f"- External links: {len(page.external_links)}",
        f"- Categories: {len(page.categories)}",
    ]

    total_rows = total_wiki_links = total_external_refs = 0
    for position, table in enumerate(page.tables, start=1):
        total_rows += len(table.rows)
        for row in table.rows:
            total_wiki_links += len(row.wikipedia_links)
            total_external_refs += len(row.external_references)
        lines.append("")
        lines.append(f"Table {position}: {len(table.rows)} rows")
        lines.append(f"Headers: {', '.join(table.headers)}")

    lines += [
        "",
        "TOTALS:",
        f"- Total rows: {total_rows}",
        f"- Total Wikipedia links: {total_wiki_links}",
        f"- Total external references: {total_external_refs}",
        "",
        "EXTERNAL REFERENCES FOUND:",
    ]
    lines += [f"[{ref.number}] {ref.url}" for ref in page.references if ref.url]
    return "\n".join(lines) + "\n"


def format_run_report(run_index: RunIndex) -> str:
    lines: List[str] = [
        "CRAWL RUN REPORT",
        RULE,
        "",
        f"Started: {run_index.started_at}",
        f"Addresses processed: {run_index.total_pages}",
        f"Successful pages: {len(run_index.pages)}",
        f"Errors: {len(run_index.errors)}",
        "",
        "PAGES:",
    ]
    lines += [f"- {entry.title} ({entry.filename}.json) <{entry.url}>" for entry in run_index.pages]
    if run_index.errors:
        lines += ["", "ERRORS:"]
        lines += [f"- {entry.url}: {entry.error}" for entry in run_index.errors]
    return "\n".join(lines) + "\n"
