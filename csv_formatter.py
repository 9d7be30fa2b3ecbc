import csv
import io
from typing import List, Sequence

from models import IndexEntry, PageRecord, RowRecord

LIST_SEPARATOR = " | "
EXTRA_COLUMNS: Sequence[str] = (
    'Wikipedia_Links', 'External_Sources_Count', 'External_URLs', 'Extraction_Methods'
)
INDEX_COLUMNS: Sequence[str] = ('Title', 'URL', 'Filename', 'Summary', 'Scraped_At')


def _flatten_row(row: RowRecord, headers: Sequence[str]) -> List[str]:
    values = [row.cells.get(header, '') for header in headers]
    values.append(LIST_SEPARATOR.join(f"{link.text}: {link.url}" for link in row.wikipedia_links))
    values.append(str(len(row.external_references)))
    values.append(LIST_SEPARATOR.join(
        f"[{ref.number}] {ref.url or 'No URL found'}" for ref in row.external_references
    ))
    values.append(LIST_SEPARATOR.join(
        f"[{ref.number}] {ref.extraction_methods or 'N/A'}" for ref in row.external_references
    ))
    return values


def tables_to_csv(page: PageRecord) -> str:
    """Una sezione per tabella: riga-titolo, intestazioni, una riga per riga di tabella."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    for position, table in enumerate(page.tables, start=1):
        writer.writerow([f"=== TABLE {position}: {page.title} ==="])
        writer.writerow(list(table.headers) + list(EXTRA_COLUMNS))
        for row in table.rows:
            writer.writerow(_flatten_row(row, table.headers))
        writer.writerow([])
    return buffer.getvalue()


def index_to_csv(entries: Sequence[IndexEntry]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n', quoting=csv.QUOTE_ALL)
    writer.writerow(INDEX_COLUMNS)
    for entry in entries:
        writer.writerow([
            entry.title,
            entry.url,
            entry.filename,
            ' '.join(entry.summary.split('\n')),
            entry.scraped_at,
        ])
    return buffer.getvalue()


def rows_to_csv(header: Sequence[str], rows: Sequence[Sequence]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()

