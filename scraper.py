import argparse
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from csv_formatter import tables_to_csv
from content_extractor import ContentExtractor
from crawler import page_filename
from exceptions import ScraperError
from json_formatter import save_page, to_json
from models import PageRecord
from report_formatter import format_page_report
from utils import is_valid_url, save_text, setup_logging

logger = setup_logging()

DEFAULT_DELAY = 1.0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scraper di tabelle e note di pagine Wikipedia")
    parser.add_argument("urls", nargs="+", help="Uno o più URL delle pagine da analizzare")
    parser.add_argument("-o", "--output", help="Percorso file JSON di output (solo se viene fornito un singolo URL)")
    parser.add_argument("--output-dir", default="Results", help="Cartella dove salvare i risultati (default: Results)")
    parser.add_argument("--no-pretty", action="store_true", help="Disabilita la formattazione leggibile del JSON")
    parser.add_argument("--timeout", type=int, default=10, help="Timeout richieste HTTP (s)")
    parser.add_argument("--user-agent", type=str, default=None, help="User-Agent personalizzato")
    parser.add_argument("--delay", type=float, default=DEFAULT_DELAY, help="Pausa fissa tra le richieste (s)")
    parser.add_argument("--stdout", action="store_true", help="Stampa il JSON su stdout oltre a salvarlo su file")
    parser.add_argument("--no-csv", action="store_true", help="Non salvare il CSV delle tabelle")
    parser.add_argument("--no-report", action="store_true", help="Non salvare il report testuale")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    invalid_urls = [url for url in args.urls if not is_valid_url(url)]
    if invalid_urls:
        logger.error(f"Gli URL non sono validi: {invalid_urls}")
        return 2

    if len(args.urls) > 1 and args.output:
        logger.warning("Opzione --output ignorata quando si specificano più URL. Verrà usata la cartella dei risultati.")

    base_output_dir = Path(args.output_dir)
    extractor = ContentExtractor(timeout=args.timeout, user_agent=args.user_agent)
    encountered_error = False

    for idx, url in enumerate(args.urls, start=1):
        if idx > 1:
            time.sleep(args.delay)
        try:
            logger.info(f"==> Elaborazione URL {idx}/{len(args.urls)}: {url}")
            page = extractor.extract(url)

            if args.stdout:
                print(f"\n=== {url} ===")
                print(to_json(page.to_dict(), pretty=(not args.no_pretty)), flush=True)

            paths = determine_output_paths(
                custom_output=args.output if len(args.urls) == 1 else None,
                output_dir=base_output_dir,
                page=page,
            )
            saved = save_outputs(page, paths, pretty=(not args.no_pretty),
                                 write_csv=not args.no_csv, write_report=not args.no_report)
            for path in saved:
                logger.info(f"Risultato salvato in: {path}")

        except ScraperError as exc:
            encountered_error = True
            logger.error(f"Errore durante lo scraping di {url}: {exc}")
        except Exception as exc:
            encountered_error = True
            logger.exception(f"Errore durante lo scraping di {url}: {exc}")

    return 0 if not encountered_error else 1


def determine_output_paths(custom_output: str | None, output_dir: Path, page: PageRecord) -> Dict[str, Path]:
    """Percorsi di JSON, CSV e report: ``<titolo>_<AAAA-MM-GG>`` nella cartella dei risultati."""
    stem = f"{page_filename(page)[:50]}_{datetime.now().strftime('%Y-%m-%d')}"
    json_path = Path(custom_output) if custom_output else output_dir / f"{stem}.json"
    base = json_path.with_suffix("")
    return {
        "json": json_path,
        "csv": base.with_name(f"{base.name}.csv"),
        "report": base.with_name(f"{base.name}_report.txt"),
    }


def save_outputs(
    page: PageRecord,
    paths: Dict[str, Path],
    pretty: bool = True,
    write_csv: bool = True,
    write_report: bool = True
) -> List[str]:
    saved = [save_page(page, str(paths["json"]), pretty=pretty)]
    if write_csv:
        if page.tables:
            saved.append(save_text(tables_to_csv(page), str(paths["csv"])))
        else:
            logger.warning("Nessuna tabella trovata: CSV non creato")
    if write_report:
        saved.append(save_text(format_page_report(page), str(paths["report"])))
    return saved


if __name__ == "__main__":
    sys.exit(main())
