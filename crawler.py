import argparse
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional
from urllib.parse import unquote, urlparse

from content_extractor import ContentExtractor
from csv_formatter import index_to_csv, tables_to_csv
from exceptions import ScraperError, WriteError
from json_formatter import load_json, save_json, save_page
from models import ErrorEntry, IndexEntry, PageRecord, RunIndex
from report_formatter import format_page_report, format_run_report
from utils import clean_filename, save_text, setup_logging

logger = setup_logging()

DEFAULT_OUTPUT_DIR = "crawled_pages"
DEFAULT_DELAY = 2.0
DEFAULT_MAX_PAGES = 50
DEFAULT_TIMEOUT = 10
INDEX_NAME = "MASTER_INDEX"
RUN_REPORT_NAME = "RUN_REPORT.txt"
SUMMARY_PREVIEW = 200


@dataclass
class CrawlerConfig:
    output_dir: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT_DIR))
    delay: float = DEFAULT_DELAY
    max_pages: int = DEFAULT_MAX_PAGES
    timeout: int = DEFAULT_TIMEOUT
    user_agent: Optional[str] = None
    write_csv: bool = False
    write_report: bool = False
    pretty: bool = True


def discover_links(source_dir: Path) -> List[str]:
    """Cerca link ``/wiki/`` nelle righe di tabella dei file JSON già salvati."""
    links: List[str] = []
    seen = set()
    files = sorted(Path(source_dir).glob("*.json"))
    logger.info(f"Trovati {len(files)} file JSON in {source_dir}")

    for json_file in files:
        try:
            data = load_json(str(json_file))
        except (OSError, ValueError) as exc:
            logger.warning(f"Impossibile leggere {json_file.name}: {exc}")
            continue
        if not isinstance(data, dict) or not isinstance(data.get("tables"), list):
            continue
        for table in data["tables"]:
            for row in table.get("rows", []) if isinstance(table, dict) else []:
                if not isinstance(row, dict):
                    continue
                # "_links" è il formato delle esportazioni più vecchie
                for key in ("wikipedia_links", "_links"):
                    for link in row.get(key) or []:
                        url = link.get("url") if isinstance(link, dict) else None
                        if url and "/wiki/" in url and url not in seen:
                            seen.add(url)
                            links.append(url)

    logger.info(f"Trovati {len(links)} link Wikipedia unici da esplorare")
    return links


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"deve essere un intero positivo: {value}")
    return number


def page_filename(page: PageRecord) -> str:
    name = clean_filename(page.title)
    if not name:
        name = clean_filename(unquote(urlparse(page.url).path.rsplit("/", 1)[-1]).replace("_", " "))
    return name or "page"


class Crawler:
    """Esegue la pipeline fetch → parse → salvataggio su una lista di indirizzi, uno alla volta."""

    def __init__(
        self,
        config: CrawlerConfig,
        extractor: Optional[ContentExtractor] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.config = config
        self.extractor = extractor or ContentExtractor(timeout=config.timeout, user_agent=config.user_agent)
        self.sleep = sleep

    def crawl(self, urls: Iterable[str]) -> RunIndex:
        """
        Elabora gli indirizzi in sequenza e salva l'indice alla fine.

        Args:
            urls: indirizzi da visitare (troncati a ``max_pages``)

        Returns:
            Il RunIndex con le pagine riuscite e il log degli errori
        """
        run_index = RunIndex()
        targets = list(urls)[:self.config.max_pages]
        if not targets:
            logger.error("Nessun indirizzo da elaborare: esecuzione terminata")
            return run_index

        logger.info(f"Verranno elaborate {len(targets)} pagine (limite {self.config.max_pages})")
        for idx, url in enumerate(targets, start=1):
            logger.info(f"==> Avanzamento {idx}/{len(targets)}: {url}")
            run_index = self._process_url(url, run_index)
            if idx < len(targets):
                logger.info(f"Attesa di {self.config.delay} secondi...")
                self.sleep(self.config.delay)

        self.save_index(run_index)
        logger.info(
            f"Esecuzione completata: {len(run_index.pages)} pagine, {len(run_index.errors)} errori"
        )
        return run_index

    def _process_url(self, url: str, run_index: RunIndex) -> RunIndex:
        try:
            page = self.extractor.extract(url)
            target = page_filename(page)
            if any(entry.filename == target for entry in run_index.pages):
                logger.warning(f"Il file {target} è già stato scritto in questa esecuzione: {url} lo sovrascrive")
            filename = self.save_page(page)
        except ScraperError as exc:
            logger.error(f"Errore durante l'elaborazione di {url}: {exc}")
            run_index.errors.append(ErrorEntry(url=url, error=str(exc)))
            return run_index
        except Exception as exc:
            logger.exception(f"Errore inatteso durante l'elaborazione di {url}: {exc}")
            run_index.errors.append(ErrorEntry(url=url, error=str(exc)))
            return run_index

        run_index.pages.append(IndexEntry(
            title=page.title,
            url=url,
            filename=filename,
            summary=page.summary[:SUMMARY_PREVIEW],
            scraped_at=page.scraped_at,
        ))
        logger.info(f"Pagina elaborata: {page.title}")
        return run_index

    def save_page(self, page: PageRecord) -> str:
        """Salva la pagina (più CSV e report se richiesti) e restituisce il nome base dei file."""
        filename = page_filename(page)
        output_dir = self.config.output_dir
        saved = save_page(page, str(output_dir / f"{filename}.json"), pretty=self.config.pretty)
        logger.info(f"Salvato: {saved}")
        if self.config.write_csv and page.tables:
            save_text(tables_to_csv(page), str(output_dir / f"{filename}.csv"))
        if self.config.write_report:
            save_text(format_page_report(page), str(output_dir / f"{filename}_report.txt"))
        return filename

    def save_index(self, run_index: RunIndex) -> List[str]:
        output_dir = self.config.output_dir
        paths = [
            save_json(run_index.to_dict(), str(output_dir / f"{INDEX_NAME}.json"), pretty=self.config.pretty),
            save_text(index_to_csv(run_index.pages), str(output_dir / f"{INDEX_NAME}.csv")),
            save_text(format_run_report(run_index), str(output_dir / RUN_REPORT_NAME)),
        ]
        logger.info(f"Indice salvato con {len(run_index.pages)} pagine in {output_dir}")
        return paths


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Crawler sequenziale di pagine Wikipedia")
    parser.add_argument("urls", nargs="*", help="URL da visitare; se assenti vengono cercati nei file JSON")
    parser.add_argument("--source-dir", default=".", help="Cartella dei JSON da cui estrarre i link (default: .)")
    parser.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR, help=f"Cartella dei risultati (default: {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("--max-pages", type=positive_int, default=DEFAULT_MAX_PAGES, help="Numero massimo di pagine da visitare")
    parser.add_argument("--delay", type=float, default=DEFAULT_DELAY, help="Pausa fissa tra le richieste (s)")
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT, help="Timeout richieste HTTP (s)")
    parser.add_argument("--user-agent", type=str, default=None, help="User-Agent personalizzato")
    parser.add_argument("--csv", action="store_true", help="Salva anche il CSV delle tabelle di ogni pagina")
    parser.add_argument("--report", action="store_true", help="Salva anche il report testuale di ogni pagina")
    parser.add_argument("--no-pretty", action="store_true", help="Disabilita la formattazione leggibile del JSON")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    urls = args.urls or discover_links(Path(args.source_dir))
    if not urls:
        logger.error("Nessun link Wikipedia trovato nei file JSON esistenti")
        return 2

    config = CrawlerConfig(
        output_dir=Path(args.output_dir),
        delay=args.delay,
        max_pages=args.max_pages,
        timeout=args.timeout,
        user_agent=args.user_agent,
        write_csv=args.csv,
        write_report=args.report,
        pretty=not args.no_pretty,
    )
    try:
        run_index = Crawler(config).crawl(urls)
    except WriteError as exc:
        logger.error(f"Impossibile salvare l'indice: {exc}")
        return 1
    return 0 if not run_index.errors else 1


if __name__ == "__main__":
    sys.exit(main())
