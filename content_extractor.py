from urllib.parse import urlparse

from html_parser import HTMLParser
from models import PageRecord
from reference_resolver import extract_references
from utils import setup_logging

logger = setup_logging()

class ContentExtractor:
    """Orchestratore che usa HTMLParser per costruire un PageRecord completo."""

    def __init__(self, timeout: int = 10, user_agent: str | None = None):
        self.parser = HTMLParser(timeout=timeout, user_agent=user_agent)

    def extract(self, url: str) -> PageRecord:
        page_info, html = self.parser.fetch_page(url)
        return self.parse(html, url, final_url=page_info["url"])

    def parse(self, html: str, url: str, final_url: str | None = None) -> PageRecord:
        """Analizza l'HTML di una pagina; ``final_url`` è l'URL dopo eventuali redirect."""
        parser = self.parser
        soup = parser.make_soup(html, url)
        base = urlparse(final_url or url)
        base_url = f"{base.scheme}://{base.netloc}" if base.netloc else HTMLParser.BASE_URL

        references = extract_references(soup)
        page = PageRecord(
            url=url,
            title=parser.extract_title(soup, html),
            summary=parser.extract_summary(soup),
            infobox=parser.extract_infobox(soup),
            sections=parser.extract_sections(soup),
            external_links=parser.extract_external_links(soup),
            references=references,
            categories=parser.extract_categories(soup),
            coordinates=parser.extract_coordinates(soup),
            tables=parser.extract_tables(soup, references, base_url),
        )
        logger.info(
            f"Pagina analizzata: {page.title!r} "
            f"({len(page.tables)} tabelle, {len(page.references)} note, {len(page.sections)} sezioni)"
        )
        return page
