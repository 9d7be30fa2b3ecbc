import copy
import re
import requests
from bs4 import BeautifulSoup
from bs4.element import Tag
from readability import Document
from typing import Dict, Any, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from exceptions import FetchError, ParseError
from models import ExternalLink, Reference, RowRecord, Section, TableRecord, WikiLink
from reference_resolver import resolve_markers
from utils import setup_logging, clean_text, format_size, is_valid_url

logger = setup_logging()


class HTMLParser:
    """Classe per recuperare e analizzare pagine Wikipedia"""

    BASE_URL = "https://en.wikipedia.org"
    DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; WikiCrawler/1.0)"
    ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

    CONTENT_ROOT = '#mw-content-text .mw-parser-output'
    SUMMARY_PARAGRAPHS = 3
    MIN_SUMMARY_LENGTH = 50
    MIN_SECTION_PARAGRAPH_LENGTH = 30
    HEADING_TAGS: Sequence[str] = ('h2', 'h3', 'h4')
    EXTERNAL_LINKS_IDS: Sequence[str] = ('External_links', 'External_Links')

    def __init__(self, timeout=10, user_agent=None):
        """
        Inizializza il parser HTML

        Args:
            timeout: Timeout in secondi per le richieste
            user_agent: User-Agent personalizzato per le richieste HTTP
        """
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': (user_agent or '').strip() or self.DEFAULT_USER_AGENT,
            'Accept': self.ACCEPT,
        })

    def fetch_page(self, url: str) -> Tuple[Dict[str, Any], str]:
        """
        Recupera il contenuto di una pagina web

        Args:
            url: URL della pagina da recuperare

        Returns:
            Dizionario con informazioni sulla pagina e il suo HTML

        Raises:
            FetchError: URL non valido, timeout o risposta non 2xx
        """
        if not is_valid_url(url):
            raise FetchError(url, ValueError(f"URL non valido: {url!r}"))

        logger.info(f"Recupero pagina: {url}")

        try:
            response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Errore durante il recupero della pagina: {e}")
            raise FetchError(url, e) from e

        # raise_for_status lascia passare i 3xx non seguiti (es. 304)
        if not 200 <= response.status_code < 300:
            error = requests.HTTPError(f"HTTP {response.status_code}", response=response)
            logger.error(f"Risposta non valida per {url}: {error}")
            raise FetchError(url, error)

        page_info = {
            'url': response.url,
            'status_code': response.status_code,
            'encoding': response.encoding,
            'size_bytes': len(response.content),
            'size_readable': format_size(len(response.content)),
        }
        logger.info(f"Scaricati {page_info['size_readable']} da {page_info['url']}")
        return page_info, response.text

    def make_soup(self, html_content: str, url: str = "") -> BeautifulSoup:
        """Costruisce l'albero interrogabile del documento."""
        try:
            return BeautifulSoup(html_content, 'lxml')
        except Exception as e:
            logger.error(f"Errore durante l'analisi HTML: {e}")
            raise ParseError(url, e) from e

    def extract_title(self, soup: BeautifulSoup, html_content: str = "") -> str:
        heading = soup.select_one('h1.firstHeading')
        if heading:
            title = clean_text(heading.get_text())
            if title:
                return title
        if not html_content:
            return ""
        try:
            return clean_text(Document(html_content).short_title())
        except Exception as exc:
            logger.debug(f"Titolo readability non disponibile: {exc}")
            return ""

    def extract_summary(self, soup: BeautifulSoup) -> str:
        paragraphs = soup.select(f'{self.CONTENT_ROOT} > p')[:self.SUMMARY_PARAGRAPHS]
        texts = [p.get_text().strip() for p in paragraphs]
        return '\n\n'.join(text for text in texts if len(text) > self.MIN_SUMMARY_LENGTH)

    def extract_infobox(self, soup: BeautifulSoup) -> Dict[str, str]:
        infobox: Dict[str, str] = {}
        for row in soup.select('.infobox tr'):
            label_cell = row.find('th')
            value_cell = row.find('td')
            label = clean_text(label_cell.get_text()) if label_cell else ""
            value = clean_text(value_cell.get_text(" ")) if value_cell else ""
            if label and value:
                infobox[label] = value
        return infobox

    def extract_sections(self, soup: BeautifulSoup) -> List[Section]:
        sections: List[Section] = []
        root = soup.select_one(self.CONTENT_ROOT)
        if not root:
            return sections
        for element in root.find_all(True, recursive=False):
            heading = self._as_heading(element)
            if heading is not None:
                title = self._heading_text(heading)
                if title and 'edit' not in title:
                    sections.append(Section(level=int(heading.name[1]), title=title))
            elif sections and element.name == 'p':
                text = element.get_text().strip()
                if len(text) > self.MIN_SECTION_PARAGRAPH_LENGTH:
                    sections[-1].content.append(text)
        return sections

    def _as_heading(self, element: Tag) -> Optional[Tag]:
        if element.name in self.HEADING_TAGS:
            return element
        # markup recente: <div class="mw-heading"><h2>...</h2></div>
        if element.name == 'div' and 'mw-heading' in (element.get('class') or []):
            return element.find(list(self.HEADING_TAGS), recursive=False)
        return None

    def _heading_text(self, heading: Tag) -> str:
        heading = copy.copy(heading)
        for editsection in heading.select('.mw-editsection'):
            editsection.decompose()
        return clean_text(heading.get_text())

    def extract_external_links(self, soup: BeautifulSoup) -> List[ExternalLink]:
        links: List[ExternalLink] = []
        seen = set()

        def add(anchor: Tag, source: Optional[str]) -> None:
            url = anchor.get('href')
            text = clean_text(anchor.get_text())
            if url and text and url not in seen:
                seen.add(url)
                links.append(ExternalLink(url=url, text=text, source=source))

        for anchor_id in self.EXTERNAL_LINKS_IDS:
            marker = soup.find(id=anchor_id)
            if not marker or not marker.parent:
                continue
            for sibling_list in marker.parent.find_next_siblings('ul'):
                for anchor in sibling_list.select('a[href^="http"]'):
                    add(anchor, None)

        for anchor in soup.select('.references a[href^="http"], .reflist a[href^="http"]'):
            add(anchor, 'references')
        return links

    def extract_categories(self, soup: BeautifulSoup) -> List[str]:
        categories = []
        for link in soup.select('#mw-normal-catlinks a'):
            category = clean_text(link.get_text())
            if category and 'Category' not in category:
                categories.append(category)
        return categories

    def extract_coordinates(self, soup: BeautifulSoup) -> Optional[str]:
        geo = soup.select_one('.geo')
        if not geo:
            return None
        return clean_text(geo.get_text()) or None

    def extract_tables(
        self,
        soup: BeautifulSoup,
        references: Sequence[Reference],
        base_url: str = BASE_URL
    ) -> List[TableRecord]:
        """Estrae le tabelle ``wikitable`` risolvendo i marcatori di nota di ogni cella."""
        tables: List[TableRecord] = []
        for index, table in enumerate(soup.select('table.wikitable')):
            rows = table.find_all('tr')
            if not rows:
                continue
            headers = [
                self._cell_text(th) for th in rows[0].find_all('th')
                if self._cell_text(th)
            ]
            if not headers:
                continue
            record = TableRecord(index=index, headers=headers)
            for row in rows[1:]:
                cells = row.find_all('td')
                if cells:
                    record.rows.append(self._build_row(cells, headers, references, base_url))
            tables.append(record)
        return tables

    def _build_row(
        self,
        cells: List[Tag],
        headers: List[str],
        references: Sequence[Reference],
        base_url: str
    ) -> RowRecord:
        row = RowRecord()
        for cell_index, cell in enumerate(cells):
            cell_text = self._cell_text(cell)
            header = headers[cell_index] if cell_index < len(headers) else f"column_{cell_index}"
            row.cells[header] = cell_text
            for link in cell.select('a[href^="/wiki/"]'):
                row.wikipedia_links.append(WikiLink(
                    url=urljoin(base_url, link['href']),
                    text=link.get_text().strip()
                ))
            row.external_references.extend(resolve_markers(cell_text, references))
        return row

    @staticmethod
    def _cell_text(cell: Tag) -> str:
        return re.sub(r'\n', ' ', cell.get_text().strip())
