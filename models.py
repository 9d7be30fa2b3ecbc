"""Modelli dati della pipeline di scraping.

Tutti i record sono dataclass serializzabili: ``to_dict`` produce la forma
salvata su JSON e ``from_dict`` la ricostruisce campo per campo.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class UrlCandidate:
    """URL esterno trovato dentro una nota, con la strategia che l'ha trovato."""

    url: str
    text: str
    method: str

    def to_dict(self) -> Dict[str, Any]:
        return {'url': self.url, 'text': self.text, 'method': self.method}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UrlCandidate':
        return cls(url=data['url'], text=data.get('text', ''), method=data.get('method', ''))


@dataclass
class Reference:
    """Nota bibliografica della pagina (voce ``cite_note-N``)."""

    number: int
    id: str
    text: str
    external_urls: List[UrlCandidate] = field(default_factory=list)
    url: Optional[str] = None
    title: Optional[str] = None
    context: str = ''

    @property
    def extraction_methods(self) -> str:
        return ', '.join(candidate.method for candidate in self.external_urls)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'number': self.number,
            'id': self.id,
            'text': self.text,
            'external_urls': [candidate.to_dict() for candidate in self.external_urls],
            'url': self.url,
            'title': self.title,
            'context': self.context,
            'extraction_methods': self.extraction_methods,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Reference':
        return cls(
            number=int(data['number']),
            id=data.get('id', ''),
            text=data.get('text', ''),
            external_urls=[UrlCandidate.from_dict(item) for item in data.get('external_urls', [])],
            url=data.get('url'),
            title=data.get('title'),
            context=data.get('context', ''),
        )


@dataclass
class Section:
    level: int
    title: str
    content: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'level': self.level, 'title': self.title, 'content': list(self.content)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Section':
        return cls(level=int(data['level']), title=data['title'], content=list(data.get('content', [])))


@dataclass
class ExternalLink:
    url: str
    text: str
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'url': self.url, 'text': self.text, 'source': self.source}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExternalLink':
        return cls(url=data['url'], text=data.get('text', ''), source=data.get('source'))


@dataclass
class WikiLink:
    """Link interno a Wikipedia trovato in una cella di tabella."""

    url: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {'url': self.url, 'text': self.text}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WikiLink':
        return cls(url=data['url'], text=data.get('text', ''))


@dataclass
class RowReference:
    """Marcatore ``[n]`` di una cella risolto verso una nota della pagina."""

    number: int
    url: Optional[str]
    title: str
    context: str = ''
    extraction_methods: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'reference_number': self.number,
            'url': self.url,
            'title': self.title,
            'context': self.context,
            'extraction_methods': self.extraction_methods,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RowReference':
        return cls(
            number=int(data['reference_number']),
            url=data.get('url'),
            title=data.get('title', ''),
            context=data.get('context', ''),
            extraction_methods=data.get('extraction_methods', ''),
        )


@dataclass
class RowRecord:
    cells: Dict[str, str] = field(default_factory=dict)
    wikipedia_links: List[WikiLink] = field(default_factory=list)
    external_references: List[RowReference] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'cells': dict(self.cells),
            'wikipedia_links': [link.to_dict() for link in self.wikipedia_links],
            'external_references': [ref.to_dict() for ref in self.external_references],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RowRecord':
        return cls(
            cells=dict(data.get('cells', {})),
            wikipedia_links=[WikiLink.from_dict(item) for item in data.get('wikipedia_links', [])],
            external_references=[RowReference.from_dict(item) for item in data.get('external_references', [])],
        )


@dataclass
class TableRecord:
    index: int
    headers: List[str] = field(default_factory=list)
    rows: List[RowRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'headers': list(self.headers),
            'rows': [row.to_dict() for row in self.rows],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TableRecord':
        return cls(
            index=int(data.get('index', 0)),
            headers=list(data.get('headers', [])),
            rows=[RowRecord.from_dict(item) for item in data.get('rows', [])],
        )


@dataclass
class PageRecord:
    """Una pagina estratta. Non viene più modificata dopo il salvataggio."""

    url: str
    title: str
    summary: str = ''
    infobox: Dict[str, str] = field(default_factory=dict)
    sections: List[Section] = field(default_factory=list)
    external_links: List[ExternalLink] = field(default_factory=list)
    references: List[Reference] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    coordinates: Optional[str] = None
    tables: List[TableRecord] = field(default_factory=list)
    scraped_at: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.url,
            'title': self.title,
            'summary': self.summary,
            'infobox': dict(self.infobox),
            'sections': [section.to_dict() for section in self.sections],
            'external_links': [link.to_dict() for link in self.external_links],
            'references': [ref.to_dict() for ref in self.references],
            'categories': list(self.categories),
            'coordinates': self.coordinates,
            'tables': [table.to_dict() for table in self.tables],
            'scraped_at': self.scraped_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PageRecord':
        return cls(
            url=data['url'],
            title=data.get('title', ''),
            summary=data.get('summary', ''),
            infobox=dict(data.get('infobox', {})),
            sections=[Section.from_dict(item) for item in data.get('sections', [])],
            external_links=[ExternalLink.from_dict(item) for item in data.get('external_links', [])],
            references=[Reference.from_dict(item) for item in data.get('references', [])],
            categories=list(data.get('categories', [])),
            coordinates=data.get('coordinates'),
            tables=[TableRecord.from_dict(item) for item in data.get('tables', [])],
            scraped_at=data.get('scraped_at', ''),
        )


@dataclass
class IndexEntry:
    title: str
    url: str
    filename: str
    summary: str
    scraped_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'url': self.url,
            'filename': self.filename,
            'summary': self.summary,
            'scraped_at': self.scraped_at,
        }


@dataclass
class ErrorEntry:
    url: str
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {'url': self.url, 'error': self.error}


@dataclass
class RunIndex:
    """Indice cumulativo di un'esecuzione: pagine riuscite e log degli errori."""

    pages: List[IndexEntry] = field(default_factory=list)
    errors: List[ErrorEntry] = field(default_factory=list)
    started_at: str = field(default_factory=utc_timestamp)

    @property
    def total_pages(self) -> int:
        return len(self.pages) + len(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_pages': self.total_pages,
            'successful_pages': len(self.pages),
            'error_count': len(self.errors),
            'started_at': self.started_at,
            'crawled_at': utc_timestamp(),
            'pages': [entry.to_dict() for entry in self.pages],
            'error_log': [entry.to_dict() for entry in self.errors],
        }
