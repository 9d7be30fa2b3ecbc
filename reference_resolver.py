"""Estrazione delle note bibliografiche e risoluzione dei marcatori ``[n]``.

Ogni nota viene analizzata da una catena ordinata di strategie; ciascuna
restituisce zero o più URL candidati. L'ordine delle strategie decide quale
URL diventa quello principale della nota.
"""

import re
from typing import Callable, List, Optional, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from models import Reference, RowReference, UrlCandidate
from utils import setup_logging

logger = setup_logging()

REFERENCE_SELECTORS: Sequence[str] = (
    'ol.references li',
    '.reflist li',
    '.references li',
    'div.reflist li',
    'ol li[id*="cite_note"]',
)
CITE_NOTE_SELECTOR = '[id*="cite_note-"]'

URL_PATTERN = re.compile(r'https?://[^\s\[\]()]+')
ARCHIVE_PATTERN = re.compile(r'Archived from the original on.*?(https?://[^\s\[\]()]+)')
TRAILING_PUNCTUATION = re.compile(r'[,;.\])}]+$')
CITE_NOTE_NUMBER = re.compile(r'cite_note-(\d+)')
FOOTNOTE_MARKER = re.compile(r'\[(\d+)\]')

CONTEXT_LENGTH = 300

Strategy = Callable[[Tag, str], List[UrlCandidate]]


def _anchor_candidates(anchors, placeholder: str, method: str) -> List[UrlCandidate]:
    candidates: List[UrlCandidate] = []
    for link in anchors:
        href = link.get('href') or ''
        if href.startswith('http'):
            text = link.get_text().strip() or placeholder
            candidates.append(UrlCandidate(url=href, text=text, method=method))
    return candidates


def direct_links(element: Tag, text: str) -> List[UrlCandidate]:
    return _anchor_candidates(element.select('a[href]'), 'External Link', 'direct_link')


def reference_text_links(element: Tag, text: str) -> List[UrlCandidate]:
    candidates: List[UrlCandidate] = []
    for span in element.select('span.reference-text, .reference-text'):
        candidates.extend(_anchor_candidates(span.select('a[href]'), 'Reference Link', 'span_reference'))
    return candidates


def citation_links(element: Tag, text: str) -> List[UrlCandidate]:
    return _anchor_candidates(element.select('cite a[href], .citation a[href]'), 'Citation Link', 'citation')


def plain_text_urls(element: Tag, text: str) -> List[UrlCandidate]:
    return [
        UrlCandidate(url=TRAILING_PUNCTUATION.sub('', match), text='Plain Text URL', method='regex_extraction')
        for match in URL_PATTERN.findall(text)
    ]


def archived_urls(element: Tag, text: str) -> List[UrlCandidate]:
    return [
        UrlCandidate(url=TRAILING_PUNCTUATION.sub('', match), text='Archived URL', method='archive_extraction')
        for match in ARCHIVE_PATTERN.findall(text)
    ]


# Ordine di priorità: il primo URL trovato diventa l'URL risolto della nota.
STRATEGIES: Sequence[Strategy] = (
    direct_links,
    reference_text_links,
    citation_links,
    plain_text_urls,
    archived_urls,
)


def extract_candidates(element: Tag, text: str, strategies: Sequence[Strategy] = STRATEGIES) -> List[UrlCandidate]:
    """Applica le strategie in ordine e deduplica per URL (vince il primo)."""
    seen = set()
    unique: List[UrlCandidate] = []
    for strategy in strategies:
        for candidate in strategy(element, text):
            if candidate.url in seen:
                continue
            seen.add(candidate.url)
            unique.append(candidate)
    return unique


def reference_number(ref_id: str) -> Optional[int]:
    match = CITE_NOTE_NUMBER.search(ref_id or '')
    return int(match.group(1)) if match else None


def build_reference(element: Tag, ref_id: str, ref_text: str) -> Optional[Reference]:
    """Costruisce una Reference, oppure None se l'id non contiene un numero di nota."""
    number = reference_number(ref_id)
    if number is None:
        return None
    candidates = extract_candidates(element, ref_text)
    primary = candidates[0] if candidates else None
    return Reference(
        number=number,
        id=ref_id,
        text=ref_text,
        external_urls=candidates,
        url=primary.url if primary else None,
        title=primary.text if primary else None,
        context=ref_text[:CONTEXT_LENGTH],
    )


def _candidate_elements(soup: BeautifulSoup) -> List[Tag]:
    elements: List[Tag] = []
    for selector in REFERENCE_SELECTORS:
        elements.extend(soup.select(selector))
    elements.extend(soup.select(CITE_NOTE_SELECTOR))
    return elements


def extract_references(soup: BeautifulSoup) -> List[Reference]:
    """Raccoglie tutte le note della pagina, ordinate per numero.

    Una nota con lo stesso id di una già vista viene ignorata: conta solo la
    prima occorrenza nel documento.
    """
    seen_ids = set()
    references: List[Reference] = []
    for element in _candidate_elements(soup):
        ref_id = element.get('id')
        ref_text = element.get_text().strip()
        if not ref_id or not ref_text or ref_id in seen_ids:
            continue
        reference = build_reference(element, ref_id, ref_text)
        if reference is None:
            continue
        seen_ids.add(ref_id)
        references.append(reference)

    references.sort(key=lambda ref: ref.number)
    logger.info(f"Estratte {len(references)} note bibliografiche")
    return references


def find_reference(number: int, references: Sequence[Reference]) -> Optional[Reference]:
    for reference in references:
        if reference.number == number:
            return reference
    return None


def resolve_markers(text: str, references: Sequence[Reference]) -> List[RowReference]:
    """Risolve i marcatori ``[n]`` di un testo; quelli senza nota vengono scartati."""
    resolved: List[RowReference] = []
    for match in FOOTNOTE_MARKER.finditer(text or ''):
        number = int(match.group(1))
        reference = find_reference(number, references)
        if reference is None:
            continue
        resolved.append(RowReference(
            number=number,
            url=reference.url,
            title=reference.title or f"Reference {number}",
            context=reference.context,
            extraction_methods=reference.extraction_methods,
        ))
    return resolved

