from typing import Optional


class ScraperError(Exception):
    """Errore base dello scraper: ogni errore di pagina deriva da qui."""

    def __init__(self, url: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.url = url
        self.cause = cause


class FetchError(ScraperError):
    """Errore di rete: timeout, connessione fallita o risposta non 2xx."""

    def __init__(self, url: str, cause: BaseException):
        super().__init__(url, f"Impossibile scaricare {url}: {cause}", cause)


class ParseError(ScraperError):
    """Documento HTML non analizzabile."""

    def __init__(self, url: str, cause: BaseException):
        super().__init__(url, f"Impossibile analizzare {url}: {cause}", cause)


class WriteError(ScraperError):
    """Errore del filesystem durante il salvataggio di un risultato."""

    def __init__(self, path: str, cause: BaseException, url: str = ""):
        super().__init__(url, f"Impossibile scrivere {path}: {cause}", cause)
        self.path = path
