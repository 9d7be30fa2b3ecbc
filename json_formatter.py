import json
from typing import Any, Dict
from pathlib import Path

from exceptions import WriteError
from models import PageRecord


def to_json(data: Dict[str, Any], pretty: bool = True) -> str:
    """Converte un dizionario in stringa JSON."""
    if pretty:
        return json.dumps(data, ensure_ascii=False, indent=2)
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def save_json(data: Dict[str, Any], output_path: str, pretty: bool = True) -> str:
    """Salva i dati JSON su file e restituisce il percorso del file."""
    path = Path(output_path)
    json_str = to_json(data, pretty=pretty)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json_str, encoding="utf-8")
    except OSError as exc:
        raise WriteError(str(path), exc) from exc
    return str(path)


def load_json(input_path: str) -> Any:
    """Legge un file JSON; solleva OSError o ValueError se illeggibile."""
    return json.loads(Path(input_path).read_text(encoding="utf-8"))


def save_page(page: PageRecord, output_path: str, pretty: bool = True) -> str:
    return save_json(page.to_dict(), output_path, pretty=pretty)


def load_page(input_path: str) -> PageRecord:
    return PageRecord.from_dict(load_json(input_path))
