import re
import logging
from pathlib import Path

from exceptions import WriteError

LOG_FILE = 'wikiscraper.log'

def setup_logging(level=logging.INFO):
    """Configura il sistema di logging"""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(LOG_FILE, encoding='utf-8'),
            logging.StreamHandler()
        ]
    )
    return logging.getLogger('wikiscraper')

def is_valid_url(url: str) -> bool:
    """Verifica se l'URL fornito è un indirizzo HTTP(S) valido"""
    if not isinstance(url, str):
        return False
    pattern = re.compile(
        r'^https?:\/\/'  # http:// o https:// obbligatorio
        r'((([A-Za-z0-9-]+\.)+[A-Za-z]{2,})|'  # dominio
        r'localhost|'  # localhost
        r'(\d{1,3}\.){3}\d{1,3})'  # o indirizzo IP
        r'(\:\d+)?'  # porta opzionale
        r'(\/[^\s]*)?$', re.IGNORECASE)
    return re.match(pattern, url) is not None

def clean_text(text: str) -> str:
    """Pulisce il testo rimuovendo spazi extra e caratteri non necessari"""
    if not text:
        return ""
    return ' '.join(text.split())

def clean_filename(title: str, max_length: int = 100) -> str:
    """Trasforma un titolo in un nome file sicuro (solo alfanumerici e underscore)"""
    if not title:
        return ""
    stripped = re.sub(r'[^A-Za-z0-9\s]', '', title)
    return re.sub(r'\s+', '_', stripped.strip())[:max_length]

def format_size(size_bytes: int) -> str:
    """Converte una dimensione in byte in un formato leggibile"""
    if size_bytes < 1024:
        return f"{size_bytes} bytes"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes/1024:.1f} KB"
    else:
        return f"{size_bytes/(1024*1024):.1f} MB"

def save_text(content: str, output_path: str) -> str:
    """Scrive un file di testo (CSV o report) e restituisce il percorso"""
    path = Path(output_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')
    except OSError as exc:
        raise WriteError(str(path), exc) from exc
    return str(path)
