"""
Normalización de texto obtenido de Reddit.
Funciones puras compartidas por el recolector de feeds y el de comentarios.
"""
import html
import re
import warnings

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

# El texto de Reddit a veces es solo un enlace o una ruta; no es un error
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

_URL_RE = re.compile(r'https?://[^\s<>"\']+')
_TAG_RE = re.compile(r'<[a-zA-Z/!][^>]*>')
_FORMAT_PATTERNS = [
    (re.compile(r'\*\*(.+?)\*\*', re.DOTALL), r'\1'),  # negrita
    (re.compile(r'\*(.+?)\*', re.DOTALL), r'\1'),  # cursiva
    (re.compile(r'~~(.+?)~~', re.DOTALL), r'\1'),  # tachado
    (re.compile(r'\^\((.+?)\)', re.DOTALL), r'\1'),  # superíndice ^(texto)
    (re.compile(r'\^(.+?)\^', re.DOTALL), r'\1'),  # superíndice ^texto^
]
_WHITESPACE_RE = re.compile(r'\s+')


def _strip_markup(text: str) -> str:
    """Elimina etiquetas HTML, incluido el contenido de script/style."""
    if not _TAG_RE.search(text):
        return text
    soup = BeautifulSoup(text, "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()
    return soup.get_text(" ")


def _clean_once(text: str) -> str:
    text = _URL_RE.sub('', text)
    text = _strip_markup(text)
    text = html.unescape(text)
    for pattern, replacement in _FORMAT_PATTERNS:
        text = pattern.sub(replacement, text)
    return _WHITESPACE_RE.sub(' ', text).strip()


def normalize_text(text: str) -> str:
    """
    Limpia markup, formato markdown, entidades HTML y URLs sueltas.

    Se aplica hasta alcanzar un punto fijo (cada pasada decodifica un nivel de
    entidades y nunca alarga el texto), por lo que es idempotente.

    Args:
        text: Texto crudo del feed o del hilo

    Returns:
        Texto plano con espacios colapsados
    """
    if not text:
        return ""
    current = text
    while True:
        cleaned = _clean_once(current)
        if cleaned == current:
            break
        current = cleaned
    return current


def normalize_author(author: str) -> str:
    """Normaliza el nombre de autor quitando el prefijo /u/ o u/."""
    cleaned = normalize_text(author)
    cleaned = re.sub(r'^/?u/', '', cleaned)
    return cleaned or "unknown"
