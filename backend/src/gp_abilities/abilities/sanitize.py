"""Input sanitizers matching WordPress' text and slug cleaning."""

import re
import unicodedata

_TAG_RE = re.compile(r"<[^>]*>")
_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_INVALID_RE = re.compile(r"[^a-z0-9_\-]+")
_SLUG_DASHES_RE = re.compile(r"-+")


def sanitize_text_field(value) -> str:
    """Strip tags, percent-encoded octets and line breaks; collapse whitespace."""
    text = str(value)
    text = _TAG_RE.sub("", text)
    text = _OCTET_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def sanitize_title(value) -> str:
    """Turn a title into a lowercase, dash-separated slug.

    >>> sanitize_title("Header Hook: Café!")
    'header-hook-cafe'
    """
    text = unicodedata.normalize("NFKD", _TAG_RE.sub("", str(value)))
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    text = _WHITESPACE_RE.sub("-", text.strip())
    text = _SLUG_INVALID_RE.sub("-", text)
    text = _SLUG_DASHES_RE.sub("-", text)
    return text.strip("-")
