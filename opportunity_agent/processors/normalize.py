"""Text cleanup applied to feed titles and bodies before scoring."""

from __future__ import annotations

import html
import re
import unicodedata
from typing import Optional

from bs4 import BeautifulSoup

_SPACES = re.compile(r"\s+")
_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Typographic punctuation feeds like to use, mapped to ASCII so keyword
# matching sees "zero-knowledge" whatever dash the publisher typed.
_ASCII_PUNCT = str.maketrans(
    {
        "\u2018": "'",
        "\u2019": "'",
        "\u201c": '"',
        "\u201d": '"',
        "\u2013": "-",
        "\u2014": "-",
        "\u2212": "-",
        "\u00a0": " ",
        "\u2026": "...",
    }
)


def _squash(text: str) -> str:
    return _SPACES.sub(" ", text).strip()


def clean_html_to_text(raw_html: str | None) -> str:
    if not raw_html:
        return ""
    if "<" in raw_html:
        raw_html = BeautifulSoup(raw_html, "html.parser").get_text(" ")
    return _squash(html.unescape(raw_html))


def normalize_plain_text(text: str | None) -> str:
    """ASCII punctuation, NFKC, no control characters, single spaces."""
    if not text:
        return ""
    text = text.lstrip("\ufeff").translate(_ASCII_PUNCT)
    text = unicodedata.normalize("NFKC", text)
    return _squash(_CONTROL.sub(" ", text))


def to_plain_text(raw: str | None) -> str:
    return normalize_plain_text(clean_html_to_text(raw))


def truncate_text(text: str | None, max_chars: int) -> Optional[str]:
    """Cut ``text`` to at most ``max_chars`` characters; ``None`` for empty input."""
    if not text:
        return None
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip()
