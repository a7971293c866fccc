"""Text helpers: tokenization and markup stripping."""

from __future__ import annotations

import re
from typing import List

from bs4 import BeautifulSoup

# ASCII word characters only: letters, digits and underscore.
_WORD_RE = re.compile(r"\w+", re.ASCII)

_INVISIBLE_TAGS = ("script", "style", "template", "noscript")


def tokenize(text: str | None) -> List[str]:
    """Lowercase ``text`` and return its maximal runs of word characters.

    Duplicates are kept so callers can count term frequency.
    """
    if not text:
        return []
    return _WORD_RE.findall(text.lower())


def strip_markup(html: str | None) -> str:
    """Return the human-visible text of an HTML (or plain text) document."""
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(list(_INVISIBLE_TAGS)):
        tag.decompose()

    # Separate adjacent elements so "<p>a</p><p>b</p>" yields two words
    return soup.get_text(" ")
