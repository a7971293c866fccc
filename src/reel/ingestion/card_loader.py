"""Turn raw document text into cards.

Markdown cards are rendered to HTML first, so every card body is stored as
HTML. The title is the first ``<h1>`` (falling back to the card path) and
the summary is the first ``<p>``.
"""

from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup
from markdown_it import MarkdownIt

from reel.models import Card, CardContent

_MARKDOWN = MarkdownIt("commonmark").enable("table")


def is_html(path: str, text: str) -> bool:
    if path.lower().endswith((".html", ".htm")):
        return True
    return text.lstrip().lower().startswith(("<!doctype html", "<html"))


def _strip_front_matter(lines: List[str]) -> List[str]:
    if lines and lines[0].strip() == "---":
        for index in range(1, len(lines)):
            if lines[index].strip() == "---":
                return lines[index + 1 :]
    return lines


def render_markdown(text: str) -> str:
    """Render a markdown document (minus YAML front matter) to HTML."""
    return _MARKDOWN.render("\n".join(_strip_front_matter(text.splitlines())))


def _element_text(element) -> str:
    return " ".join(element.get_text(" ").split())


def html_title_and_summary(html: str) -> tuple[str | None, str]:
    soup = BeautifulSoup(html, "html.parser")
    heading = soup.find("h1")
    paragraph = soup.find("p")
    title = _element_text(heading) if heading else None
    summary = _element_text(paragraph) if paragraph else ""
    return title or None, summary


def build_card(content: CardContent) -> Card:
    """Build an unsaved card; ``updated_at`` is assigned when it is indexed."""
    if is_html(content.path, content.text):
        body = content.text
    else:
        body = render_markdown(content.text)
    title, summary = html_title_and_summary(body)

    return Card(
        path=content.path,
        title=title or content.path,
        summary=summary,
        body=body,
        hash=content.hash,
    )
