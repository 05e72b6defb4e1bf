"""HTML to plain text flattening."""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from .exceptions import MalformedHTMLError

logger = logging.getLogger(__name__)

# Elements whose whole subtree contributes no text
SKIPPED_ELEMENTS = {"script", "style"}


class HtmlText(NamedTuple):
    """Result of flattening: ``converted`` is False when ``text`` is the raw markup."""
    text: str
    converted: bool
    error: Optional[MalformedHTMLError] = None


def parse_html(markup: str, parser: str = "html.parser") -> BeautifulSoup:
    try:
        return BeautifulSoup(markup, parser)
    except Exception as exc:
        raise MalformedHTMLError(f"could not parse HTML: {exc}", {"parser": parser}, exc) from exc


def node_text(root: Tag) -> str:
    """
    Concatenate the text nodes under ``root`` in document order.

    ``script`` and ``style`` elements are skipped together with their
    children.  Comments, doctypes, CDATA sections and processing
    instructions contribute nothing.
    """
    pieces = []
    stack = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, NavigableString):
            if not isinstance(node, PreformattedString):
                pieces.append(str(node))
            continue
        if isinstance(node, Tag):
            if node is not root and (node.name or "").lower() in SKIPPED_ELEMENTS:
                continue
            stack.extend(reversed(node.contents))
    return "".join(pieces)


def flatten_html(markup: str, parser: str = "html.parser") -> HtmlText:
    """Flatten ``markup`` to text, falling back to the raw markup if it cannot be parsed."""
    try:
        soup = parse_html(markup, parser)
    except MalformedHTMLError as exc:
        logger.warning(f"Returning raw HTML body: {exc}")
        return HtmlText(markup, False, exc)
    return HtmlText(node_text(soup), True)
