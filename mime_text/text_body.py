"""Selection of the best body representation from a :class:`MimeNode` tree."""

from __future__ import annotations

import html
import logging
from typing import NamedTuple, Optional, Tuple

from .exceptions import TextPartNotFoundError
from .html_cleaner import flatten_html
from .mime_walker import MimeNode

logger = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain"
TEXT_HTML = "text/html"


class TextBody(NamedTuple):
    text: str
    converted_from_html: bool


def _candidates(root: MimeNode) -> Tuple[Optional[MimeNode], Optional[MimeNode]]:
    """First inline ``text/plain`` and ``text/html`` leaves in breadth-first order."""
    plain = rich = None
    for node in root.walk():
        if node.is_multipart or not node.is_text or node.is_attachment:
            continue
        media_type = node.media_type
        if media_type == TEXT_PLAIN and plain is None:
            plain = node
        elif media_type == TEXT_HTML and rich is None:
            rich = node
    return plain, rich


def extract_text(node: MimeNode, html_parser: str = "html.parser") -> TextBody:
    """Plain text of a text leaf; HTML bodies are flattened."""
    if node.media_type == TEXT_HTML:
        flattened = flatten_html(node.body, html_parser)
        return TextBody(flattened.text, flattened.converted)
    return TextBody(node.body, False)


def find_text_body(root: MimeNode, html_parser: str = "html.parser") -> TextBody:
    """
    Find the single best plain-text body of a message.

    A leaf root is used directly (a non-text leaf yields an empty body).
    For multipart roots the whole tree is searched breadth-first for inline
    text parts; ``text/plain`` wins over ``text/html``.

    Raises:
        TextPartNotFoundError: a multipart tree holds no usable text part
    """
    if not root.is_multipart:
        if root.is_text:
            return extract_text(root, html_parser)
        return TextBody("", False)

    plain, rich = _candidates(root)
    if plain is not None:
        return extract_text(plain, html_parser)
    if rich is not None:
        logger.debug("No text/plain part, converting text/html")
        return extract_text(rich, html_parser)
    raise TextPartNotFoundError("could not find valid text part")


def extract_html(node: MimeNode) -> str:
    """HTML rendering of a text leaf; non-HTML bodies are escaped."""
    if node.media_type == TEXT_HTML:
        return node.body
    return html.escape(node.body)


def find_html_body(root: MimeNode) -> str:
    """
    Find the best HTML body of a message.

    Uses the same candidates as :func:`find_text_body` but prefers
    ``text/html``; a ``text/plain`` body is escaped.

    Raises:
        TextPartNotFoundError: a multipart tree holds no usable text part
    """
    if not root.is_multipart:
        return extract_html(root) if root.is_text else ""

    plain, rich = _candidates(root)
    if rich is not None:
        return extract_html(rich)
    if plain is not None:
        return extract_html(plain)
    raise TextPartNotFoundError("could not find valid text part")
