"""
MIME part tree decoding and readable body extraction.

    root = parse(raw_bytes)
    text, converted_from_html = find_text_body(root)
"""

from .config_manager import ParserConfiguration, get_config_from_env, get_default_config
from .exceptions import MimeTextError, TextPartNotFoundError, BoundaryMissingError
from .headers import Header
from .mime_walker import MimeNode, MimeTreeBuilder, PartFailure, parse, parse_file
from .text_body import TextBody, extract_html, extract_text, find_html_body, find_text_body

__version__ = "1.0.0"

__all__ = [
    "parse",
    "parse_file",
    "find_text_body",
    "find_html_body",
    "extract_text",
    "extract_html",
    "MimeNode",
    "MimeTreeBuilder",
    "PartFailure",
    "TextBody",
    "Header",
    "ParserConfiguration",
    "get_default_config",
    "get_config_from_env",
    "MimeTextError",
    "TextPartNotFoundError",
    "BoundaryMissingError",
]
