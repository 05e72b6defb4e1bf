#!/usr/bin/env python3
"""Outline of a parsed MIME tree, for debugging."""

import logging
from typing import List

from .mime_walker import MimeNode

logger = logging.getLogger(__name__)


def format_outline(root: MimeNode) -> List[str]:
    """One line per node, indented by depth."""
    lines = []
    stack = [root]
    while stack:
        node = stack.pop()
        kind = "multipart" if node.is_multipart else ("text" if node.is_text else "binary")
        line = f"{'  ' * (node.depth - root.depth)}{node.media_type or '(no content type)'} [{kind}]"
        if node.is_multipart:
            line += f" {len(node.children)} part(s)"
        else:
            line += f" {len(node.body):,} chars"
        if node.header.get("Content-Disposition"):
            line += f" disposition={node.header.get('Content-Disposition')}"
        if node.error:
            line += f" ERROR: {node.error}"
        lines.append(line)
        stack.extend(reversed(node.children))
    return lines


def debug_tree(root: MimeNode) -> None:
    """Log the outline of ``root`` at INFO level."""
    lines = format_outline(root)
    logger.info(f"MIME structure ({len(lines)} node(s)):")
    logger.info("=" * 60)
    for line in lines:
        logger.info(line)
