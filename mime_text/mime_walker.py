# =============================================================
# mime_walker.py
# =============================================================
"""Recursive construction of a MIME part tree.

:func:`parse` tokenizes the top-level header block and hands the header and
body stream to :class:`MimeTreeBuilder`, which builds one :class:`MimeNode`
per part.  Multipart parts are split on their boundary and each sub-part is
built in turn; leaves get their transfer encoding undone and are stored as
text (``text/*``) or base64.

Failures are contained per part where possible: a broken child is recorded
on its parent's ``failures`` list and its best-effort node is kept, while
its siblings are still built.
"""
from __future__ import annotations

import base64
import io
import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Union

from .config_manager import ParserConfiguration, get_default_config
from .decoders import decode_text, decode_transfer
from .exceptions import (
    BoundaryMissingError,
    MimeTextError,
    handle_processing_errors,
    raise_file_too_large,
    raise_nesting_too_deep,
    wrap_processing_error,
)
from .headers import Header, media_type_of, parse_media_type, read_header
from .multipart import iter_parts

log = logging.getLogger(__name__)

MULTIPART_PREFIX = "multipart/"
TEXT_PREFIX = "text/"


def is_multipart_type(content_type: str) -> bool:
    return content_type[:len(MULTIPART_PREFIX)].lower() == MULTIPART_PREFIX


def is_text_type(content_type: str) -> bool:
    return content_type[:len(TEXT_PREFIX)].lower() == TEXT_PREFIX


@dataclass
class PartFailure:
    """A child part whose construction failed."""
    index: int
    error: MimeTextError

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "error_type": type(self.error).__name__,
            "error": str(self.error),
        }


@dataclass(eq=False)
class MimeNode:
    """One message or MIME part."""
    header: Header
    is_text: bool = False
    is_multipart: bool = False
    body: str = ""
    error: Optional[str] = None
    children: List["MimeNode"] = field(default_factory=list)
    failures: List[PartFailure] = field(default_factory=list)
    depth: int = 0

    @property
    def content_type(self) -> str:
        return self.header.get("Content-Type")

    @property
    def media_type(self) -> str:
        """Lower-cased media type without parameters, ``""`` if unparseable."""
        return media_type_of(self.content_type)

    @property
    def is_attachment(self) -> bool:
        return bool(self.header.get("Content-Disposition"))

    def walk(self) -> Iterator["MimeNode"]:
        """Breadth-first iteration over this node and its descendants."""
        queue = deque([self])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(node.children)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "header": self.header.to_dict(),
            "is_text": self.is_text,
            "is_multipart": self.is_multipart,
            "body": self.body,
            "error": self.error,
            "children": [child.to_dict() for child in self.children],
            "failures": [failure.to_dict() for failure in self.failures],
        }


class MimeTreeBuilder:
    """Builds :class:`MimeNode` trees according to a :class:`ParserConfiguration`."""

    def __init__(self, config: Optional[ParserConfiguration] = None):
        self.config = config or get_default_config()

    def build(self, header: Header, body: BinaryIO, depth: int = 0) -> MimeNode:
        """
        Build the node for one part and, for multipart parts, its subtree.

        ``header`` holds raw (undecoded) values; the node stores decoded
        copies.  Node-local problems such as a charset fallback or a broken
        child only set ``error``/``failures``.  Anything that leaves the part
        without usable content is recorded on the node and re-raised with
        the node attached as ``exc.node``.
        """
        node = MimeNode(header=header.decoded(), depth=depth)
        content_type = header.get("Content-Type")
        node.is_multipart = is_multipart_type(content_type)

        try:
            max_depth = self.config.security.max_nested_depth
            if max_depth is not None and depth > max_depth:
                raise_nesting_too_deep(depth, max_depth)

            if node.is_multipart:
                self._build_multipart(node, content_type, body)
            else:
                self._build_leaf(node, header, body)
        except MimeTextError as exc:
            node.error = str(exc)
            exc.node = node
            raise
        return node

    def _build_leaf(self, node: MimeNode, header: Header, body: BinaryIO) -> None:
        content_type = header.get("Content-Type")

        try:
            data = body.read()
        except OSError as exc:
            raise wrap_processing_error(exc, "part body copy", {"depth": node.depth}) from exc

        data = decode_transfer(data, header.get("Content-Transfer-Encoding"))

        # Only parts with usable content are classified as text
        node.is_text = is_text_type(content_type)

        if not node.is_text:
            node.body = base64.b64encode(data).decode("ascii")
            return

        processing = self.config.processing
        decoded = decode_text(
            data,
            content_type,
            detect=processing.detect_charset,
            min_confidence=processing.charset_detection_confidence,
        )
        node.body = decoded.text
        if decoded.error is not None:
            node.error = str(decoded.error)

    def _build_multipart(self, node: MimeNode, content_type: str, body: BinaryIO) -> None:
        _, params = parse_media_type(content_type)
        boundary = params.get("boundary")
        if not boundary:
            raise BoundaryMissingError(
                f"invalid multipart Content-Type (boundary missing): {content_type}"
            )

        for index, (part_header, part_body) in enumerate(iter_parts(body, boundary)):
            try:
                child = self.build(part_header, part_body, node.depth + 1)
            except MimeTextError as exc:
                if self.config.logging.log_part_failures:
                    log.warning(
                        "Skipping part %d at depth %d: %s", index, node.depth + 1, exc
                    )
                node.failures.append(PartFailure(index=index, error=exc))
                child = exc.node
            if child is not None:
                node.children.append(child)


def _as_stream(message: Union[bytes, bytearray, str, BinaryIO]) -> BinaryIO:
    if isinstance(message, str):
        message = message.encode("utf-8", errors="surrogateescape")
    if isinstance(message, (bytes, bytearray)):
        return io.BytesIO(bytes(message))
    return message


@handle_processing_errors("message parsing")
def parse(message: Union[bytes, bytearray, str, BinaryIO],
          config: Optional[ParserConfiguration] = None) -> MimeNode:
    """Parse a raw message into a :class:`MimeNode` tree rooted at its top-level part."""
    stream = _as_stream(message)
    header = read_header(stream)
    log.debug("Parsing message with Content-Type %r", header.get("Content-Type"))
    return MimeTreeBuilder(config).build(header, stream)


def parse_file(file_path: Union[str, Path],
               config: Optional[ParserConfiguration] = None) -> MimeNode:
    """Parse a message stored on disk."""
    config = config or get_default_config()
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    size_mb = file_path.stat().st_size / (1024 * 1024)
    if size_mb > config.security.max_file_size_mb:
        raise_file_too_large(file_path.name, size_mb, config.security.max_file_size_mb)

    with open(file_path, 'rb') as f:
        return parse(f, config)
