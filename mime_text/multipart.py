"""Splitting of multipart bodies into their sub-parts."""

from __future__ import annotations

import io
import logging
from typing import BinaryIO, Iterator, Optional, Tuple

from .exceptions import MultipartError, wrap_processing_error
from .headers import Header, read_header

logger = logging.getLogger(__name__)

OPEN, CLOSE = "open", "close"


def _lines(stream: BinaryIO) -> Iterator[bytes]:
    while True:
        try:
            line = stream.readline()
        except OSError as exc:
            raise wrap_processing_error(exc, "multipart body read") from exc
        if not line:
            return
        yield line


def _delimiter(line: bytes, dash_boundary: bytes) -> Optional[str]:
    # Transport padding after a delimiter is allowed
    stripped = line.rstrip(b" \t\r\n")
    if stripped == dash_boundary:
        return OPEN
    if stripped == dash_boundary + b"--":
        return CLOSE
    return None


def _strip_line_break(data: bytes) -> bytes:
    # The line break before a delimiter belongs to the delimiter
    if data.endswith(b"\r\n"):
        return data[:-2]
    if data.endswith(b"\n"):
        return data[:-1]
    return data


def iter_parts(stream: BinaryIO, boundary: str) -> Iterator[Tuple[Header, BinaryIO]]:
    """
    Yield ``(header, body)`` for each part of a multipart body.

    Parts are produced lazily in source order; the preamble before the
    first delimiter and the epilogue after the closing delimiter are
    discarded.

    Raises:
        MultipartError: no opening delimiter, or the stream ends before
            the closing delimiter (after yielding whatever part was read)
    """
    dash_boundary = b"--" + boundary.encode("utf-8")
    lines = _lines(stream)

    for line in lines:
        kind = _delimiter(line, dash_boundary)
        if kind == CLOSE:
            return
        if kind == OPEN:
            break
    else:
        raise MultipartError(f"multipart body has no opening boundary {boundary!r}")

    index = 0
    while True:
        chunk = []
        for line in lines:
            kind = _delimiter(line, dash_boundary)
            if kind is not None:
                break
            chunk.append(line)
        else:
            # A truncated final part is still handed out before failing
            if chunk:
                part = io.BytesIO(b"".join(chunk))
                yield read_header(part), part
                index += 1
            raise MultipartError(
                f"multipart body ended before closing boundary {boundary!r}",
                {"parts_read": index},
            )

        part = io.BytesIO(_strip_line_break(b"".join(chunk)))
        header = read_header(part)
        logger.debug(f"Split part {index} ({header.get('Content-Type') or 'no Content-Type'})")
        yield header, part
        index += 1
        if kind == CLOSE:
            return
