"""Content-Transfer-Encoding and charset decoding for leaf parts."""

from __future__ import annotations

import base64
import binascii
import logging
import quopri
import re
from dataclasses import dataclass
from typing import Optional

import chardet

from .exceptions import (
    CharsetError,
    InvalidEncodingError,
    MalformedMediaTypeError,
    TransferEncodingError,
    UnknownCharsetError,
    UnsupportedEncodingError,
)
from .headers import parse_media_type

logger = logging.getLogger(__name__)

IDENTITY_ENCODINGS = {"", "7bit", "8bit", "binary"}

# Used when no charset is declared, the payload is not UTF-8 and detection is inconclusive
FALLBACK_CHARSET = "windows-1252"

_NON_BASE64 = re.compile(rb"[^A-Za-z0-9+/]")


def decode_transfer(data: bytes, encoding: Optional[str]) -> bytes:
    """Undo the Content-Transfer-Encoding named by ``encoding``."""
    name = (encoding or "").strip().lower()
    if name in IDENTITY_ENCODINGS:
        return data

    if name == "base64":
        # Line breaks and missing padding are tolerated
        cleaned = _NON_BASE64.sub(b"", data)
        cleaned += b"=" * (-len(cleaned) % 4)
        try:
            return base64.b64decode(cleaned)
        except binascii.Error as exc:
            raise TransferEncodingError(f"corrupt base64 payload: {exc}", original_exception=exc) from exc

    if name == "quoted-printable":
        return quopri.decodestring(data)

    raise UnsupportedEncodingError(f"unsupported Content-Transfer-Encoding: {encoding}")


def declared_charset(content_type: str) -> Optional[str]:
    try:
        _, params = parse_media_type(content_type)
    except MalformedMediaTypeError:
        return None
    return params.get("charset") or None


def convert_charset(data: bytes, content_type: str, detect: bool = True,
                    min_confidence: float = 0.7) -> str:
    """
    Convert ``data`` to text using the charset of ``content_type``.

    Without a declared charset the payload is tried as UTF-8, then as the
    charset reported by chardet, then as windows-1252.

    Raises:
        UnknownCharsetError: the charset label is not a known text codec
        InvalidEncodingError: the bytes are not valid in that charset
    """
    charset = declared_charset(content_type)
    if charset is None:
        charset = _sniff_charset(data, detect, min_confidence)

    try:
        return data.decode(charset)
    except LookupError as exc:
        raise UnknownCharsetError(f"unknown charset: {charset}", {"content_type": content_type}, exc) from exc
    except UnicodeDecodeError as exc:
        raise InvalidEncodingError(f"invalid {charset} data: {exc.reason}", {"position": exc.start}, exc) from exc


def _sniff_charset(data: bytes, detect: bool, min_confidence: float) -> str:
    try:
        data.decode("utf-8")
        return "utf-8"
    except UnicodeDecodeError:
        pass

    if detect:
        detected = chardet.detect(data)
        if detected and detected["encoding"] and detected["confidence"] >= min_confidence:
            logger.debug(f"chardet detected {detected['encoding']} ({detected['confidence']:.2f})")
            return detected["encoding"]
    return FALLBACK_CHARSET


@dataclass(frozen=True)
class DecodedText:
    """Text of a leaf part, with the conversion error when a fallback was used."""
    text: str
    error: Optional[CharsetError] = None

    @property
    def converted(self) -> bool:
        return self.error is None


def decode_text(data: bytes, content_type: str, detect: bool = True,
                min_confidence: float = 0.7) -> DecodedText:
    """:func:`convert_charset` that falls back to lossy UTF-8 instead of raising."""
    try:
        return DecodedText(convert_charset(data, content_type, detect, min_confidence))
    except CharsetError as exc:
        logger.warning(f"Charset conversion failed, keeping unconverted text: {exc}")
        return DecodedText(data.decode("utf-8", errors="replace"), exc)
