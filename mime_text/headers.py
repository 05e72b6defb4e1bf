"""Header block tokenizing, RFC 2047 decoding and media type parsing."""

from __future__ import annotations

import logging
import re
from email import policy
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from email.message import Message
from email.parser import HeaderParser
from email.utils import collapse_rfc2231_value
from typing import BinaryIO, Dict, Iterable, Iterator, List, Tuple

from .exceptions import MalformedMediaTypeError

logger = logging.getLogger(__name__)

_FOLD = re.compile(r"\r?\n[ \t]+")

HEADER_FALLBACK_CHARSET = "windows-1252"


def canonical_key(name: str) -> str:
    """Return ``name`` in canonical form, e.g. ``content-type`` -> ``Content-Type``."""
    return "-".join(word[:1].upper() + word[1:].lower() for word in name.strip().split("-"))


def unfold(value: str) -> str:
    return _FOLD.sub(" ", value).strip()


def decode_encoded_word(value: str) -> str:
    """Decode RFC 2047 encoded words; input that cannot be decoded is returned as-is."""
    if "=?" not in value:
        return value
    try:
        return str(make_header(decode_header(value)))
    except (HeaderParseError, LookupError, UnicodeError, ValueError) as exc:
        logger.debug(f"Keeping undecodable header value {value!r}: {exc}")
        return value


class Header:
    """Ordered, case-insensitive, multi-valued mail header."""

    def __init__(self, fields: Iterable[Tuple[str, str]] = ()):
        self._fields: Dict[str, List[str]] = {}
        for name, value in fields:
            self.add(name, value)

    @classmethod
    def from_message(cls, message: Message) -> "Header":
        return cls((name, unfold(str(value))) for name, value in message.items())

    def add(self, name: str, value: str) -> None:
        self._fields.setdefault(canonical_key(name), []).append(value)

    def get(self, name: str, default: str = "") -> str:
        """First value of ``name``, or ``default`` when the field is absent."""
        values = self._fields.get(canonical_key(name))
        return values[0] if values else default

    def get_all(self, name: str) -> List[str]:
        return list(self._fields.get(canonical_key(name), []))

    def decoded(self) -> "Header":
        """Copy of this header with every value passed through :func:`decode_encoded_word`."""
        header = Header()
        for name, values in self._fields.items():
            header._fields[name] = [decode_encoded_word(v) for v in values]
        return header

    def keys(self) -> List[str]:
        return list(self._fields)

    def items(self) -> Iterator[Tuple[str, List[str]]]:
        for name, values in self._fields.items():
            yield name, list(values)

    def to_dict(self) -> Dict[str, List[str]]:
        return {name: list(values) for name, values in self._fields.items()}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and canonical_key(name) in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Header):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"Header({self._fields!r})"


def read_header(stream: BinaryIO) -> Header:
    """
    Read a header block from ``stream``.

    Consumes lines up to and including the first blank line (or EOF) and
    leaves ``stream`` positioned at the start of the body.
    """
    lines = []
    while True:
        line = stream.readline()
        if not line or line in (b"\r\n", b"\n"):
            break
        lines.append(line)

    raw = b"".join(lines)
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        # Raw 8-bit headers are usually a legacy single-byte charset
        text = raw.decode(HEADER_FALLBACK_CHARSET, errors="replace")
    message = HeaderParser(policy=policy.compat32).parsestr(text, headersonly=True)
    return Header.from_message(message)


def parse_media_type(value: str) -> Tuple[str, Dict[str, str]]:
    """
    Split a Content-Type value into its media type and parameters.

    The media type and parameter names are lower-cased, parameter values are
    unquoted and RFC 2231 continuations are collapsed.
    """
    message = Message()
    message["Content-Type"] = value
    params = message.get_params() or []
    if not params or "/" not in params[0][0]:
        raise MalformedMediaTypeError(f"malformed media type: {value!r}")

    media_type = params[0][0].strip().lower()
    return media_type, {
        name.strip().lower(): collapse_rfc2231_value(param)
        for name, param in params[1:]
        if name.strip()
    }


def media_type_of(value: str) -> str:
    """Media type of a Content-Type value, or ``""`` when it cannot be parsed."""
    try:
        return parse_media_type(value)[0]
    except MalformedMediaTypeError:
        return ""
