import io
import os
import sys

import pytest

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, ROOT_DIR)

from mime_text.exceptions import MalformedMediaTypeError
from mime_text.headers import (
    Header,
    canonical_key,
    decode_encoded_word,
    media_type_of,
    parse_media_type,
    read_header,
)


@pytest.mark.parametrize("name,expected", [
    ("content-type", "Content-Type"),
    ("CONTENT-TRANSFER-ENCODING", "Content-Transfer-Encoding"),
    ("MIME-Version", "Mime-Version"),
    ("subject", "Subject"),
])
def test_canonical_key(name, expected):
    assert canonical_key(name) == expected


@pytest.mark.parametrize("raw,expected", [
    ("=?utf-8?q?Caf=C3=A9?=", "Café"),
    ("=?UTF-8?B?w6l0w6k=?=", "été"),
    ("plain value", "plain value"),
    ("=?bogus-charset?q?x?=", "=?bogus-charset?q?x?="),
])
def test_decode_encoded_word(raw, expected):
    assert decode_encoded_word(raw) == expected


def test_header_is_case_insensitive_and_ordered():
    header = Header([("X-Tag", "one"), ("x-tag", "two"), ("Subject", "s")])
    assert header.get("X-TAG") == "one"
    assert header.get_all("x-tag") == ["one", "two"]
    assert header.keys() == ["X-Tag", "Subject"]
    assert "subject" in header
    assert header.get("Missing") == ""


def test_decoded_copy_leaves_original_untouched():
    header = Header([("Subject", "=?utf-8?q?Caf=C3=A9?=")])
    assert header.decoded().get("Subject") == "Café"
    assert header.get("Subject") == "=?utf-8?q?Caf=C3=A9?="


def test_read_header_stops_at_blank_line():
    stream = io.BytesIO(b"Subject: a\nX-Folded: one\n two\n\nbody\n\nmore")
    header = read_header(stream)
    assert header.get("Subject") == "a"
    assert header.get("X-Folded") == "one two"
    assert stream.read() == b"body\n\nmore"


def test_read_header_without_fields():
    stream = io.BytesIO(b"\r\nbody only")
    assert len(read_header(stream)) == 0
    assert stream.read() == b"body only"


def test_parse_media_type():
    media_type, params = parse_media_type('Multipart/Alternative; Boundary="abc def"; charset=UTF-8')
    assert media_type == "multipart/alternative"
    assert params == {"boundary": "abc def", "charset": "UTF-8"}


@pytest.mark.parametrize("value", ["", "garbage", "; boundary=x"])
def test_parse_media_type_malformed(value):
    with pytest.raises(MalformedMediaTypeError):
        parse_media_type(value)
    assert media_type_of(value) == ""
