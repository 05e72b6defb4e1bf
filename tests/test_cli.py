import json
import logging
import os
import sys

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, ROOT_DIR)

from mime_text.cli import main
from mime_text.debug_utils import debug_tree, format_outline
from mime_text import parse

MESSAGE = b"""Subject: Report
Content-Type: multipart/mixed; boundary="mix"

--mix
Content-Type: multipart/alternative; boundary="alt"

--alt
Content-Type: text/html

<p>Hello <b>there</b></p>
--alt--
--mix
Content-Type: application/pdf
Content-Disposition: attachment; filename="r.pdf"

%PDF
--mix--
"""


def write_message(tmp_path, name="message.eml", data=MESSAGE):
    path = tmp_path / name
    path.write_bytes(data)
    return str(path)


def test_cli_text_body(tmp_path, capsys):
    path = write_message(tmp_path)
    assert main([path]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["total_files"] == 1
    assert output["successful"] == 1
    result = output["results"][0]
    assert result["body"] == "Hello there"
    assert result["converted_from_html"] is True
    assert "tree" not in result


def test_cli_html_body_and_tree(tmp_path):
    path = write_message(tmp_path)
    out_file = tmp_path / "out.json"
    assert main([path, "--html", "--tree", "--compact", "-o", str(out_file)]) == 0
    result = json.loads(out_file.read_text(encoding="utf-8"))["results"][0]
    assert result["body"] == "<p>Hello <b>there</b></p>"
    assert result["tree"]["is_multipart"] is True
    assert len(result["tree"]["children"]) == 2


def test_cli_reports_failures(tmp_path, capsys):
    good = write_message(tmp_path)
    bad = write_message(tmp_path, "bad.eml", b"Content-Type: multipart/mixed\n\nno boundary")
    missing = str(tmp_path / "missing.eml")
    assert main([good, bad, missing]) == 1
    output = json.loads(capsys.readouterr().out)
    assert output["successful"] == 1
    assert "boundary missing" in output["results"][1]["error"]
    assert "File not found" in output["results"][2]["error"]


def test_format_outline():
    lines = format_outline(parse(MESSAGE))
    assert lines[0].startswith("multipart/mixed [multipart] 2 part(s)")
    assert lines[1].startswith("  multipart/alternative [multipart]")
    assert lines[2].startswith("    text/html [text]")
    assert "disposition=attachment" in lines[3]


def test_debug_tree_logs_outline(caplog):
    with caplog.at_level(logging.INFO, logger="mime_text.debug_utils"):
        debug_tree(parse(MESSAGE))
    assert "text/html [text]" in caplog.text
