import asyncio
import io
import json

import pytest
from docx import Document

from conftest import FakeProvider
from hiremind.errors import FileParseError
from hiremind.file_parser import DOCX, clean_text, extract_text

PARSED = {"name": "Alice", "email": "alice@example.com", "skills": ["Python"]}


def make_minimal_pdf_bytes():
    # Header and EOF marker only: no pages, no text
    return b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF\n"


def make_docx_bytes(*paragraphs):
    doc = Document()
    for p in paragraphs:
        doc.add_paragraph(p)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def test_extract_text_from_docx():
    text = extract_text(make_docx_bytes("Alice", "alice@example.com", "Python developer"), DOCX)
    assert "alice@example.com" in text
    assert "Python developer" in text


def test_extract_text_from_txt_replaces_bad_bytes():
    assert extract_text(b"Alice \xff Smith", "text/plain; charset=utf-8").startswith("Alice")


def test_extract_text_rejects_unknown_type():
    with pytest.raises(FileParseError) as exc:
        extract_text(b"<html></html>", "text/html")
    assert "Only PDF, DOCX, and TXT" in exc.value.message


def test_clean_text_collapses_whitespace():
    assert clean_text("a   b\t\tc\n\n\n\nd") == "a b c\n\nd"


def test_parse_accepts_docx(make_client):
    client = make_client(FakeProvider("openai", replies=[json.dumps(PARSED)]))
    files = {"file": ("resume.docx", io.BytesIO(make_docx_bytes("Alice", "alice@example.com")), DOCX)}
    r = client.post("/resume/parse", files=files)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["name"] == "Alice"
    assert data["filename"] == "resume.docx"


def test_parse_rejects_invalid_type(client, fake_provider):
    files = {"file": ("notes.html", io.BytesIO(b"<p>hello</p>"), "text/html")}
    r = client.post("/resume/parse", files=files)
    assert r.status_code == 400
    assert "Invalid file type" in r.text
    assert fake_provider.calls == []


def test_parse_rejects_oversized_file(client, fake_provider):
    big = b"a" * (5 * 1024 * 1024 + 1)
    files = {"file": ("big.txt", io.BytesIO(big), "text/plain")}
    r = client.post("/resume/parse", files=files)
    assert r.status_code == 400
    assert "File too large" in r.json()["message"]
    assert fake_provider.calls == []


def test_parse_requires_file(client):
    r = client.post("/resume/parse")
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_parse_rejects_pdf_without_text(client, fake_provider):
    files = {"file": ("resume.pdf", io.BytesIO(make_minimal_pdf_bytes()), "application/pdf")}
    r = client.post("/resume/parse", files=files)
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert fake_provider.calls == []


def test_extraction_runs_off_the_event_loop(make_client, monkeypatch):
    threads = []

    def extract_in_worker(content, content_type):
        try:
            asyncio.get_running_loop()
            threads.append("event loop")
        except RuntimeError:
            threads.append("worker")
        return "Alice\nalice@example.com"

    monkeypatch.setattr("hiremind.api.common.extract_text", extract_in_worker)
    client = make_client(FakeProvider("openai", replies=[json.dumps(PARSED)]))
    files = {"file": ("resume.txt", io.BytesIO(b"Alice"), "text/plain")}
    assert client.post("/resume/parse", files=files).status_code == 200
    assert threads == ["worker"]
