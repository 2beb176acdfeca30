"""Shared test configuration, PDF builders and a mocked Gemini endpoint."""

import base64
import json

import httpx
import pytest

from services.gemini_client import GeminiClient

TEST_API_URL = "https://gemini.test/v1beta/models/test-model:generateContent"
TEST_TOKEN = "test-token-123456"

ANALYSIS = {
    "strengths": ["5 years of backend engineering", "Proficient in Go"],
    "weaknesses": ["No mention of distributed systems"],
    "alignment": {"score": 82, "explanation": "Strong overlap on Go and backend work."},
    "recommendations": ["Probe production Go experience in the interview"],
}


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: parses real PDF bytes with pdfplumber"
    )


def _pdf_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(text: str, title: str | None = None, author: str | None = None) -> bytes:
    """Single-page PDF with one line of Helvetica text and a correct xref table."""
    stream = f"BT /F1 12 Tf 72 720 Td ({_pdf_string(text)}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
    ]
    info_entries = []
    if title:
        info_entries.append(f"/Title ({_pdf_string(title)})")
    if author:
        info_entries.append(f"/Author ({_pdf_string(author)})")
    if info_entries:
        objects.append(("<< " + " ".join(info_entries) + " >>").encode("latin-1"))

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += str(number).encode() + b" 0 obj\n" + body + b"\nendobj\n"

    xref_offset = len(out)
    out += b"xref\n0 " + str(len(objects) + 1).encode() + b"\n"
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()

    trailer = f"<< /Size {len(objects) + 1} /Root 1 0 R"
    if info_entries:
        trailer += f" /Info {len(objects)} 0 R"
    trailer += " >>"
    out += b"trailer\n" + trailer.encode() + b"\nstartxref\n" + str(xref_offset).encode() + b"\n%EOF\n"
    return bytes(out)


@pytest.fixture
def b64():
    def encode(raw: bytes) -> str:
        return base64.b64encode(raw).decode("ascii")
    return encode


@pytest.fixture
def pdf_b64(b64):
    """Base64 of a real PDF containing ``text``."""
    def factory(text: str, **info) -> str:
        return b64(build_pdf(text, **info))
    return factory


def gemini_body(text: str) -> dict:
    return {
        "candidates": [
            {"content": {"parts": [{"text": text}], "role": "model"}, "finishReason": "STOP"}
        ]
    }


@pytest.fixture
def analysis():
    return json.loads(json.dumps(ANALYSIS))


@pytest.fixture
def make_gemini_client():
    """GeminiClient whose HTTP traffic goes to an in-process handler.

    ``handler`` receives the httpx.Request; by default it answers with
    ANALYSIS wrapped in prose. Every request is appended to ``client.requests``.
    """
    def factory(handler=None, status_code: int = 200, body: dict | None = None) -> GeminiClient:
        requests: list[httpx.Request] = []

        def respond(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if handler is not None:
                return handler(request)
            payload = body if body is not None else gemini_body(
                "Here is the analysis:\n```json\n" + json.dumps(ANALYSIS) + "\n```\nGood luck!"
            )
            return httpx.Response(status_code, json=payload)

        client = GeminiClient(
            api_url=TEST_API_URL,
            auth_token=TEST_TOKEN,
            timeout=5.0,
            transport=httpx.MockTransport(respond),
        )
        client.requests = requests
        return client
    return factory


@pytest.fixture
def gemini_text_body():
    return gemini_body
