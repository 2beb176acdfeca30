import base64
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_gemini_client, get_rate_limiter
from main import app
from services.pdf_parser import RawPdf
from services.rate_limiter import FixedWindowRateLimiter

ANALYZE = "/trpc/profile.analyzeProfile"
PDF_DATA = base64.b64encode(b"%PDF-1.4 stub").decode()


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gemini(make_gemini_client):
    return make_gemini_client()


@pytest.fixture
def client(gemini, clock):
    limiter = FixedWindowRateLimiter(limit=3, window_seconds=60, clock=clock)
    app.dependency_overrides[get_gemini_client] = lambda: gemini
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def stub_pdf_text():
    with patch(
        "services.pdf_parser.read_pdf",
        return_value=RawPdf(text="Backend engineer, 5 years of Go experience", num_pages=1, info={}),
    ) as mock_read:
        yield mock_read


def _file(name="doc.pdf", mime="application/pdf", size=1024, data=PDF_DATA) -> dict:
    return {"name": name, "type": mime, "size": size, "data": data}


def _body(jd=None, cv=None) -> dict:
    return {"jobDescription": jd or _file("jd.pdf"), "cv": cv or _file("cv.pdf")}


def test_index(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "profile.analyzeProfile" in data["endpoints"]["procedures"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["rateLimits"]["perMinute"] > 0
    assert set(data) == {"status", "timestamp", "server", "environment", "rateLimits"}


def test_profile_health(client):
    response = client.get("/trpc/profile.health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["timestamp"]


def test_profile_test_ai(client, gemini):
    response = client.get("/trpc/profile.testAI")
    assert response.status_code == 200
    data = response.json()
    assert data["connected"] is True
    assert data["apiUrl"] == gemini.api_url
    assert data["timestamp"]


def test_profile_test_ai_disconnected(client, make_gemini_client):
    app.dependency_overrides[get_gemini_client] = lambda: make_gemini_client(status_code=500, body={})
    response = client.get("/trpc/profile.testAI")
    assert response.status_code == 200
    assert response.json()["connected"] is False


def test_analyze_profile(client, stub_pdf_text):
    response = client.post(ANALYZE, json=_body())
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    analysis = data["analysis"]
    assert set(analysis) == {"strengths", "weaknesses", "alignment", "recommendations"}
    assert len(analysis["strengths"]) > 0
    assert 0 <= analysis["alignment"]["score"] <= 100
    assert stub_pdf_text.call_count == 2


def test_analyze_rejects_non_pdf(client, stub_pdf_text):
    response = client.post(ANALYZE, json=_body(jd=_file("jd.txt", mime="text/plain")))
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "BAD_REQUEST"
    assert detail["message"] == "Job description file: File must be a PDF"
    assert stub_pdf_text.call_count == 0


def test_analyze_rejects_oversized(client, stub_pdf_text):
    response = client.post(ANALYZE, json=_body(cv=_file(size=50 * 1024 * 1024)))
    assert response.status_code == 400
    assert "exceeds maximum allowed size" in response.json()["detail"]["message"]
    assert stub_pdf_text.call_count == 0


def test_analyze_rejects_bad_magic(client, stub_pdf_text):
    not_pdf = base64.b64encode(b"GIF89a").decode()
    response = client.post(ANALYZE, json=_body(cv=_file(data=not_pdf)))
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "CV file is not a valid PDF"


def test_analyze_rejects_empty_text(client):
    with patch("services.pdf_parser.read_pdf", return_value=RawPdf(text="  ", num_pages=1, info={})):
        response = client.post(ANALYZE, json=_body())
    assert response.status_code == 400
    assert "empty or unreadable" in response.json()["detail"]["message"]


def test_analyze_malformed_body(client):
    response = client.post(ANALYZE, json={"jobDescription": {"size": "big"}, "cv": _file()})
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "BAD_REQUEST"
    assert "jobDescription" in detail["message"]


def test_analyze_vendor_auth_failure(client, stub_pdf_text, make_gemini_client):
    app.dependency_overrides[get_gemini_client] = lambda: make_gemini_client(
        status_code=401, body={"error": {"message": "API key invalid"}}
    )
    response = client.post(ANALYZE, json=_body())
    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail["code"] == "INTERNAL_SERVER_ERROR"
    assert detail["message"].startswith("AI service error")


def test_analyze_rate_limited_then_recovers(client, clock, stub_pdf_text):
    for _ in range(3):
        assert client.post(ANALYZE, json=_body()).status_code == 200

    response = client.post(ANALYZE, json=_body())
    assert response.status_code == 429
    assert response.json()["detail"]["code"] == "TOO_MANY_REQUESTS"
    assert "retry-after" in response.headers

    clock.now += 61
    assert client.post(ANALYZE, json=_body()).status_code == 200


def test_health_is_not_rate_limited(client):
    for _ in range(5):
        assert client.get("/trpc/profile.health").status_code == 200


def test_lifespan_starts_and_stops(gemini):
    app.dependency_overrides[get_gemini_client] = lambda: gemini
    try:
        with TestClient(app) as live:
            assert live.get("/health").status_code == 200
    finally:
        app.dependency_overrides.clear()
