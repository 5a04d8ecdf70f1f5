import json
import pytest
import respx
import httpx
from fastapi.testclient import TestClient
from sizeguide.main import app
from sizeguide.config import settings
from sizeguide.services.translations import CN_TO_EN


client = TestClient(app)
HEADERS = {"X-API-Key": settings.api_key}

CHART_TEXT = "Size S M L XL\nChest 100 104 108 112\nLength 68 70 72 74"

TOP_CHART = {
    "headers": ["chest"],
    "rows": [
        {"size": "S", "chest": 100},
        {"size": "M", "chest": 104},
        {"size": "L", "chest": 108},
        {"size": "XL", "chest": 112},
    ],
}


def test_ocr_with_raw_text():
    r = client.post("/v1/ocr", json={"rawText": CHART_TEXT}, headers=HEADERS)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["isSizeGuide"] is True
    assert body["rawText"] == CHART_TEXT
    assert body["structured"]["garmentType"] == "top"
    assert body["structured"]["headers"] == ["chest", "length"]
    assert body["structured"]["rows"][0] == {"size": "S", "chest": 100.0, "length": 68.0}
    assert body["structured"]["tables"][0]["garmentType"] == "top"


def test_ocr_translates_chinese_raw_text():
    r = client.post("/v1/ocr", json={"rawText": "尺码 S M L\n腰围 70 74 78\n臀围 92 96 100"}, headers=HEADERS)
    assert r.status_code == 200
    body = r.json()
    assert body["translatedText"].startswith("Size S M L")
    assert body["isSizeGuide"] is True
    assert body["structured"]["garmentType"] == "bottom"
    assert body["structured"]["rows"][1] == {"size": "M", "waist": 74.0, "hip": 96.0}


def test_ocr_requires_an_input():
    r = client.post("/v1/ocr", json={}, headers=HEADERS)
    assert r.status_code == 400


@respx.mock
def test_ocr_calls_provider_and_caches():
    route = respx.post(f"{settings.ocr_api_base.rstrip('/')}/ocr").mock(
        return_value=httpx.Response(200, json={"text": CHART_TEXT, "confidence": 0.91})
    )
    payload = {"imageUrl": "https://example.com/chart.jpg"}

    r = client.post("/v1/ocr", json=payload, headers=HEADERS)
    assert r.status_code == 200
    assert r.json()["confidence"] == 0.91
    assert len(r.json()["structured"]["rows"]) == 4

    sent = json.loads(route.calls.last.request.content)
    assert sent["imageUrl"] == "https://example.com/chart.jpg"
    assert sent["language"] == settings.ocr_language

    r = client.post("/v1/ocr", json=payload, headers=HEADERS)
    assert r.status_code == 200
    assert route.call_count == 1


@respx.mock
def test_ocr_provider_failure_is_502():
    respx.post(f"{settings.ocr_api_base.rstrip('/')}/ocr").mock(return_value=httpx.Response(503))
    r = client.post("/v1/ocr", json={"imageBase64": "aGVsbG8="}, headers=HEADERS)
    assert r.status_code == 502


def test_recommend():
    payload = {
        "sizeChart": TOP_CHART,
        "userMeasurements": {"chest": 96},
        "garmentType": "top",
        "baggyMargin": {"type": "size", "value": 1},
    }
    r = client.post("/v1/recommend", json=payload, headers=HEADERS)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["rightFit"]["size"] == "M"
    assert body["baggyFit"]["size"] == "L"
    assert [s["size"] for s in body["allSizes"]][0] == "M"
    assert body["easeAllowances"]["chest"] == {"min": 4, "ideal": 8, "max": 16}
    assert body["baggyMargin"] == {"type": "size", "value": 1}
    assert body["userMeasurements"] == {"chest": 96}


def test_recommend_defaults_garment_type_and_margin():
    r = client.post("/v1/recommend", json={"sizeChart": TOP_CHART, "userMeasurements": {"chest": 96}}, headers=HEADERS)
    assert r.status_code == 200
    body = r.json()
    assert body["garmentType"] == "top"
    assert body["baggyFit"]["size"] == "L"


@pytest.mark.parametrize("override", [
    {"sizeChart": {"rows": []}},
    {"userMeasurements": {}},
    {"garmentType": "shoes"},
    {"baggyMargin": {"type": "inches", "value": 2}},
])
def test_recommend_rejects_invalid_input(override):
    payload = {"sizeChart": TOP_CHART, "userMeasurements": {"chest": 96}, **override}
    r = client.post("/v1/recommend", json=payload, headers=HEADERS)
    assert r.status_code == 400


def test_translate():
    r = client.post("/v1/translate", json={"text": "胸围 100 衣长 70"}, headers=HEADERS)
    assert r.status_code == 200
    body = r.json()
    assert body == {
        "success": True,
        "original": "胸围 100 衣长 70",
        "translated": "Chest 100 Length 70",
        "dictionarySize": len(CN_TO_EN),
    }


def test_translate_requires_text():
    r = client.post("/v1/translate", json={"text": ""}, headers=HEADERS)
    assert r.status_code == 400
