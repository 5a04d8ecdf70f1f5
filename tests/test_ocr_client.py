import json
import pytest
import respx
import httpx

from sizeguide.config import settings
from sizeguide.services.ocr_client import OcrProviderClient


OCR_URL = f"{settings.ocr_api_base.rstrip('/')}/ocr"


@pytest.mark.asyncio
@respx.mock
async def test_recognize_image_url():
    route = respx.post(OCR_URL).mock(
        return_value=httpx.Response(200, json={"text": "Size S M L", "confidence": 0.87})
    )
    result = await OcrProviderClient().recognize(image_url="https://example.com/a.jpg")
    assert result == {"text": "Size S M L", "confidence": 0.87}

    sent = json.loads(route.calls.last.request.content)
    assert sent == {"language": settings.ocr_language, "imageUrl": "https://example.com/a.jpg"}


@pytest.mark.asyncio
@respx.mock
async def test_recognize_prefers_base64_and_sends_key(monkeypatch):
    monkeypatch.setattr(settings, "ocr_api_key", "ocr-secret")
    route = respx.post(OCR_URL).mock(return_value=httpx.Response(200, json={"text": None}))

    result = await OcrProviderClient().recognize(image_url="https://example.com/a.jpg", image_base64="aGVsbG8=")
    assert result == {"text": "", "confidence": 0.0}

    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer ocr-secret"
    assert "imageUrl" not in json.loads(request.content)


@pytest.mark.asyncio
@respx.mock
async def test_recognize_raises_on_provider_error():
    respx.post(OCR_URL).mock(return_value=httpx.Response(500, json={"error": "boom"}))
    with pytest.raises(httpx.HTTPStatusError):
        await OcrProviderClient().recognize(image_url="https://example.com/a.jpg")


@pytest.mark.asyncio
async def test_recognize_requires_image():
    with pytest.raises(ValueError):
        await OcrProviderClient().recognize()
