import httpx
import structlog
from typing import Any, Dict, Optional
from ..config import settings


logger = structlog.get_logger("sizeguide.ocr_client")


class OcrProviderClient:
    """Thin client for the external OCR service: image in, raw text out."""

    def __init__(self) -> None:
        self.base = settings.ocr_api_base.rstrip("/")
        self.language = settings.ocr_language
        self.timeout = settings.ocr_timeout_seconds

    def _headers(self) -> Dict[str, str]:
        if settings.ocr_api_key:
            return {"Authorization": f"Bearer {settings.ocr_api_key}"}
        return {}

    async def recognize(self, image_url: Optional[str] = None, image_base64: Optional[str] = None) -> Dict[str, Any]:
        if not image_url and not image_base64:
            raise ValueError("image_url or image_base64 is required")

        payload: Dict[str, Any] = {"language": self.language}
        if image_base64:
            payload["imageBase64"] = image_base64
        else:
            payload["imageUrl"] = image_url

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(f"{self.base}/ocr", json=payload, headers=self._headers())
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            logger.error("ocr_provider_failed", base=self.base, error=str(e), error_type=type(e).__name__)
            raise

        try:
            confidence = float(data.get("confidence") or 0.0)
        except (TypeError, ValueError):
            confidence = 0.0
        return {"text": data.get("text") or "", "confidence": confidence}
