import httpx
import structlog
from fastapi import APIRouter, Depends, HTTPException

from ..cache import cache_get, cache_key, cache_set
from ..config import settings
from ..security import verify_api_key
from ..schemas.ocr import OcrRequest, OcrResponse, StructuredChart
from ..services.ocr_client import OcrProviderClient
from ..services.ocr_parser import detect_garment_type, is_size_guide, reconstruct


logger = structlog.get_logger("sizeguide.ocr")

router = APIRouter(prefix="/ocr", tags=["ocr"], dependencies=[Depends(verify_api_key)])


async def _recognize(req: OcrRequest) -> dict:
    key = cache_key("ocr", settings.ocr_language, req.image_url, req.image_base64)
    cached = cache_get(key)
    if cached is not None:
        logger.debug("ocr_cache_hit")
        return cached

    client = OcrProviderClient()
    try:
        result = await client.recognize(image_url=req.image_url, image_base64=req.image_base64)
    except httpx.HTTPError:
        raise HTTPException(status_code=502, detail="OCR provider request failed")
    cache_set(key, result, settings.cache_ttl_seconds)
    return result


@router.post("", response_model=OcrResponse)
async def ocr(req: OcrRequest) -> OcrResponse:
    if req.raw_text is None and not req.image_url and not req.image_base64:
        raise HTTPException(status_code=400, detail="Provide imageUrl, imageBase64 or rawText")

    if req.raw_text is not None:
        ocr_result = {"text": req.raw_text, "confidence": 1.0}
    else:
        ocr_result = await _recognize(req)

    raw_text = ocr_result["text"]
    chart = reconstruct(raw_text)
    garment_type = chart.tables[0].garment_type if chart.tables else detect_garment_type(chart)

    logger.info(
        "ocr_reconstructed",
        source="raw_text" if req.raw_text is not None else "provider",
        rows=len(chart.rows),
        tables=len(chart.tables),
        garment_type=garment_type,
    )

    return OcrResponse(
        is_size_guide=is_size_guide(raw_text),
        confidence=ocr_result["confidence"],
        raw_text=raw_text,
        translated_text=chart.translated_text,
        structured=StructuredChart(
            headers=chart.headers,
            rows=chart.rows,
            tables=chart.tables,
            garment_type=garment_type,
        ),
    )
