from fastapi import APIRouter, Depends, HTTPException

from ..security import verify_api_key
from ..schemas.ocr import TranslateRequest, TranslateResponse
from ..services.translations import CN_TO_EN, translate_chinese


router = APIRouter(prefix="/translate", tags=["translate"], dependencies=[Depends(verify_api_key)])


@router.post("", response_model=TranslateResponse)
async def translate(req: TranslateRequest) -> TranslateResponse:
    if not req.text:
        raise HTTPException(status_code=400, detail="text is required")
    return TranslateResponse(
        original=req.text,
        translated=translate_chinese(req.text),
        dictionary_size=len(CN_TO_EN),
    )
