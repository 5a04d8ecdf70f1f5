from typing import List, Optional
from pydantic import Field

from .size_chart import CamelModel, SizeRow, SizeTable


class OcrRequest(CamelModel):
    image_url: Optional[str] = None
    image_base64: Optional[str] = None
    raw_text: Optional[str] = None


class StructuredChart(CamelModel):
    headers: List[str] = Field(default_factory=list)
    rows: List[SizeRow] = Field(default_factory=list)
    tables: List[SizeTable] = Field(default_factory=list)
    garment_type: str = "top"


class OcrResponse(CamelModel):
    success: bool = True
    is_size_guide: bool
    confidence: float
    raw_text: str
    translated_text: str
    structured: StructuredChart


class TranslateRequest(CamelModel):
    text: Optional[str] = None


class TranslateResponse(CamelModel):
    success: bool = True
    original: str
    translated: str
    dictionary_size: int
