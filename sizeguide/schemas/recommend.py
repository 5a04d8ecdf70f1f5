from typing import Any, Dict, Optional, List
from pydantic import Field

from .size_chart import CamelModel


class BaggyMargin(CamelModel):
    # size: N sizes up from the right fit; cm / percent: over the primary body measurement
    type: str = "size"
    value: float = 1


class ChartInput(CamelModel):
    headers: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)


class RecommendRequest(CamelModel):
    size_chart: ChartInput
    user_measurements: Dict[str, float] = Field(default_factory=dict)
    garment_type: str = "top"
    baggy_margin: BaggyMargin = Field(default_factory=BaggyMargin)


class FitResult(CamelModel):
    size: str
    confidence: float
    fit: str
    notes: List[str] = Field(default_factory=list)
    details: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class SizeScore(CamelModel):
    size: str
    fit: str
    score: float


class RecommendResponse(CamelModel):
    success: bool = True
    garment_type: str
    user_measurements: Dict[str, float]
    baggy_margin: BaggyMargin
    right_fit: Optional[FitResult] = None
    baggy_fit: Optional[FitResult] = None
    all_sizes: List[SizeScore] = Field(default_factory=list)
    ease_allowances: Dict[str, Dict[str, float]]
