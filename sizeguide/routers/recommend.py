from fastapi import APIRouter, Depends, HTTPException
import structlog

from ..config import settings
from ..security import verify_api_key
from ..schemas.recommend import RecommendRequest, RecommendResponse
from ..services.fit_scorer import BAGGY_MARGIN_TYPES, EASE_ALLOWANCES, FitScorer


logger = structlog.get_logger("sizeguide.recommend")

router = APIRouter(prefix="/recommend", tags=["recommend"], dependencies=[Depends(verify_api_key)])


@router.post("", response_model=RecommendResponse)
async def recommend(req: RecommendRequest) -> RecommendResponse:
    if not req.size_chart.rows:
        raise HTTPException(status_code=400, detail="sizeChart.rows must not be empty")
    if not req.user_measurements:
        raise HTTPException(status_code=400, detail="userMeasurements must not be empty")
    if req.garment_type not in EASE_ALLOWANCES:
        raise HTTPException(status_code=400, detail="garmentType must be 'top' or 'bottom'")
    if req.baggy_margin.type not in BAGGY_MARGIN_TYPES:
        raise HTTPException(status_code=400, detail="baggyMargin.type must be one of: size, cm, percent")

    scorer = FitScorer(prefer_larger_on_tie=settings.prefer_larger_on_tie)
    result = scorer.recommend(
        size_chart=req.size_chart.model_dump(),
        user_measurements=req.user_measurements,
        garment_type=req.garment_type,
        baggy_margin=req.baggy_margin.model_dump(),
    )

    logger.info(
        "recommendation_computed",
        garment_type=req.garment_type,
        sizes=len(req.size_chart.rows),
        right_fit=(result["right_fit"] or {}).get("size"),
        baggy_fit=(result["baggy_fit"] or {}).get("size"),
    )

    return RecommendResponse(
        garment_type=req.garment_type,
        user_measurements=req.user_measurements,
        baggy_margin=req.baggy_margin,
        right_fit=result["right_fit"],
        baggy_fit=result["baggy_fit"],
        all_sizes=result["all_sizes"],
        ease_allowances=EASE_ALLOWANCES[req.garment_type],
    )
