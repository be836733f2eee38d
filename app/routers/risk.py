"""
风险雷达路由
"""
import logging

from fastapi import APIRouter, Depends, Query, Response

from app.models.market_schemas import MarketSnapshot
from app.models.risk_schemas import RiskAssessment, RiskRadarResponse
from app.routers.market import lookup_or_raise
from app.services.market_service import CoinGeckoService, get_market_service, parse_market_row
from app.services.risk_service import score_snapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/risk", tags=["风险雷达"])


@router.get("/radar", response_model=RiskRadarResponse)
async def risk_radar(
    response: Response,
    q: str = Query("", description="币种关键字，如 BTC / solana"),
    service: CoinGeckoService = Depends(get_market_service),
) -> RiskRadarResponse:
    """拉取实时行情并计算风险评分"""
    response.headers["Cache-Control"] = "no-store"
    result = await lookup_or_raise(service, q)
    snapshot = parse_market_row(result.row)
    assessment = score_snapshot(snapshot)
    logger.info(f"📊 风险雷达: {result.chosen.symbol} | 评分 {assessment.score} | {assessment.label} / {assessment.bias}")
    return RiskRadarResponse(chosen=result.chosen, snapshot=snapshot, assessment=assessment)


@router.post("/score", response_model=RiskAssessment)
def score_endpoint(snapshot: MarketSnapshot) -> RiskAssessment:
    """对给定行情快照计算风险评分"""
    return score_snapshot(snapshot)
