"""
持仓集中度路由
"""
import logging

from fastapi import APIRouter

from app.models.portfolio_schemas import ConcentrationAssessment, ConcentrationRequest
from app.services.portfolio_service import check_concentration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/portfolio", tags=["持仓集中度"])


@router.post("/concentration", response_model=ConcentrationAssessment)
def concentration_endpoint(request: ConcentrationRequest) -> ConcentrationAssessment:
    """计算 top1 / top3 / 长尾占比"""
    result = check_concentration(request.rows)
    logger.info(f"收到集中度检查请求: {len(request.rows)} 行 → {result.label}")
    return result
