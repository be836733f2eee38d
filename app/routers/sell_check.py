"""
"是否卖出" 问卷路由
"""
import logging

from fastapi import APIRouter

from app.models.sell_check_schemas import SellCheckRequest, SellCheckResponse
from app.services.sell_check_service import evaluate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["卖出决策"])


@router.post("/sell-check", response_model=SellCheckResponse)
def sell_check_endpoint(answers: SellCheckRequest) -> SellCheckResponse:
    """根据问卷答案给出结论"""
    result = evaluate(answers)
    logger.info(
        f"问卷结论: {result.label} | 周期 {answers.time_horizon} | 变化 {answers.what_changed} | "
        f"信心 {answers.conviction_now} | 压力 {answers.stress_level}"
    )
    return result
