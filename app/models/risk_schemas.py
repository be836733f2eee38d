"""
风险雷达数据模型
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from app.models.market_schemas import CoinCandidate, MarketSnapshot

RiskLabel = Literal["Low", "Medium", "High", "Chaos"]
RiskBias = Literal["Hold", "Watch", "Reduce", "Avoid"]


class RiskAssessment(BaseModel):
    """风险评估结果"""
    score: int = Field(..., ge=0, le=100, description="风险评分 0-100")
    label: RiskLabel = Field(..., description="风险等级")
    bias: RiskBias = Field(..., description="操作倾向")
    drawdownFromAth: Optional[int] = Field(None, description="距历史最高价回撤（百分比，取整）")
    bullets: List[str] = Field(default_factory=list, description="说明要点（固定顺序）")


class RiskRadarResponse(BaseModel):
    """风险雷达接口响应"""
    chosen: CoinCandidate
    snapshot: MarketSnapshot
    assessment: RiskAssessment
