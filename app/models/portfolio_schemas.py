"""
持仓集中度数据模型
"""
from typing import List, Literal

from pydantic import BaseModel, Field

ConcentrationLabel = Literal["Low", "Medium", "High", "Severe"]


class AllocationRow(BaseModel):
    """用户输入的一行持仓，pct 保留原始字符串"""
    token: str = Field("", description="币种名称或符号")
    pct: str = Field("", description="仓位占比（百分比字符串），如 \"25\"")


class ConcentrationRequest(BaseModel):
    """集中度检查请求模型"""
    rows: List[AllocationRow] = Field(..., description="持仓列表")


class AllocationEntry(BaseModel):
    """清洗后的持仓行"""
    token: str
    pct: float


class ConcentrationAssessment(BaseModel):
    """集中度检查结果"""
    total: float = Field(..., description="有效持仓占比合计")
    top1: float = Field(..., description="最大单一持仓占比")
    top3: float = Field(..., description="前三大持仓占比合计")
    rest: float = Field(..., description="长尾（前三以外）占比")
    label: ConcentrationLabel
    message: str
    rows: List[AllocationEntry] = Field(default_factory=list, description="按占比降序排列的有效持仓")
