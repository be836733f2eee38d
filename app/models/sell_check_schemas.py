"""
"是否卖出" 问卷数据模型
"""
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

TimeHorizon = Literal["Days", "Weeks", "Months", "Years"]
WhatChanged = Literal["Nothing", "Thesis broken", "Price moved only", "New info (good)", "New info (bad)"]
ZeroOk = Literal["Yes", "No", "Not sure"]
SellCall = Literal["Hold", "Trim", "Exit", "Reassess"]


class SellCheckRequest(BaseModel):
    """问卷答案"""
    model_config = ConfigDict(str_strip_whitespace=True)

    asset: str = Field(..., min_length=1, description="资产，如 BTC / SOL / PEPE")
    why_bought: str = Field(..., min_length=1, description="买入理由（一句话）")
    time_horizon: TimeHorizon = Field("Months", description="持有周期")
    what_changed: WhatChanged = Field("Nothing", description="买入后发生了什么变化")
    conviction_now: int = Field(3, ge=1, le=5, description="当前信心 1-5")
    stress_level: int = Field(3, ge=1, le=5, description="压力水平 1-5")
    if_zero_ok: ZeroOk = Field("Not sure", description="归零是否能接受")


class SellCheckResponse(BaseModel):
    """问卷结论"""
    label: SellCall
    headline: str
    bullets: List[str]
    conviction_now: int
    disclaimer: str
