"""
币种检索与行情快照数据模型
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class CoinCandidate(BaseModel):
    """搜索结果中的单个候选币种"""
    id: str = Field(..., description="CoinGecko 币种 ID，如 bitcoin")
    symbol: str = Field("", description="币种符号（大写），如 BTC")
    name: str = Field("", description="币种名称")


class MarketSnapshot(BaseModel):
    """行情快照（仅包含风险评估用到的字段，缺失即 None，不等于 0）"""
    id: str = Field("", description="CoinGecko 币种 ID")
    symbol: str = Field("", description="币种符号")
    name: str = Field("", description="币种名称")
    image: Optional[str] = Field(None, description="图标 URL")
    current_price: float = Field(0.0, description="当前价格（USD）")
    market_cap: float = Field(0.0, description="市值（USD）")
    market_cap_rank: Optional[int] = Field(None, description="市值排名，无排名为 None")
    total_volume: float = Field(0.0, description="24小时成交额（USD）")
    price_change_percentage_24h: Optional[float] = Field(None, description="24小时涨跌幅（百分比）")
    price_change_percentage_7d: Optional[float] = Field(None, description="7天涨跌幅（百分比）")
    price_change_percentage_30d: Optional[float] = Field(None, description="30天涨跌幅（百分比）")
    high_24h: Optional[float] = Field(None, description="24小时最高价")
    low_24h: Optional[float] = Field(None, description="24小时最低价")
    ath: Optional[float] = Field(None, description="历史最高价")
    atl: Optional[float] = Field(None, description="历史最低价")


class CoinLookupResponse(BaseModel):
    """代理接口响应：选中的币种 + 原始行情行"""
    chosen: CoinCandidate
    row: Dict[str, Any]
