"""
行情代理路由 - GET /api/coingecko 端点

服务端完成 检索 → 行情 两步请求，避免浏览器跨域限制。
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from app.models.market_schemas import CoinLookupResponse
from app.services.market_service import CoinGeckoService, MarketLookupError, get_market_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["行情代理"])


async def lookup_or_raise(service: CoinGeckoService, q: str) -> CoinLookupResponse:
    """执行检索 + 行情，失败时转换为 HTTPException"""
    try:
        return await service.resolve_and_fetch(q)
    except MarketLookupError as e:
        logger.warning(f"⚠️ 检索 '{q}' 失败: {e}")
        raise HTTPException(status_code=e.http_status, detail=str(e))
    except Exception as e:
        logger.error(f"❌ 检索 '{q}' 异常: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Server error")


@router.get("/api/coingecko", response_model=CoinLookupResponse)
async def coingecko_proxy(
    response: Response,
    q: str = Query("", description="币种关键字，如 BTC / solana"),
    service: CoinGeckoService = Depends(get_market_service),
) -> CoinLookupResponse:
    """按关键字检索币种并返回原始行情行"""
    response.headers["Cache-Control"] = "no-store"
    return await lookup_or_raise(service, q)
