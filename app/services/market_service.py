"""
币种检索 + 行情获取服务（CoinGecko）

两步串行查询：
1. /search 按关键字检索候选币种，符号精确匹配优先，否则取上游返回的第一个
2. /coins/markets 按选中币种 ID 拉取 USD 行情快照（含 24h/7d/30d 涨跌幅）

不做缓存、不做重试：任一步失败即终止并抛出对应异常，由调用方决定是否整体重试。
"""
import json
import logging
import math
import os
from typing import Any, Dict, List, Optional, Tuple

import aiohttp
from dotenv import load_dotenv

from app.models.market_schemas import CoinCandidate, CoinLookupResponse, MarketSnapshot

project_root = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(project_root, '.env'))

logger = logging.getLogger(__name__)

# ── 配置加载 ──────────────────────────────────────────────────────────────────

def _load_config() -> Dict[str, Any]:
    """读取 config/config.json，缺失项使用默认值"""
    config_path = os.path.join(project_root, 'config', 'config.json')
    default_config: Dict[str, Any] = {
        "coingecko_api_url": "https://api.coingecko.com/api/v3",
        "request_timeout": 30,
    }
    try:
        if os.path.exists(config_path):
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
            for key, value in default_config.items():
                if key not in config:
                    config[key] = value
            return config
        return default_config
    except Exception as e:
        logger.error(f"❌ 加载配置文件失败: {e}，使用默认配置")
        return default_config


_config = _load_config()

# ── 常量 ──────────────────────────────────────────────────────────────────────

MIN_QUERY_LENGTH: int = 2
VS_CURRENCY: str = "usd"
PRICE_CHANGE_WINDOWS: Tuple[str, ...] = ("24h", "7d", "30d")

NO_STORE_HEADERS: Dict[str, str] = {"Cache-Control": "no-store"}


def is_success(status: int) -> bool:
    return 200 <= status < 300


# ── 异常 ──────────────────────────────────────────────────────────────────────

class MarketLookupError(Exception):
    """检索/行情流程的基础异常，http_status 为代理接口应返回的状态码"""
    http_status: int = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class InvalidQuery(MarketLookupError):
    http_status = 400

    def __init__(self) -> None:
        super().__init__("Query too short")


class UpstreamSearchError(MarketLookupError):
    http_status = 502

    def __init__(self, status: int) -> None:
        super().__init__(f"Search failed ({status})", upstream_status=status)


class NoMatchFound(MarketLookupError):
    http_status = 404

    def __init__(self) -> None:
        super().__init__("No matching coin found")


class UpstreamMarketError(MarketLookupError):
    http_status = 502

    def __init__(self, status: int) -> None:
        super().__init__(f"Market fetch failed ({status})", upstream_status=status)


class MarketDataUnavailable(MarketLookupError):
    http_status = 404

    def __init__(self) -> None:
        super().__init__("Market data unavailable")


# ── 行情行解析 ────────────────────────────────────────────────────────────────

def _to_float(value: Any) -> Optional[float]:
    """数值转换，缺失/非数值/非有限值返回 None"""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_rank(value: Any) -> Optional[int]:
    number = _to_float(value)
    if number is None or number < 1:
        return None
    return int(number)


def _change_pct(row: Dict[str, Any], window: str) -> Optional[float]:
    # /coins/markets 带 price_change_percentage 参数时返回 *_in_currency 字段
    value = _to_float(row.get(f"price_change_percentage_{window}_in_currency"))
    if value is None:
        value = _to_float(row.get(f"price_change_percentage_{window}"))
    return value


def parse_market_row(row: Dict[str, Any]) -> MarketSnapshot:
    """将 /coins/markets 返回的原始行解析为 MarketSnapshot

    价格/市值/成交额缺失时记为 0，其余可选字段缺失时保持 None。
    """
    image = row.get("image")
    return MarketSnapshot(
        id=str(row.get("id") or ""),
        symbol=str(row.get("symbol") or "").upper(),
        name=str(row.get("name") or ""),
        image=str(image) if image else None,
        current_price=_to_float(row.get("current_price")) or 0.0,
        market_cap=_to_float(row.get("market_cap")) or 0.0,
        market_cap_rank=_to_rank(row.get("market_cap_rank")),
        total_volume=_to_float(row.get("total_volume")) or 0.0,
        price_change_percentage_24h=_change_pct(row, "24h"),
        price_change_percentage_7d=_change_pct(row, "7d"),
        price_change_percentage_30d=_change_pct(row, "30d"),
        high_24h=_to_float(row.get("high_24h")),
        low_24h=_to_float(row.get("low_24h")),
        ath=_to_float(row.get("ath")),
        atl=_to_float(row.get("atl")),
    )


# ── 核心服务 ──────────────────────────────────────────────────────────────────

class CoinGeckoService:
    """CoinGecko 检索 + 行情服务

    流程：search → choose_coin → fetch_market_row，由 resolve_and_fetch 串联。
    """

    def __init__(self) -> None:
        self._session: Optional[aiohttp.ClientSession] = None
        self._base_url: str = _config['coingecko_api_url'].rstrip('/')

    @property
    def base_url(self) -> str:
        return self._base_url

    # ── Session 管理 ──────────────────────────────────────────────────────

    async def _get_session(self) -> aiohttp.ClientSession:
        """获取或创建 HTTP 会话（复用连接池）"""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=_config['request_timeout'])
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """关闭 HTTP 会话，释放资源"""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
        logger.info("✅ 行情服务已关闭")

    @staticmethod
    def _headers() -> Dict[str, str]:
        headers = dict(NO_STORE_HEADERS)
        api_key = os.getenv("COINGECKO_API_KEY")
        if api_key:
            headers["x-cg-demo-api-key"] = api_key
        return headers

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Tuple[int, Any]:
        """发送 GET 请求，返回 (状态码, JSON 数据)；非 2xx 时数据为 None"""
        url = f"{self._base_url}{path}"
        session = await self._get_session()
        async with session.get(url, params=params, headers=self._headers()) as response:
            if not is_success(response.status):
                # 错误响应体可能不是合法 UTF-8，只用于日志
                body = await response.read()
                text = body.decode("utf-8", errors="replace")
                logger.error(f"❌ CoinGecko {path} 返回 {response.status}: {text[:200]}")
                return response.status, None
            data = await response.json(content_type=None)
            return response.status, data

    # ── 第一步：检索 ──────────────────────────────────────────────────────

    async def search(self, query: str) -> List[CoinCandidate]:
        """按关键字检索候选币种

        Raises:
            UpstreamSearchError: 上游返回非 2xx
        """
        status, data = await self._get_json("/search", {"query": query})
        if not is_success(status):
            raise UpstreamSearchError(status)

        coins = data.get("coins") if isinstance(data, dict) else None
        if not isinstance(coins, list):
            coins = []

        candidates: List[CoinCandidate] = []
        for coin in coins:
            # 没有 id 的候选无法用于行情查询
            if not isinstance(coin, dict) or not coin.get("id"):
                continue
            candidates.append(CoinCandidate(
                id=str(coin.get("id") or ""),
                symbol=str(coin.get("symbol") or "").upper(),
                name=str(coin.get("name") or ""),
            ))
        return candidates

    @staticmethod
    def choose_coin(query: str, candidates: List[CoinCandidate]) -> CoinCandidate:
        """符号精确匹配的第一个候选，否则取列表第一个（保持上游顺序）

        Raises:
            NoMatchFound: 候选列表为空
        """
        upper = query.upper()
        for candidate in candidates:
            if candidate.symbol == upper:
                return candidate
        if not candidates:
            raise NoMatchFound()
        return candidates[0]

    # ── 第二步：行情 ──────────────────────────────────────────────────────

    async def fetch_market_row(self, coin_id: str) -> Dict[str, Any]:
        """拉取单个币种的 USD 行情行

        Raises:
            UpstreamMarketError: 上游返回非 2xx
            MarketDataUnavailable: 返回结果中没有该币种
        """
        params = {
            "vs_currency": VS_CURRENCY,
            "ids": coin_id,
            "price_change_percentage": ",".join(PRICE_CHANGE_WINDOWS),
        }
        status, data = await self._get_json("/coins/markets", params)
        if not is_success(status):
            raise UpstreamMarketError(status)
        rows = data if isinstance(data, list) else []
        for row in rows:
            if isinstance(row, dict) and row.get("id") == coin_id:
                return row
        raise MarketDataUnavailable()

    # ── 主流程 ────────────────────────────────────────────────────────────

    async def resolve_and_fetch(self, raw_query: str) -> CoinLookupResponse:
        """检索并获取行情

        Raises:
            InvalidQuery: 去空白后长度不足 2（不发起任何请求）
            其余异常见 search / choose_coin / fetch_market_row
        """
        query = (raw_query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            raise InvalidQuery()

        candidates = await self.search(query)
        chosen = self.choose_coin(query, candidates)
        logger.info(f"📊 检索 '{query}' → {chosen.id} ({chosen.symbol}), 候选 {len(candidates)} 个")

        row = await self.fetch_market_row(chosen.id)
        return CoinLookupResponse(chosen=chosen, row=row)


# ── 模块级单例 ────────────────────────────────────────────────────────────────

_service = CoinGeckoService()


async def get_market_service() -> CoinGeckoService:
    """获取行情服务单例"""
    return _service
