"""
风险雷达评分 - 纯函数，无 I/O

评分维度（四项独立封顶后求和，再整体截断到 0-100）：
1. 波动（0-40）：|24h 涨跌幅| × 2.5
2. 排名（5-35）：市值排名分档，无排名视为最高风险
3. 流动性（3-25）：24h 成交额 / 市值 分档
4. 回撤（0-30）：距历史最高价回撤 / 2
"""
import math
from typing import List, Optional

from app.models.market_schemas import MarketSnapshot
from app.models.risk_schemas import RiskAssessment

# ── 常量 ──────────────────────────────────────────────────────────────────────

UNRANKED: int = 10**9

VOLATILITY_MULTIPLIER: float = 2.5
VOLATILITY_CAP: float = 40.0
DRAWDOWN_CAP: float = 30.0

# (排名上限, 分数)，超出最后一档记 RANK_POINTS_TAIL
RANK_BANDS = ((20, 5), (50, 12), (100, 20), (250, 28))
RANK_POINTS_TAIL: int = 35

# (成交额/市值 上限（不含）, 分数)，超出最后一档记 LIQUIDITY_POINTS_TAIL
LIQUIDITY_BANDS = ((0.02, 25), (0.05, 18), (0.1, 10), (0.2, 6))
LIQUIDITY_POINTS_TAIL: int = 3

THIN_LIQUIDITY: float = 0.05
LARGE_CAP_RANK: int = 20


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def round_half_up(x: float) -> int:
    """四舍五入（.5 向正无穷方向），与内置 round 的银行家舍入不同"""
    return int(math.floor(x + 0.5))


# ── 信号 ──────────────────────────────────────────────────────────────────────

def drawdown_from_ath(snapshot: MarketSnapshot) -> Optional[int]:
    """距历史最高价回撤百分比（取整），ath 缺失或非正时为 None"""
    ath = snapshot.ath
    if ath is None or ath <= 0:
        return None
    return round_half_up((ath - snapshot.current_price) / ath * 100)


def liquidity_ratio(snapshot: MarketSnapshot) -> float:
    if snapshot.market_cap > 0:
        return snapshot.total_volume / snapshot.market_cap
    return 0.0


def volatility_points(abs_change_24h: float) -> float:
    return _clamp(abs_change_24h * VOLATILITY_MULTIPLIER, 0.0, VOLATILITY_CAP)


def rank_points(rank: int) -> int:
    for upper, points in RANK_BANDS:
        if rank <= upper:
            return points
    return RANK_POINTS_TAIL


def liquidity_points(liq: float) -> int:
    for upper, points in LIQUIDITY_BANDS:
        if liq < upper:
            return points
    return LIQUIDITY_POINTS_TAIL


def drawdown_points(drawdown: Optional[int]) -> float:
    if drawdown is None:
        return 0.0
    return _clamp(drawdown / 2, 0.0, DRAWDOWN_CAP)


# ── 分级 ──────────────────────────────────────────────────────────────────────

def classify(score: int) -> str:
    """边界归入较低一档：25 → Low, 50 → Medium, 75 → High"""
    if score <= 25:
        return "Low"
    if score <= 50:
        return "Medium"
    if score <= 75:
        return "High"
    return "Chaos"


def derive_bias(label: str, drawdown: Optional[int]) -> str:
    if label == "Low":
        if drawdown is not None and drawdown < 20:
            return "Hold"
        return "Watch"
    if label == "Medium":
        return "Watch"
    if label == "High":
        return "Reduce"
    return "Avoid"


# ── 说明要点 ──────────────────────────────────────────────────────────────────

def _build_bullets(
    snapshot: MarketSnapshot,
    rank: int,
    liq: float,
    drawdown: Optional[int],
    label: str,
) -> List[str]:
    change_24h = snapshot.price_change_percentage_24h or 0.0
    bullets: List[str] = [f"24h move: {change_24h:+.2f}%."]

    rank_text = "Unranked" if rank == UNRANKED else f"Rank #{rank}"
    if rank <= LARGE_CAP_RANK:
        bullets.append(f"{rank_text}: large-cap, deeper markets and more eyes on it.")
    else:
        bullets.append(f"{rank_text}: smaller cap, expect sharper swings both ways.")

    if liq < THIN_LIQUIDITY:
        bullets.append(f"Volume/market cap {liq * 100:.1f}%: thin trading, exits can slip.")
    else:
        bullets.append(f"Volume/market cap {liq * 100:.1f}%: liquidity looks healthy.")

    if drawdown is not None:
        bullets.append(f"{drawdown}% below all-time high.")
    if snapshot.price_change_percentage_7d is not None:
        bullets.append(f"7d move: {snapshot.price_change_percentage_7d:+.2f}%.")
    if snapshot.price_change_percentage_30d is not None:
        bullets.append(f"30d move: {snapshot.price_change_percentage_30d:+.2f}%.")

    if label == "Chaos":
        bullets.append("Chaos zone: size it like it can go to zero, or sit this one out.")
    elif label == "Low":
        bullets.append("Lower risk on these signals, but crypto can still drop fast. Keep an invalidation rule.")
    return bullets


# ── 主入口 ────────────────────────────────────────────────────────────────────

def score_snapshot(snapshot: MarketSnapshot) -> RiskAssessment:
    """根据行情快照计算风险评分、等级、倾向与说明要点

    Args:
        snapshot: 行情快照

    Returns:
        RiskAssessment，相同输入始终得到相同输出
    """
    abs_change_24h = abs(snapshot.price_change_percentage_24h or 0.0)
    liq = liquidity_ratio(snapshot)
    rank = snapshot.market_cap_rank if snapshot.market_cap_rank is not None else UNRANKED
    drawdown = drawdown_from_ath(snapshot)

    total = (
        volatility_points(abs_change_24h)
        + rank_points(rank)
        + liquidity_points(liq)
        + drawdown_points(drawdown)
    )
    score = int(_clamp(round_half_up(total), 0, 100))
    label = classify(score)

    return RiskAssessment(
        score=score,
        label=label,
        bias=derive_bias(label, drawdown),
        drawdownFromAth=drawdown,
        bullets=_build_bullets(snapshot, rank, liq, drawdown, label),
    )
