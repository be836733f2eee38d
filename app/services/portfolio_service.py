"""
持仓集中度检查 - 纯函数，无 I/O

分级规则（按顺序命中即返回）：
- 最大单一持仓 >= 50%        → Severe
- 前三大持仓合计 >= 70%      → High
- 长尾（前三以外）>= 40%     → Medium
- 其余                       → Low
"""
import math
from typing import List, Sequence

from app.models.portfolio_schemas import AllocationEntry, AllocationRow, ConcentrationAssessment

SEVERE_TOP1: float = 50.0
HIGH_TOP3: float = 70.0
MEDIUM_REST: float = 40.0

MESSAGES = {
    "Severe": "One position dominates. A single bad outcome can sink the whole portfolio.",
    "High": "Your top three positions carry most of the risk. Make sure each one earns its size.",
    "Medium": "Long tail is heavy. Small positions you don't track add noise, not conviction.",
    "Low": "Exposure is reasonably spread. Keep sizing deliberate as prices move.",
}


def parse_pct(raw: str) -> float:
    """解析百分比字符串，截断到 [0, 100]；空白或无法解析记为 0"""
    try:
        value = float((raw or "").strip())
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(100.0, value))


def _round1(x: float) -> float:
    return math.floor(x * 10 + 0.5) / 10


def check_concentration(rows: Sequence[AllocationRow]) -> ConcentrationAssessment:
    """计算 top1 / top3 / 长尾占比并分级

    Args:
        rows: 用户输入的持仓行

    Returns:
        ConcentrationAssessment，rows 字段为降序排列的有效持仓（同占比保持输入顺序）
    """
    entries: List[AllocationEntry] = []
    for row in rows:
        token = (row.token or "").strip()
        pct = parse_pct(row.pct)
        if not token or pct <= 0:
            continue
        entries.append(AllocationEntry(token=token, pct=pct))

    # sorted 为稳定排序
    entries = sorted(entries, key=lambda e: e.pct, reverse=True)

    total = _round1(sum(e.pct for e in entries))
    top1 = entries[0].pct if entries else 0.0
    top3 = sum(e.pct for e in entries[:3])
    rest = max(0.0, total - top3)

    if top1 >= SEVERE_TOP1:
        label = "Severe"
    elif top3 >= HIGH_TOP3:
        label = "High"
    elif rest >= MEDIUM_REST:
        label = "Medium"
    else:
        label = "Low"

    return ConcentrationAssessment(
        total=total,
        top1=_round1(top1),
        top3=_round1(top3),
        rest=_round1(rest),
        label=label,
        message=MESSAGES[label],
        rows=entries,
    )
