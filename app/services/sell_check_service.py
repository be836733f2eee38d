"""
"是否卖出" 问卷 - 按答案映射到固定结论，纯函数
"""
from app.models.sell_check_schemas import SellCheckRequest, SellCheckResponse

DISCLAIMER = "Not financial advice. This is a decision framework."

EXIT = (
    "Exit",
    "If the thesis is broken, stop negotiating with yourself.",
    [
        "You don’t need a perfect exit. You need consistency.",
        "Write the new thesis. If you can’t, you’re holding hope.",
        "Re-enter later if the facts change.",
    ],
)

TRIM = (
    "Trim",
    "Your position is too big for your nervous system.",
    [
        "Stress is data. If you can’t hold it, you’re overexposed.",
        "Trim until you can think clearly again.",
        "Keep a small runner only if the thesis still stands.",
    ],
)

REACTING_TO_PRICE = (
    "Reassess",
    "You’re reacting to candles, not information.",
    [
        "If nothing fundamental changed, don’t turn this into a new trade.",
        "Re-read why you bought. If it still holds, chill.",
        "If you can’t explain the thesis, reduce and reset.",
    ],
)

HOLD = (
    "Hold",
    "Nothing changed and conviction is high. Don’t sabotage it.",
    [
        "Most losses come from bad behaviour, not bad picks.",
        "Set a simple invalidation rule and stop staring at it.",
        "If you need action: plan partial take-profits, not panic sells.",
    ],
)

MISSING_RULE = (
    "Reassess",
    "You’re not stuck. You’re missing a rule.",
    [
        "Define: what would make you sell (invalidation).",
        "If you can’t define it, reduce risk until you can.",
        "Then stop asking the market to make decisions for you.",
    ],
)


def evaluate(answers: SellCheckRequest) -> SellCheckResponse:
    """按顺序匹配规则，第一个命中的结论生效"""
    thesis_broken = answers.what_changed in ("Thesis broken", "New info (bad)")
    high_stress = answers.stress_level >= 4
    low_conviction = answers.conviction_now <= 2
    not_ok_zero = answers.if_zero_ok == "No"
    long_enough = answers.time_horizon != "Days"

    if thesis_broken:
        outcome = EXIT
    elif high_stress and (not_ok_zero or low_conviction):
        outcome = TRIM
    elif answers.what_changed == "Price moved only" and long_enough:
        outcome = REACTING_TO_PRICE
    elif answers.what_changed == "Nothing" and answers.conviction_now >= 4 and long_enough:
        outcome = HOLD
    else:
        outcome = MISSING_RULE

    label, headline, bullets = outcome
    return SellCheckResponse(
        label=label,
        headline=headline,
        bullets=list(bullets),
        conviction_now=answers.conviction_now,
        disclaimer=DISCLAIMER,
    )
