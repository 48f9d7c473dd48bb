from __future__ import annotations

import math
from collections.abc import Iterable

from .models import Finding, FindingType, RiskLevel, RiskReport

RISK_WEIGHTS: dict[RiskLevel, float] = {
    RiskLevel.CRITICAL: 15,
    RiskLevel.HIGH: 10,
    RiskLevel.MEDIUM: 5,
    RiskLevel.LOW: 1,
    RiskLevel.INFO: 0,
}

PRODUCTION_URL_BONUS = 10
CRITICAL_BONUS = 5
MAX_SCORE = 100

# Checked in order; the first threshold the score reaches wins.
_LEVEL_THRESHOLDS = [
    (80, RiskLevel.CRITICAL),
    (60, RiskLevel.HIGH),
    (30, RiskLevel.MEDIUM),
]


def aggregate(findings: Iterable[Finding]) -> RiskReport:
    """Reduce a batch of findings to a single 0-100 score and level.

    An empty batch is the only way to get INFO. A non-empty batch whose
    findings all weigh nothing scores 0 and maps to LOW.
    """
    findings = list(findings)
    if not findings:
        return RiskReport(score=0, level=RiskLevel.INFO)

    total = sum(RISK_WEIGHTS[f.risk] for f in findings)

    if any(f.type is FindingType.PRODUCTION_URL and f.risk is RiskLevel.HIGH for f in findings):
        total += PRODUCTION_URL_BONUS
    if any(f.risk is RiskLevel.CRITICAL for f in findings):
        total += CRITICAL_BONUS

    # Half-up rounding; the weights are integral today.
    score = min(MAX_SCORE, max(0, math.floor(total + 0.5)))
    return RiskReport(score=score, level=level_for_score(score))


def level_for_score(score: int) -> RiskLevel:
    for threshold, level in _LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.LOW
