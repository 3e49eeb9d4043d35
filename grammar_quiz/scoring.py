"""
scoring.py
======================

最終得点から総評カテゴリを決める純粋関数群。

しきい値（正答率）:
    1.0   → PERFECT
    >=0.8 → GREAT
    >=0.6 → GOOD
    それ以外 → KEEP_TRYING

表示用の文言は UI 側 (ui.ENCOURAGEMENTS) が持つ。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

GREAT_THRESHOLD = 0.8
GOOD_THRESHOLD = 0.6


class SummaryCategory(Enum):
    PERFECT = "perfect"
    GREAT = "great"
    GOOD = "good"
    KEEP_TRYING = "keep_trying"


def score_ratio(score: int, total: int) -> float:
    if total <= 0:
        raise ValueError("total は 1 以上が必要です")
    if not 0 <= score <= total:
        raise ValueError(f"score が範囲外です: {score}/{total}")
    return score / total


def categorize(ratio: float) -> SummaryCategory:
    """[0, 1] の正答率をカテゴリに写す。範囲外は ValueError。"""
    if not 0.0 <= ratio <= 1.0:
        raise ValueError(f"正答率が範囲外です: {ratio}")
    if ratio == 1.0:
        return SummaryCategory.PERFECT
    if ratio >= GREAT_THRESHOLD:
        return SummaryCategory.GREAT
    if ratio >= GOOD_THRESHOLD:
        return SummaryCategory.GOOD
    return SummaryCategory.KEEP_TRYING


def summarize(score: int, total: int) -> SummaryCategory:
    return categorize(score_ratio(score, total))


@dataclass(frozen=True)
class QuizResult:
    """終了したセッションの集計結果。"""

    score: int
    total: int
    category: SummaryCategory
    incorrect_question_ids: Tuple[str, ...] = ()

    @property
    def ratio(self) -> float:
        return score_ratio(self.score, self.total)

    @property
    def percent(self) -> int:
        return round(self.ratio * 100)
