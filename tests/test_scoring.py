from __future__ import annotations

import pytest

from grammar_quiz.scoring import QuizResult, SummaryCategory, categorize, score_ratio, summarize


@pytest.mark.parametrize(
    ("ratio", "expected"),
    [
        (1.0, SummaryCategory.PERFECT),
        (0.99, SummaryCategory.GREAT),
        (0.8, SummaryCategory.GREAT),
        (0.79, SummaryCategory.GOOD),
        (0.6, SummaryCategory.GOOD),
        (0.59, SummaryCategory.KEEP_TRYING),
        (0.0, SummaryCategory.KEEP_TRYING),
    ],
)
def test_categorize(ratio: float, expected: SummaryCategory) -> None:
    assert categorize(ratio) is expected


@pytest.mark.parametrize("ratio", [-0.01, 1.01])
def test_categorize_out_of_range(ratio: float) -> None:
    with pytest.raises(ValueError):
        categorize(ratio)


@pytest.mark.parametrize(
    ("score", "total", "expected"),
    [
        (8, 8, SummaryCategory.PERFECT),
        (7, 8, SummaryCategory.GREAT),
        (5, 8, SummaryCategory.GOOD),
        (4, 8, SummaryCategory.KEEP_TRYING),
        (4, 5, SummaryCategory.GREAT),
        (3, 5, SummaryCategory.GOOD),
    ],
)
def test_summarize(score: int, total: int, expected: SummaryCategory) -> None:
    assert summarize(score, total) is expected


@pytest.mark.parametrize(("score", "total"), [(0, 0), (-1, 3), (4, 3)])
def test_score_ratio_rejects_invalid(score: int, total: int) -> None:
    with pytest.raises(ValueError):
        score_ratio(score, total)


def test_quiz_result_percent() -> None:
    result = QuizResult(score=5, total=8, category=SummaryCategory.GOOD)

    assert result.ratio == 0.625
    assert result.percent == 62
