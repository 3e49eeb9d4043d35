from __future__ import annotations

import pytest

from grammar_quiz.engine import QuizEngine, QuizPhase
from grammar_quiz.errors import (
    AlreadySubmittedError,
    InvalidSelectionError,
    NoSelectionError,
    NotReviewedError,
    OutOfRangeIndexError,
    QuizFinishedError,
    QuizNotFinishedError,
)
from grammar_quiz.history import AnswerRecord
from grammar_quiz.question_bank import QuestionBank
from grammar_quiz.scoring import SummaryCategory

from tests.quiz_fixtures import SAMPLE_CORRECT_ANSWERS, make_question


def _answer(engine: QuizEngine, option_id: str) -> AnswerRecord:
    engine.select_option(option_id)
    return engine.submit()


def _assert_initial(engine: QuizEngine) -> None:
    snap = engine.snapshot()
    assert snap.phase is QuizPhase.ANSWERING
    assert snap.current_position == 1
    assert snap.selected_option_id is None
    assert snap.is_submitted is False
    assert snap.score == 0
    assert snap.history == ()
    assert snap.summary is None
    assert engine.session.current_index == 0


def _assert_score_matches_history(engine: QuizEngine) -> None:
    snap = engine.snapshot()
    assert snap.score == sum(1 for r in snap.history if r.is_correct)


def test_initial_snapshot(sample_engine: QuizEngine) -> None:
    _assert_initial(sample_engine)
    snap = sample_engine.snapshot()
    assert snap.question.id == "1"
    assert [o.id for o in snap.options] == ["a", "b", "c", "d"]
    assert snap.progress == (1, 8)
    assert snap.is_finished is False
    assert snap.can_submit is False


def test_correct_answer_on_first_question(sample_engine: QuizEngine) -> None:
    record = _answer(sample_engine, "b")

    assert record.is_correct is True
    snap = sample_engine.snapshot()
    assert snap.score == 1
    assert snap.phase is QuizPhase.REVIEWED
    assert snap.is_correct is True


def test_wrong_answer_keeps_selection_for_review(sample_engine: QuizEngine) -> None:
    record = _answer(sample_engine, "a")

    assert record.is_correct is False
    snap = sample_engine.snapshot()
    assert snap.score == 0
    assert [(r.question_id, r.is_correct) for r in snap.history] == [("1", False)]
    assert snap.phase is QuizPhase.REVIEWED
    assert snap.selected_option_id == "a"
    assert snap.is_correct is False


def test_full_sample_run_is_perfect(sample_engine: QuizEngine) -> None:
    for position, option_id in enumerate(SAMPLE_CORRECT_ANSWERS, start=1):
        assert sample_engine.snapshot().current_position == position
        assert _answer(sample_engine, option_id).is_correct is True
        _assert_score_matches_history(sample_engine)
        sample_engine.next()

    snap = sample_engine.snapshot()
    assert snap.is_finished is True
    assert snap.score == 8
    assert snap.summary is SummaryCategory.PERFECT
    assert sample_engine.result().category is SummaryCategory.PERFECT


def test_always_correct_run_scores_total(sample_bank: QuestionBank) -> None:
    engine = QuizEngine(sample_bank)
    while not engine.snapshot().is_finished:
        _answer(engine, engine.snapshot().question.correct_option_id)
        engine.next()

    result = engine.result()
    assert result.score == result.total == len(sample_bank)
    assert result.incorrect_question_ids == ()


def test_reselection_replaces_previous(sample_engine: QuizEngine) -> None:
    sample_engine.select_option("a")
    sample_engine.select_option("c")
    sample_engine.select_option("c")

    assert sample_engine.snapshot().selected_option_id == "c"
    assert sample_engine.snapshot().can_submit is True


def test_invalid_selection_leaves_state_unchanged(sample_engine: QuizEngine) -> None:
    sample_engine.select_option("a")

    with pytest.raises(InvalidSelectionError):
        sample_engine.select_option("z")

    assert sample_engine.snapshot().selected_option_id == "a"


def test_submit_without_selection(sample_engine: QuizEngine) -> None:
    with pytest.raises(NoSelectionError):
        sample_engine.submit()

    _assert_initial(sample_engine)


def test_second_submit_is_rejected(sample_engine: QuizEngine) -> None:
    _answer(sample_engine, "b")

    with pytest.raises(AlreadySubmittedError):
        sample_engine.submit()

    snap = sample_engine.snapshot()
    assert len(snap.history) == 1
    assert snap.score == 1


def test_selection_after_submit_is_ignored(sample_engine: QuizEngine) -> None:
    _answer(sample_engine, "a")

    sample_engine.select_option("b")
    sample_engine.select_option("z")

    snap = sample_engine.snapshot()
    assert snap.selected_option_id == "a"
    assert snap.phase is QuizPhase.REVIEWED


def test_next_before_submit(sample_engine: QuizEngine) -> None:
    sample_engine.select_option("b")

    with pytest.raises(NotReviewedError):
        sample_engine.next()

    assert sample_engine.session.current_index == 0
    assert sample_engine.snapshot().selected_option_id == "b"


def test_next_clears_selection(sample_engine: QuizEngine) -> None:
    _answer(sample_engine, "b")

    assert sample_engine.next() is QuizPhase.ANSWERING

    snap = sample_engine.snapshot()
    assert snap.question.id == "2"
    assert snap.selected_option_id is None
    assert snap.is_submitted is False
    assert snap.is_correct is None


def test_single_question_bank_full_run(single_engine: QuizEngine) -> None:
    _answer(single_engine, "b")

    assert single_engine.next() is QuizPhase.FINISHED
    snap = single_engine.snapshot()
    assert snap.progress == (1, 1)
    assert snap.question is None
    assert snap.summary is SummaryCategory.PERFECT
    assert single_engine.session.current_index == 0


def test_finished_state_rejects_further_operations(single_engine: QuizEngine) -> None:
    _answer(single_engine, "a")
    single_engine.next()
    before = single_engine.snapshot()

    with pytest.raises(QuizFinishedError):
        single_engine.next()
    with pytest.raises(QuizFinishedError):
        single_engine.submit()
    single_engine.select_option("b")

    assert single_engine.snapshot() == before
    assert before.summary is SummaryCategory.KEEP_TRYING


def test_result_requires_finished(sample_engine: QuizEngine) -> None:
    with pytest.raises(QuizNotFinishedError):
        sample_engine.result()


@pytest.mark.parametrize("steps", [0, 1, 2, 3, 17])
def test_restart_returns_to_initial_snapshot(sample_engine: QuizEngine, steps: int) -> None:
    # steps 回ぶんの操作（選択 → 提出 → 次へ の繰り返し）
    actions = []
    for option_id in SAMPLE_CORRECT_ANSWERS:
        actions += [
            lambda o=option_id: sample_engine.select_option(o),
            sample_engine.submit,
            sample_engine.next,
        ]
    for action in actions[:steps]:
        action()

    sample_engine.restart()

    _assert_initial(sample_engine)


def test_restart_from_finished(single_engine: QuizEngine) -> None:
    _answer(single_engine, "b")
    single_engine.next()

    single_engine.restart()

    _assert_initial(single_engine)


def test_mixed_run_summary() -> None:
    bank = QuestionBank([make_question(str(i)) for i in range(5)])
    engine = QuizEngine(bank)

    for option_id in ["b", "b", "a", "b", "c"]:
        _answer(engine, option_id)
        _assert_score_matches_history(engine)
        engine.next()

    result = engine.result()
    assert result.score == 3
    assert result.category is SummaryCategory.GOOD
    assert result.incorrect_question_ids == ("2", "4")


def test_out_of_range_index_is_detected(sample_engine: QuizEngine) -> None:
    sample_engine.session.current_index = 99

    with pytest.raises(OutOfRangeIndexError):
        sample_engine.snapshot()


def test_session_to_dict(sample_engine: QuizEngine) -> None:
    _answer(sample_engine, "a")

    assert sample_engine.session.to_dict() == {
        "currentIndex": 0,
        "selectedOptionId": "a",
        "isSubmitted": True,
        "score": 0,
        "history": [{"questionId": "1", "selectedOptionId": "a", "isCorrect": False}],
    }
