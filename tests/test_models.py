from __future__ import annotations

import pytest

from grammar_quiz.errors import QuestionValidationError
from grammar_quiz.models import Difficulty, GrammarPoint, Question

from tests.quiz_fixtures import make_question, question_dict


def test_from_dict_builds_question() -> None:
    q = make_question()

    assert q.id == "q1"
    assert q.option_ids == ["a", "b", "c"]
    assert q.correct_option.text == "goes"
    assert q.difficulty is Difficulty.BEGINNER
    assert q.category is GrammarPoint.TENSE
    assert q.explanation.review_link is None


def test_enum_accepts_display_label() -> None:
    q = make_question(difficulty="高级", category="介词")

    assert q.difficulty is Difficulty.ADVANCED
    assert q.category is GrammarPoint.PREPOSITIONS


def test_integer_id_is_normalized_to_str() -> None:
    assert make_question(qid=7).id == "7"


@pytest.mark.parametrize(
    "overrides",
    [
        {"sentence": "No blank here."},
        {"sentence": "Two ____ blanks ____ here."},
        {"correctOptionId": "z"},
        {"options": [{"id": "a", "text": "x"}, {"id": "a", "text": "y"}]},
        {"options": []},
        {"difficulty": "EXPERT"},
        {"category": "SPELLING"},
        {"explanation": {"rule": "r", "example": "e"}},
        {"explanation": None},
    ],
)
def test_invalid_question_is_rejected(overrides) -> None:
    with pytest.raises(QuestionValidationError):
        Question.from_dict(question_dict(**overrides))


def test_options_are_stored_as_tuple() -> None:
    q = make_question()
    assert isinstance(q.options, tuple)


def test_render_sentence_fills_blank() -> None:
    q = make_question()

    assert q.render_sentence("b") == "She goes to school every day."
    assert q.render_sentence(None) == "She ________ to school every day."
    assert q.render_sentence("zz", placeholder="...") == "She ... to school every day."


def test_sentence_parts_split_on_blank() -> None:
    assert make_question().sentence_parts() == ("She ", " to school every day.")


def test_to_dict_uses_member_names_and_keeps_review_link() -> None:
    data = question_dict()
    data["explanation"]["reviewLink"] = "https://example.com/grammar"

    out = Question.from_dict(data).to_dict()

    assert out["difficulty"] == "BEGINNER"
    assert out["category"] == "TENSE"
    assert out["correctOptionId"] == "b"
    assert out["explanation"]["reviewLink"] == "https://example.com/grammar"
    assert Question.from_dict(out) == Question.from_dict(data)


@pytest.mark.parametrize("raw", [None, ""])
def test_missing_correct_answer_becomes_empty_string(raw) -> None:
    data = question_dict()
    data["explanation"]["correctAnswer"] = raw

    q = Question.from_dict(data)

    assert q.explanation.correct_answer == ""
    assert q.to_dict()["explanation"]["correctAnswer"] == ""


def test_absent_correct_answer_becomes_empty_string() -> None:
    data = question_dict()
    del data["explanation"]["correctAnswer"]

    assert Question.from_dict(data).explanation.correct_answer == ""
