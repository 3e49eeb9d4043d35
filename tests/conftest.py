from __future__ import annotations

import pytest

from grammar_quiz.config import DEFAULT_BANK_PATH
from grammar_quiz.engine import QuizEngine
from grammar_quiz.question_bank import QuestionBank, clear_cache
from tests.quiz_fixtures import make_question


@pytest.fixture(autouse=True)
def _clear_bank_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def sample_bank() -> QuestionBank:
    return QuestionBank.from_jsonl(DEFAULT_BANK_PATH)


@pytest.fixture
def sample_engine(sample_bank: QuestionBank) -> QuizEngine:
    return QuizEngine(sample_bank)


@pytest.fixture
def single_engine() -> QuizEngine:
    return QuizEngine(QuestionBank([make_question("only")]))
