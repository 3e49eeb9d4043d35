"""
grammar_quiz パッケージ
======================

このパッケージは、英文法クイズアプリの内部ロジックを提供する。

主な役割:
- データモデルと検証（models）
- 例外の一覧（errors）
- JSONL 問題バンクの読み込み（question_bank）
- 解答履歴（history）
- 総評カテゴリの判定（scoring）
- クイズの状態遷移（engine）
- 設定管理（config）とログ設定（logging）
- Gemini による問題補充（refill）
- UI コンポーネント（ui）

app.py は Streamlit UI のみを担当し、内部ロジックはすべて本パッケージから呼ぶ。
ui / refill は streamlit / google-generativeai を読み込むため、ここでは import しない。
"""

from .config import AppConfig
from .engine import QuizEngine, QuizPhase, QuizSession, QuizSnapshot
from .errors import (
    AlreadySubmittedError,
    EmptyBankError,
    InvalidSelectionError,
    NoSelectionError,
    NotReviewedError,
    OutOfRangeIndexError,
    QuestionValidationError,
    QuizError,
    QuizFinishedError,
    QuizNotFinishedError,
)
from .history import AnswerHistory, AnswerRecord
from .models import Difficulty, Explanation, GrammarPoint, Option, Question
from .question_bank import QuestionBank, load_question_bank
from .scoring import QuizResult, SummaryCategory, categorize, summarize

__all__ = [
    "AppConfig",
    "QuizEngine",
    "QuizPhase",
    "QuizSession",
    "QuizSnapshot",
    "QuizError",
    "QuestionValidationError",
    "EmptyBankError",
    "OutOfRangeIndexError",
    "InvalidSelectionError",
    "NoSelectionError",
    "AlreadySubmittedError",
    "NotReviewedError",
    "QuizFinishedError",
    "QuizNotFinishedError",
    "AnswerHistory",
    "AnswerRecord",
    "Difficulty",
    "GrammarPoint",
    "Option",
    "Explanation",
    "Question",
    "QuestionBank",
    "load_question_bank",
    "QuizResult",
    "SummaryCategory",
    "categorize",
    "summarize",
]
