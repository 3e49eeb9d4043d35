"""
engine.py
======================

クイズ 1 回分の状態遷移を担当するモジュール。UI には一切依存しない。

状態 (QuizPhase):
    ANSWERING  : 現在の問題に未解答（選択肢の選択・変更が可能）
    REVIEWED   : 解答済み（解説を表示する段階、選択はロック）
    FINISHED   : 全問終了（終端状態）

遷移:
    ANSWERING --submit()--> REVIEWED --next()--> ANSWERING（次の問題）
                                     --next()--> FINISHED（最終問題のとき）
    任意の状態 --restart()--> ANSWERING（index 0、得点・履歴リセット）

不正な操作は QuizError のサブクラスを送出し、セッションは変更しない。
REVIEWED / FINISHED での select_option() は例外にせず無視する。

呼び出しは直列である前提（内部でロックは取らない）。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import structlog

from .errors import (
    AlreadySubmittedError,
    InvalidSelectionError,
    NoSelectionError,
    NotReviewedError,
    QuizFinishedError,
    QuizNotFinishedError,
)
from .history import AnswerHistory, AnswerRecord
from .models import Option, Question
from .question_bank import QuestionBank
from .scoring import QuizResult, SummaryCategory, summarize

logger = structlog.get_logger("grammar_quiz.engine")


class QuizPhase(Enum):
    ANSWERING = "answering"
    REVIEWED = "reviewed"
    FINISHED = "finished"


# ----------------------------------------------------------------------
#  セッション（可変の値オブジェクト）
# ----------------------------------------------------------------------
@dataclass
class QuizSession:
    bank: QuestionBank
    current_index: int = 0
    finished: bool = False
    selected_option_id: Optional[str] = None
    is_submitted: bool = False
    score: int = 0
    history: AnswerHistory = field(default_factory=AnswerHistory)

    @property
    def phase(self) -> QuizPhase:
        if self.finished:
            return QuizPhase.FINISHED
        if self.is_submitted:
            return QuizPhase.REVIEWED
        return QuizPhase.ANSWERING

    @property
    def total(self) -> int:
        return len(self.bank)

    @property
    def current_question(self) -> Question:
        return self.bank.question_at(self.current_index)

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.total - 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentIndex": None if self.finished else self.current_index,
            "selectedOptionId": self.selected_option_id,
            "isSubmitted": self.is_submitted,
            "score": self.score,
            "history": self.history.to_list(),
        }


# ----------------------------------------------------------------------
#  スナップショット（UI が描画に使う読み取り専用ビュー）
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class QuizSnapshot:
    phase: QuizPhase
    question: Optional[Question]
    options: Tuple[Option, ...]
    selected_option_id: Optional[str]
    is_submitted: bool
    is_correct: Optional[bool]
    score: int
    current_position: int
    total: int
    history: Tuple[AnswerRecord, ...]
    summary: Optional[SummaryCategory]

    @property
    def is_finished(self) -> bool:
        return self.phase is QuizPhase.FINISHED

    @property
    def progress(self) -> Tuple[int, int]:
        return self.current_position, self.total

    @property
    def progress_ratio(self) -> float:
        return self.current_position / self.total

    @property
    def can_submit(self) -> bool:
        return self.phase is QuizPhase.ANSWERING and self.selected_option_id is not None


# ----------------------------------------------------------------------
#  エンジン
# ----------------------------------------------------------------------
class QuizEngine:
    """
    QuizSession を所有し、公開操作を通じてのみ状態を変更する。

    主な機能:
    - select_option(): 選択肢の選択（ANSWERING のみ）
    - submit(): 解答の確定と採点
    - next(): 次の問題へ / 最終問題なら終了
    - restart(): 最初からやり直し
    - snapshot(): 描画用の読み取り専用ビュー
    - result(): 終了後の集計結果
    """

    def __init__(self, bank: QuestionBank):
        self.bank = bank
        self._session = QuizSession(bank=bank)

    @property
    def session(self) -> QuizSession:
        return self._session

    @property
    def phase(self) -> QuizPhase:
        return self._session.phase

    # ------------------------------------------------------------
    # 操作
    # ------------------------------------------------------------
    def select_option(self, option_id: str) -> None:
        s = self._session
        if s.phase is not QuizPhase.ANSWERING:
            logger.debug("selection_ignored", phase=s.phase.value, option_id=option_id)
            return

        question = s.current_question
        if not question.has_option(option_id):
            raise InvalidSelectionError(
                f"問題 {question.id} に選択肢 {option_id!r} はありません"
            )

        s.selected_option_id = option_id

    def submit(self) -> AnswerRecord:
        s = self._session
        phase = s.phase
        if phase is QuizPhase.FINISHED:
            raise QuizFinishedError("クイズはすでに終了しています")
        if phase is QuizPhase.REVIEWED:
            raise AlreadySubmittedError("この問題はすでに解答済みです")
        if s.selected_option_id is None:
            raise NoSelectionError("選択肢が選ばれていません")

        question = s.current_question
        is_correct = s.selected_option_id == question.correct_option_id

        record = s.history.record(
            question_id=question.id,
            selected_option_id=s.selected_option_id,
            is_correct=is_correct,
        )
        if is_correct:
            s.score += 1
        s.is_submitted = True

        logger.info(
            "answer_submitted",
            question_id=question.id,
            selected=s.selected_option_id,
            is_correct=is_correct,
            score=s.score,
        )
        return record

    def next(self) -> QuizPhase:
        s = self._session
        phase = s.phase
        if phase is QuizPhase.FINISHED:
            raise QuizFinishedError("クイズはすでに終了しています")
        if phase is QuizPhase.ANSWERING:
            raise NotReviewedError("解答前に次の問題へは進めません")

        if s.is_last_question:
            # index は最終問題のまま、終了マーカーだけ立てる
            s.finished = True
            logger.info("quiz_finished", score=s.score, total=s.total)
        else:
            s.current_index += 1
            s.selected_option_id = None
            s.is_submitted = False

        return s.phase

    def restart(self) -> None:
        self._session = QuizSession(bank=self.bank)
        logger.info("quiz_restarted", total=len(self.bank))

    # ------------------------------------------------------------
    # 参照
    # ------------------------------------------------------------
    def snapshot(self) -> QuizSnapshot:
        s = self._session
        phase = s.phase

        if phase is QuizPhase.FINISHED:
            question = None
            options: Tuple[Option, ...] = ()
            position = s.total
            summary: Optional[SummaryCategory] = summarize(s.score, s.total)
        else:
            question = s.current_question
            options = question.options
            position = s.current_index + 1
            summary = None

        is_correct: Optional[bool] = None
        if phase is QuizPhase.REVIEWED:
            is_correct = s.history.records[-1].is_correct

        return QuizSnapshot(
            phase=phase,
            question=question,
            options=options,
            selected_option_id=s.selected_option_id,
            is_submitted=s.is_submitted,
            is_correct=is_correct,
            score=s.score,
            current_position=position,
            total=s.total,
            history=s.history.records,
            summary=summary,
        )

    def result(self) -> QuizResult:
        s = self._session
        if s.phase is not QuizPhase.FINISHED:
            raise QuizNotFinishedError("クイズはまだ終了していません")
        return QuizResult(
            score=s.score,
            total=s.total,
            category=summarize(s.score, s.total),
            incorrect_question_ids=tuple(s.history.incorrect_ids()),
        )
