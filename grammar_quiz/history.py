"""
history.py
=====================================

1 回のクイズ実行（セッション）内の解答履歴を管理するモジュール。

- 解答 1 件につき AnswerRecord を 1 件だけ追加する（追記専用）
- 得点は常に「正解レコードの件数」と一致する
- 永続化はしない（セッションの再スタートで破棄される）
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Tuple


@dataclass(frozen=True)
class AnswerRecord:
    question_id: str
    selected_option_id: str
    is_correct: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "selectedOptionId": self.selected_option_id,
            "isCorrect": self.is_correct,
        }


class AnswerHistory:
    """
    解答履歴を保持するクラス。

    record() 以外に内容を変更する手段は持たない。
    同じ問題への 2 回目の記録は ValueError（エンジン側で事前に弾く想定）。
    """

    def __init__(self) -> None:
        self._records: List[AnswerRecord] = []

    # ---------------------------------------------------------
    # 履歴を追加
    # ---------------------------------------------------------
    def record(
        self,
        question_id: str,
        selected_option_id: str,
        is_correct: bool,
    ) -> AnswerRecord:
        if self.has_answered(question_id):
            raise ValueError(f"問題 {question_id} はすでに記録済みです")

        rec = AnswerRecord(
            question_id=question_id,
            selected_option_id=selected_option_id,
            is_correct=is_correct,
        )
        self._records.append(rec)
        return rec

    # ---------------------------------------------------------
    # 参照
    # ---------------------------------------------------------
    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[AnswerRecord]:
        return iter(self._records)

    @property
    def records(self) -> Tuple[AnswerRecord, ...]:
        return tuple(self._records)

    def has_answered(self, question_id: str) -> bool:
        return any(r.question_id == question_id for r in self._records)

    def correct_count(self) -> int:
        return sum(1 for r in self._records if r.is_correct)

    def incorrect_ids(self) -> List[str]:
        """間違えた問題の id（解答順）"""
        return [r.question_id for r in self._records if not r.is_correct]

    def to_list(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self._records]
