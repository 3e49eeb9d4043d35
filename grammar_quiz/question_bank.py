"""
question_bank.py
===========================

JSONL 形式の問題バンクを読み込み、出題順の固定された
不変の問題列 (QuestionBank) として提供するモジュール。

目的:
- 1 行 1 問の JSONL を Question に変換する
- strict=True では壊れた行で即座に例外（行番号付き）
- strict=False では壊れた行をスキップしてログに残す
- 同じパスの多回ロードはプロセス内キャッシュで高速化
- refill ツール向けの書き出し・追記
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import structlog

from .config import DEFAULT_BANK_PATH
from .errors import EmptyBankError, OutOfRangeIndexError, QuestionValidationError
from .models import Difficulty, GrammarPoint, Question

logger = structlog.get_logger("grammar_quiz.question_bank")

PathLike = Union[str, Path]


class QuestionBank:
    """
    出題順に並んだ Question の不変シーケンス。

    - 0 件は EmptyBankError
    - id の重複は QuestionValidationError
    - 位置 0..N-1 でアクセスする（範囲外は OutOfRangeIndexError）
    """

    def __init__(self, questions: Iterable[Question]):
        items: Tuple[Question, ...] = tuple(questions)
        if not items:
            raise EmptyBankError("問題バンクが空です。")

        seen = set()
        for q in items:
            if q.id in seen:
                raise QuestionValidationError(f"問題 id が重複しています: {q.id}")
            seen.add(q.id)

        self._questions = items
        self._by_id: Dict[str, Question] = {q.id: q for q in items}

    # ------------------------------------------------------------
    # シーケンスとしての振る舞い
    # ------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __repr__(self) -> str:
        return f"QuestionBank({len(self)} questions)"

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    @property
    def ids(self) -> List[str]:
        return [q.id for q in self._questions]

    def question_at(self, index: int) -> Question:
        if not 0 <= index < len(self._questions):
            raise OutOfRangeIndexError(
                f"index {index} は範囲外です (0..{len(self._questions) - 1})"
            )
        return self._questions[index]

    def get(self, question_id: str) -> Optional[Question]:
        """id で 1問取得"""
        return self._by_id.get(question_id)

    # ------------------------------------------------------------
    # 絞り込み（順序は保持）
    # ------------------------------------------------------------
    def by_category(self, category: GrammarPoint) -> "QuestionBank":
        """文法カテゴリで絞り込む。該当なしなら EmptyBankError。"""
        return QuestionBank(q for q in self._questions if q.category is category)

    def by_difficulty(self, difficulty: Difficulty) -> "QuestionBank":
        return QuestionBank(q for q in self._questions if q.difficulty is difficulty)

    def search(self, keyword: str) -> List[Question]:
        """
        問題文・選択肢・文法ルールを対象とする簡易全文検索。
        """
        keyword = keyword.strip()
        if not keyword:
            return []

        keyword_lower = keyword.lower()

        results = []
        for q in self._questions:
            t = (
                q.sentence.lower(),
                " ".join(o.text for o in q.options).lower(),
                q.explanation.rule.lower(),
            )
            if any(keyword_lower in part for part in t):
                results.append(q)

        return results

    # ------------------------------------------------------------
    # JSONL 入出力
    # ------------------------------------------------------------
    @classmethod
    def from_jsonl(cls, path: PathLike, strict: bool = True) -> "QuestionBank":
        return cls(_read_jsonl(Path(path), strict=strict))

    def to_jsonl(self, path: PathLike) -> None:
        write_questions(path, self._questions)


# ----------------------------------------------------------------------
#  JSONL 読み込み
# ----------------------------------------------------------------------
def _read_jsonl(path: Path, strict: bool) -> List[Question]:
    if not path.exists():
        raise FileNotFoundError(f"問題バンクが見つかりません: {path}")

    questions: List[Question] = []

    with path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue

            try:
                data = json.loads(line)
                questions.append(Question.from_dict(data))
            except (json.JSONDecodeError, QuestionValidationError) as exc:
                if strict:
                    raise QuestionValidationError(f"{path}:{lineno}: {exc}") from exc
                logger.warning(
                    "question_bank_line_skipped",
                    path=str(path),
                    line=lineno,
                    error=str(exc),
                )

    logger.info("question_bank_loaded", path=str(path), questions=len(questions))
    return questions


def write_questions(path: PathLike, questions: Sequence[Question]) -> None:
    """問題列を JSONL として上書き保存する。"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        for q in questions:
            f.write(json.dumps(q.to_dict(), ensure_ascii=False))
            f.write("\n")


def append_questions(path: PathLike, questions: Sequence[Question]) -> int:
    """問題列を JSONL に追記し、追記した件数を返す。"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        for q in questions:
            f.write(json.dumps(q.to_dict(), ensure_ascii=False))
            f.write("\n")
    return len(questions)


# ----------------------------------------------------------------------
#  グローバルキャッシュ（Pythonプロセス中は維持される）
# ----------------------------------------------------------------------
_BANK_CACHE: Dict[Path, QuestionBank] = {}


def load_question_bank(
    path: Optional[PathLike] = None,
    force_reload: bool = False,
    strict: bool = True,
) -> QuestionBank:
    """
    question_bank.jsonl を読み込み QuestionBank を返す。

    - path 省略時は bank/question_bank.jsonl
    - force_reload=True の場合のみ再読込
    """
    resolved = Path(path or DEFAULT_BANK_PATH).resolve()

    if not force_reload and resolved in _BANK_CACHE:
        return _BANK_CACHE[resolved]

    bank = QuestionBank.from_jsonl(resolved, strict=strict)
    _BANK_CACHE[resolved] = bank
    return bank


def clear_cache() -> None:
    _BANK_CACHE.clear()
