"""
models.py
======================

文法クイズのデータモデル。

- Difficulty / GrammarPoint : 閉じた列挙型（値は表示用ラベル）
- Option / Explanation / Question : 不変のデータクラス

Question は生成時に以下を検証する:
- sentence に空欄マーカー "____" がちょうど 1 つ含まれること
- options の id が問題内で一意であること
- correct_option_id が options のいずれかを指していること

JSONL との相互変換 (from_dict / to_dict) は元データのキー名
(correctOptionId, commonMistake など) をそのまま使う。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import QuestionValidationError

BLANK_MARKER = "____"
BLANK_PLACEHOLDER = "________"


class Difficulty(Enum):
    BEGINNER = "初级"
    INTERMEDIATE = "中级"
    ADVANCED = "高级"

    @property
    def label(self) -> str:
        return self.value


class GrammarPoint(Enum):
    NON_FINITE = "非谓语动词"
    RELATIVE_CLAUSE = "定语从句"
    CONJUNCTIONS = "连词"
    TENSE = "时态"
    PREPOSITIONS = "介词"

    @property
    def label(self) -> str:
        return self.value


def _parse_enum(enum_cls, raw: Any, field_name: str):
    """メンバー名 (BEGINNER) と表示ラベル (初级) のどちらでも受け付ける。"""
    if isinstance(raw, enum_cls):
        return raw
    if isinstance(raw, str):
        if raw in enum_cls.__members__:
            return enum_cls[raw]
        for member in enum_cls:
            if member.value == raw:
                return member
    raise QuestionValidationError(f"{field_name} が不正です: {raw!r}")


def _require_str(data: Dict[str, Any], key: str, context: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise QuestionValidationError(f"{context}: {key} は空でない文字列が必要です")
    return value


@dataclass(frozen=True)
class Option:
    id: str
    text: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Option":
        if not isinstance(data, dict):
            raise QuestionValidationError(f"選択肢の形式が不正です: {data!r}")
        return cls(
            id=_require_str(data, "id", "option"),
            text=_require_str(data, "text", "option"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text}


@dataclass(frozen=True)
class Explanation:
    """解答後に表示する解説。採点には一切影響しない。"""

    rule: str
    example: str
    common_mistake: str
    correct_answer: str = ""
    review_link: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Explanation":
        if not isinstance(data, dict):
            raise QuestionValidationError(f"explanation の形式が不正です: {data!r}")
        link = data.get("reviewLink")
        return cls(
            rule=_require_str(data, "rule", "explanation"),
            example=_require_str(data, "example", "explanation"),
            common_mistake=_require_str(data, "commonMistake", "explanation"),
            correct_answer=data.get("correctAnswer") or "",
            review_link=link if isinstance(link, str) and link else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "correctAnswer": self.correct_answer,
            "rule": self.rule,
            "example": self.example,
            "commonMistake": self.common_mistake,
        }
        if self.review_link:
            d["reviewLink"] = self.review_link
        return d


@dataclass(frozen=True)
class Question:
    """
    空欄補充形式の四択（選択肢数は任意）文法問題 1 問。

    生成後は変更不可。不正なデータは __post_init__ で
    QuestionValidationError として弾く。
    """

    id: str
    sentence: str
    options: Tuple[Option, ...]
    correct_option_id: str
    difficulty: Difficulty
    category: GrammarPoint
    explanation: Explanation

    def __post_init__(self) -> None:
        # list で渡されても tuple に揃えて不変にする
        object.__setattr__(self, "options", tuple(self.options))

        if not self.id:
            raise QuestionValidationError("問題 id が空です")

        blanks = self.sentence.count(BLANK_MARKER)
        if blanks != 1:
            raise QuestionValidationError(
                f"問題 {self.id}: 空欄マーカーは 1 つだけ必要です（{blanks} 個）"
            )

        if not self.options:
            raise QuestionValidationError(f"問題 {self.id}: 選択肢がありません")

        ids = [o.id for o in self.options]
        if len(set(ids)) != len(ids):
            raise QuestionValidationError(f"問題 {self.id}: 選択肢 id が重複しています")

        if self.correct_option_id not in ids:
            raise QuestionValidationError(
                f"問題 {self.id}: 正解 {self.correct_option_id!r} が選択肢にありません"
            )

    # ------------------------------------------------------------
    # 参照ヘルパー
    # ------------------------------------------------------------
    @property
    def option_ids(self) -> List[str]:
        return [o.id for o in self.options]

    def has_option(self, option_id: Optional[str]) -> bool:
        return option_id in self.option_ids

    def option_text(self, option_id: Optional[str]) -> Optional[str]:
        for o in self.options:
            if o.id == option_id:
                return o.text
        return None

    @property
    def correct_option(self) -> Option:
        for o in self.options:
            if o.id == self.correct_option_id:
                return o
        # __post_init__ で保証済み
        raise QuestionValidationError(f"問題 {self.id}: 正解の選択肢がありません")

    def render_sentence(
        self,
        selected_option_id: Optional[str] = None,
        placeholder: str = BLANK_PLACEHOLDER,
    ) -> str:
        """空欄を選択中の選択肢テキスト（未選択ならプレースホルダ）で置き換える。"""
        text = self.option_text(selected_option_id) or placeholder
        return self.sentence.replace(BLANK_MARKER, text, 1)

    def sentence_parts(self) -> Tuple[str, str]:
        """空欄の前後の文字列。UI で空欄部分だけ装飾したい場合に使う。"""
        before, after = self.sentence.split(BLANK_MARKER, 1)
        return before, after

    # ------------------------------------------------------------
    # dict 変換
    # ------------------------------------------------------------
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        if not isinstance(data, dict):
            raise QuestionValidationError(f"問題の形式が不正です: {data!r}")

        qid = data.get("id")
        if isinstance(qid, int):
            qid = str(qid)
        if not isinstance(qid, str) or not qid:
            raise QuestionValidationError("問題 id がありません")

        raw_options = data.get("options")
        if not isinstance(raw_options, list):
            raise QuestionValidationError(f"問題 {qid}: options はリストが必要です")

        return cls(
            id=qid,
            sentence=_require_str(data, "sentence", f"問題 {qid}"),
            options=tuple(Option.from_dict(o) for o in raw_options),
            correct_option_id=_require_str(data, "correctOptionId", f"問題 {qid}"),
            difficulty=_parse_enum(Difficulty, data.get("difficulty"), "difficulty"),
            category=_parse_enum(GrammarPoint, data.get("category"), "category"),
            explanation=Explanation.from_dict(data.get("explanation")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sentence": self.sentence,
            "options": [o.to_dict() for o in self.options],
            "correctOptionId": self.correct_option_id,
            "difficulty": self.difficulty.name,
            "category": self.category.name,
            "explanation": self.explanation.to_dict(),
        }
