"""
refill.py
======================

Google Gemini に文法問題を生成させ、問題バンクへ補充するためのロジック。
CLI は tools/auto_refill.py。

要件:
- 利用可能なモデル一覧を API から取得し、優先モデル → 先頭の順で選ぶ
- 文法カテゴリを固定順で巡回して偏りなく生成する
- 生成結果（JSON）は Question.from_dict で検証し、不正なものは捨てる
- 429 (ResourceExhausted) が出たらその時点で打ち切る
"""

from __future__ import annotations

import json
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import google.generativeai as genai
import structlog
from google.api_core.exceptions import GoogleAPIError, ResourceExhausted

from .errors import QuestionValidationError
from .models import BLANK_MARKER, Difficulty, GrammarPoint, Question

logger = structlog.get_logger("grammar_quiz.refill")

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


# ------------------------------------------------------------
# モデル選択
# ------------------------------------------------------------
def init_gemini(api_key: str) -> None:
    if not api_key:
        raise RuntimeError("GEMINI_API_KEY が設定されていません。")
    genai.configure(api_key=api_key)


def list_available_models() -> List[str]:
    """
    generateContent に対応したモデル名を逆順ソートで返す。
    （新しいモデルほど名前が後ろに来ることが多いため）
    """
    names: List[str] = []
    for m in genai.list_models():
        if "generateContent" in getattr(m, "supported_generation_methods", []):
            names.append(m.name)
    return sorted(names, reverse=True)


def choose_model_with_fallback(preferred_model: Optional[str] = None) -> str:
    available = list_available_models()
    if not available:
        raise RuntimeError("利用可能な Gemini モデルが見つかりません。")

    if preferred_model and preferred_model in available:
        return preferred_model
    return available[0]


# ------------------------------------------------------------
# question_id の生成
# ------------------------------------------------------------
def generate_question_id(existing_ids: Iterable[str], now: Optional[datetime] = None) -> str:
    """
    既存 ID と衝突しない ID を生成する。

    形式:
        Q_AUTO_<yyyymmddHHMMss>_<seq>
    """
    now = now or datetime.now(timezone.utc)
    base = f"Q_AUTO_{now.strftime('%Y%m%d%H%M%S')}"
    id_set = set(existing_ids)
    seq = 1
    while True:
        qid = f"{base}_{seq:02d}"
        if qid not in id_set:
            return qid
        seq += 1


# ------------------------------------------------------------
# プロンプト
# ------------------------------------------------------------
def build_prompt(category: GrammarPoint, difficulty: Difficulty) -> str:
    return f"""
You write high quality English grammar fill-in-the-blank questions for Chinese-speaking learners.

Create exactly ONE multiple-choice question.

# Topic
- Grammar point: {category.name} ({category.label})
- Difficulty: {difficulty.name} ({difficulty.label})

# Rules
- The sentence is in English and contains the blank marker "{BLANK_MARKER}" exactly once.
- Exactly 4 options with ids "a", "b", "c", "d". Exactly one is correct.
- The explanation (rule, example, commonMistake) is written in Simplified Chinese.

# Output format (a single JSON object, nothing else)
{{
  "sentence": "... {BLANK_MARKER} ...",
  "options": [{{"id": "a", "text": "..."}}, {{"id": "b", "text": "..."}}, {{"id": "c", "text": "..."}}, {{"id": "d", "text": "..."}}],
  "correctOptionId": "a",
  "explanation": {{
    "correctAnswer": "...",
    "rule": "...",
    "example": "...",
    "commonMistake": "..."
  }}
}}
"""


# ------------------------------------------------------------
# 応答の解析
# ------------------------------------------------------------
def parse_generated_question(
    text: str,
    question_id: str,
    category: GrammarPoint,
    difficulty: Difficulty,
) -> Question:
    """
    モデル出力を Question に変換する。
    コードフェンス付きの JSON も受け付ける。不正なら QuestionValidationError。
    """
    cleaned = _FENCE_RE.sub("", text.strip())
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise QuestionValidationError(f"JSON として解析できません: {exc}") from exc

    if not isinstance(data, dict):
        raise QuestionValidationError("JSON オブジェクトではありません")

    data = dict(data)
    data["id"] = question_id
    data["category"] = category.name
    data["difficulty"] = difficulty.name
    return Question.from_dict(data)


# ------------------------------------------------------------
# 生成
# ------------------------------------------------------------
def plan_topics(
    count: int,
    category: Optional[GrammarPoint] = None,
    difficulty: Optional[Difficulty] = None,
) -> List[Dict[str, Any]]:
    """
    生成する (category, difficulty) の並びを決める。
    指定がなければ列挙順で巡回する。
    """
    categories = [category] if category else list(GrammarPoint)
    difficulties = [difficulty] if difficulty else list(Difficulty)
    return [
        {
            "category": categories[i % len(categories)],
            "difficulty": difficulties[i % len(difficulties)],
        }
        for i in range(count)
    ]


def generate_one_question(
    model_name: str,
    category: GrammarPoint,
    difficulty: Difficulty,
    question_id: str,
) -> Optional[Question]:
    """1 問生成する。API エラー・検証エラーの場合は None。"""
    prompt = build_prompt(category, difficulty)

    model = genai.GenerativeModel(model_name)
    response = model.generate_content(prompt)
    try:
        # ブロックされた応答・空の応答では .text が ValueError を送出する
        text = response.text.strip()
        return parse_generated_question(text, question_id, category, difficulty)
    except (ValueError, QuestionValidationError) as exc:
        logger.warning(
            "generated_question_rejected",
            model=model_name,
            category=category.name,
            error=str(exc),
        )
        return None


def generate_questions(
    count: int,
    existing_ids: Iterable[str],
    model_name: str,
    category: Optional[GrammarPoint] = None,
    difficulty: Optional[Difficulty] = None,
) -> List[Question]:
    """
    count 問の生成を試み、検証を通過した問題だけを返す。
    429 を受けた場合はそこで打ち切り、それまでの分を返す。
    """
    ids = set(existing_ids)
    created: List[Question] = []

    for topic in plan_topics(count, category, difficulty):
        qid = generate_question_id(ids)
        try:
            q = generate_one_question(
                model_name=model_name,
                category=topic["category"],
                difficulty=topic["difficulty"],
                question_id=qid,
            )
        except ResourceExhausted as exc:
            logger.warning("gemini_quota_exhausted", model=model_name, error=str(exc))
            break
        except GoogleAPIError as exc:
            logger.warning("gemini_api_error", model=model_name, error=str(exc))
            time.sleep(0.3)
            continue

        if q is None:
            continue

        ids.add(q.id)
        created.append(q)

    logger.info("refill_generated", requested=count, created=len(created))
    return created
