"""
tools/auto_refill.py
===========================

bank/question_bank.jsonl に Gemini で生成した文法問題を追加するスクリプト。

主な役割:
- config.toml / 環境変数から設定を読む (AppConfig)
- 既存の問題バンクを読み込み、ID の衝突を避ける
- 文法カテゴリを巡回しながら Gemini に問題生成を依頼
- 検証を通過した問題だけを JSONL 形式で追記

前提:
- 環境変数 GEMINI_API_KEY に Google Gemini API キーが設定されている
- pip で `google-generativeai` がインストールされていること
"""

from __future__ import annotations

import argparse
import json
from typing import List, Optional

from grammar_quiz.config import AppConfig
from grammar_quiz.logging import configure_logging
from grammar_quiz.models import Difficulty, GrammarPoint
from grammar_quiz.question_bank import append_questions, load_question_bank
from grammar_quiz.refill import (
    choose_model_with_fallback,
    generate_questions,
    init_gemini,
)


def refill_questions(
    config: AppConfig,
    count: int,
    category: Optional[GrammarPoint] = None,
    difficulty: Optional[Difficulty] = None,
    preferred_model: Optional[str] = None,
    dry_run: bool = False,
) -> int:
    """
    問題を count 問生成してバンクに追加し、追加件数を返す。

    dry_run=True の場合、生成内容を標準出力に表示するだけで
    question_bank.jsonl には書き込まない。
    """
    bank = load_question_bank(config.question_bank_path, strict=config.strict_bank)
    model_name = choose_model_with_fallback(preferred_model or config.preferred_model)

    new_questions = generate_questions(
        count=count,
        existing_ids=bank.ids,
        model_name=model_name,
        category=category,
        difficulty=difficulty,
    )

    if not new_questions:
        print("新規問題は生成されませんでした。")
        return 0

    if dry_run:
        print(f"[DRY RUN] {len(new_questions)}問生成:")
        for q in new_questions:
            print(json.dumps(q.to_dict(), ensure_ascii=False))
        return 0

    added = append_questions(config.question_bank_path, new_questions)
    print(f"{added}問を {config.question_bank_path} に追記しました。")
    return added


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="文法クイズ用 question_bank 自動補充スクリプト",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=5,
        help="生成する問題数（デフォルト: 5）",
    )
    parser.add_argument(
        "--category",
        choices=[g.name for g in GrammarPoint],
        default=None,
        help="文法カテゴリを固定する（省略時は巡回）",
    )
    parser.add_argument(
        "--difficulty",
        choices=[d.name for d in Difficulty],
        default=None,
        help="難易度を固定する（省略時は巡回）",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="優先的に使いたい Gemini モデル名（任意）",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="問題バンクには書き込まず、生成結果のみ標準出力に表示する",
    )
    args = parser.parse_args(argv)

    config = AppConfig.load()
    configure_logging(config.log_level)
    init_gemini(config.gemini_api_key)

    refill_questions(
        config,
        count=args.count,
        category=GrammarPoint[args.category] if args.category else None,
        difficulty=Difficulty[args.difficulty] if args.difficulty else None,
        preferred_model=args.model,
        dry_run=args.dry_run,
    )


if __name__ == "__main__":
    main()
