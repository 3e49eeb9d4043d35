"""
app.py
======================

文法クイズアプリ（Streamlit）エントリーポイント。

特徴:
- 問題画面 → 解説 → 次の問題 → 結果画面 の一本道
- 状態遷移はすべて QuizEngine に任せ、ここでは操作を仲介するだけ
- サイドバーで文法カテゴリの絞り込み・テーマ切替・やり直し

前提:
- bank/question_bank.jsonl に問題が格納されている
- config.toml があれば読み込む（なければデフォルト設定）
"""

from __future__ import annotations

from typing import Optional

import streamlit as st
import structlog

from grammar_quiz.config import AppConfig
from grammar_quiz.engine import QuizEngine
from grammar_quiz.errors import QuizError
from grammar_quiz.logging import configure_logging
from grammar_quiz.models import GrammarPoint
from grammar_quiz.question_bank import QuestionBank, load_question_bank
from grammar_quiz.ui import (
    inject_theme,
    render_quiz_page,
    render_results_page,
    render_theme_selector,
)

logger = structlog.get_logger("grammar_quiz.app")

ALL_CATEGORIES = "ALL"


# ----------------------------------------------------------------------
#  設定・問題バンク（プロセス内で共有）
# ----------------------------------------------------------------------
@st.cache_resource(show_spinner=False)
def get_app_config() -> AppConfig:
    config = AppConfig.load()
    configure_logging(config.log_level)
    return config


def get_bank(config: AppConfig, category: Optional[GrammarPoint]) -> QuestionBank:
    bank = load_question_bank(config.question_bank_path, strict=config.strict_bank)
    if category is None:
        return bank
    return bank.by_category(category)


# ----------------------------------------------------------------------
#  QuizEngine のラッパー（ブラウザセッションごとに 1 つ）
# ----------------------------------------------------------------------
def get_engine(config: AppConfig, category_key: str) -> QuizEngine:
    """
    セッションに保持した QuizEngine を返す。
    カテゴリ絞り込みが変わった場合は新しいエンジンを作る。
    """
    if (
        "quiz_engine" not in st.session_state
        or st.session_state.get("quiz_category") != category_key
    ):
        category = None if category_key == ALL_CATEGORIES else GrammarPoint[category_key]
        st.session_state["quiz_engine"] = QuizEngine(get_bank(config, category))
        st.session_state["quiz_category"] = category_key
        logger.info("quiz_engine_created", category=category_key)
    return st.session_state["quiz_engine"]  # type: ignore[return-value]


# ----------------------------------------------------------------------
#  サイドバー
# ----------------------------------------------------------------------
def render_sidebar(config: AppConfig) -> str:
    """カテゴリ選択キーを返す。"""
    bank = load_question_bank(config.question_bank_path, strict=config.strict_bank)
    available = [g for g in GrammarPoint if any(q.category is g for q in bank)]

    keys = [ALL_CATEGORIES] + [g.name for g in available]
    labels = {ALL_CATEGORIES: "全部"}
    labels.update({g.name: g.label for g in available})

    with st.sidebar:
        st.markdown("### 练习范围")
        category_key = st.selectbox(
            "语法点",
            keys,
            format_func=lambda k: labels.get(k, k),
        )
        st.write("---")
        render_theme_selector(config.theme)
        st.write("---")
        if st.button("🔄 重新开始", key="gq_sidebar_restart", use_container_width=True):
            st.session_state["restart_requested"] = True

    return category_key


# ----------------------------------------------------------------------
#  メイン
# ----------------------------------------------------------------------
def main() -> None:
    config = get_app_config()

    st.set_page_config(
        page_title=config.app_title,
        page_icon="📘",
        layout="centered",
    )

    category_key = render_sidebar(config)
    engine = get_engine(config, category_key)
    theme = inject_theme(config.theme)

    if st.session_state.pop("restart_requested", False):
        engine.restart()

    try:
        snapshot = engine.snapshot()

        if snapshot.is_finished:
            ui_result = render_results_page(snapshot, engine.result(), engine.bank)
            if ui_result["clicked_restart"]:
                engine.restart()
                st.rerun()
            return

        ui_result = render_quiz_page(snapshot, app_title=config.app_title, theme=theme)

        if ui_result["selected_option"] is not None:
            engine.select_option(ui_result["selected_option"])
            st.rerun()
        elif ui_result["clicked_submit"]:
            engine.submit()
            st.rerun()
        elif ui_result["clicked_next"]:
            engine.next()
            st.rerun()
    except QuizError as exc:
        logger.warning("quiz_operation_rejected", error=str(exc))
        st.warning(str(exc))


if __name__ == "__main__":
    main()
