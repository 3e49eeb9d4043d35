"""
ui.py
======================

Streamlit ベースの UI コンポーネントをまとめたモジュール。

責務:
- スマートフォンを主ターゲットとしたレイアウトとスタイル
- 問題画面の描画（進捗・バッジ・空欄付きの文・選択肢・解説）
- 結果画面の描画（得点・総評・問題ごとの正誤表）

ここでは「見た目」と「ユーザー操作の入力」だけを扱う。
状態遷移は QuizEngine に任せ、本モジュールは QuizSnapshot を読むだけ。

戻り値として「何が押されたか」を返す。
"""

from __future__ import annotations

from html import escape
from typing import Any, Dict, Optional

import pandas as pd
import streamlit as st

from .engine import QuizSnapshot
from .models import BLANK_PLACEHOLDER, Difficulty
from .question_bank import QuestionBank
from .scoring import QuizResult, SummaryCategory

# ----------------------------------------------------------------------
#  テーマ定義
# ----------------------------------------------------------------------


THEMES: Dict[str, Dict[str, str]] = {
    "light": {
        "bg": "#f8fafc",
        "text": "#0f172a",
        "surface": "#f1f5f9",
        "surface_alt": "#ffffff",
        "border": "#e2e8f0",
        "primary": "#4f46e5",
        "correct": "#10b981",
        "incorrect": "#f43f5e",
    },
    "dark": {
        "bg": "#000000",
        "text": "#f5f5f7",
        "surface": "#1c1c1e",
        "surface_alt": "#2c2c2e",
        "border": "#3a3a3c",
        "primary": "#818cf8",
        "correct": "#30d158",
        "incorrect": "#ff453a",
    },
    "blue": {
        "bg": "#f5f9ff",
        "text": "#0a1a2f",
        "surface": "#e8f0ff",
        "surface_alt": "#ffffff",
        "border": "#c9d6e8",
        "primary": "#0066cc",
        "correct": "#1f9d55",
        "incorrect": "#d64545",
    },
}

DIFFICULTY_BADGE: Dict[Difficulty, str] = {
    Difficulty.BEGINNER: "correct",
    Difficulty.INTERMEDIATE: "primary",
    Difficulty.ADVANCED: "incorrect",
}

# 総評カテゴリごとの表示文言（表示側の関心事なので自由に差し替えてよい）
ENCOURAGEMENTS: Dict[SummaryCategory, str] = {
    SummaryCategory.PERFECT: "太棒了！你真是个语法小达人！🌟",
    SummaryCategory.GREAT: "做得好！离满分只有一步之遥！🚀",
    SummaryCategory.GOOD: "不错哦！继续加油练习！👍",
    SummaryCategory.KEEP_TRYING: "别灰心！每一个错误都是进步的机会。💪",
}


# ----------------------------------------------------------------------
#  CSS 生成
# ----------------------------------------------------------------------
def _generate_css(theme: Dict[str, str]) -> str:
    """テーマに応じたグローバル CSS を生成する。"""

    return f"""
    <style>
    html, body {{
        background: {theme['bg']};
        color: {theme['text']};
        -webkit-text-size-adjust: 100%;
        touch-action: manipulation;
    }}

    .gq-header {{
        display: flex;
        justify-content: space-between;
        align-items: center;
        gap: 0.5rem;
        margin-bottom: 0.5rem;
    }}

    .gq-app-title {{
        font-weight: 700;
        font-size: 1.15rem;
    }}

    .gq-progress-label {{
        font-size: 0.8rem;
        font-weight: 600;
        opacity: 0.6;
    }}

    .gq-tags {{
        display: flex;
        flex-wrap: wrap;
        gap: 0.25rem;
        font-size: 0.75rem;
        margin: 0.5rem 0;
    }}

    .gq-tag {{
        padding: 0.1rem 0.6rem;
        border-radius: 999px;
        background: {theme['surface']};
        border: 1px solid {theme['border']};
        font-weight: 600;
    }}

    .gq-question-box {{
        background: {theme['surface_alt']};
        padding: 1.25rem;
        border-radius: 16px;
        border: 1px solid {theme['border']};
        font-size: 1.4rem;
        line-height: 1.7;
        margin: 0.5rem 0 1rem 0;
    }}

    .gq-blank {{
        display: inline-block;
        min-width: 5rem;
        padding: 0 0.5rem;
        margin: 0 0.25rem;
        border-bottom: 2px solid {theme['border']};
        text-align: center;
    }}

    .gq-blank-empty {{
        font-style: italic;
        opacity: 0.4;
    }}

    .gq-blank-selected {{
        border-color: {theme['primary']};
        color: {theme['primary']};
    }}

    .gq-blank-correct {{
        border-color: {theme['correct']};
        color: {theme['correct']};
        background: {theme['correct']}22;
    }}

    .gq-blank-incorrect {{
        border-color: {theme['incorrect']};
        color: {theme['incorrect']};
        background: {theme['incorrect']}22;
    }}

    .gq-explanation-head {{
        padding: 0.6rem 1rem;
        border-radius: 10px 10px 0 0;
        color: #ffffff;
        font-weight: 700;
    }}

    .gq-explanation-box {{
        padding: 1rem;
        border-radius: 0 0 10px 10px;
        background: {theme['surface_alt']};
        border: 1px solid {theme['border']};
        font-size: 0.95rem;
        line-height: 1.6;
    }}

    .gq-score {{
        font-size: 3rem;
        font-weight: 900;
        color: {theme['primary']};
        text-align: center;
    }}

    .gq-footer {{
        margin-top: 1.5rem;
        text-align: center;
        font-size: 0.8rem;
        opacity: 0.5;
    }}
    </style>
    """


# ----------------------------------------------------------------------
#  テーマ関連
# ----------------------------------------------------------------------
def _ensure_theme(default: str = "light") -> str:
    """セッションに theme キーを用意し、現在のテーマキーを返す。"""
    if "theme" not in st.session_state:
        st.session_state["theme"] = default
    theme_key = st.session_state.get("theme", default)
    if theme_key not in THEMES:
        theme_key = "light"
        st.session_state["theme"] = "light"
    return theme_key


def inject_theme(default: str = "light") -> Dict[str, str]:
    theme = THEMES[_ensure_theme(default)]
    st.markdown(_generate_css(theme), unsafe_allow_html=True)
    return theme


def render_theme_selector(default: str = "light") -> str:
    """テーマ切替ラジオを表示し、選択されたテーマキーを返す。

    default は初回表示時のテーマ（config.toml の [app] theme）。
    """
    options = list(THEMES.keys())
    labels = {"light": "Light", "dark": "Dark", "blue": "Blue"}

    current = _ensure_theme(default)
    selected = st.radio(
        "テーマ",
        options,
        index=options.index(current),
        horizontal=True,
        format_func=lambda k: labels.get(k, k),
    )
    st.session_state["theme"] = selected
    return selected


# ----------------------------------------------------------------------
#  部品
# ----------------------------------------------------------------------
def _sentence_html(snapshot: QuizSnapshot) -> str:
    """空欄を選択中の選択肢（または下線のプレースホルダ）に置き換えた HTML。"""
    q = snapshot.question
    before, after = q.sentence_parts()
    selected_text = q.option_text(snapshot.selected_option_id)

    if selected_text is None:
        css = "gq-blank gq-blank-empty"
        fill = BLANK_PLACEHOLDER
    elif not snapshot.is_submitted:
        css = "gq-blank gq-blank-selected"
        fill = selected_text
    elif snapshot.is_correct:
        css = "gq-blank gq-blank-correct"
        fill = selected_text
    else:
        css = "gq-blank gq-blank-incorrect"
        fill = selected_text

    return (
        f"<div class='gq-question-box'>{escape(before)}"
        f"<span class='{css}'>{escape(fill)}</span>"
        f"{escape(after)}</div>"
    )


def _option_label(snapshot: QuizSnapshot, option_id: str, text: str) -> str:
    if not snapshot.is_submitted:
        return f"● {text}" if option_id == snapshot.selected_option_id else text
    if option_id == snapshot.question.correct_option_id:
        return f"✅ {text}"
    if option_id == snapshot.selected_option_id:
        return f"❌ {text}"
    return text


def _render_explanation(snapshot: QuizSnapshot, theme: Dict[str, str]) -> None:
    q = snapshot.question
    exp = q.explanation

    if snapshot.is_correct:
        head_color, head_text = theme["correct"], "太棒了！回答正确。"
    else:
        head_color, head_text = theme["incorrect"], "别灰心，看看解析吧。"

    st.markdown(
        f"<div class='gq-explanation-head' style='background:{head_color}'>"
        f"ℹ️ {head_text}</div>",
        unsafe_allow_html=True,
    )

    body = [
        "<div class='gq-explanation-box'>",
        f"<b>正确答案</b>：{escape(q.correct_option.text)}<br><br>",
        f"<b>语法规则</b><br>{escape(exp.rule)}<br><br>",
        f"<b>例句</b><br><i>“{escape(exp.example)}”</i><br><br>",
        f"<b>常见错误</b><br>{escape(exp.common_mistake)}",
        "</div>",
    ]
    st.markdown("".join(body), unsafe_allow_html=True)

    if exp.review_link:
        st.markdown(f"[了解更多语法知识 ↗]({exp.review_link})")


# ----------------------------------------------------------------------
#  公開 API: クイズページの描画
# ----------------------------------------------------------------------
def render_quiz_page(
    snapshot: QuizSnapshot,
    *,
    app_title: str,
    theme: Dict[str, str],
) -> Dict[str, Any]:
    """
    クイズページ全体を描画し、ユーザー操作の結果を返す。

    引数:
        snapshot:
            QuizEngine.snapshot() の戻り値（FINISHED 以外）。
        app_title:
            ヘッダーに表示するタイトル。
        theme:
            inject_theme() の戻り値。

    戻り値:
        {
          "selected_option": Optional[str],   # 新たに押された選択肢 id (なければ None)
          "clicked_submit": bool,
          "clicked_next": bool,
        }
    """
    selected_option: Optional[str] = None
    clicked_submit = False
    clicked_next = False

    q = snapshot.question
    position, total = snapshot.progress

    # ----------------------------------------
    # ヘッダー
    # ----------------------------------------
    st.markdown(
        "<div class='gq-header'>"
        f"<div class='gq-app-title'>📘 {escape(app_title)}</div>"
        f"<div class='gq-progress-label'>第 {position} 题 / 共 {total} 题</div>"
        "</div>",
        unsafe_allow_html=True,
    )
    st.progress(snapshot.progress_ratio)

    badge_color = theme[DIFFICULTY_BADGE[q.difficulty]]
    st.markdown(
        "<div class='gq-tags'>"
        f"<span class='gq-tag' style='color:{badge_color}'>{q.difficulty.label}</span>"
        f"<span class='gq-tag'>{q.category.label}</span>"
        "</div>",
        unsafe_allow_html=True,
    )

    # ----------------------------------------
    # 問題文
    # ----------------------------------------
    st.markdown(_sentence_html(snapshot), unsafe_allow_html=True)

    # ----------------------------------------
    # 選択肢（2 列）
    # ----------------------------------------
    cols = st.columns(2)
    for idx, option in enumerate(snapshot.options):
        with cols[idx % 2]:
            if st.button(
                _option_label(snapshot, option.id, option.text),
                key=f"gq_option_{q.id}_{option.id}",
                disabled=snapshot.is_submitted,
                use_container_width=True,
            ):
                selected_option = option.id

    # ----------------------------------------
    # 提出 / 次へ
    # ----------------------------------------
    if not snapshot.is_submitted:
        if st.button(
            "提交答案 ›",
            key="gq_submit",
            type="primary",
            disabled=not snapshot.can_submit,
            use_container_width=True,
        ):
            clicked_submit = True
    else:
        label = "查看结果 →" if position == total else "下一题 →"
        if st.button(label, key="gq_next", type="primary", use_container_width=True):
            clicked_next = True

        # ----------------------------------------
        # 解説（解答済みの場合のみ）
        # ----------------------------------------
        _render_explanation(snapshot, theme)

    render_footer()

    return {
        "selected_option": selected_option,
        "clicked_submit": clicked_submit,
        "clicked_next": clicked_next,
    }


# ----------------------------------------------------------------------
#  公開 API: 結果ページの描画
# ----------------------------------------------------------------------
def build_result_table(snapshot: QuizSnapshot, bank: QuestionBank) -> pd.DataFrame:
    """解答履歴を問題ごとの正誤表にする。"""
    rows = []
    for no, rec in enumerate(snapshot.history, start=1):
        q = bank.get(rec.question_id)
        if q is None:
            continue
        rows.append(
            {
                "#": no,
                "题目": q.render_sentence(rec.selected_option_id),
                "你的答案": q.option_text(rec.selected_option_id),
                "正确答案": q.correct_option.text,
                "结果": "✅" if rec.is_correct else "❌",
            }
        )
    return pd.DataFrame(rows, columns=["#", "题目", "你的答案", "正确答案", "结果"])


def render_results_page(
    snapshot: QuizSnapshot,
    result: QuizResult,
    bank: QuestionBank,
) -> Dict[str, Any]:
    """
    結果ページを描画する。

    戻り値:
        {"clicked_restart": bool}
    """
    st.markdown("## 🏆 练习完成！")
    st.write(ENCOURAGEMENTS[result.category])

    st.markdown(
        f"<div class='gq-score'>{result.score}"
        f"<span style='font-size:1.5rem; opacity:0.5;'>/{result.total}</span></div>",
        unsafe_allow_html=True,
    )
    st.caption(f"你的最终得分 · 正确率 {result.percent}%")

    table = build_result_table(snapshot, bank)
    if not table.empty:
        st.dataframe(table, hide_index=True, use_container_width=True)

    clicked_restart = st.button(
        "🔄 再试一次", key="gq_restart", type="primary", use_container_width=True
    )

    render_footer()
    return {"clicked_restart": clicked_restart}


def render_footer() -> None:
    st.markdown(
        "<div class='gq-footer'>© 语法大闯关互动学习系统。专为英语学习者打造。</div>",
        unsafe_allow_html=True,
    )
