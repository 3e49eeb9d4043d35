"""
config.py
=========

アプリ全体で利用する設定値を一元管理する。
Streamlit UI、問題バンクのパス、ログレベル、Gemini API（refill ツール）など
すべてこのクラスを通じて取得する。

読み込み順（後勝ち）:
1. AppConfig のデフォルト値
2. ルートの config.toml（[app] / [bank] / [gemini]）
3. 環境変数 GRAMMAR_QUIZ_BANK_PATH / GRAMMAR_QUIZ_LOG_LEVEL / GEMINI_API_KEY

config.toml の場所は環境変数 GRAMMAR_QUIZ_CONFIG で差し替えられる。

本ファイルは app.py と tools/auto_refill.py の共通設定でもある。
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import toml


# ------------------------------------------------------------
# 基本パス定義
# ------------------------------------------------------------

ROOT_DIR = Path(__file__).resolve().parent.parent
BANK_DIR = ROOT_DIR / "bank"
DEFAULT_BANK_PATH = BANK_DIR / "question_bank.jsonl"
DEFAULT_CONFIG_PATH = ROOT_DIR / "config.toml"

THEME_KEYS = ("light", "dark", "blue")


# ------------------------------------------------------------
# AppConfig
# ------------------------------------------------------------

@dataclass
class AppConfig:
    """
    アプリ設定クラス。

    - 問題バンクのパスと読み込みモード
    - ログレベル
    - UI のタイトル・テーマ
    - Gemini APIキーと優先モデル（問題補充用）
    """

    # ---------- 問題バンク ----------
    question_bank_path: Path = DEFAULT_BANK_PATH
    strict_bank: bool = True

    # ---------- UI ----------
    app_title: str = "语法大闯关"
    theme: str = "light"

    # ---------- ログ ----------
    log_level: str = "INFO"

    # ---------- Gemini ----------
    gemini_api_key: str = field(default="", repr=False)
    preferred_model: Optional[str] = None

    def __post_init__(self) -> None:
        self.question_bank_path = Path(self.question_bank_path)
        if self.theme not in THEME_KEYS:
            self.theme = "light"

    # ============================================================
    # 読み込み
    # ============================================================

    @classmethod
    def load(cls, path: Union[str, Path, None] = None) -> "AppConfig":
        """
        config.toml と環境変数から設定を組み立てる。
        ファイルがなければデフォルト値のまま。
        """
        if path is None:
            path = os.environ.get("GRAMMAR_QUIZ_CONFIG") or DEFAULT_CONFIG_PATH
        cfg_path = Path(path)
        data: Dict[str, Any] = {}
        if cfg_path.exists():
            data = toml.load(cfg_path)

        app = data.get("app", {})
        bank = data.get("bank", {})
        gemini = data.get("gemini", {})

        kwargs: Dict[str, Any] = {}
        if "title" in app:
            kwargs["app_title"] = str(app["title"])
        if "theme" in app:
            kwargs["theme"] = str(app["theme"])
        if "log_level" in app:
            kwargs["log_level"] = str(app["log_level"])
        if "path" in bank:
            bank_path = Path(bank["path"])
            # 相対パスは config.toml の場所を基準にする
            if not bank_path.is_absolute():
                bank_path = cfg_path.resolve().parent / bank_path
            kwargs["question_bank_path"] = bank_path
        if "strict" in bank:
            kwargs["strict_bank"] = bool(bank["strict"])
        if gemini.get("preferred_model"):
            kwargs["preferred_model"] = str(gemini["preferred_model"])

        # 環境変数による上書き
        env_bank = os.environ.get("GRAMMAR_QUIZ_BANK_PATH")
        if env_bank:
            kwargs["question_bank_path"] = Path(env_bank)
        env_level = os.environ.get("GRAMMAR_QUIZ_LOG_LEVEL")
        if env_level:
            kwargs["log_level"] = env_level

        kwargs["gemini_api_key"] = _load_api_key()

        return cls(**kwargs)


# ============================================================
# 内部関数
# ============================================================

def _load_api_key() -> str:
    """
    Streamlit Cloud / GitHub Actions / ローカルすべてで
    GEMINI_API_KEY が使えるようにする。
    """

    key = os.environ.get("GEMINI_API_KEY")
    if key:
        return key

    # ローカル開発などで .env を使いたい場合にも対応
    env_path = ROOT_DIR / ".env"
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            if line.startswith("GEMINI_API_KEY="):
                return line.split("=", 1)[1].strip()

    return ""  # キーなし → refill ツールは起動できない
