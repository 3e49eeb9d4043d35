from __future__ import annotations

from pathlib import Path

import pytest

from grammar_quiz.config import DEFAULT_BANK_PATH, AppConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GRAMMAR_QUIZ_CONFIG",
        "GRAMMAR_QUIZ_BANK_PATH",
        "GRAMMAR_QUIZ_LOG_LEVEL",
        "GEMINI_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    # ルートの .env を読まないように
    monkeypatch.setattr("grammar_quiz.config.ROOT_DIR", Path("/nonexistent"))


def test_defaults_without_file(tmp_path: Path) -> None:
    config = AppConfig.load(tmp_path / "missing.toml")

    assert config.question_bank_path == DEFAULT_BANK_PATH
    assert config.strict_bank is True
    assert config.log_level == "INFO"
    assert config.theme == "light"
    assert config.gemini_api_key == ""


def test_toml_values(tmp_path: Path) -> None:
    cfg = tmp_path / "config.toml"
    cfg.write_text(
        "\n".join(
            [
                "[app]",
                'title = "Grammar"',
                'theme = "dark"',
                'log_level = "DEBUG"',
                "[bank]",
                'path = "data/bank.jsonl"',
                "strict = false",
                "[gemini]",
                'preferred_model = "models/gemini-pro"',
            ]
        ),
        encoding="utf-8",
    )

    config = AppConfig.load(cfg)

    assert config.app_title == "Grammar"
    assert config.theme == "dark"
    assert config.log_level == "DEBUG"
    assert config.question_bank_path == tmp_path.resolve() / "data" / "bank.jsonl"
    assert config.strict_bank is False
    assert config.preferred_model == "models/gemini-pro"


def test_environment_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GRAMMAR_QUIZ_BANK_PATH", str(tmp_path / "env.jsonl"))
    monkeypatch.setenv("GRAMMAR_QUIZ_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("GEMINI_API_KEY", "secret")

    config = AppConfig.load(tmp_path / "missing.toml")

    assert config.question_bank_path == tmp_path / "env.jsonl"
    assert config.log_level == "WARNING"
    assert config.gemini_api_key == "secret"
    assert "secret" not in repr(config)


def test_unknown_theme_falls_back_to_light() -> None:
    assert AppConfig(theme="neon").theme == "light"


def test_config_path_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg = tmp_path / "alt.toml"
    cfg.write_text('[app]\ntheme = "blue"\n', encoding="utf-8")
    monkeypatch.setenv("GRAMMAR_QUIZ_CONFIG", str(cfg))

    assert AppConfig.load().theme == "blue"


def test_explicit_path_wins_over_config_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("GRAMMAR_QUIZ_CONFIG", str(tmp_path / "missing.toml"))
    cfg = tmp_path / "config.toml"
    cfg.write_text('[app]\ntheme = "dark"\n', encoding="utf-8")

    assert AppConfig.load(cfg).theme == "dark"
