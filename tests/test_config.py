"""Configuration loading tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from wardrobe_app.config import AppConfig

ENV_KEYS = [
    "APP_ENV",
    "APP_CONFIG_PATH",
    "GOOGLE_API_KEY",
    "MAX_MATCHES",
    "MAX_OUTFITS",
    "DEFAULT_MAX_USES",
    "FALLBACK_SCORING",
    "MODEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = AppConfig.from_env()
    assert config.model == "gemini-1.5-flash"
    assert config.api_key is None
    assert (config.max_matches, config.max_outfits, config.default_max_uses) == (6, 3, 10)
    assert config.fallback_scoring == "rule"


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "staging.yaml"
    config_file.write_text('# staging\nmax_matches: 4\nfallback_scoring: "randomized"\nmodel: gemini-pro\n')
    monkeypatch.setenv("APP_CONFIG_PATH", str(config_file))
    monkeypatch.setenv("MODEL", "gemini-1.5-pro")
    monkeypatch.setenv("GOOGLE_API_KEY", "secret")

    config = AppConfig.from_env()

    assert config.max_matches == 4
    assert config.fallback_scoring == "randomized"
    assert config.model == "gemini-1.5-pro"
    assert config.api_key == "secret"


def test_invalid_values_rejected() -> None:
    with pytest.raises(ValueError):
        AppConfig(fallback_scoring="coin-flip")
    with pytest.raises(ValueError):
        AppConfig(default_max_uses=0)
    with pytest.raises(ValueError):
        AppConfig(max_matches=0)
    with pytest.raises(ValueError):
        AppConfig(max_outfits=-1)


@pytest.mark.parametrize(
    "key, value",
    [("DEFAULT_MAX_USES", "0"), ("MAX_MATCHES", "-2"), ("MAX_OUTFITS", "three")],
)
def test_bad_numeric_overrides_are_rejected(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(key, value)
    with pytest.raises(ValueError):
        AppConfig.from_env()


def test_blank_numeric_override_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAX_MATCHES", "  ")
    assert AppConfig.from_env().max_matches == 6
