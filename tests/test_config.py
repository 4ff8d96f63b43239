"""Unit tests for runtime settings (skaya.config)."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from skaya.config import AISettings, Settings

_ENV_VARS = (
    "SKAYA_ROOT",
    "SKAYA_TEMPLATES_DIR",
    "SKAYA_AI_PROVIDER",
    "SKAYA_AI_MODEL",
    "SKAYA_AI_BASE_URL",
    "SKAYA_AI_TIMEOUT",
    "SKAYA_AI_TEMPERATURE",
    "SKAYA_AI_MAX_TOKENS",
    "SKAYA_AI_PARALLEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


class TestAISettings:
    @pytest.mark.unit
    def test_defaults(self):
        ai = AISettings()
        assert ai.provider == "gemini"
        assert ai.resolved_model == "gemini-2.0-flash"
        assert ai.parallel is True

    @pytest.mark.unit
    def test_explicit_model_wins(self):
        assert AISettings(provider="ollama", model="llama3").resolved_model == "llama3"
        assert AISettings(provider="openai").resolved_model == "gpt-4o-mini"

    @pytest.mark.unit
    def test_validation(self):
        with pytest.raises(ValidationError):
            AISettings(provider="mistral")
        with pytest.raises(ValidationError):
            AISettings(timeout=1)


class TestSettings:
    @pytest.mark.unit
    def test_derived_paths(self, tmp_path):
        settings = Settings(root=tmp_path)
        assert settings.manifest_path == tmp_path / "skaya.config.json"
        assert settings.activity_log_path == tmp_path / "skaya.log"
        assert settings.component_templates_dir.is_dir()
        assert (settings.shared_templates_dir / "frontend" / "api").is_dir()
        assert settings.catalog_path.is_file()

    @pytest.mark.unit
    def test_from_env_defaults(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        settings = Settings.from_env()
        assert settings.root == Path.cwd()
        assert settings.ai == AISettings()

    @pytest.mark.unit
    def test_from_env_overrides(self, clean_env, tmp_path):
        clean_env.setenv("SKAYA_ROOT", str(tmp_path))
        clean_env.setenv("SKAYA_AI_PROVIDER", "OpenAI")
        clean_env.setenv("SKAYA_AI_MODEL", "gpt-x")
        clean_env.setenv("SKAYA_AI_TIMEOUT", "45")
        clean_env.setenv("SKAYA_AI_TEMPERATURE", "0.7")
        clean_env.setenv("SKAYA_AI_MAX_TOKENS", "512")
        clean_env.setenv("SKAYA_AI_PARALLEL", "no")

        settings = Settings.from_env()
        assert settings.root == tmp_path
        assert settings.ai.provider == "openai"
        assert settings.ai.model == "gpt-x"
        assert settings.ai.timeout == 45
        assert settings.ai.temperature == 0.7
        assert settings.ai.max_tokens == 512
        assert settings.ai.parallel is False

    @pytest.mark.unit
    def test_explicit_root_beats_env(self, clean_env, tmp_path):
        clean_env.setenv("SKAYA_ROOT", "/somewhere/else")
        assert Settings.from_env(root=tmp_path).root == tmp_path

    @pytest.mark.unit
    def test_invalid_env_value(self, clean_env):
        clean_env.setenv("SKAYA_AI_TIMEOUT", "soon")
        with pytest.raises(ValueError):
            Settings.from_env()
