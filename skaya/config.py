"""Skaya runtime settings.

Centralised, typed configuration for the scaffolding core. All settings use
Pydantic v2 models so they can be validated at construction time and built
from environment variables without boiler-plate.

These are *tool* settings; the per-workspace manifest describing generated
projects and components lives in :mod:`skaya.store`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

_PACKAGE_TEMPLATES = Path(__file__).parent / "templates"

AIProviderName = Literal["gemini", "openai", "ollama"]

DEFAULT_MODELS: dict[str, str] = {
    "gemini": "gemini-2.0-flash",
    "openai": "gpt-4o-mini",
    "ollama": "qwen2.5-coder:14b",
}


class AISettings(BaseModel):
    """Configuration for the text-completion provider used in AI mode."""

    provider: AIProviderName = Field(default="gemini")
    model: str = Field(default="", description="Model name; empty means the provider default")
    base_url: str = Field(default="", description="Override the provider endpoint")
    timeout: int = Field(default=120, ge=10, description="Per-request timeout in seconds")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, ge=64)
    parallel: bool = Field(
        default=True,
        description="Fan out dependent-file requests once the primary file is generated",
    )

    @property
    def resolved_model(self) -> str:
        return self.model or DEFAULT_MODELS[self.provider]


class Settings(BaseModel):
    """Global Skaya configuration.

    Instances are created once by the CLI entry point (or by tests) and
    passed to every service that touches the filesystem.
    """

    root: Path = Field(default_factory=Path.cwd, description="Workspace root")
    manifest_name: str = Field(default="skaya.config.json")
    activity_log_name: str = Field(default="skaya.log")
    templates_dir: Path = Field(default=_PACKAGE_TEMPLATES)
    ai: AISettings = Field(default_factory=AISettings)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def manifest_path(self) -> Path:
        """Path to the workspace manifest JSON file."""
        return self.root / self.manifest_name

    @property
    def activity_log_path(self) -> Path:
        """Path to the JSON-lines activity log."""
        return self.root / self.activity_log_name

    @property
    def component_templates_dir(self) -> Path:
        """Root of the ``<projectType>/<componentType>/`` template tree."""
        return self.templates_dir / "components"

    @property
    def shared_templates_dir(self) -> Path:
        """Support files copied once per project (e.g. API request helpers)."""
        return self.templates_dir / "shared"

    @property
    def catalog_path(self) -> Path:
        """YAML catalogue of remote project templates."""
        return self.templates_dir / "catalog.yaml"

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, root: Path | None = None) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            SKAYA_ROOT, SKAYA_TEMPLATES_DIR, SKAYA_AI_PROVIDER, SKAYA_AI_MODEL,
            SKAYA_AI_BASE_URL, SKAYA_AI_TIMEOUT, SKAYA_AI_TEMPERATURE,
            SKAYA_AI_MAX_TOKENS, SKAYA_AI_PARALLEL.
        """
        ai_kwargs: dict[str, Any] = {}
        if os.environ.get("SKAYA_AI_PROVIDER"):
            ai_kwargs["provider"] = os.environ["SKAYA_AI_PROVIDER"].lower()
        if os.environ.get("SKAYA_AI_MODEL"):
            ai_kwargs["model"] = os.environ["SKAYA_AI_MODEL"]
        if os.environ.get("SKAYA_AI_BASE_URL"):
            ai_kwargs["base_url"] = os.environ["SKAYA_AI_BASE_URL"]
        if os.environ.get("SKAYA_AI_TIMEOUT"):
            ai_kwargs["timeout"] = int(os.environ["SKAYA_AI_TIMEOUT"])
        if os.environ.get("SKAYA_AI_TEMPERATURE"):
            ai_kwargs["temperature"] = float(os.environ["SKAYA_AI_TEMPERATURE"])
        if os.environ.get("SKAYA_AI_MAX_TOKENS"):
            ai_kwargs["max_tokens"] = int(os.environ["SKAYA_AI_MAX_TOKENS"])
        if os.environ.get("SKAYA_AI_PARALLEL"):
            ai_kwargs["parallel"] = os.environ["SKAYA_AI_PARALLEL"].lower() in ("1", "true", "yes")

        kwargs: dict[str, Any] = {"ai": AISettings(**ai_kwargs)}
        if root is not None:
            kwargs["root"] = root
        elif os.environ.get("SKAYA_ROOT"):
            kwargs["root"] = Path(os.environ["SKAYA_ROOT"])
        if os.environ.get("SKAYA_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["SKAYA_TEMPLATES_DIR"])
        return cls(**kwargs)
