"""Shared pytest fixtures for the Skaya test suite.

Provides reusable fixtures for:
- A temporary workspace with Settings and a ConfigStore
- A manifest with frontend, backend and blockchain projects initialized
- A scripted completion provider standing in for the AI service
- A ready-to-use ComponentPipeline wired to all of the above
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

import pytest

from skaya.config import Settings
from skaya.exceptions import AIProviderError
from skaya.pipeline import ComponentPipeline
from skaya.store import ConfigStore
from skaya.writer import FileWriter


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------

@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty workspace root (auto-cleanup)."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def settings(workspace: Path) -> Settings:
    """Settings rooted at the temporary workspace, bundled templates."""
    return Settings(root=workspace)


@pytest.fixture
def store(settings: Settings) -> ConfigStore:
    return ConfigStore(settings.manifest_path, settings.activity_log_path)


PROJECT_FOLDERS = {"frontend": "web", "backend": "api", "blockchain": "chain"}


def write_manifest(path: Path, document: dict[str, Any]) -> None:
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")


@pytest.fixture
def initialized_store(store: ConfigStore) -> ConfigStore:
    """Store whose manifest already has every project type initialized."""
    write_manifest(
        store.path,
        {
            ptype: {
                "name": folder,
                "template": "blank",
                "createdAt": "2024-01-01T00:00:00+00:00",
                "components": {},
            }
            for ptype, folder in PROJECT_FOLDERS.items()
        },
    )
    return store


# ---------------------------------------------------------------------------
# Scripted completion provider
# ---------------------------------------------------------------------------

_TARGET_RE = re.compile(r"^Target file name: (.+)$", re.MULTILINE)


class FakeProvider:
    """Completion provider answering from a table keyed by target file name.

    Args:
        responses: ``{target_file_name: text}``; files not listed get a
            generated ``// generated <file>`` body.
        fail_on: Target file names whose request raises.
        error: Exception raised for files in *fail_on*.
    """

    name = "fake"

    def __init__(
        self,
        responses: dict[str, str] | None = None,
        fail_on: set[str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.responses = responses or {}
        self.fail_on = fail_on or set()
        self.error = error or AIProviderError("provider unavailable")
        self.calls: list[dict[str, str]] = []

    async def complete(self, system: str, user: str) -> str:
        match = _TARGET_RE.search(user)
        target = match.group(1).strip() if match else ""
        self.calls.append({"system": system, "user": user, "target": target})
        if target in self.fail_on:
            raise self.error
        return self.responses.get(target, f"// generated {target}\n")

    @property
    def targets(self) -> list[str]:
        return [call["target"] for call in self.calls]


@pytest.fixture
def make_provider() -> type[FakeProvider]:
    """The FakeProvider class, for tests that need custom responses or failures."""
    return FakeProvider


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def pipeline(settings: Settings, initialized_store: ConfigStore, fake_provider: FakeProvider) -> ComponentPipeline:
    """Pipeline on an initialized workspace, using :class:`FakeProvider` for AI runs."""
    return ComponentPipeline(
        settings,
        store=initialized_store,
        provider_factory=lambda _ai: fake_provider,
        writer=FileWriter(quiet=True),
    )
