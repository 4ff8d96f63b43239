"""Configuration store for ``skaya.config.json``.

The store is a thin service over one JSON document shaped
``{ projectType: ProjectConfig }``.  Every operation re-reads the file and
writes the whole merged document back; nothing is cached between calls.

There is no file locking: two concurrent invocations against the same
workspace can lose updates (last writer wins).  Callers keep the window small
by reading immediately before writing, never across an AI request.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .exceptions import ConfigurationNotFound, ProjectAlreadyInitialized
from .models import (
    ComponentConfig,
    ComponentType,
    Manifest,
    ProjectConfig,
    ProjectType,
)
from .utils import append_json_line, load_json, print_warning, save_json, utc_now_iso


class ConfigStore:
    """Read/write access to the workspace manifest."""

    def __init__(self, path: str | Path, activity_log: str | Path | None = None) -> None:
        self.path = Path(path)
        self.activity_log = Path(activity_log) if activity_log else None

    # ------------------------------------------------------------------
    # Whole-document access
    # ------------------------------------------------------------------

    def read(self) -> Manifest:
        """Return the current manifest.

        A missing file is an empty manifest.  An unreadable or invalid file is
        reported and also treated as empty, so the next write replaces it.
        """
        if not self.path.exists():
            return Manifest({})
        try:
            return Manifest.model_validate(load_json(self.path))
        except (json.JSONDecodeError, ValueError, ValidationError, OSError) as exc:
            print_warning(
                f"Could not parse {self.path.name} ({exc.__class__.__name__}: {exc}); "
                "continuing with an empty configuration."
            )
            return Manifest({})

    async def write(self, manifest: Manifest) -> None:
        """Persist the whole manifest."""
        await save_json(manifest.to_json_dict(), self.path)

    # ------------------------------------------------------------------
    # Project records
    # ------------------------------------------------------------------

    def project(self, project_type: ProjectType) -> ProjectConfig:
        """Return the ProjectConfig for *project_type* or raise."""
        project = self.read().project(project_type)
        if project is None:
            raise ConfigurationNotFound(
                f"No '{project_type.value}' project configured in {self.path.name}."
            )
        return project

    async def save_project(
        self, project_type: ProjectType, name: str, template: str = "custom"
    ) -> ProjectConfig:
        """Record a freshly initialized project type."""
        manifest = self.read()
        if manifest.project(project_type) is not None:
            raise ProjectAlreadyInitialized(
                f"A '{project_type.value}' project is already configured in {self.path.name}."
            )
        project = ProjectConfig(name=name, template=template or "custom", created_at=utc_now_iso())
        manifest.root[project_type.value] = project
        await self.write(manifest)
        return project

    # ------------------------------------------------------------------
    # Component records
    # ------------------------------------------------------------------

    async def save_component(
        self,
        project_type: ProjectType,
        name: str,
        details: ComponentConfig,
        clear: tuple[str, ...] = (),
    ) -> ComponentConfig:
        """Merge *details* into the component record and persist.

        Fields already stored but not set on *details* survive (including
        unknown keys), except the fields named in *clear*, which are dropped.
        ``usedBy`` is never taken from *details*; it belongs to the reference
        graph.
        """
        manifest = self.read()
        project = manifest.project(project_type)
        if project is None:
            raise ConfigurationNotFound(
                f"No '{project_type.value}' project configured in {self.path.name}."
            )

        existing = project.components.get(name)
        merged: dict[str, Any] = existing.to_json_dict() if existing else {}
        incoming = details.model_dump(mode="json", by_alias=True, exclude_unset=True, exclude_none=True)
        incoming.pop("usedBy", None)
        for field_name in clear:
            merged.pop(ComponentConfig.model_fields[field_name].alias or field_name, None)
        merged.update(incoming)
        merged["usedBy"] = list(existing.used_by) if existing else []
        merged.setdefault("savedAt", utc_now_iso())

        record = ComponentConfig.model_validate(merged)
        project.components[name] = record
        await self.write(manifest)
        return record

    def component(self, project_type: ProjectType, name: str) -> ComponentConfig | None:
        return self.read().component(project_type, name)

    def components(self, project_type: ProjectType) -> dict[str, ComponentConfig]:
        project = self.read().project(project_type)
        return dict(project.components) if project else {}

    # ------------------------------------------------------------------
    # Activity log
    # ------------------------------------------------------------------

    async def log_activity(
        self,
        action: str,
        project_type: ProjectType,
        component_type: ComponentType,
        name: str,
        **extra: Any,
    ) -> None:
        """Append one JSON line describing a create/update to the activity log."""
        if self.activity_log is None:
            return
        entry = {
            "timestamp": utc_now_iso(),
            "action": action,
            "projectType": project_type.value,
            "componentType": component_type.value,
            "name": name,
            **extra,
        }
        await append_json_line(entry, self.activity_log)
