"""Project initialization.

Bootstraps the root folder of a frontend, backend or blockchain project and
records it in the manifest.  A project starts either from the built-in blank
skeleton (rendered with Jinja2) or from a git repository: one listed in the
YAML template catalogue, or any repository URL given by the operator.

Typical usage::

    initializer = ProjectInitializer(settings, store)
    await initializer.init_project(ProjectType.FRONTEND, "web", "blank")
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import Any

import yaml

from .config import Settings
from .exceptions import InvalidProjectFolder, ProjectAlreadyInitialized, TemplateCloneError
from .models import ProjectConfig, ProjectType
from .rendering import TemplateRenderer
from .store import ConfigStore
from .utils import console, print_success, run_command

BLANK_TEMPLATE = "blank"
CUSTOM_REPO_TEMPLATE = "custom-repo"


# ---------------------------------------------------------------------------
# Template catalogue
# ---------------------------------------------------------------------------


class TemplateCatalog:
    """Remote project templates, grouped by category, per project type.

    The YAML document has the shape::

        frontend:
          categories:
            react: [react-indie-stack]
          templates:
            react-indie-stack: https://github.com/...
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data = data or {}

    @classmethod
    def load(cls, path: str | Path) -> "TemplateCatalog":
        """Read the catalogue; a missing file is an empty catalogue."""
        file_path = Path(path)
        if not file_path.is_file():
            return cls()
        with file_path.open(encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{file_path} must contain a mapping of project types")
        return cls(data)

    def _section(self, project_type: ProjectType) -> dict[str, Any]:
        return self.data.get(project_type.value) or {}

    def categories(self, project_type: ProjectType) -> list[str]:
        return list((self._section(project_type).get("categories") or {}).keys())

    def templates(self, project_type: ProjectType, category: str | None = None) -> list[str]:
        """Template identifiers in *category*, or in every category."""
        categories = self._section(project_type).get("categories") or {}
        if category is not None:
            return list(categories.get(category) or [])
        names: list[str] = []
        for members in categories.values():
            names.extend(m for m in members or [] if m not in names)
        return names

    def repo_url(self, project_type: ProjectType, template: str) -> str | None:
        return (self._section(project_type).get("templates") or {}).get(template)


# ---------------------------------------------------------------------------
# Initializer
# ---------------------------------------------------------------------------


class ProjectInitializer:
    """Creates a project folder and its manifest record."""

    def __init__(
        self,
        settings: Settings,
        store: ConfigStore,
        renderer: TemplateRenderer | None = None,
        catalog: TemplateCatalog | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.renderer = renderer or TemplateRenderer(settings.templates_dir)
        self.catalog = catalog if catalog is not None else TemplateCatalog.load(settings.catalog_path)

    async def init_project(
        self,
        project_type: ProjectType,
        folder: str,
        template: str = BLANK_TEMPLATE,
        repo_url: str | None = None,
    ) -> ProjectConfig:
        """Create ``<root>/<folder>`` for *project_type* and record it.

        Args:
            project_type: Project type being initialized.
            folder: Project root folder, relative to the workspace root.
            template: ``"blank"``, ``"custom-repo"`` or a catalogue identifier.
            repo_url: Repository to clone when *template* is ``"custom-repo"``.

        Raises:
            InvalidProjectFolder: *folder* is blank or escapes the workspace root.
            ProjectAlreadyInitialized: The folder exists or the project type is
                already configured.
            TemplateCloneError: The repository is unknown or cannot be cloned.
        """
        folder = folder.strip().strip("/")
        if not folder:
            raise InvalidProjectFolder("Project folder name cannot be empty.")
        target = self.settings.root / folder
        root = self.settings.root.resolve()
        if root not in target.resolve().parents:
            raise InvalidProjectFolder(f"Project folder {folder!r} is outside {root}.")

        if self.store.read().project(project_type) is not None:
            raise ProjectAlreadyInitialized(
                f"A '{project_type.value}' project is already configured.",
                hint="Each project type can be initialized once per workspace.",
            )
        if target.exists():
            raise ProjectAlreadyInitialized(
                f"Folder {target} already exists.",
                hint="Choose another folder name or remove the existing folder.",
            )

        if template == BLANK_TEMPLATE:
            written = await self.renderer.render_tree(
                f"skeletons/{project_type.value}",
                target,
                {"name": folder, "project_type": project_type.value},
            )
            console.print(f"  [green]+[/green] {len(written)} skeleton files in {target}", highlight=False)
        else:
            await self.clone(self._repo_for(project_type, template, repo_url), target)

        project = await self.store.save_project(project_type, folder, template)
        print_success(f"{project_type.value.capitalize()} project '{folder}' initialized.")
        return project

    def _repo_for(self, project_type: ProjectType, template: str, repo_url: str | None) -> str:
        if template == CUSTOM_REPO_TEMPLATE:
            if not repo_url or not repo_url.strip():
                raise TemplateCloneError(
                    "A repository URL is required for the custom-repo template.",
                    hint="Pass --repo <url>.",
                )
            return repo_url.strip()
        url = self.catalog.repo_url(project_type, template)
        if url is None:
            available = ", ".join([BLANK_TEMPLATE, CUSTOM_REPO_TEMPLATE, *self.catalog.templates(project_type)])
            raise TemplateCloneError(
                f"Unknown {project_type.value} template {template!r}.",
                hint=f"Available templates: {available}",
            )
        return url

    async def clone(self, repo_url: str, target: Path) -> None:
        """Shallow-clone *repo_url* into *target* and drop its git history.

        A failed clone leaves no folder behind.
        """
        console.print(f"[dim]Cloning {repo_url} ...[/dim]")
        rc, _, stderr = await run_command(
            ["git", "clone", "--depth", "1", repo_url, str(target)],
            cwd=self.settings.root,
            timeout=600,
        )
        if rc != 0:
            await asyncio.to_thread(shutil.rmtree, target, True)
            raise TemplateCloneError(
                f"Failed to clone {repo_url}: {stderr or f'git exited with {rc}'}",
                hint="Check the repository URL and that git is installed.",
            )
        await asyncio.to_thread(shutil.rmtree, target / ".git", True)
