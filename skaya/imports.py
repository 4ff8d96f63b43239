"""Dependency selection and import injection.

:class:`DependencySelector` scans the folders of previously generated
components so the operator can pick the ones a new component depends on;
:func:`inject_imports` adds the matching import statements to the primary
file of the new component.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from . import registry
from .models import ComponentImport, ComponentType, ProjectType
from .resolver import find_primary_file
from .store import ConfigStore
from .substitution import component_name
from .utils import console, print_warning

if TYPE_CHECKING:
    from .prompting import Prompter


_SCRIPT_SUFFIXES = (".ts", ".tsx", ".js", ".jsx")
_PRAGMA_RE = re.compile(r"^pragma\s+solidity[^\n]*\n", re.MULTILINE)


@dataclass
class ImportSelection:
    """Outcome of a dependency selection."""

    import_existing: bool = False
    selections: list[ComponentImport] = field(default_factory=list)


class DependencySelector:
    """Finds existing components and lets the operator choose dependencies."""

    def __init__(self, root: str | Path, store: ConfigStore, prompter: "Prompter | None" = None) -> None:
        self.root = Path(root)
        self.store = store
        self.prompter = prompter

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def folder(self, project_type: ProjectType, component_type: ComponentType) -> Path | None:
        project = self.store.read().project(project_type)
        if project is None:
            return None
        return self.root / project.name / "src" / registry.folder_for(component_type)

    def scan(self, project_type: ProjectType, component_type: ComponentType) -> list[ComponentImport]:
        """List existing components of *component_type* found on disk.

        A missing project or folder yields an empty list.  Sub-folders whose
        primary file cannot be located are ignored.
        """
        folder = self.folder(project_type, component_type)
        if folder is None or not folder.is_dir():
            return []

        found: list[ComponentImport] = []
        for child in sorted(p for p in folder.iterdir() if p.is_dir()):
            try:
                name = component_name(registry.component_name_from_directory(component_type, child.name))
            except ValueError:
                continue
            primary = find_primary_file(child, component_type, name)
            if primary is None:
                continue
            try:
                data = primary.read_text(encoding="utf-8")
            except OSError as exc:
                print_warning(f"Could not read {primary}: {exc}")
                continue
            found.append(
                ComponentImport(
                    name=name,
                    data=data,
                    file_location=str(primary.resolve()),
                    component_type=component_type,
                )
            )
        return found

    def available(self, project_type: ProjectType, component_type: ComponentType) -> list[ComponentImport]:
        """Existing components of every type *component_type* may import."""
        found: list[ComponentImport] = []
        for source in registry.import_sources(component_type):
            found.extend(self.scan(project_type, source))
        return found

    def refresh(
        self,
        project_type: ProjectType,
        component_type: ComponentType,
        imports: list[ComponentImport],
    ) -> list[ComponentImport]:
        """Reload the primary source of imports read back from the manifest.

        Imports that already carry ``data`` are kept as they are.  A dependency
        whose primary file is gone keeps its manifest record, without source.
        """
        if all(dep.data for dep in imports):
            return list(imports)

        on_disk = {c.name: c for c in self.available(project_type, component_type)}
        refreshed: list[ComponentImport] = []
        for dep in imports:
            current = on_disk.get(dep.name)
            if dep.data:
                refreshed.append(dep)
            elif current is not None:
                refreshed.append(current)
            else:
                print_warning(f"Source of dependency '{dep.name}' not found on disk.")
                refreshed.append(dep)
        return refreshed

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_imports(
        self,
        project_type: ProjectType,
        component_type: ComponentType,
        names: list[str] | None = None,
        exclude: str | None = None,
    ) -> ImportSelection:
        """Choose dependencies for a new or updated component.

        Args:
            project_type: Project the component belongs to.
            component_type: Type of the component being generated.
            names: Explicit dependency names.  When ``None`` the prompter (if
                any) is asked; an empty list selects nothing.
            exclude: Component name never offered (the component itself).

        Returns:
            An :class:`ImportSelection`; an empty selection is valid.
        """
        candidates = [
            c for c in self.available(project_type, component_type) if c.name != exclude
        ]

        if names is not None:
            wanted = []
            for raw in names:
                try:
                    wanted.append(component_name(raw))
                except ValueError:
                    print_warning(f"Ignoring invalid dependency name {raw!r}.")
            by_name = {c.name: c for c in candidates}
            selections = []
            for name in wanted:
                if name in by_name:
                    if by_name[name] not in selections:
                        selections.append(by_name[name])
                else:
                    print_warning(f"No existing component named '{name}' to import.")
            return ImportSelection(import_existing=bool(selections), selections=selections)

        if self.prompter is None:
            return ImportSelection()

        if not candidates:
            console.print("[dim]No existing components found to import.[/dim]")
            return ImportSelection()

        if not self.prompter.confirm(
            f"Would you like to import existing {component_type.value} dependencies?",
            default=False,
        ):
            return ImportSelection()

        chosen = self.prompter.checkbox(
            "Select components to import:", [c.name for c in candidates]
        )
        selections = [c for c in candidates if c.name in chosen]
        return ImportSelection(import_existing=bool(selections), selections=selections)


# ---------------------------------------------------------------------------
# Import statements
# ---------------------------------------------------------------------------


def import_statement(dependency: ComponentImport, target_file_name: str) -> str | None:
    """Import line for *dependency* as seen from a file named *target_file_name*.

    Returns ``None`` for file types that have no import syntax (stylesheets).
    """
    dep_type = dependency.component_type or ComponentType.COMPONENT
    dir_name = registry.directory_name(dep_type, dependency.name)
    location = Path(dependency.file_location) if dependency.file_location else None

    if target_file_name.endswith(_SCRIPT_SUFFIXES):
        stem = location.name.split(".")[0] if location else dependency.name
        folder = registry.folder_for(dep_type)
        return f'import {dependency.name} from "@/{folder}/{dir_name}/{stem}";'
    if target_file_name.endswith(".sol"):
        file_name = location.name if location else f"{dependency.name}.sol"
        return f'import "../{dir_name}/{file_name}";'
    return None


def inject_imports(content: str, target_file_name: str, imports: list[ComponentImport]) -> str:
    """Add missing import lines for *imports* to *content*.

    Lines already present are not repeated, so applying this twice is the
    same as applying it once.  Solidity imports go after the pragma line.
    """
    lines = []
    for dep in imports:
        statement = import_statement(dep, target_file_name)
        if statement and statement not in content and statement not in lines:
            lines.append(statement)
    if not lines:
        return content

    block = "\n".join(lines) + "\n"
    if target_file_name.endswith(".sol"):
        pragma = _PRAGMA_RE.search(content)
        if pragma:
            return content[: pragma.end()] + "\n" + block + content[pragma.end():]
    return f"{block}\n{content}"
