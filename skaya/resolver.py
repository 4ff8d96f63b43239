"""Template file resolution.

Turns a component type and a name into the list of
:class:`~skaya.models.TemplateFileInfo` records the rest of the pipeline works
on.  In *create* mode the original contents come from the bundled template
tree; in *update* mode they come from the files already materialized for the
component, located with :func:`match_file`.
"""

from __future__ import annotations

from pathlib import Path

from . import registry
from .exceptions import ComponentNotFound, TemplateDirectoryNotFound, TemplateFileMissing
from .models import ComponentType, ProjectType, TemplateFileInfo
from .substitution import component_name, target_file_name


# ---------------------------------------------------------------------------
# Flexible file matching
# ---------------------------------------------------------------------------


def candidate_file_names(
    original_file_name: str,
    component_type: ComponentType | str,
    name: str,
) -> list[str]:
    """Ordered candidate names for one canonical file inside a component folder.

    Precedence: the canonical template name, the name-substituted target name,
    the folder-name variant (``HomePage.tsx`` for pages), then the generic
    ``index`` variant.  Duplicates are dropped, keeping the first occurrence.
    """
    ctype = registry.lookup(component_type).component_type
    dir_name = registry.directory_name(ctype, component_name(name))
    candidates = [
        original_file_name,
        target_file_name(original_file_name, ctype, name),
        target_file_name(original_file_name, ctype, dir_name),
        original_file_name.replace(ctype.value, "index", 1),
    ]
    ordered: list[str] = []
    for candidate in candidates:
        if candidate not in ordered:
            ordered.append(candidate)
    return ordered


def match_file(directory: Path, candidates: list[str]) -> Path | None:
    """Return the first existing file in *directory* matching *candidates*.

    The first candidate must match exactly; later candidates match
    case-insensitively, since earlier generation passes did not always agree
    on casing.
    """
    if not directory.is_dir():
        return None
    entries = {p.name: p for p in directory.iterdir() if p.is_file()}
    lowered = {n.lower(): p for n, p in entries.items()}

    for index, candidate in enumerate(candidates):
        if candidate in entries:
            return entries[candidate]
        if index > 0 and candidate.lower() in lowered:
            return lowered[candidate.lower()]
    return None


def find_primary_file(
    component_dir: Path, component_type: ComponentType | str, name: str
) -> Path | None:
    """Locate the primary (body) file of an existing component."""
    primary = registry.primary_file(component_type)
    return match_file(component_dir, candidate_file_names(primary, component_type, name))


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class TemplateResolver:
    """Loads original file contents and computes target file names."""

    def __init__(self, templates_root: str | Path) -> None:
        self.templates_root = Path(templates_root)

    def template_dir(self, project_type: ProjectType, component_type: ComponentType) -> Path:
        return self.templates_root / project_type.value / component_type.value

    def plan(self, component_type: ComponentType | str, name: str) -> list[TemplateFileInfo]:
        """File list with target names only, in registry order."""
        return [
            TemplateFileInfo(
                original_file_name=original,
                target_file_name=target_file_name(original, component_type, name),
            )
            for original in registry.files_for(component_type)
        ]

    def resolve(
        self,
        project_type: ProjectType,
        component_type: ComponentType,
        name: str,
    ) -> list[TemplateFileInfo]:
        """Create mode: read every canonical file from the bundled templates.

        Raises:
            TemplateDirectoryNotFound: The template folder for the type is absent.
            TemplateFileMissing: A canonical file is absent from that folder.
        """
        template_dir = self.template_dir(project_type, component_type)
        if not template_dir.is_dir():
            raise TemplateDirectoryNotFound(
                f"Template directory not found for {project_type.value}/{component_type.value}."
            )

        files = self.plan(component_type, name)
        for info in files:
            info.content = self._read_template(template_dir, info.original_file_name)
        return files

    def resolve_existing(
        self,
        project_type: ProjectType,
        component_type: ComponentType,
        name: str,
        component_dir: Path,
    ) -> list[TemplateFileInfo]:
        """Update mode: read the files already written for a component.

        Files that cannot be found in *component_dir* fall back to the bundled
        template so the component can be completed.

        Raises:
            ComponentNotFound: *component_dir* does not exist.
            TemplateFileMissing: A file is missing both on disk and in the templates.
        """
        if not component_dir.is_dir():
            raise ComponentNotFound(f"Component folder not found: {component_dir}")

        template_dir = self.template_dir(project_type, component_type)
        files = self.plan(component_type, name)
        for info in files:
            existing = match_file(
                component_dir,
                candidate_file_names(info.original_file_name, component_type, name),
            )
            if existing is not None:
                info.content = existing.read_text(encoding="utf-8")
                # Written back in place, so an ``index.tsx`` is not duplicated as ``<Name>.tsx``.
                info.target_file_name = existing.name
            else:
                info.content = self._read_template(template_dir, info.original_file_name)
        return files

    @staticmethod
    def _read_template(template_dir: Path, file_name: str) -> str:
        source = template_dir / file_name
        if not source.is_file():
            raise TemplateFileMissing(f"Template file {file_name} not found in {template_dir}")
        return source.read_text(encoding="utf-8")
