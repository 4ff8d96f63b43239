"""Prompt construction for AI-mode generation.

Each file of a component gets its own (system, user) pair.  The system prompt
depends on the file category; the user prompt carries the component name,
the operator description, the target file name, the reference template and,
for every file but the primary one, the already generated primary content.
"""

from __future__ import annotations

from pathlib import PurePath

from ..models import ComponentImport, ComponentType, ProjectType, TemplateFileInfo
from ..rendering import TemplateRenderer

CATEGORIES = ("body", "test", "story", "style", "generic")

_STYLE_SUFFIXES = (".css", ".scss", ".sass", ".less")

_LANGUAGES = {
    ".tsx": "TypeScript React",
    ".ts": "TypeScript",
    ".jsx": "JavaScript React",
    ".js": "JavaScript",
    ".css": "CSS",
    ".sol": "Solidity",
}


def file_category(original_file_name: str, primary_file_name: str) -> str:
    """Classify a template file for prompt selection."""
    if original_file_name == primary_file_name:
        return "body"
    if ".test." in original_file_name or ".spec." in original_file_name:
        return "test"
    if ".stories." in original_file_name:
        return "story"
    if original_file_name.endswith(_STYLE_SUFFIXES):
        return "style"
    return "generic"


def language_for(file_name: str) -> str:
    return _LANGUAGES.get(PurePath(file_name).suffix, "source")


def build_prompts(
    renderer: TemplateRenderer,
    info: TemplateFileInfo,
    *,
    category: str,
    project_type: ProjectType,
    component_type: ComponentType,
    component_name: str,
    description: str = "",
    template_content: str = "",
    primary: TemplateFileInfo | None = None,
    import_lines: list[str] | None = None,
    dependencies: list[ComponentImport] | None = None,
) -> tuple[str, str]:
    """Render the (system, user) prompt pair for one file.

    Args:
        renderer: Renderer rooted at the bundled templates directory.
        info: The file being generated; its ``target_file_name`` is used verbatim.
        category: One of :data:`CATEGORIES`.
        primary: The generated primary file; ``None`` while generating it.
        import_lines: Import statements the primary file must start with.
        dependencies: Selected dependencies; their sources are given as context
            to the primary file only.
    """
    if category not in CATEGORIES:
        raise ValueError(f"Unknown prompt category {category!r}")

    context = {
        "category": category,
        "project_type": project_type.value,
        "component_type": component_type.value,
        "component_name": component_name,
        "description": description.strip(),
        "original_file_name": info.original_file_name,
        "target_file_name": info.target_file_name,
        "language": language_for(info.target_file_name),
        "template_content": template_content,
        "primary_file_name": primary.target_file_name if primary else "",
        "primary_content": primary.content if primary else "",
        "import_lines": import_lines or [],
        "dependencies": [
            {"name": dep.name, "source": dep.data}
            for dep in (dependencies or [])
            if dep.data and category == "body"
        ],
    }
    system = renderer.render(f"prompts/system/{category}.j2", context).strip()
    user = renderer.render("prompts/user.j2", context).strip()
    return system, user
