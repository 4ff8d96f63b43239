"""Component-type registry.

The single source of truth for which template files a component type needs,
in generation order (primary/body file first), which folder under ``src/`` it
lives in, and which other component types it may import.  Every other module
asks this registry instead of declaring its own mapping.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import UnsupportedComponentType
from .models import ComponentType, ProjectType


@dataclass(frozen=True)
class RegistryEntry:
    """Static description of one component type."""

    project_type: ProjectType
    component_type: ComponentType
    folder: str
    files: tuple[str, ...]
    import_sources: tuple[ComponentType, ...] = ()
    directory_suffix: str = ""
    # False when the keyword is also a reserved word of the target language.
    rewrite_bare_keyword: bool = True

    @property
    def primary_file(self) -> str:
        return self.files[0]


_ENTRIES: tuple[RegistryEntry, ...] = (
    RegistryEntry(
        ProjectType.FRONTEND,
        ComponentType.COMPONENT,
        folder="components",
        files=("component.tsx", "component.stories.tsx", "component.test.tsx", "component.css"),
        import_sources=(ComponentType.COMPONENT,),
    ),
    RegistryEntry(
        ProjectType.FRONTEND,
        ComponentType.PAGE,
        folder="pages",
        files=("page.tsx", "page.test.tsx", "page.css"),
        import_sources=(ComponentType.COMPONENT,),
        directory_suffix="Page",
    ),
    RegistryEntry(
        ProjectType.FRONTEND,
        ComponentType.API,
        folder="apis",
        files=("api.tsx",),
    ),
    RegistryEntry(
        ProjectType.BACKEND,
        ComponentType.ROUTE,
        folder="routes",
        files=("route.ts", "route.test.ts"),
        import_sources=(ComponentType.CONTROLLER, ComponentType.MIDDLEWARE),
    ),
    RegistryEntry(
        ProjectType.BACKEND,
        ComponentType.CONTROLLER,
        folder="controllers",
        files=("controller.ts", "controller.test.ts"),
        import_sources=(ComponentType.MODEL,),
    ),
    RegistryEntry(
        ProjectType.BACKEND,
        ComponentType.MIDDLEWARE,
        folder="middlewares",
        files=("middleware.ts", "middleware.test.ts"),
    ),
    RegistryEntry(
        ProjectType.BACKEND,
        ComponentType.MODEL,
        folder="models",
        files=("model.ts", "model.test.ts"),
    ),
    RegistryEntry(
        ProjectType.BLOCKCHAIN,
        ComponentType.CONTRACT,
        folder="contracts",
        files=("contract.sol", "contract.test.ts"),
        import_sources=(ComponentType.CONTRACT,),
        rewrite_bare_keyword=False,
    ),
)

_BY_TYPE: dict[ComponentType, RegistryEntry] = {e.component_type: e for e in _ENTRIES}


def _coerce(component_type: ComponentType | str) -> ComponentType:
    if isinstance(component_type, ComponentType):
        return component_type
    try:
        return ComponentType(str(component_type).lower())
    except ValueError:
        raise UnsupportedComponentType(
            f"Unhandled component type: {component_type!r}",
            hint=f"Supported types: {', '.join(t.value for t in ComponentType)}",
        ) from None


def lookup(component_type: ComponentType | str) -> RegistryEntry:
    """Return the registry entry for *component_type*."""
    ctype = _coerce(component_type)
    entry = _BY_TYPE.get(ctype)
    if entry is None:
        raise UnsupportedComponentType(f"Unhandled component type: {ctype.value!r}")
    return entry


def entry(project_type: ProjectType | str, component_type: ComponentType | str) -> RegistryEntry:
    """Return the entry, checking that the type belongs to *project_type*."""
    found = lookup(component_type)
    ptype = ProjectType(project_type)
    if found.project_type is not ptype:
        raise UnsupportedComponentType(
            f"{found.component_type.value!r} is not a {ptype.value} component type",
            hint=f"{ptype.value} supports: {', '.join(t.value for t in component_types(ptype))}",
        )
    return found


def files_for(component_type: ComponentType | str) -> list[str]:
    """Ordered canonical template file names; the primary file comes first."""
    return list(lookup(component_type).files)


def primary_file(component_type: ComponentType | str) -> str:
    return lookup(component_type).primary_file


def folder_for(component_type: ComponentType | str) -> str:
    return lookup(component_type).folder


def import_sources(component_type: ComponentType | str) -> list[ComponentType]:
    return list(lookup(component_type).import_sources)


def component_types(project_type: ProjectType | str) -> list[ComponentType]:
    """All component types available for *project_type*, in registry order."""
    ptype = ProjectType(project_type)
    return [e.component_type for e in _ENTRIES if e.project_type is ptype]


def directory_name(component_type: ComponentType | str, component_name: str) -> str:
    """Folder name for a component, e.g. ``Button`` or ``HomePage``."""
    return f"{component_name}{lookup(component_type).directory_suffix}"


def component_name_from_directory(component_type: ComponentType | str, dir_name: str) -> str:
    """Inverse of :func:`directory_name`."""
    suffix = lookup(component_type).directory_suffix
    if suffix and dir_name.endswith(suffix) and len(dir_name) > len(suffix):
        return dir_name[: -len(suffix)]
    return dir_name
