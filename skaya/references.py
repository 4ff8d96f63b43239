"""Reference graph maintenance.

Keeps ``usedBy`` back-references consistent with ``imports``: after every
create or update, component X appears in Y's ``usedBy`` exactly when X's
``imports`` names Y.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import ComponentImport, ProjectType
from .store import ConfigStore
from .utils import print_warning


def _names(imports: Iterable[ComponentImport | str]) -> list[str]:
    seen: list[str] = []
    for item in imports:
        name = item if isinstance(item, str) else item.name
        if name not in seen:
            seen.append(name)
    return seen


def imports_changed(
    new_imports: Iterable[ComponentImport | str],
    old_imports: Iterable[ComponentImport | str],
) -> bool:
    """Order-independent comparison of two import lists by name."""
    return set(_names(new_imports)) != set(_names(old_imports))


async def reconcile(
    store: ConfigStore,
    project_type: ProjectType,
    component_name: str,
    new_imports: Iterable[ComponentImport | str],
    old_imports: Iterable[ComponentImport | str],
) -> dict[str, list[str]]:
    """Update ``usedBy`` of the dependencies of *component_name*.

    Removed dependencies drop *component_name* from their ``usedBy``; added
    ones gain it once (repeated calls are idempotent).  Dependencies without a
    manifest record are skipped with a warning.

    Returns:
        ``{"added": [...], "removed": [...]}`` naming the dependencies touched.
    """
    new_names = [n for n in _names(new_imports) if n != component_name]
    old_names = [n for n in _names(old_imports) if n != component_name]
    added = [n for n in new_names if n not in old_names]
    removed = [n for n in old_names if n not in new_names]

    manifest = store.read()
    project = manifest.project(project_type)
    if project is None:
        return {"added": [], "removed": []}

    touched_added: list[str] = []
    touched_removed: list[str] = []

    for dep in removed:
        record = project.components.get(dep)
        if record is not None and component_name in record.used_by:
            record.used_by = [n for n in record.used_by if n != component_name]
            touched_removed.append(dep)

    # Every current dependency is checked, not only the added ones, so a
    # back-reference lost by an interrupted run is restored.
    for dep in new_names:
        record = project.components.get(dep)
        if record is None:
            if dep in added:
                print_warning(
                    f"'{dep}' has no entry in the configuration; "
                    f"usedBy for '{component_name}' not recorded."
                )
            continue
        if component_name not in record.used_by:
            record.used_by = [*record.used_by, component_name]
            touched_added.append(dep)

    if touched_added or touched_removed:
        await store.write(manifest)
    return {"added": touched_added, "removed": touched_removed}
