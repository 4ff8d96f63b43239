"""Materializes generated component files on disk."""

from __future__ import annotations

import asyncio
from pathlib import Path

from rich.markup import escape

from . import registry
from .exceptions import ComponentAlreadyExists
from .models import ComponentType, TemplateFileInfo
from .substitution import component_name
from .utils import console


def component_dir(target_folder: str | Path, component_type: ComponentType, name: str) -> Path:
    """``<target_folder>/<Name>[Page]`` for a component."""
    return Path(target_folder) / registry.directory_name(component_type, component_name(name))


class FileWriter:
    """Writes each non-empty file to ``<target_folder>/<Name>[Page]/<target_file_name>``."""

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet

    def target_paths(
        self,
        files: list[TemplateFileInfo],
        name: str,
        target_folder: str | Path,
        component_type: ComponentType,
    ) -> list[Path]:
        base = component_dir(target_folder, component_type, name)
        return [(base / info.target_file_name).resolve() for info in files]

    def ensure_absent(
        self,
        files: list[TemplateFileInfo],
        name: str,
        target_folder: str | Path,
        component_type: ComponentType,
    ) -> None:
        """Raise :class:`ComponentAlreadyExists` if any target path is taken."""
        taken = [
            p for p in self.target_paths(files, name, target_folder, component_type) if p.exists()
        ]
        if taken:
            raise ComponentAlreadyExists(
                f"{component_name(name)} already exists: {', '.join(str(p) for p in taken)}"
            )

    async def write(
        self,
        files: list[TemplateFileInfo],
        name: str,
        target_folder: str | Path,
        component_type: ComponentType,
        overwrite: bool = False,
    ) -> list[str]:
        """Write *files* and return the absolute paths actually written.

        Files with empty or missing content are skipped.  Unless *overwrite*
        is set, every target is checked before the first write so a collision
        never leaves a half-written component.
        """
        if not overwrite:
            self.ensure_absent(files, name, target_folder, component_type)

        paths = self.target_paths(files, name, target_folder, component_type)
        written: list[str] = []
        for info, path in zip(files, paths):
            if not info.content:
                continue
            await asyncio.to_thread(_write_file, path, info.content)
            written.append(str(path))
            if not self.quiet:
                console.print(f"  [green]+[/green] {escape(str(path))}", highlight=False)
        return written


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
