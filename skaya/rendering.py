"""Jinja2 rendering of AI prompts and blank project skeletons.

Everything under ``skaya/templates/`` with a ``.j2`` suffix goes through
:class:`TemplateRenderer`: the system/user prompts in ``prompts/`` and the
skeleton trees in ``skeletons/<projectType>/``.  Component templates in
``components/`` are plain text; the substitution engine handles those.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

_BUNDLED_TEMPLATES = Path(__file__).parent / "templates"
_J2_SUFFIX = ".j2"


class TemplateRenderer:
    """Jinja2 environment rooted at a template directory.

    Rendering is strict: a variable missing from the context raises
    ``jinja2.UndefinedError`` rather than leaving a hole in a prompt or a
    ``package.json``.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        self.template_dir = Path(template_dir) if template_dir is not None else _BUNDLED_TEMPLATES
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.update(slugify=_slugify, pascal_case=_pascal_case)

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render ``<template_dir>/<template_path>``, e.g. ``"prompts/user.j2"``."""
        return self.env.get_template(template_path).render(**context)

    def render_string(self, source: str, context: dict[str, Any]) -> str:
        return self.env.from_string(source).render(**context)

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render one template into *output_path*, creating parent folders."""
        out = Path(output_path)
        await asyncio.to_thread(_write_text, out, self.render(template_path, context))
        return out

    async def render_tree(
        self,
        template_prefix: str,
        output_dir: str | Path,
        context: dict[str, Any],
    ) -> list[Path]:
        """Materialize a skeleton: every ``.j2`` under *template_prefix*.

        Relative paths are kept and the suffix dropped, so
        ``skeletons/frontend/src/App.tsx.j2`` becomes ``<output_dir>/src/App.tsx``.
        File names are themselves templates (``{{ name | slugify }}.md.j2``).
        Files without the suffix are ignored.  An unknown prefix renders nothing.
        """
        source_dir = self.template_dir / template_prefix
        if not source_dir.is_dir():
            return []

        written: list[Path] = []
        for template_file in sorted(source_dir.rglob(f"*{_J2_SUFFIX}")):
            relative = template_file.relative_to(source_dir).as_posix()
            target_name = self.render_string(relative[: -len(_J2_SUFFIX)], context)
            written.append(
                await self.render_to_file(
                    f"{template_prefix}/{relative}", Path(output_dir) / target_name, context
                )
            )
        return written


def _slugify(value: str) -> str:
    """``"My Web App"`` -> ``"my-web-app"`` (npm package names)."""
    return re.sub(r"[^a-z0-9]+", "-", value.strip().lower()).strip("-")


def _pascal_case(value: str) -> str:
    """``"my-web_app"`` -> ``"MyWebApp"``; inner capitals are kept."""
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_\s]+", value))


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
