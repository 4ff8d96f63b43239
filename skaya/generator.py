"""Content generation for component files.

Two strategies fill in the ``content`` of every
:class:`~skaya.models.TemplateFileInfo` of a component:

* **Template mode** applies the name substitution passes to the original
  template text.
* **AI mode** asks the completion provider for each file.  The primary file
  is always generated first and its result is passed as context to the
  dependent files (tests, stories, styles), which may then be requested
  concurrently.

AI mode is all-or-nothing: if any request fails or comes back blank the
whole component is produced in template mode instead, and the result says so.

Typical usage::

    generator = ContentGenerator(provider=build_provider(settings.ai))
    result = await generator.generate(
        ProjectType.FRONTEND, ComponentType.COMPONENT, "card", files,
        ai=True, description="a clickable card with a title prop",
    )
    if result.fell_back:
        print_warning(result.reason)
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass

from . import registry
from .ai.prompts import build_prompts, file_category
from .ai.providers import CompletionProvider
from .exceptions import (
    AIProviderError,
    EmptyGenerationResult,
    MissingAPIKey,
    TemplateFileMissing,
)
from .imports import import_statement, inject_imports
from .models import (
    ComponentImport,
    ComponentSource,
    ComponentType,
    ProjectType,
    TemplateFileInfo,
)
from .rendering import TemplateRenderer
from .substitution import component_name, substitute

_FENCE_START_RE = re.compile(r"^\s*```[\w+-]*[ \t]*\n")
_FENCE_END_RE = re.compile(r"\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```lang line and a trailing ``` from model output."""
    return _FENCE_END_RE.sub("", _FENCE_START_RE.sub("", text, count=1), count=1)


@dataclass
class GenerationResult:
    """Files with content populated, plus how they were produced."""

    files: list[TemplateFileInfo]
    source: ComponentSource
    fell_back: bool = False
    reason: str | None = None


class ContentGenerator:
    """Produces the final content of every file of one component.

    Args:
        provider: Completion provider for AI mode.  Only required when
            :meth:`generate` is called with ``ai=True``.
        renderer: Renders the prompt templates; defaults to the bundled ones.
        parallel: Request dependent files concurrently once the primary file
            is in hand.
    """

    def __init__(
        self,
        provider: CompletionProvider | None = None,
        renderer: TemplateRenderer | None = None,
        parallel: bool = True,
    ) -> None:
        self.provider = provider
        self.renderer = renderer or TemplateRenderer()
        self.parallel = parallel

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate(
        self,
        project_type: ProjectType,
        component_type: ComponentType,
        name: str,
        files: list[TemplateFileInfo],
        ai: bool = False,
        description: str = "",
        dependencies: list[ComponentImport] | None = None,
    ) -> GenerationResult:
        """Return new ``TemplateFileInfo`` records with content for every file.

        The input records are never modified.  Output order matches input
        order; ``target_file_name`` is carried over unchanged.

        Raises:
            MissingAPIKey: ``ai`` is set but no provider was configured.
            TemplateFileMissing: A file has no original content.
        """
        dependencies = list(dependencies or [])
        templated = self.from_templates(component_type, name, files, dependencies)
        if not ai:
            return GenerationResult(files=templated, source=ComponentSource.TEMPLATE)

        if self.provider is None:
            raise MissingAPIKey("AI mode requested but no completion provider is configured.")

        try:
            generated = await self._generate_with_ai(
                project_type, component_type, name, files, description, dependencies
            )
        except AIProviderError as exc:
            return GenerationResult(
                files=templated,
                source=ComponentSource.TEMPLATE,
                fell_back=True,
                reason=str(exc),
            )
        return GenerationResult(files=generated, source=ComponentSource.AI)

    def from_templates(
        self,
        component_type: ComponentType,
        name: str,
        files: list[TemplateFileInfo],
        dependencies: list[ComponentImport] | None = None,
    ) -> list[TemplateFileInfo]:
        """Template mode: substitute names and add dependency imports."""
        primary = registry.primary_file(component_type)
        result = []
        for info in files:
            if info.content is None:
                raise TemplateFileMissing(f"No content loaded for {info.original_file_name}")
            content = substitute(info.content, component_type, name)
            if info.original_file_name == primary and dependencies:
                content = inject_imports(content, info.target_file_name, dependencies)
            result.append(info.model_copy(update={"content": content}))
        return result

    # ------------------------------------------------------------------
    # AI mode
    # ------------------------------------------------------------------

    async def _generate_with_ai(
        self,
        project_type: ProjectType,
        component_type: ComponentType,
        name: str,
        files: list[TemplateFileInfo],
        description: str,
        dependencies: list[ComponentImport],
    ) -> list[TemplateFileInfo]:
        primary_name = registry.primary_file(component_type)
        primary_info = next((f for f in files if f.original_file_name == primary_name), None)
        if primary_info is None:
            raise AIProviderError(f"Primary file {primary_name} is not part of the request.")

        import_lines = [
            line
            for line in (import_statement(dep, primary_info.target_file_name) for dep in dependencies)
            if line
        ]
        common = {
            "project_type": project_type,
            "component_type": component_type,
            "component_name": component_name(name),
            "description": description,
        }

        primary_content = await self._complete_file(
            primary_info, "body", common, import_lines=import_lines, dependencies=dependencies
        )
        primary_content = inject_imports(
            substitute(primary_content, component_type, name),
            primary_info.target_file_name,
            dependencies,
        )
        primary = primary_info.model_copy(update={"content": primary_content})

        others = [f for f in files if f is not primary_info]
        requests = [
            self._complete_file(
                info, file_category(info.original_file_name, primary_name), common, primary=primary
            )
            for info in others
        ]
        if self.parallel:
            outcomes = await asyncio.gather(*requests, return_exceptions=True)
        else:
            outcomes = []
            for request in requests:
                try:
                    outcomes.append(await request)
                except AIProviderError as exc:
                    outcomes.append(exc)
                    # Remaining coroutines are never awaited; close them.
                    for pending in requests[len(outcomes):]:
                        pending.close()
                    break

        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

        generated = {id(primary_info): primary}
        for info, text in zip(others, outcomes):
            generated[id(info)] = info.model_copy(
                update={"content": substitute(text, component_type, name)}
            )
        return [generated[id(info)] for info in files]

    async def _complete_file(
        self,
        info: TemplateFileInfo,
        category: str,
        common: dict,
        *,
        primary: TemplateFileInfo | None = None,
        import_lines: list[str] | None = None,
        dependencies: list[ComponentImport] | None = None,
    ) -> str:
        """One provider request; any failure surfaces as :class:`AIProviderError`."""
        system, user = build_prompts(
            self.renderer,
            info,
            category=category,
            template_content=info.content or "",
            primary=primary,
            import_lines=import_lines,
            dependencies=dependencies,
            **common,
        )
        try:
            raw = await self.provider.complete(system, user)
        except AIProviderError:
            raise
        except asyncio.CancelledError as exc:
            # Only a request cancelled on its own falls back; cancelling the run propagates.
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            raise AIProviderError(f"Generating {info.target_file_name} was cancelled.") from exc
        except Exception as exc:
            raise AIProviderError(
                f"Generating {info.target_file_name} failed: {exc.__class__.__name__}: {exc}"
            ) from exc

        text = strip_code_fences(raw or "")
        if not text.strip():
            raise EmptyGenerationResult(f"Empty response generating {info.target_file_name}.")
        return text if text.endswith("\n") else text + "\n"
