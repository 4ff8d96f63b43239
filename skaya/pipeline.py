"""Component generation pipeline.

Drives one create or update run end to end:

1. Registry lookup   -- which files the component type needs, and where.
2. Resolution        -- original contents from the templates (create) or
                        from the component's folder (update).
3. Generation        -- template substitution or AI completion, with
                        all-or-nothing fallback to templates.
4. Writing           -- every file written once, each acknowledged.
5. Manifest update   -- the ComponentConfig merged into ``skaya.config.json``.
6. Reference graph   -- ``usedBy`` of the dependencies reconciled.

All checks that can fail a run (unknown type, missing project, name
collision, missing API key) happen before any AI request or file write.
The manifest is read again right before each write, never held across the
AI requests.

Typical usage::

    pipeline = ComponentPipeline(Settings.from_env())
    await pipeline.create_component(
        ComponentRequest(project_type="frontend", component_type="component", name="button")
    )
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from . import registry
from .ai.providers import CompletionProvider, build_provider
from .api_endpoints import ApiEndpointRegistry
from .config import AISettings, Settings
from .exceptions import InvalidComponentName
from .generator import ContentGenerator, GenerationResult
from .imports import DependencySelector
from .models import (
    ComponentConfig,
    ComponentImport,
    ComponentRequest,
    ComponentSource,
    ComponentType,
    ProjectType,
)
from .references import imports_changed, reconcile
from .rendering import TemplateRenderer
from .resolver import TemplateResolver
from .store import ConfigStore
from .substitution import component_name
from .utils import console, print_success, print_warning, utc_now_iso
from .writer import FileWriter, component_dir

ProviderFactory = Callable[[AISettings], CompletionProvider]


@dataclass
class ComponentOutcome:
    """What one create/update run produced."""

    name: str
    component_type: ComponentType
    source: ComponentSource
    files: list[str]
    config: ComponentConfig
    fell_back: bool = False
    fallback_reason: str | None = None
    references: dict[str, list[str]] = field(default_factory=dict)
    extra_files: list[str] = field(default_factory=list)


class ComponentPipeline:
    """Creates, updates and lists components of a workspace.

    Args:
        settings: Workspace settings (root, manifest, templates, AI).
        store: Manifest store; defaults to the one at ``settings.manifest_path``.
        provider_factory: Builds the completion provider for AI runs.  Called
            only when a request asks for AI mode, before any file is touched.
        writer: File writer; pass ``FileWriter(quiet=True)`` to silence output.
    """

    def __init__(
        self,
        settings: Settings,
        store: ConfigStore | None = None,
        provider_factory: ProviderFactory | None = None,
        writer: FileWriter | None = None,
    ) -> None:
        self.settings = settings
        self.store = store or ConfigStore(settings.manifest_path, settings.activity_log_path)
        self.provider_factory = provider_factory or build_provider
        self.resolver = TemplateResolver(settings.component_templates_dir)
        self.renderer = TemplateRenderer(settings.templates_dir)
        self.writer = writer or FileWriter()

    # ------------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------------

    def target_folder(self, project_type: ProjectType, component_type: ComponentType) -> Path:
        """``<root>/<project>/src/<folder>`` for a component type."""
        project = self.store.project(project_type)
        return self.settings.root / project.name / "src" / registry.folder_for(component_type)

    def _normalize(self, request: ComponentRequest) -> str:
        registry.entry(request.project_type, request.component_type)
        try:
            return component_name(request.name)
        except ValueError as exc:
            raise InvalidComponentName(str(exc)) from exc

    def _generator(self, ai: bool) -> ContentGenerator:
        provider = self.provider_factory(self.settings.ai) if ai else None
        return ContentGenerator(
            provider=provider, renderer=self.renderer, parallel=self.settings.ai.parallel
        )

    async def _register_endpoint(
        self, request: ComponentRequest, folder: Path, name: str
    ) -> list[str]:
        """Upsert the endpoint of an ``api`` component; other types register nothing."""
        if request.component_type is not ComponentType.API or request.api_endpoint is None:
            return []
        endpoints = ApiEndpointRegistry(
            folder,
            self.settings.shared_templates_dir / request.project_type.value / request.component_type.value,
        )
        return await endpoints.register(name, request.api_endpoint)

    @staticmethod
    def _report_fallback(result: GenerationResult) -> None:
        if result.fell_back:
            print_warning(
                f"AI generation failed ({result.reason}); "
                "every file was generated from the templates instead."
            )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_component(self, request: ComponentRequest) -> ComponentOutcome:
        """Generate a new component and record it.

        Raises:
            UnsupportedComponentType: The type does not belong to the project type.
            InvalidComponentName: The name cannot be normalized.
            ConfigurationNotFound: The project type was never initialized.
            TemplateDirectoryNotFound, TemplateFileMissing: Bundled templates are absent.
            ComponentAlreadyExists: A target file is already on disk.
            MissingAPIKey: AI mode was requested without a resolvable key.
        """
        name = self._normalize(request)
        ptype, ctype = request.project_type, request.component_type
        folder = self.target_folder(ptype, ctype)

        files = self.resolver.resolve(ptype, ctype, name)
        self.writer.ensure_absent(files, name, folder, ctype)
        generator = self._generator(request.ai)

        imports: list[ComponentImport] = list(request.imports or [])
        result = await generator.generate(
            ptype, ctype, name, files,
            ai=request.ai, description=request.description, dependencies=imports,
        )
        self._report_fallback(result)

        written = await self.writer.write(result.files, name, folder, ctype)

        extra = await self._register_endpoint(request, folder, name)

        previous = self.store.component(ptype, name)
        details = ComponentConfig(
            source=result.source,
            files=written,
            component_type=ctype,
            imports=imports,
        )
        if request.ai and request.description:
            details.ai_prompt = request.description
        record = await self.store.save_component(ptype, name, details)
        references = await reconcile(
            self.store, ptype, name, imports, previous.imports if previous else []
        )

        await self.store.log_activity(
            "create", ptype, ctype, name,
            source=result.source.value, description=request.description,
        )
        print_success(f"{ctype.value.capitalize()} {name} created ({result.source.value}).")
        return ComponentOutcome(
            name=name,
            component_type=ctype,
            source=result.source,
            files=written,
            config=record,
            fell_back=result.fell_back,
            fallback_reason=result.reason,
            references=references,
            extra_files=extra,
        )

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update_component(self, request: ComponentRequest) -> ComponentOutcome:
        """Regenerate an existing component from its current files.

        ``request.imports`` replaces the stored imports; ``None`` keeps them.
        ``usedBy`` is reconciled only when the set of import names changed.
        An ``api_endpoint`` on the request replaces the stored endpoint entry.
        A template-mode update drops the previous ``aiPrompt``.

        Raises:
            ComponentNotFound: The component folder does not exist.
            (plus the setup errors of :meth:`create_component`)
        """
        name = self._normalize(request)
        ptype, ctype = request.project_type, request.component_type
        folder = self.target_folder(ptype, ctype)

        files = self.resolver.resolve_existing(
            ptype, ctype, name, component_dir(folder, ctype, name)
        )
        generator = self._generator(request.ai)

        stored = self.store.component(ptype, name)
        old_imports = list(stored.imports) if stored else []
        imports = list(request.imports) if request.imports is not None else old_imports
        if request.ai:
            # Stored imports carry no source; the primary prompt needs it.
            imports = DependencySelector(self.settings.root, self.store).refresh(ptype, ctype, imports)

        result = await generator.generate(
            ptype, ctype, name, files,
            ai=request.ai, description=request.description, dependencies=imports,
        )
        self._report_fallback(result)

        written = await self.writer.write(result.files, name, folder, ctype, overwrite=True)
        extra = await self._register_endpoint(request, folder, name)

        # Re-read: the manifest may have changed while the AI requests ran.
        stored = self.store.component(ptype, name)
        history = list(stored.files) if stored else []
        details = ComponentConfig(
            source=result.source,
            files=history + [p for p in written if p not in history],
            component_type=ctype,
            updated_at=utc_now_iso(),
            imports=imports,
        )
        if request.ai and request.description:
            details.ai_prompt = request.description
        clear = () if request.ai else ("ai_prompt",)
        record = await self.store.save_component(ptype, name, details, clear=clear)

        references: dict[str, list[str]] = {"added": [], "removed": []}
        if imports_changed(imports, old_imports):
            references = await reconcile(self.store, ptype, name, imports, old_imports)

        await self.store.log_activity(
            "update", ptype, ctype, name,
            source=result.source.value, description=request.description,
        )
        print_success(f"{ctype.value.capitalize()} {name} updated ({result.source.value}).")
        return ComponentOutcome(
            name=name,
            component_type=ctype,
            source=result.source,
            files=written,
            config=record,
            fell_back=result.fell_back,
            fallback_reason=result.reason,
            references=references,
            extra_files=extra,
        )

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_components(self, project_type: ProjectType) -> dict[str, ComponentConfig]:
        """Manifest records of every component of *project_type*.

        Raises:
            ConfigurationNotFound: The project type was never initialized.
        """
        project = self.store.project(project_type)
        if not project.components:
            console.print(f"[dim]No {project_type.value} components recorded yet.[/dim]")
        return dict(project.components)
