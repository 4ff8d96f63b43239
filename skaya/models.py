"""Pydantic v2 models for the Skaya manifest and generation pipeline.

The manifest (``skaya.config.json``) is persisted with camelCase keys so that
it stays interchangeable with JavaScript tooling reading the same file; every manifest model accepts
both the camelCase alias and the snake_case field name, and keeps unknown keys
so a read-modify-write cycle never drops data written by someone else.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ProjectType(str, Enum):
    """Broad target a component belongs to."""
    FRONTEND = "frontend"
    BACKEND = "backend"
    BLOCKCHAIN = "blockchain"


class ComponentType(str, Enum):
    """Kind of artifact the pipeline can generate."""
    COMPONENT = "component"
    PAGE = "page"
    API = "api"
    ROUTE = "route"
    CONTROLLER = "controller"
    MIDDLEWARE = "middleware"
    MODEL = "model"
    CONTRACT = "contract"


class ComponentSource(str, Enum):
    """How a component's content was produced."""
    TEMPLATE = "template"
    AI = "ai"


class HTTPMethod(str, Enum):
    """HTTP methods accepted for API endpoint registration."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


# ---------------------------------------------------------------------------
# Manifest models
# ---------------------------------------------------------------------------

class _ManifestModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_json_dict(self) -> dict:
        """Return the on-disk (camelCase, no nulls) representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ComponentImport(_ManifestModel):
    """A reference from one component to another it depends on.

    ``data`` holds the dependency's primary source while a generation request
    is in flight (it is fed to the AI as context) and is never persisted.
    """
    name: str = Field(..., description="Manifest key of the imported component")
    data: str = Field(default="", exclude=True, description="Primary file source")
    file_location: Optional[str] = Field(
        default=None, description="Absolute path of the dependency's primary file"
    )
    component_type: Optional[ComponentType] = Field(
        default=None, description="Component type of the dependency"
    )


class ComponentConfig(_ManifestModel):
    """Manifest record for one generated component."""
    source: ComponentSource = Field(default=ComponentSource.TEMPLATE)
    files: list[str] = Field(default_factory=list, description="Absolute paths written")
    component_type: Optional[ComponentType] = Field(default=None)
    saved_at: Optional[str] = Field(default=None, description="ISO timestamp of creation")
    updated_at: Optional[str] = Field(default=None, description="ISO timestamp of last update")
    ai_prompt: Optional[str] = Field(default=None, description="Operator description used in AI mode")
    imports: list[ComponentImport] = Field(default_factory=list)
    used_by: list[str] = Field(
        default_factory=list,
        description="Back-references; maintained only by the reference graph",
    )

    def import_names(self) -> set[str]:
        return {imp.name for imp in self.imports}


class ProjectConfig(_ManifestModel):
    """Manifest record for one initialized project type."""
    name: str = Field(..., description="Project root folder, relative to the workspace")
    template: str = Field(default="custom", description="Template used to bootstrap it")
    created_at: Optional[str] = Field(default=None)
    components: dict[str, ComponentConfig] = Field(default_factory=dict)


class Manifest(RootModel[dict[str, ProjectConfig]]):
    """The whole ``skaya.config.json`` document, keyed by project type."""

    root: dict[str, ProjectConfig] = Field(default_factory=dict)

    def project(self, project_type: ProjectType | str) -> ProjectConfig | None:
        key = project_type.value if isinstance(project_type, ProjectType) else project_type
        return self.root.get(key)

    def component(
        self, project_type: ProjectType | str, name: str
    ) -> ComponentConfig | None:
        project = self.project(project_type)
        if project is None:
            return None
        return project.components.get(name)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Transient pipeline models
# ---------------------------------------------------------------------------

class TemplateFileInfo(BaseModel):
    """One file of a component as it moves through the pipeline.

    ``target_file_name`` is computed exactly once by the resolver and reused
    verbatim by the generator prompts and the file writer.
    """
    original_file_name: str
    target_file_name: str
    content: Optional[str] = None


class ApiEndpointConfig(BaseModel):
    """Endpoint entry written to ``apiEndpoints.ts`` for ``api`` components."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    api_id: int = Field(..., ge=0)
    with_auth: bool = Field(default=True)
    url: str = Field(..., min_length=1)
    method: HTTPMethod = Field(default=HTTPMethod.GET)


class ComponentRequest(BaseModel):
    """Plain-parameter description of one create/update run."""
    project_type: ProjectType
    component_type: ComponentType
    name: str = Field(..., min_length=1)
    ai: bool = Field(default=False)
    description: str = Field(default="")
    imports: Optional[list[ComponentImport]] = Field(
        default=None, description="Dependencies; None keeps the stored imports on update"
    )
    api_endpoint: Optional[ApiEndpointConfig] = Field(default=None)
