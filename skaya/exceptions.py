"""Exception hierarchy for the Skaya scaffolding core.

Structural errors (missing configuration, unknown component type, missing API
key) are fatal to the current operation and carry a remediation ``hint`` that
the CLI prints alongside the message.  Per-file AI failures
(:class:`AIProviderError`, :class:`EmptyGenerationResult`) are recovered by the
content generator and never reach the operator as failures.
"""

from __future__ import annotations


class SkayaError(Exception):
    """Base class for every error raised by Skaya."""

    default_hint: str = ""

    def __init__(self, message: str, hint: str | None = None) -> None:
        self.hint = hint if hint is not None else self.default_hint
        super().__init__(message)


class ConfigurationNotFound(SkayaError):
    """No ProjectConfig exists for the requested project type."""

    default_hint = "Initialize the project first with `skaya init <projectType>`."


class ProjectAlreadyInitialized(SkayaError):
    """The project type (or target folder) is already set up."""


class TemplateCloneError(SkayaError):
    """Bootstrapping a project from a git template failed."""


class TemplateDirectoryNotFound(SkayaError):
    """The bundled template directory for a component type is missing."""

    default_hint = "Initialize the project first with `skaya init <projectType>`."


class TemplateFileMissing(SkayaError):
    """A canonical template file could not be read."""


class UnsupportedComponentType(SkayaError):
    """The component type tag is not known for the project type."""


class ComponentAlreadyExists(SkayaError):
    """A target file of a new component already exists on disk."""

    default_hint = "Use `skaya update` to regenerate an existing component."


class ComponentNotFound(SkayaError):
    """An update targets a component folder that does not exist."""

    default_hint = "Use `skaya create` to generate the component first."


class MissingAPIKey(SkayaError):
    """AI mode was requested but no API key could be resolved."""

    default_hint = (
        "Set SKAYA_API_KEY, or add `skaya_api_key=<key>` to ./.npmrc or ~/.npmrc."
    )


class AIProviderError(SkayaError):
    """A completion request failed at the provider."""


class EmptyGenerationResult(AIProviderError):
    """A completion request succeeded but returned blank content."""


class InvalidComponentName(SkayaError):
    """The component name cannot be normalized."""

    default_hint = "Names start with a letter and use letters, digits, '-' or '_'."


class InvalidProjectFolder(SkayaError):
    """The project folder is blank or lies outside the workspace root."""

    default_hint = "Pass a folder name relative to the workspace, e.g. --folder web."
