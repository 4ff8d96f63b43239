"""Skaya command-line interface.

Usage::

    skaya init frontend --folder web --template blank
    skaya create frontend component --name button
    skaya create frontend component --name card --ai --description "a clickable card"
    skaya update frontend page --name home --import Button --import Card
    skaya list frontend

Any argument left out is asked for interactively, unless ``--no-input`` is
given, in which case defaults are used and required values must be passed.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

from pydantic import ValidationError
from rich.table import Table

from . import __version__, registry
from .config import Settings
from .exceptions import InvalidComponentName, SkayaError
from .imports import DependencySelector
from .models import (
    ApiEndpointConfig,
    ComponentImport,
    ComponentRequest,
    ComponentType,
    HTTPMethod,
    ProjectType,
)
from .pipeline import ComponentPipeline
from .project import BLANK_TEMPLATE, CUSTOM_REPO_TEMPLATE, ProjectInitializer
from .prompting import Prompter, RichPrompter, ScriptedPrompter
from .store import ConfigStore
from .substitution import component_name
from .utils import console, print_error, print_header

_PROJECT_TYPES = [t.value for t in ProjectType]


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skaya",
        description="Skaya -- scaffold projects and generate components from templates or AI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  skaya init frontend --folder web\n"
            "  skaya create frontend component --name button\n"
            "  skaya create backend route --name users --import UsersController\n"
            "  skaya list frontend\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"skaya {__version__}")
    parser.add_argument(
        "--no-input",
        action="store_true",
        help="Never prompt; use defaults for anything not given on the command line",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init", help="Initialize a project")
    init.add_argument("project_type", nargs="?", choices=_PROJECT_TYPES)
    init.add_argument("--folder", help="Project root folder (relative to the workspace)")
    init.add_argument(
        "--template",
        help=f"'{BLANK_TEMPLATE}', '{CUSTOM_REPO_TEMPLATE}' or a catalogue template",
    )
    init.add_argument("--repo", help="Repository URL for the custom-repo template")

    for command, help_text in (
        ("create", "Generate a new component"),
        ("update", "Regenerate an existing component"),
    ):
        cmd = sub.add_parser(command, help=help_text)
        cmd.add_argument("project_type", nargs="?", choices=_PROJECT_TYPES)
        cmd.add_argument("component_type", nargs="?", choices=[t.value for t in ComponentType])
        cmd.add_argument("--name", help="Component name, e.g. button or user-card")
        cmd.add_argument(
            "--ai",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="Generate content with the configured AI provider",
        )
        cmd.add_argument("--description", help="What the component should do (AI mode)")
        cmd.add_argument(
            "--import",
            dest="imports",
            action="append",
            metavar="NAME",
            help="Existing component to import (repeatable)",
        )
        cmd.add_argument(
            "--no-imports", action="store_true", help="Do not import existing components"
        )
        cmd.add_argument("--api-id", type=int, help="API endpoint id (api components)")
        cmd.add_argument("--url", help="API endpoint URL (api components)")
        cmd.add_argument(
            "--method", choices=[m.value for m in HTTPMethod], help="API endpoint HTTP method"
        )
        cmd.add_argument(
            "--auth",
            action=argparse.BooleanOptionalAction,
            default=None,
            help="Whether the API endpoint requires auth",
        )

    listing = sub.add_parser("list", help="List generated components")
    listing.add_argument("project_type", nargs="?", choices=_PROJECT_TYPES)

    return parser


# ---------------------------------------------------------------------------
# Interactive helpers
# ---------------------------------------------------------------------------


def _project_type(args: argparse.Namespace, prompter: Prompter) -> ProjectType:
    value = args.project_type or prompter.select("Select project type", _PROJECT_TYPES)
    return ProjectType(value)


def _component_type(args: argparse.Namespace, prompter: Prompter, project_type: ProjectType) -> ComponentType:
    choices = [t.value for t in registry.component_types(project_type)]
    value = args.component_type or prompter.select(f"Select {project_type.value} component type", choices)
    registry.entry(project_type, value)
    return ComponentType(value)


def _api_endpoint(args: argparse.Namespace, prompter: Prompter) -> ApiEndpointConfig | None:
    if args.url is None and args.api_id is None:
        if not prompter.confirm("Register an API endpoint for this api?", default=False):
            return None
    api_id = args.api_id
    if api_id is None:
        raw = prompter.text("API id", default="1", required=True)
        try:
            api_id = int(raw)
        except ValueError:
            raise SkayaError(f"API id must be a number, got {raw!r}.") from None
    url = args.url or prompter.text("API URL", required=True)
    method = args.method or prompter.select(
        "HTTP method", [m.value for m in HTTPMethod], default=HTTPMethod.GET.value
    )
    with_auth = args.auth if args.auth is not None else prompter.confirm(
        "Does this endpoint require auth?", default=True
    )
    return ApiEndpointConfig(api_id=api_id, url=url, method=method, with_auth=with_auth)


def _request(
    args: argparse.Namespace,
    prompter: Prompter,
    settings: Settings,
    store: ConfigStore,
) -> ComponentRequest:
    project_type = _project_type(args, prompter)
    component_type = _component_type(args, prompter, project_type)

    name = args.name or prompter.text(f"Name of the {component_type.value}", required=True)
    if not name:
        raise InvalidComponentName("A component name is required.", hint="Pass --name <name>.")

    ai = args.ai if args.ai is not None else prompter.confirm("Generate with AI?", default=False)
    description = args.description or ""
    if ai and not description:
        description = prompter.text("Describe the component", default="")

    try:
        normalized = component_name(name)
    except ValueError as exc:
        raise InvalidComponentName(str(exc)) from exc

    # On update, no explicit names and no interactive choice keeps the stored imports.
    names: list[str] | None = [] if args.no_imports else args.imports
    imports: list[ComponentImport] | None = None
    if args.command == "create" or names is not None or not args.no_input:
        selection = DependencySelector(settings.root, store, prompter).select_imports(
            project_type, component_type, names=names, exclude=normalized
        )
        if args.command == "create" or names is not None or selection.import_existing:
            imports = selection.selections

    api_endpoint = None
    if component_type is ComponentType.API:
        api_endpoint = _api_endpoint(args, prompter)

    return ComponentRequest(
        project_type=project_type,
        component_type=component_type,
        name=name,
        ai=ai,
        description=description,
        imports=imports,
        api_endpoint=api_endpoint,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _run_init(args: argparse.Namespace, prompter: Prompter, settings: Settings, store: ConfigStore) -> None:
    initializer = ProjectInitializer(settings, store)
    project_type = _project_type(args, prompter)
    print_header(f"Initialize {project_type.value} project")

    folder = args.folder or prompter.text("Project folder", default=project_type.value, required=True)
    template = args.template
    if template is None:
        choices = [BLANK_TEMPLATE, *initializer.catalog.templates(project_type), CUSTOM_REPO_TEMPLATE]
        template = prompter.select("Select a template", choices, default=BLANK_TEMPLATE)
    repo = args.repo
    if template == CUSTOM_REPO_TEMPLATE and not repo:
        repo = prompter.text("Repository URL", required=True)

    await initializer.init_project(project_type, folder, template, repo_url=repo)


async def _run_component(args: argparse.Namespace, prompter: Prompter, settings: Settings, store: ConfigStore) -> None:
    request = _request(args, prompter, settings, store)
    print_header(f"{args.command.capitalize()} {request.component_type.value} {request.name}")
    pipeline = ComponentPipeline(settings, store=store)
    if args.command == "create":
        await pipeline.create_component(request)
    else:
        await pipeline.update_component(request)


async def _run_list(args: argparse.Namespace, prompter: Prompter, settings: Settings, store: ConfigStore) -> None:
    project_type = _project_type(args, prompter)
    components = ComponentPipeline(settings, store=store).list_components(project_type)
    if not components:
        return

    table = Table(title=f"{project_type.value} components", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold", no_wrap=True)
    table.add_column("Type")
    table.add_column("Source")
    table.add_column("Imports")
    table.add_column("Used by")
    table.add_column("Last change", style="dim")
    for name, record in sorted(components.items()):
        table.add_row(
            name,
            record.component_type.value if record.component_type else "-",
            record.source.value,
            ", ".join(sorted(record.import_names())) or "-",
            ", ".join(record.used_by) or "-",
            record.updated_at or record.saved_at or "-",
        )
    console.print(table)


_COMMANDS = {
    "init": _run_init,
    "create": _run_component,
    "update": _run_component,
    "list": _run_list,
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None, prompter: Prompter | None = None) -> None:
    """CLI entry point for ``skaya`` and ``python -m skaya``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if prompter is None:
        prompter = ScriptedPrompter() if args.no_input else RichPrompter()

    try:
        settings = Settings.from_env()
    except (ValidationError, ValueError) as exc:
        print_error(f"Invalid SKAYA_* environment settings: {exc}")
        sys.exit(1)
    store = ConfigStore(settings.manifest_path, settings.activity_log_path)

    try:
        asyncio.run(_COMMANDS[args.command](args, prompter, settings, store))
    except SkayaError as exc:
        print_error(f"Error: {exc}")
        if exc.hint:
            console.print(f"[dim]{exc.hint}[/dim]")
        sys.exit(1)
    except ValidationError as exc:
        print_error(f"Invalid input: {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        print_error("Aborted.")
        sys.exit(130)


if __name__ == "__main__":
    main()
