"""Endpoint registration for frontend ``api`` components.

Every ``api`` component can register one endpoint in
``src/apis/apiEndpoints.ts``::

    export const ApiEndpoint: Record<string, any> = {
      USERS: {
        apiId: 1,
        withAuth: true,
        url: "/users",
        method: "GET"
      },
    };

The request helper and store the generated slices rely on are copied next to
it the first time an endpoint is registered and never overwritten after that.
"""

from __future__ import annotations

import asyncio
import json
import re
import shutil
from pathlib import Path

from .models import ApiEndpointConfig
from .utils import print_warning

ENDPOINTS_FILE = "apiEndpoints.ts"
SUPPORT_FILES = ("backendRequest.ts", "store.tsx")

_HEADER = "export const ApiEndpoint: Record<string, any> = {"


def endpoint_key(name: str) -> str:
    """``userList`` -> ``USERLIST``; the key generated slices refer to."""
    return re.sub(r"[^A-Za-z0-9_]", "_", name).upper()


def render_entry(key: str, config: ApiEndpointConfig) -> str:
    """One ``KEY: {...},`` block, indented for the endpoints object."""
    fields = config.model_dump(mode="json", by_alias=True)
    body = ",\n".join(f"    {field}: {json.dumps(value)}" for field, value in fields.items())
    return f"  {key}: {{\n{body}\n  }},"


def upsert_content(content: str, key: str, config: ApiEndpointConfig) -> str:
    """Return *content* with the *key* entry inserted or replaced.

    An existing entry with the same key is replaced in place; otherwise the
    entry is added before the last closing brace.  Content without an object
    to extend is replaced by a fresh endpoints file.
    """
    entry = render_entry(key, config)
    existing = re.compile(rf"^[ \t]*{re.escape(key)}:\s*\{{[^}}]*\}},?[ \t]*$", re.MULTILINE)
    if existing.search(content):
        return existing.sub(lambda _m: entry, content, count=1)

    brace = content.rfind("}")
    if brace == -1:
        return f"{_HEADER}\n{entry}\n}};\n"

    head = content[:brace].rstrip()
    if head.endswith("}"):
        head += ","
    return f"{head}\n{entry}\n{content[brace:]}"


class ApiEndpointRegistry:
    """Maintains ``apiEndpoints.ts`` and its support files in one apis folder."""

    def __init__(self, apis_folder: str | Path, shared_dir: str | Path) -> None:
        self.apis_folder = Path(apis_folder)
        self.shared_dir = Path(shared_dir)

    @property
    def endpoints_path(self) -> Path:
        return self.apis_folder / ENDPOINTS_FILE

    async def upsert(self, name: str, config: ApiEndpointConfig) -> Path:
        """Insert or replace the endpoint for component *name*."""
        path = self.endpoints_path
        key = endpoint_key(name)

        def _upsert() -> None:
            if path.is_file():
                content = path.read_text(encoding="utf-8")
                if "}" not in content:
                    print_warning(f"{path.name} has no endpoint object; recreating it.")
            else:
                content = ""
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(upsert_content(content, key, config), encoding="utf-8")

        await asyncio.to_thread(_upsert)
        return path

    async def ensure_support_files(self) -> list[Path]:
        """Copy missing support files from the shared templates; return those copied."""

        def _copy() -> list[Path]:
            copied = []
            for file_name in SUPPORT_FILES:
                target = self.apis_folder / file_name
                source = self.shared_dir / file_name
                if target.exists():
                    continue
                if not source.is_file():
                    print_warning(f"Support template {file_name} not found in {self.shared_dir}.")
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(source, target)
                copied.append(target)
            return copied

        return await asyncio.to_thread(_copy)

    async def register(self, name: str, config: ApiEndpointConfig) -> list[str]:
        """Upsert the endpoint and copy support files; return the paths touched."""
        touched = [await self.upsert(name, config)]
        touched.extend(await self.ensure_support_files())
        return [str(p.resolve()) for p in touched]
