"""API key resolution for hosted AI providers.

Lookup order:

1. ``SKAYA_API_KEY`` environment variable
2. ``npm_config_skaya_api_key`` / ``npm_package_config_skaya_api_key``
   (set by npm when Skaya runs as an npm script)
3. ``skaya_api_key=...`` in ``./.npmrc``
4. ``skaya_api_key=...`` in ``~/.npmrc``
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path

from ..exceptions import MissingAPIKey

ENV_VARS: tuple[str, ...] = (
    "SKAYA_API_KEY",
    "npm_config_skaya_api_key",
    "npm_package_config_skaya_api_key",
)

_NPMRC_RE = re.compile(r"^\s*skaya_api_key\s*=\s*(.+?)\s*$", re.MULTILINE)


def read_npmrc_key(path: Path) -> str | None:
    """Return the ``skaya_api_key`` value from an ``.npmrc`` file, if any."""
    if not path.is_file():
        return None
    match = _NPMRC_RE.search(path.read_text(encoding="utf-8", errors="replace"))
    if not match:
        return None
    return match.group(1).strip().strip("\"'") or None


def resolve_api_key(
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
    home: Path | None = None,
) -> str:
    """Find the API key or raise :class:`MissingAPIKey`."""
    env = os.environ if env is None else env
    for var in ENV_VARS:
        value = env.get(var, "").strip()
        if value:
            return value

    for directory in (cwd or Path.cwd(), home or Path.home()):
        key = read_npmrc_key(directory / ".npmrc")
        if key:
            return key

    raise MissingAPIKey("AI API key not found.")
