"""Name substitution for component templates.

Template files mix explicit placeholders (``{{component}}``, ``{{Component}}``,
``{{COMPONENT}}``) with natural-language uses of the component-type keyword.
:func:`substitute` rewrites both in three ordered passes so that a single
component gets consistent names across all of its files, and
:func:`target_file_name` derives the on-disk file name from the canonical
template name.
"""

from __future__ import annotations

import re

from . import registry
from .models import ComponentType

# Identifiers qualified by one of these namespaces are never rewritten
# (``React.Component`` must survive a ``component`` template, ``mongoose.model``
# a ``model`` one).
NAMESPACE_PREFIXES: tuple[str, ...] = ("React", "mongoose")

_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_\- ]*$")
_SPLIT_RE = re.compile(r"[-_\s]+")


def component_name(raw: str) -> str:
    """Normalize operator input to the capitalized component name.

    Examples::

        component_name("button")    -> "Button"
        component_name("user-card") -> "UserCard"
        component_name("userCard")  -> "UserCard"

    Raises:
        ValueError: If *raw* is empty or contains unsupported characters.
    """
    value = raw.strip()
    if not value or not _NAME_RE.match(value):
        raise ValueError(
            f"Invalid component name {raw!r}: use letters, digits, '-' or '_', "
            "starting with a letter"
        )
    parts = [p for p in _SPLIT_RE.split(value) if p]
    return "".join(p[0].upper() + p[1:] for p in parts)


def name_variants(name: str) -> dict[str, str]:
    """Return the ``lower``/``capitalized``/``upper`` forms of a component name."""
    pascal = component_name(name)
    return {
        "lower": pascal[0].lower() + pascal[1:],
        "capitalized": pascal,
        "upper": pascal.upper(),
    }


def _keyword(component_type: ComponentType | str) -> str:
    return component_type.value if isinstance(component_type, ComponentType) else str(component_type)


def target_file_name(original_file_name: str, component_type: ComponentType | str, name: str) -> str:
    """Replace the component-type token in a template file name.

    ``component.stories.tsx`` for ``button`` becomes ``Button.stories.tsx``.
    The result only depends on its three inputs.
    """
    pascal = component_name(name)
    pattern = re.compile(re.escape(_keyword(component_type)), re.IGNORECASE)
    return pattern.sub(lambda _m: pascal, original_file_name)


def _bare_keyword_pattern(keyword: str) -> re.Pattern[str]:
    lookbehinds = "".join(rf"(?<!{re.escape(prefix)}\.)" for prefix in NAMESPACE_PREFIXES)
    return re.compile(rf"{lookbehinds}\b{re.escape(keyword)}\b(?!:)", re.IGNORECASE)


def substitute(content: str, component_type: ComponentType | str, name: str) -> str:
    """Apply the three substitution passes to *content*.

    1. ``{{type}}``, ``{{Type}}`` and ``{{TYPE}}`` placeholders, case-sensitive.
    2. The Storybook ``component: Type`` pairing.
    3. Bare, word-bounded occurrences of the keyword in any case, except when
       qualified by a namespace prefix (``React.Component``) or directly
       followed by a colon (object keys, type annotations).  Skipped for
       types whose keyword is reserved in the target language (``contract``
       in Solidity).

    Content without placeholders or the keyword is returned unchanged.
    """
    keyword = _keyword(component_type).lower()
    variants = name_variants(name)
    pascal = variants["capitalized"]

    result = (
        content.replace("{{%s}}" % keyword, variants["lower"])
        .replace("{{%s}}" % keyword.capitalize(), pascal)
        .replace("{{%s}}" % keyword.upper(), variants["upper"])
    )

    result = result.replace(f"component: {keyword.capitalize()}", f"component: {pascal}")

    if not registry.lookup(component_type).rewrite_bare_keyword:
        return result
    return _bare_keyword_pattern(keyword).sub(lambda _m: pascal, result)
