"""Asset reference rewriting for relocated HTML fragments.

After assets are materialized, HTML that shipped alongside them still points
at the original relative paths. Two passes over ``src``, ``poster``, ``href``
and ``data-src`` attributes fix that:

1. exact: the attribute value is a key of the replacement map;
2. suffix: the value is a relative path whose basename equals the basename of
   a key (``"Landing page/cover.png"`` vs. a manifest's ``"assets/cover.png"``).
"""

import re
from typing import Mapping
from urllib.parse import unquote

REWRITE_ATTRIBUTES = ("data-src", "src", "poster", "href")

_ATTRIBUTE_RE = re.compile(
    r"""(?<![\w-])(""" + "|".join(REWRITE_ATTRIBUTES) + r""")(\s*=\s*)(["'])(.*?)\3""",
    re.IGNORECASE | re.DOTALL,
)

DEFAULT_API_PREFIX = "/api/"


def _basename(value: str) -> str:
    path = value.split("#", 1)[0].split("?", 1)[0].replace("\\", "/")
    return unquote(path.rsplit("/", 1)[-1])


def _is_relative(value: str, api_prefix: str) -> bool:
    lowered = value.lower()
    if lowered.startswith(("http://", "https://", "//", "data:")):
        return False
    return not value.startswith(api_prefix)


def rewrite_asset_references(
    html: str,
    replacements: Mapping[str, str],
    api_prefix: str = DEFAULT_API_PREFIX,
) -> str:
    """Point asset attributes at their materialized URLs.

    Args:
        html: HTML fragment to rewrite
        replacements: Original reference -> served URL
        api_prefix: Values already under this prefix are left alone

    Returns:
        Rewritten HTML
    """
    mapping = {k: v for k, v in replacements.items() if k and v}
    if not mapping:
        return html

    def _exact(match: re.Match) -> str:
        attr, eq, quote, value = match.groups()
        target = mapping.get(value)
        if target is None:
            return match.group(0)
        return f"{attr}{eq}{quote}{target}{quote}"

    output = _ATTRIBUTE_RE.sub(_exact, html)

    by_basename: dict[str, str] = {}
    for key, target in mapping.items():
        by_basename.setdefault(_basename(key), target)
    targets = set(mapping.values())

    def _suffix(match: re.Match) -> str:
        attr, eq, quote, value = match.groups()
        if not value or value in targets or not _is_relative(value, api_prefix):
            return match.group(0)
        target = by_basename.get(_basename(value))
        if target is None:
            return match.group(0)
        return f"{attr}{eq}{quote}{target}{quote}"

    return _ATTRIBUTE_RE.sub(_suffix, output)
