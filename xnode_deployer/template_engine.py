"""Single-pass {key} placeholder substitution for boot script templates."""

from __future__ import annotations

import re

_SENTINEL_L = "\x00LBRACE\x00"
_SENTINEL_R = "\x00RBRACE\x00"


def _single_pass_replace(content: str, replacements: dict[str, str]) -> str:
    """Replace {key} placeholders in a single pass (prevents injection)."""
    content = content.replace("{{", _SENTINEL_L)
    content = content.replace("}}", _SENTINEL_R)

    def _replacer(m: re.Match) -> str:
        key = m.group(1)
        return str(replacements[key]) if key in replacements else m.group(0)

    content = re.sub(r"\{(\w+)\}", _replacer, content)

    content = content.replace(_SENTINEL_L, "{")
    content = content.replace(_SENTINEL_R, "}")
    return content


def render_string(template: str, replacements: dict[str, str]) -> str:
    """Replace {key} placeholders in ``template`` and return the result.

    Substituted values are never scanned again, so a value that itself
    contains ``{key}`` text is emitted verbatim. ``{{`` / ``}}`` produce
    literal braces.
    """
    return _single_pass_replace(template, replacements)
