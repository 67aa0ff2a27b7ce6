"""
Prompt Templates — `{{ name }}` substitution for step prompts.

Unbound placeholders are left in the output exactly as written, so a
template can be formatted with a partial set of variables without error.
Substituted values are inserted verbatim and never re-scanned.
"""
from __future__ import annotations

import re
from typing import Any, Mapping

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([^{}\s]+)\s*\}\}")


class PromptTemplate:
    """A compiled prompt template."""

    def __init__(self, template: str):
        self._template = template

    @property
    def template(self) -> str:
        return self._template

    @property
    def placeholders(self) -> list[str]:
        """Placeholder names in order of first appearance."""
        seen: list[str] = []
        for match in PLACEHOLDER_PATTERN.finditer(self._template):
            if match.group(1) not in seen:
                seen.append(match.group(1))
        return seen

    def format(self, variables: Mapping[str, Any]) -> str:
        """
        Replace bound placeholders; leave unbound ones untouched.

        All placeholders are replaced in one pass over the template, so a
        substituted value is never expanded again: with variables
        {"input": "say {{memory}}", "memory": "M"}, "{{input}}" formats to
        "say {{memory}}". A key-by-key replace loop would instead give "say M"
        because later keys would be substituted inside earlier values.
        """
        if not self._template:
            return ""

        def replacer(match):
            key = match.group(1)
            if key not in variables:
                return match.group(0)
            return str(variables[key])

        return PLACEHOLDER_PATTERN.sub(replacer, self._template)

    def __repr__(self):
        return f"PromptTemplate({self._template!r})"
