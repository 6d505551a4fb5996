# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Placeholder substitution for notification templates.

Placeholders are names wrapped in braces, e.g. {studentName}. Matching
is case-sensitive and every occurrence is replaced. Placeholders with no
matching variable are kept verbatim so a missing optional value shows up
in the text instead of failing the whole notification. Substituted
values are inserted as-is and never scanned again.
"""

import re
from collections.abc import Mapping

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")


def render(template: str, variables: Mapping[str, str]) -> str:
    """Substitute {name} placeholders in a template.

    Args:
        template: Template text.
        variables: Placeholder values by name.

    Returns:
        Rendered text.

    Example:
        >>> render("Hello {name} {missing}", {"name": "Ana"})
        'Hello Ana {missing}'
    """

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in variables:
            return str(variables[name])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(substitute, template)


def placeholders(template: str) -> set[str]:
    """List the placeholder names used in a template.

    Args:
        template: Template text.

    Returns:
        Set of placeholder names.
    """
    return set(PLACEHOLDER_PATTERN.findall(template))
