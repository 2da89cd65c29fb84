"""Instruction rendering against session state.

Instructions may use Jinja2 template syntax or plain ``{key}`` placeholders.

Template variables available (Jinja2):

- ``state``  : Mapping[str, Any] -- read-only snapshot of the session state
- every state key that is a valid identifier, as a top-level variable

Example templates::

    You are helping {{ user_name }}.
    {% if state["user:tier"] == "pro" %}Answer in depth.{% endif %}

    You are helping {user_name}.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import jinja2

if TYPE_CHECKING:
    from collections.abc import Mapping

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}\s]+)\}")


def render_instructions(template: str | None, state: Mapping[str, Any]) -> str:
    """Render *template* with *state*.  ``None`` renders as an empty string.

    Templates without Jinja2 syntax use ``{key}`` substitution; placeholders
    naming an unknown key are left unchanged.
    """
    if not template:
        return ""

    if "{{" in template or "{%" in template:
        template_vars: dict[str, object] = {key: value for key, value in state.items() if key.isidentifier()}
        template_vars["state"] = state
        env = jinja2.Environment(autoescape=False)  # noqa: S701
        return env.from_string(template).render(**template_vars)

    def substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in state:
            return match.group(0)
        return str(state[key])

    return PLACEHOLDER_PATTERN.sub(substitute, template)
