"""Text template rendering for paths and tag templates."""
from __future__ import annotations

from typing import Any, Mapping

import jinja2

from discovery.core.observability import Observability

_env = jinja2.Environment(undefined=jinja2.Undefined, autoescape=False)


def render(template: str, variables: Mapping[str, Any], observability: Observability) -> str:
    """Render ``template`` against ``variables``.

    Undefined variables render empty. Any rendering error, including one
    raised by the variables themselves, is logged and the template text
    itself is returned.
    """
    if not template:
        return ""
    try:
        out = _env.from_string(template).render(dict(variables))
    except Exception as e:
        observability.logs().error("Cannot render template %r: %s", template, e)
        return template
    return out.strip()
