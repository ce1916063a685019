"""Route Templates: pure mapping from operation name + params to a request path.

Invariants:
    - Deterministic: same operation and params always produce the same path
    - Every parameter value is URL-encoded
    - Missing or blank required parameters fail fast with InvalidParamsError

Design Decisions:
    - Only name lookup is registered; querying the same endpoint by last name
      is not something the service relies on
"""

import string
from urllib.parse import quote

from person_api.core.errors import InvalidParamsError

ROUTE_TEMPLATES: dict[str, str] = {
    "get_by_name": "/?name={name}",
}

_formatter = string.Formatter()


def required_params(template: str) -> list[str]:
    """Placeholder names used by a template, in order of appearance."""
    return [
        field_name
        for _, field_name, _, _ in _formatter.parse(template)
        if field_name
    ]


def build_path(
    operation_name: str,
    params: dict[str, object],
    templates: dict[str, str] | None = None,
) -> str:
    """Render the path for an operation, URL-encoding every value."""
    templates = ROUTE_TEMPLATES if templates is None else templates
    template = templates.get(operation_name)
    if template is None:
        raise InvalidParamsError(
            f"Unknown operation '{operation_name}'", operation_name,
        )

    encoded: dict[str, str] = {}
    for key in required_params(template):
        value = params.get(key)
        text = "" if value is None else str(value).strip()
        if not text:
            raise InvalidParamsError(
                f"Parameter '{key}' is required for '{operation_name}'",
                operation_name,
            )
        encoded[key] = quote(text, safe="")
    return template.format(**encoded)
