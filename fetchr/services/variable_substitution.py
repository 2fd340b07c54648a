"""
Resolution of {{name}} tokens against the active environment.

A token is ``{{`` followed by the shortest run of characters up to ``}}``;
the name between the braces is trimmed. Every occurrence is replaced in a
single pass and substituted values are not scanned again. Tokens with no
matching variable are left in place.
"""

import re
from typing import Tuple, List

from ..schemas.draft import RequestDraft
from ..schemas.environment import EnvironmentRecord


TOKEN_PATTERN = re.compile(r'\{\{(.*?)\}\}')


def extract_variables(template: str) -> List[str]:
    """Names of all tokens in ``template`` in order of appearance, duplicates kept."""
    return [raw.strip() for raw in TOKEN_PATTERN.findall(template or "")]


def substitute(template: str, variables: dict[str, str]) -> Tuple[str, List[str]]:
    """
    Resolve the tokens of ``template`` from ``variables``.

    Returns the resolved text together with the names that had no value,
    one entry per unresolved occurrence.

        >>> substitute("{{ greeting }}, {{who}}", {"greeting": "Hi"})
        ('Hi, {{who}}', ['who'])
    """
    if not template or "{{" not in template:
        return template, []

    missing: List[str] = []

    def lookup(match: re.Match) -> str:
        name = match.group(1).strip()
        value = variables.get(name)
        if value is None:
            missing.append(name)
            return match.group(0)
        return value

    return TOKEN_PATTERN.sub(lookup, template), missing


def environment_variables(environment: EnvironmentRecord | None) -> dict[str, str]:
    """
    Build the lookup table for an environment.

    When keys collide the first variable in stored order wins.
    """
    if environment is None:
        return {}
    lookup: dict[str, str] = {}
    for var in environment.parsed_variables():
        lookup.setdefault(var.key, var.value)
    return lookup


def interpolate(text: str, environment: EnvironmentRecord | None) -> str:
    """
    Resolve {{name}} tokens in ``text`` against ``environment``.

    Returns the input unchanged when no environment is active or no token is
    present. Never raises.
    """
    if environment is None or not text:
        return text
    result, _ = substitute(text, environment_variables(environment))
    return result


def resolve_draft(draft: RequestDraft, environment: EnvironmentRecord | None) -> RequestDraft:
    """
    Produce the outbound copy of a draft with all tokens resolved.

    URL first, then enabled header values, then the body (only when the
    draft has a body type), then enabled text form fields. Disabled rows are
    copied untouched. The given draft is never modified.
    """
    resolved = draft.model_copy(deep=True)
    if environment is None:
        return resolved

    variables = environment_variables(environment)

    resolved.url, _ = substitute(resolved.url, variables)

    for header in resolved.headers:
        if header.enabled:
            header.value, _ = substitute(header.value, variables)

    if resolved.body_type != "none" and resolved.body:
        resolved.body, _ = substitute(resolved.body, variables)

    for field in resolved.form_data:
        if field.enabled and field.type == "text":
            field.value, _ = substitute(field.value, variables)

    return resolved


def find_undefined(draft: RequestDraft, environment: EnvironmentRecord | None) -> List[str]:
    """List placeholders in the sendable parts of a draft that would stay unresolved."""
    variables = environment_variables(environment)
    undefined: List[str] = []

    texts = [draft.url] + [h.value for h in draft.enabled_headers()]
    if draft.body_type != "none":
        texts.append(draft.body)

    for text in texts:
        _, unmatched = substitute(text, variables)
        undefined.extend(name for name in unmatched if name not in undefined)
    return undefined
