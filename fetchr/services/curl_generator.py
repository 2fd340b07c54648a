"""
cURL generation for request drafts.
"""

from ..schemas.draft import RequestDraft, encode_form_body


def shell_quote(value: str) -> str:
    """Wrap in single quotes, escaping embedded quotes as ``'\\''``."""
    return "'" + value.replace("'", "'\\''") + "'"


def generate_curl(draft: RequestDraft) -> str:
    """
    Serialize a draft into a multi-line cURL command.

    The method flag is omitted for GET. Enabled headers are emitted in order,
    followed by auth flags, then the body. A JSON body gets a Content-Type
    header unless one is already enabled. The URL is always the last token.
    """
    parts = ["curl"]

    if draft.method != "GET":
        parts.append(f"-X {draft.method}")

    enabled_headers = draft.enabled_headers()
    for header in enabled_headers:
        parts.append(f"-H '{header.key}: {header.value}'")

    auth = draft.auth_data
    if draft.auth_type == "basic" and auth.username:
        parts.append(f"-u '{auth.username}:{auth.password or ''}'")
    elif draft.auth_type == "bearer" and auth.token:
        parts.append(f"-H 'Authorization: Bearer {auth.token}'")
    elif draft.auth_type == "apikey" and auth.key:
        parts.append(f"-H '{auth.key}: {auth.value_field or ''}'")

    if draft.body_type == "form":
        parts.extend(_form_flags(draft))
    elif draft.body and draft.body_type != "none":
        parts.append(f"-d {shell_quote(draft.body)}")

        if draft.body_type == "json" and not draft.has_header("Content-Type"):
            parts.append("-H 'Content-Type: application/json'")

    parts.append(f"'{draft.url}'")

    return " \\\n  ".join(parts)


def _form_flags(draft: RequestDraft) -> list[str]:
    """
    Body flags for a form draft, chosen the way the executor sends it.

    Enabled fields win over the body text: with a file among them every
    field becomes ``-F``, otherwise they are urlencoded into a single ``-d``.
    """
    fields = [f for f in draft.form_data if f.enabled and f.key]
    if any(f.type == "file" for f in fields):
        flags = []
        for field in fields:
            if field.type == "file":
                if not field.file_path:
                    continue
                value = "@" + field.file_path
            else:
                value = field.value
            flags.append("-F " + shell_quote(f"{field.key}={value}"))
        return flags
    if fields:
        return [f"-d {shell_quote(encode_form_body(fields))}"]
    if draft.body:
        return [f"-d {shell_quote(draft.body)}"]
    return []
