"""
HTTP execution service for sending request drafts.

This service handles the actual HTTP request execution using httpx: it maps
a (already interpolated) draft onto an httpx request, applies auth and body
encoding, and captures status, headers, body, cookies and timing.
"""

import logging
import time
from pathlib import Path
from urllib.parse import parse_qsl

import httpx

from ..config import DEFAULT_REQUEST_TIMEOUT
from ..exceptions import BadRequestError, NetworkError, RequestTimeoutError
from ..schemas.draft import RequestDraft
from ..schemas.execute import Cookie, HttpResponse

logger = logging.getLogger(__name__)


def build_headers(draft: RequestDraft) -> dict[str, str]:
    """Enabled headers plus bearer/apikey auth headers."""
    headers = {h.key: h.value for h in draft.enabled_headers()}

    auth = draft.auth_data
    if draft.auth_type == "bearer" and auth.token:
        headers["Authorization"] = f"Bearer {auth.token}"
    elif draft.auth_type == "apikey" and auth.key and auth.value_field is not None:
        headers[auth.key] = auth.value_field

    return headers


def build_basic_auth(draft: RequestDraft) -> tuple[str, str] | None:
    auth = draft.auth_data
    if draft.auth_type == "basic" and auth.username is not None and auth.password is not None:
        return auth.username, auth.password
    return None


def build_body(draft: RequestDraft, headers: dict[str, str]) -> dict:
    """
    Translate the draft body into httpx keyword arguments.

    Form bodies use the enabled form fields when present (multipart when a
    file field is enabled), otherwise the body text is parsed as
    ``key=value&key2=value2``.
    """
    if draft.body_type == "json" and draft.body:
        if not draft.has_header("Content-Type"):
            headers["Content-Type"] = "application/json"
        return {"content": draft.body}

    if draft.body_type == "raw" and draft.body:
        return {"content": draft.body}

    if draft.body_type == "form":
        data: dict[str, list[str]] = {}
        files = []
        enabled = [f for f in draft.form_data if f.enabled and f.key]
        for field in enabled:
            if field.type == "file":
                if not field.file_path:
                    continue
                path = Path(field.file_path)
                try:
                    content = path.read_bytes()
                except OSError as e:
                    raise BadRequestError(f"Failed to read file {field.file_path}: {e}") from e
                files.append((field.key, (path.name or "file", content)))
            else:
                data.setdefault(field.key, []).append(field.value)

        if not enabled and draft.body:
            for key, value in parse_qsl(draft.body, keep_blank_values=True):
                data.setdefault(key, []).append(value)

        kwargs: dict = {}
        if data:
            kwargs["data"] = data
        if files:
            kwargs["files"] = files
        return kwargs

    return {}


def parse_cookies(response: httpx.Response) -> list[Cookie]:
    """Parse Set-Cookie headers into name/value pairs with domain and path."""
    cookies = []
    for raw in response.headers.get_list("set-cookie"):
        name_value, *attributes = raw.split(";")
        if "=" not in name_value:
            continue
        name, value = name_value.split("=", 1)
        cookie = Cookie(name=name.strip(), value=value.strip())
        for attribute in attributes:
            attr_name, _, attr_value = attribute.partition("=")
            attr_name = attr_name.strip().lower()
            if attr_name == "domain":
                cookie.domain = attr_value.strip()
            elif attr_name == "path":
                cookie.path = attr_value.strip()
        cookies.append(cookie)
    return cookies


async def send_request(
    draft: RequestDraft,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> HttpResponse:
    """
    Execute an HTTP request and return the response.

    Args:
        draft: The request to send, variables already resolved
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests inject a MockTransport)

    Returns:
        HttpResponse with status, headers, body, cookies, size and timing

    Raises:
        RequestTimeoutError: The request exceeded ``timeout``
        BadRequestError: The URL or a form file could not be used
        NetworkError: Any other transport failure
    """
    headers = build_headers(draft)
    body_kwargs = build_body(draft, headers)

    logger.debug("Sending %s %s", draft.method, draft.url)
    try:
        start_time = time.perf_counter()

        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.request(
                method=draft.method,
                url=draft.url,
                headers=headers,
                auth=build_basic_auth(draft),
                **body_kwargs
            )

        end_time = time.perf_counter()
        response_time = int((end_time - start_time) * 1000)

    except httpx.TimeoutException as e:
        raise RequestTimeoutError(f"Request exceeded {timeout} seconds timeout") from e
    except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
        raise BadRequestError(f"Invalid URL: {e}") from e
    except httpx.HTTPError as e:
        raise NetworkError(f"Failed to reach {draft.url}: {e}") from e

    return HttpResponse(
        status=response.status_code,
        status_text=response.reason_phrase or "Unknown",
        headers=dict(response.headers),
        body=response.text,
        response_time=response_time,
        size=len(response.content),
        cookies=parse_cookies(response),
    )
