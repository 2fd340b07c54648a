"""
The editable request draft held by each tab.

A draft is a plain value: tabs own deep copies, so edits made to a persisted
request elsewhere never reach an open draft, and resolving variables for a
send never touches the stored draft.
"""

import logging
from typing import Literal
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, Field, ValidationError

from .request import AuthType, BodyType, RequestRecord
from .serialized import dump_json, parse_json_list, parse_json_object

logger = logging.getLogger(__name__)


class KeyValue(BaseModel):
    """A header or query parameter row. Disabled rows are kept but never sent."""
    key: str
    value: str = ""
    enabled: bool = True


class FormField(BaseModel):
    """A form body field, either text or a file read from ``file_path``."""
    key: str
    value: str = ""
    type: Literal["text", "file"] = "text"
    enabled: bool = True
    file_path: str | None = None


class AuthData(BaseModel):
    """Credentials for the draft's auth scheme; unused fields stay None."""
    username: str | None = None
    password: str | None = None
    token: str | None = None
    key: str | None = None
    value_field: str | None = None


class RequestDraft(BaseModel):
    """An in-memory, possibly unsaved request configuration."""
    method: str = "GET"
    url: str = ""
    headers: list[KeyValue] = Field(default_factory=list)
    body: str = ""
    body_type: BodyType = "none"
    auth_type: AuthType = "none"
    auth_data: AuthData = Field(default_factory=AuthData)
    form_data: list[FormField] = Field(default_factory=list)

    def enabled_headers(self) -> list[KeyValue]:
        return [h for h in self.headers if h.enabled and h.key]

    def has_header(self, name: str) -> bool:
        """Case-insensitive check among enabled headers."""
        lowered = name.lower()
        return any(h.key.lower() == lowered for h in self.enabled_headers())

    def query_params(self) -> list[KeyValue]:
        """
        Derive query parameters from the URL.

        An unparseable URL yields no parameters rather than an error.
        """
        try:
            query = urlsplit(self.url).query
        except ValueError:
            return []
        return [KeyValue(key=k, value=v) for k, v in parse_qsl(query, keep_blank_values=True)]

    def with_query_params(self, params: list[KeyValue]) -> str | None:
        """
        Return the URL rewritten with ``params`` as its query string.

        Returns None when the current URL cannot be parsed, so callers can
        leave the draft untouched.
        """
        try:
            parts = urlsplit(self.url)
        except ValueError:
            return None
        pairs = [(p.key, p.value) for p in params if p.enabled and p.key]
        # Keep {{tokens}} readable in the query string
        query = urlencode(pairs, safe="{}")
        return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))

    @classmethod
    def from_request(cls, request: RequestRecord) -> "RequestDraft":
        """Hydrate a draft from a persisted request, tolerating corrupt JSON fields."""
        headers = []
        for item in parse_json_list(request.headers):
            try:
                headers.append(KeyValue.model_validate(item))
            except ValidationError:
                logger.debug("Skipping malformed header on request %s: %r", request.id, item)

        try:
            auth_data = AuthData.model_validate(parse_json_object(request.auth_data))
        except ValidationError:
            logger.debug("Discarding malformed auth data on request %s", request.id)
            auth_data = AuthData()

        form_data = decode_form_body(request.body) if request.body_type == "form" else []

        return cls(
            method=request.method,
            url=request.url,
            headers=headers,
            body=request.body,
            body_type=request.body_type,
            auth_type=request.auth_type,
            auth_data=auth_data,
            form_data=form_data,
        )

    def to_record(self, request_id: str, collection_id: str, name: str) -> RequestRecord:
        """Serialize the draft into a request entity ready to be saved."""
        body = self.body
        if self.body_type == "form" and self.form_data:
            body = encode_form_body(self.form_data)
        return RequestRecord(
            id=request_id,
            collection_id=collection_id,
            name=name,
            method=self.method,
            url=self.url,
            headers=dump_json([h.model_dump() for h in self.headers]),
            body=body,
            body_type=self.body_type,
            auth_type=self.auth_type,
            auth_data=dump_json(self.auth_data.model_dump(exclude_none=True)),
        )


def encode_form_body(fields: list[FormField]) -> str:
    """Encode enabled text fields as ``key=value&key2=value2``."""
    pairs = [(f.key, f.value) for f in fields if f.enabled and f.key and f.type == "text"]
    return urlencode(pairs, safe="{}")


def decode_form_body(body: str) -> list[FormField]:
    if not body:
        return []
    return [FormField(key=k, value=v) for k, v in parse_qsl(body, keep_blank_values=True)]
