"""
Postman Collection v2.1 parser.

Turns a Postman export into an ``ImportedCollection``: folders and requests
flattened in document order, each remembering the path of folder names it
was found under.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError

from ..exceptions import CollectionImportError
from ..schemas.draft import FormField, encode_form_body
from ..schemas.imported import (
    ImportedCollection,
    ImportedFolder,
    ImportedFormData,
    ImportedHeader,
    ImportedRequest,
)
from ..schemas.serialized import dump_json


class PostmanInfo(BaseModel):
    name: str


class PostmanHeader(BaseModel):
    key: str
    value: Optional[str] = None
    disabled: bool = False


class PostmanFormData(BaseModel):
    key: str
    value: Optional[str] = None
    type: Optional[str] = None
    src: Optional[Any] = None
    disabled: bool = False


class PostmanBody(BaseModel):
    mode: str = "none"
    raw: Optional[str] = None
    formdata: Optional[list[PostmanFormData]] = None
    urlencoded: Optional[list[PostmanFormData]] = None
    options: Optional[dict[str, Any]] = None


class PostmanUrlObject(BaseModel):
    raw: str = ""


class PostmanRequest(BaseModel):
    method: str = "GET"
    header: Optional[list[PostmanHeader]] = None
    body: Optional[PostmanBody] = None
    url: Union[str, PostmanUrlObject] = ""
    auth: Optional[dict[str, Any]] = None


class PostmanItem(BaseModel):
    name: str
    item: Optional[list["PostmanItem"]] = None  # For folders
    request: Optional[PostmanRequest] = None


class PostmanCollection(BaseModel):
    info: PostmanInfo
    item: list[PostmanItem] = []


PostmanItem.model_rebuild()


def parse_postman_collection(json_content: str) -> ImportedCollection:
    """
    Parse a Postman v2.1 document.

    Raises:
        CollectionImportError: The content is not JSON or not a collection
    """
    try:
        collection = PostmanCollection.model_validate_json(json_content)
    except ValidationError as e:
        raise CollectionImportError(f"Invalid Postman collection: {e.errors()[0]['msg']}") from e

    folders: list[ImportedFolder] = []
    requests: list[ImportedRequest] = []
    _process_items(collection.item, folders, requests, [])

    return ImportedCollection(name=collection.info.name, folders=folders, requests=requests)


def _process_items(
    items: list[PostmanItem],
    folders: list[ImportedFolder],
    requests: list[ImportedRequest],
    current_path: list[str],
) -> None:
    for item in items:
        if item.item is not None:
            folders.append(ImportedFolder(name=item.name, parent_path=list(current_path)))
            _process_items(item.item, folders, requests, current_path + [item.name])
        elif item.request is not None:
            requests.append(_convert_request(item.name, item.request, current_path))


def _convert_request(name: str, request: PostmanRequest, path: list[str]) -> ImportedRequest:
    url = request.url if isinstance(request.url, str) else request.url.raw

    headers = [
        ImportedHeader(key=h.key, value=h.value or "", enabled=not h.disabled)
        for h in request.header or []
    ]

    body, body_type, form_data = _convert_body(request.body)
    auth_type, auth_data = parse_auth(request.auth)

    return ImportedRequest(
        name=name,
        method=request.method.upper(),
        url=url,
        headers=headers,
        body=body,
        body_type=body_type,
        auth_type=auth_type,
        auth_data=auth_data,
        form_data=form_data,
        folder_path=list(path),
    )


def _convert_body(body: PostmanBody | None) -> tuple[str, str, list[ImportedFormData]]:
    if body is None:
        return "", "none", []

    if body.mode == "raw":
        language = ((body.options or {}).get("raw") or {}).get("language")
        body_type = "json" if language in (None, "json") else "raw"
        return body.raw or "", body_type, []

    if body.mode in ("formdata", "urlencoded"):
        fields = body.formdata if body.mode == "formdata" else body.urlencoded
        form_data = []
        for field in fields or []:
            is_file = body.mode == "formdata" and field.type == "file"
            form_data.append(ImportedFormData(
                key=field.key,
                value=field.value or "",
                type="file" if is_file else "text",
                enabled=not field.disabled,
                file_path=field.src if is_file and isinstance(field.src, str) else None,
            ))
        encoded = encode_form_body([FormField.model_validate(f.model_dump()) for f in form_data])
        return encoded, "form", form_data

    return "", "none", []


def _auth_values(auth: dict[str, Any], scheme: str) -> dict[str, str]:
    """Read Postman's ``[{"key": ..., "value": ...}]`` auth arrays into a dict."""
    values = {}
    entries = auth.get(scheme)
    if not isinstance(entries, list):
        return values
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        key, value = entry.get("key"), entry.get("value")
        if isinstance(key, str) and isinstance(value, str):
            values[key] = value
    return values


def parse_auth(auth: dict[str, Any] | None) -> tuple[str, str]:
    """Map a Postman auth block to ``(auth_type, serialized auth_data)``."""
    if not auth:
        return "none", "{}"

    auth_type = auth.get("type")
    if auth_type == "basic" and isinstance(auth.get("basic"), list):
        values = _auth_values(auth, "basic")
        return "basic", dump_json({
            "username": values.get("username", ""),
            "password": values.get("password", ""),
        })
    if auth_type == "bearer":
        values = _auth_values(auth, "bearer")
        if "token" in values:
            return "bearer", dump_json({"token": values["token"]})
    if auth_type == "apikey" and isinstance(auth.get("apikey"), list):
        values = _auth_values(auth, "apikey")
        return "apikey", dump_json({
            "key": values.get("key", ""),
            "value_field": values.get("value", ""),
        })

    return "none", "{}"
