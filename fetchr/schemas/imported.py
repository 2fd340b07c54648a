"""
Pydantic schemas for collections imported from Postman.

The parser flattens the Postman item tree into folders and requests that
remember their position as a path of folder names.
"""

from typing import Literal

from pydantic import BaseModel

from .request import AuthType, BodyType


class ImportedFolder(BaseModel):
    name: str
    parent_path: list[str] = []


class ImportedHeader(BaseModel):
    key: str
    value: str
    enabled: bool = True


class ImportedFormData(BaseModel):
    key: str
    value: str = ""
    type: Literal["text", "file"] = "text"
    enabled: bool = True
    file_path: str | None = None


class ImportedRequest(BaseModel):
    name: str
    method: str
    url: str
    headers: list[ImportedHeader] = []
    body: str = ""
    body_type: BodyType = "none"
    auth_type: AuthType = "none"
    auth_data: str = "{}"
    form_data: list[ImportedFormData] = []
    folder_path: list[str] = []


class ImportedCollection(BaseModel):
    """Internal shape produced by the Postman parser."""
    name: str
    folders: list[ImportedFolder] = []
    requests: list[ImportedRequest] = []


class PostmanImportPayload(BaseModel):
    """Raw Postman document sent for parsing."""
    json_content: str


class ImportResult(BaseModel):
    root_id: str
