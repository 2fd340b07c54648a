"""
Pydantic schemas package.

Exports all schemas shared by the services, the client-side store and the API.
"""

from .request import (
    HTTP_METHODS,
    BodyType,
    AuthType,
    RequestRecord,
)

from .draft import (
    KeyValue,
    FormField,
    AuthData,
    RequestDraft,
    encode_form_body,
    decode_form_body,
)

from .collection import (
    CollectionNode,
    FolderNode,
    RequestNode,
    TreeNode,
)

from .environment import (
    EnvironmentVariable,
    EnvironmentRecord,
    serialize_variables,
)

from .history import HistoryEntry

from .execute import (
    Cookie,
    HttpResponse,
    InterpolateRequest,
    InterpolateResponse,
)

from .imported import (
    ImportedFolder,
    ImportedHeader,
    ImportedFormData,
    ImportedRequest,
    ImportedCollection,
    PostmanImportPayload,
    ImportResult,
)

__all__ = [
    # Request schemas
    "HTTP_METHODS",
    "BodyType",
    "AuthType",
    "RequestRecord",
    # Draft schemas
    "KeyValue",
    "FormField",
    "AuthData",
    "RequestDraft",
    "encode_form_body",
    "decode_form_body",
    # Collection schemas
    "CollectionNode",
    "FolderNode",
    "RequestNode",
    "TreeNode",
    # Environment schemas
    "EnvironmentVariable",
    "EnvironmentRecord",
    "serialize_variables",
    # History schemas
    "HistoryEntry",
    # Execute schemas
    "Cookie",
    "HttpResponse",
    "InterpolateRequest",
    "InterpolateResponse",
    # Import schemas
    "ImportedFolder",
    "ImportedHeader",
    "ImportedFormData",
    "ImportedRequest",
    "ImportedCollection",
    "PostmanImportPayload",
    "ImportResult",
]
