# Services package

from .variable_substitution import (
    extract_variables,
    substitute,
    interpolate,
    resolve_draft,
    find_undefined,
)
from .collection_tree import build_tree, collect_subtree_ids
from .curl_generator import generate_curl
from .http_executor import send_request
from .postman_import import parse_postman_collection

__all__ = [
    "extract_variables",
    "substitute",
    "interpolate",
    "resolve_draft",
    "find_undefined",
    "build_tree",
    "collect_subtree_ids",
    "generate_curl",
    "send_request",
    "parse_postman_collection",
]
