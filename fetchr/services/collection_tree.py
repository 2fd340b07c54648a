"""
Collection tree service for building the rendered request tree.

Folds the flat list of collection nodes and the per-collection request lists
into a tree of ``FolderNode``/``RequestNode`` values:

- folders become folder nodes; their sub-collections come first, then the
  requests they own as leaves
- leaf containers never appear themselves; their requests are emitted as
  leaves directly at the level the container sits on

Sibling order is the order of the input lists. Nothing is sorted, so the
output is a pure function of the two inputs.
"""

from collections import defaultdict
from typing import Mapping, Optional, Sequence

from ..schemas.collection import CollectionNode, FolderNode, RequestNode, TreeNode
from ..schemas.request import RequestRecord


def _request_leaves(requests: Sequence[RequestRecord]) -> list[TreeNode]:
    return [RequestNode(key=req.id, label=req.name, data=req) for req in requests]


def build_tree(
    collections: Sequence[CollectionNode],
    requests_by_collection: Mapping[str, Sequence[RequestRecord]],
    parent_id: Optional[str] = None,
) -> list[TreeNode]:
    """
    Build the tree below ``parent_id`` (the root when None).

    Args:
        collections: Flat list of collection nodes, in presentation order.
        requests_by_collection: Saved requests keyed by owning collection id.
        parent_id: Level to build; an empty or missing parent_id on a node
            only matches the root level.

    Returns:
        Folder nodes of the level followed by the request leaves of its
        leaf containers.
    """
    children_map: dict[Optional[str], list[CollectionNode]] = defaultdict(list)
    for node in collections:
        children_map[node.parent_id or None].append(node)

    def _folder_node(folder: CollectionNode) -> FolderNode:
        children = _build_level(folder.id)
        children.extend(_request_leaves(requests_by_collection.get(folder.id, [])))
        return FolderNode(key=folder.id, label=folder.name, data=folder, children=children)

    def _build_level(level_id: Optional[str]) -> list[TreeNode]:
        siblings = children_map.get(level_id, [])
        items: list[TreeNode] = [_folder_node(node) for node in siblings if node.is_folder]
        for container in siblings:
            if not container.is_folder:
                items.extend(_request_leaves(requests_by_collection.get(container.id, [])))
        return items

    return _build_level(parent_id or None)


def collect_subtree_ids(collections: Sequence[CollectionNode], root_id: str) -> list[str]:
    """Return ``root_id`` and the ids of every collection nested below it."""
    children_map: dict[Optional[str], list[str]] = defaultdict(list)
    for node in collections:
        children_map[node.parent_id or None].append(node.id)

    result = []
    pending = [root_id]
    while pending:
        current = pending.pop(0)
        if current in result:
            continue
        result.append(current)
        pending.extend(children_map.get(current, []))
    return result
