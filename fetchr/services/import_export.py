"""
Import/Export service for collections.

Persists parsed Postman collections and serializes a collection subtree
into a portable JSON document.
"""

import json
import uuid

from sqlalchemy.orm import Session

from ..exceptions import ResourceNotFoundError
from ..schemas.collection import CollectionNode
from ..schemas.imported import ImportedCollection
from ..schemas.request import RequestRecord
from ..schemas.serialized import dump_json, parse_json_list, parse_json_object
from . import collection_service


def save_imported_collection(db: Session, imported: ImportedCollection) -> str:
    """
    Persist an imported collection under a new root folder.

    Folders are created under the folder their parent path points at;
    requests whose folder path is unknown land in the root.

    Returns:
        The id of the new root folder
    """
    root_id = str(uuid.uuid4())
    collection_service.create_collection(
        db, CollectionNode(id=root_id, name=imported.name, parent_id=None, is_folder=True)
    )

    folder_map: dict[tuple[str, ...], str] = {(): root_id}

    for folder in imported.folders:
        folder_id = str(uuid.uuid4())
        parent_id = folder_map.get(tuple(folder.parent_path), root_id)
        collection_service.create_collection(
            db, CollectionNode(id=folder_id, name=folder.name, parent_id=parent_id, is_folder=True)
        )
        folder_map[tuple(folder.parent_path) + (folder.name,)] = folder_id

    for request in imported.requests:
        collection_id = folder_map.get(tuple(request.folder_path), root_id)
        collection_service.save_request(db, RequestRecord(
            id=str(uuid.uuid4()),
            collection_id=collection_id,
            name=request.name,
            method=request.method,
            url=request.url,
            headers=dump_json([h.model_dump() for h in request.headers]),
            body=request.body,
            body_type=request.body_type,
            auth_type=request.auth_type,
            auth_data=request.auth_data,
        ))

    return root_id


def _export_request(request: RequestRecord) -> dict:
    return {
        "name": request.name,
        "method": request.method,
        "url": request.url,
        "headers": parse_json_list(request.headers),
        "body": request.body,
        "body_type": request.body_type,
        "auth_type": request.auth_type,
        "auth_data": parse_json_object(request.auth_data),
    }


def export_collection(db: Session, collection_id: str) -> str:
    """
    Serialize a collection and everything below it.

    Raises:
        ResourceNotFoundError: No collection has this id
    """
    collections = collection_service.list_collections(db)
    by_id = {c.id: c for c in collections}
    if collection_id not in by_id:
        raise ResourceNotFoundError("Collection", collection_id)

    def _export_node(node: CollectionNode) -> dict:
        return {
            "name": node.name,
            "requests": [_export_request(r) for r in collection_service.list_requests(db, node.id)],
            "folders": [
                _export_node(child)
                for child in collections
                if child.parent_id == node.id
            ],
        }

    return json.dumps(_export_node(by_id[collection_id]), indent=2, ensure_ascii=False)
