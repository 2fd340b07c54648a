"""
Collection management API routes.

Provides listing, creation and deletion of collection nodes, the per-node
request listing, the rendered tree and the JSON export.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import ResourceNotFoundError
from ..schemas.collection import CollectionNode, TreeNode
from ..schemas.request import RequestRecord
from ..services import collection_service
from ..services.collection_tree import build_tree
from ..services.import_export import export_collection


router = APIRouter(prefix="/api", tags=["collections"])


@router.get("/collections", response_model=list[CollectionNode])
def list_collections(db: Session = Depends(get_db)):
    """List every collection node in insertion order."""
    return collection_service.list_collections(db)


@router.get("/collections/tree", response_model=list[TreeNode])
def get_collection_tree(db: Session = Depends(get_db)):
    """
    Get the rendered tree of folders and saved requests.

    Folders nest their sub-collections and requests; requests owned by leaf
    containers appear directly at the container's level.
    """
    collections = collection_service.list_collections(db)
    requests = {c.id: collection_service.list_requests(db, c.id) for c in collections}
    return build_tree(collections, requests)


@router.post("/collections", response_model=CollectionNode, status_code=status.HTTP_201_CREATED)
def create_collection(node: CollectionNode, db: Session = Depends(get_db)):
    """Create a collection node with a caller-chosen id."""
    if node.parent_id and collection_service.get_collection(db, node.parent_id) is None:
        raise ResourceNotFoundError("Collection", node.parent_id)
    return collection_service.create_collection(db, node)


@router.delete("/collections/{collection_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_collection(collection_id: str, db: Session = Depends(get_db)):
    """Delete a collection node. Cascades to nested nodes and their requests."""
    if not collection_service.delete_collection(db, collection_id):
        raise ResourceNotFoundError("Collection", collection_id)
    return None


@router.get("/collections/{collection_id}/requests", response_model=list[RequestRecord])
def list_collection_requests(collection_id: str, db: Session = Depends(get_db)):
    return collection_service.list_requests(db, collection_id)


@router.get("/collections/{collection_id}/export")
def export_collection_json(collection_id: str, db: Session = Depends(get_db)):
    """Export a collection subtree as a pretty-printed JSON document."""
    return Response(content=export_collection(db, collection_id), media_type="application/json")
