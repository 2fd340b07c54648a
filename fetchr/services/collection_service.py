"""
Collection and saved-request persistence.

Listings come back in insertion order (``sort_order`` then ``created_at``),
which is the order the tree renders siblings in.
"""

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.collection import Collection
from ..models.request import Request
from ..schemas.collection import CollectionNode
from ..schemas.request import RequestRecord


def list_collections(db: Session) -> list[CollectionNode]:
    rows = db.query(Collection).order_by(Collection.sort_order, Collection.created_at).all()
    return [CollectionNode.model_validate(row) for row in rows]


def get_collection(db: Session, collection_id: str) -> CollectionNode | None:
    row = db.query(Collection).filter(Collection.id == collection_id).first()
    return CollectionNode.model_validate(row) if row is not None else None


def create_collection(db: Session, node: CollectionNode) -> CollectionNode:
    """
    Insert a collection node at the end of the listing.

    Args:
        db: Database session
        node: Node to insert; its id is chosen by the caller

    Returns:
        The stored node
    """
    max_sort_order = db.query(func.max(Collection.sort_order)).scalar()
    new_sort_order = (max_sort_order + 1) if max_sort_order is not None else 0

    db_collection = Collection(
        id=node.id,
        name=node.name,
        parent_id=node.parent_id or None,
        is_folder=node.is_folder,
        sort_order=new_sort_order,
        created_at=node.created_at,
    )
    db.add(db_collection)
    db.commit()
    db.refresh(db_collection)
    return CollectionNode.model_validate(db_collection)


def delete_collection(db: Session, collection_id: str) -> bool:
    """Delete a node; nested nodes and owned requests go with it. False if absent."""
    deleted = db.query(Collection).filter(Collection.id == collection_id).delete()
    db.commit()
    return deleted > 0


def list_requests(db: Session, collection_id: str) -> list[RequestRecord]:
    rows = (
        db.query(Request)
        .filter(Request.collection_id == collection_id)
        .order_by(Request.sort_order, Request.created_at)
        .all()
    )
    return [RequestRecord.model_validate(row) for row in rows]


def get_request(db: Session, request_id: str) -> RequestRecord | None:
    row = db.query(Request).filter(Request.id == request_id).first()
    return RequestRecord.model_validate(row) if row is not None else None


def save_request(db: Session, record: RequestRecord) -> RequestRecord:
    """
    Create or update a request.

    An update keeps the original ``created_at`` and list position unless the
    request moves to another collection, in which case it is appended there.
    """
    db_request = db.query(Request).filter(Request.id == record.id).first()

    if db_request is None or db_request.collection_id != record.collection_id:
        max_sort_order = db.query(func.max(Request.sort_order)).filter(
            Request.collection_id == record.collection_id,
        ).scalar()
        sort_order = (max_sort_order + 1) if max_sort_order is not None else 0
    else:
        sort_order = db_request.sort_order

    if db_request is None:
        db_request = Request(id=record.id, created_at=record.created_at)
        db.add(db_request)

    db_request.collection_id = record.collection_id
    db_request.name = record.name
    db_request.method = record.method
    db_request.url = record.url
    db_request.headers = record.headers
    db_request.body = record.body
    db_request.body_type = record.body_type
    db_request.auth_type = record.auth_type
    db_request.auth_data = record.auth_data
    db_request.sort_order = sort_order
    db_request.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(db_request)
    return RequestRecord.model_validate(db_request)


def delete_request(db: Session, request_id: str) -> bool:
    deleted = db.query(Request).filter(Request.id == request_id).delete()
    db.commit()
    return deleted > 0
