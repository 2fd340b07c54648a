"""
Request management API routes.

Provides upsert, lookup and deletion of saved HTTP requests.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import ResourceNotFoundError
from ..schemas.request import RequestRecord
from ..services import collection_service


router = APIRouter(prefix="/api/requests", tags=["requests"])


@router.put("/{request_id}", response_model=RequestRecord)
def save_request(request_id: str, record: RequestRecord, db: Session = Depends(get_db)):
    """
    Create or update a saved request.

    Args:
        request_id: Id of the request; overrides the id in the body
        record: Request data, headers and auth data as JSON text
        db: Database session

    Returns:
        The stored request

    Raises:
        ResourceNotFoundError: The owning collection does not exist
    """
    if collection_service.get_collection(db, record.collection_id) is None:
        raise ResourceNotFoundError("Collection", record.collection_id)
    return collection_service.save_request(db, record.model_copy(update={"id": request_id}))


@router.get("/{request_id}", response_model=RequestRecord)
def get_request(request_id: str, db: Session = Depends(get_db)):
    record = collection_service.get_request(db, request_id)
    if record is None:
        raise ResourceNotFoundError("Request", request_id)
    return record


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_request(request_id: str, db: Session = Depends(get_db)):
    """Delete a saved request by id."""
    if not collection_service.delete_request(db, request_id):
        raise ResourceNotFoundError("Request", request_id)
    return None
