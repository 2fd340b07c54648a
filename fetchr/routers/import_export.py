"""
Collection import API routes.

Parsing and persisting are separate steps so a client can inspect the parsed
collection before saving it. Export lives on the collections router.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import ErrorResponse
from ..schemas.imported import ImportedCollection, ImportResult, PostmanImportPayload
from ..services.import_export import save_imported_collection
from ..services.postman_import import parse_postman_collection


router = APIRouter(prefix="/api/import", tags=["import"])


@router.post(
    "/postman",
    response_model=ImportedCollection,
    responses={400: {"model": ErrorResponse, "description": "Not a Postman v2.1 collection"}},
)
def parse_postman(payload: PostmanImportPayload):
    """Parse a Postman v2.1 document without saving it."""
    return parse_postman_collection(payload.json_content)


@router.post("", response_model=ImportResult, status_code=status.HTTP_201_CREATED)
def save_imported(imported: ImportedCollection, db: Session = Depends(get_db)):
    """
    Persist a parsed collection under a new root folder.

    Returns:
        ImportResult with the id of the new root folder
    """
    return ImportResult(root_id=save_imported_collection(db, imported))
