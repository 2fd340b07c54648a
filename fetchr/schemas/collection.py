"""
Pydantic schemas for collection nodes and the derived request tree.

Tree nodes form a tagged variant on ``type``: a ``FolderNode`` carries its
children, a ``RequestNode`` is a leaf wrapping a saved request.
"""

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .request import RequestRecord


class CollectionNode(BaseModel):
    """Schema for a persisted collection node (folder or leaf container)."""
    id: str
    name: str
    parent_id: str | None = None
    is_folder: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(from_attributes=True)


class FolderNode(BaseModel):
    """A folder in the rendered tree."""
    type: Literal["folder"] = "folder"
    key: str
    label: str
    data: CollectionNode
    children: list["TreeNode"] = []


class RequestNode(BaseModel):
    """A saved request in the rendered tree."""
    type: Literal["request"] = "request"
    key: str
    label: str
    data: RequestRecord


TreeNode = Annotated[Union[FolderNode, RequestNode], Field(discriminator="type")]


FolderNode.model_rebuild()
