"""
Pydantic schemas for saved HTTP requests.

A ``RequestRecord`` mirrors the persisted row: headers and auth data travel
as serialized JSON text, the same way they are stored.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# HTTP methods offered by the editor; saved requests may carry others
HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

# Body types supported for requests
BodyType = Literal["none", "json", "form", "raw"]

# Authentication schemes supported for requests
AuthType = Literal["none", "basic", "bearer", "apikey"]


class RequestRecord(BaseModel):
    """Schema for a persisted request entity."""
    id: str
    collection_id: str
    name: str
    method: str = "GET"
    url: str = ""
    headers: str = "[]"
    body: str = ""
    body_type: BodyType = "none"
    auth_type: AuthType = "none"
    auth_data: str = "{}"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(from_attributes=True)
