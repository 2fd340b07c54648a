"""
Pydantic schemas for request execution.

Defines the response returned by the transport and the payloads of the
interpolation endpoint.
"""

from pydantic import BaseModel


class Cookie(BaseModel):
    """A cookie parsed from a Set-Cookie response header."""
    name: str
    value: str
    domain: str | None = None
    path: str | None = None


class HttpResponse(BaseModel):
    """
    Schema for request execution response.

    ``response_time`` is in milliseconds and ``size`` is the body size in bytes.
    """
    status: int
    status_text: str
    headers: dict[str, str]
    body: str
    response_time: int
    size: int
    cookies: list[Cookie] = []


class InterpolateRequest(BaseModel):
    text: str


class InterpolateResponse(BaseModel):
    result: str
