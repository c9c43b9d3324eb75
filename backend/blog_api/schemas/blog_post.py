"""
Blog Posts API: Pydantic Request/Response Schemas
==================================================

What:  Pydantic models defining the wire contract of the blog post endpoints.
How:   FastAPI validates request bodies against the *In/Create/Update models
       before a handler runs, and serializes handler results through
       BlogPostResponse. Shape failures are turned into 400 responses by the
       handler registered in main.py.

The stored record and the wire view differ on purpose:
    stored:  author_first_name, author_last_name
    wire:    author (single display string)
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class AuthorIn(BaseModel):
    """Structured author as sent by clients. Both parts are optional."""
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")

    model_config = ConfigDict(populate_by_name=True)


class BlogPostCreate(BaseModel):
    """
    Body of POST /blog-posts.

    Field order matters: when several fields are missing, the error for
    the first one in this order is the one reported.
    """
    title: str = Field(min_length=1, description="Post title")
    author: AuthorIn = Field(description="Author name parts")
    content: str = Field(min_length=1, description="Post body")


class BlogPostUpdate(BaseModel):
    """
    Body of PUT /blog-posts/{id}.

    `id` must repeat the path id; the route checks that. Every other field
    is optional and only the ones actually present in the body are applied.
    """
    id: Optional[str] = Field(default=None, description="Must equal the path id")
    title: Optional[str] = Field(default=None, min_length=1)
    author: Optional[AuthorIn] = None
    content: Optional[str] = Field(default=None, min_length=1)

    @field_validator("title", "content", "author")
    @classmethod
    def reject_explicit_null(cls, v):
        # Defaults are not validated, so this only fires for an explicit null
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        if v is None or isinstance(v, str):
            return v
        return str(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BlogPostResponse(BaseModel):
    """
    Public view of a blog post.

    Returned by list, get and create.
    """
    id: uuid.UUID = Field(description="Store-assigned identifier")
    title: str
    author: str = Field(description="Author display string, e.g. 'Jane Doe'")
    content: str
    created: datetime = Field(description="Creation timestamp (UTC ISO 8601)")


class ErrorResponse(BaseModel):
    """
    Standardized error body for every 4xx/5xx response.

    Example:
        {
            "error": "validation_error",
            "message": "Missing `title` in request body",
            "details": {"field": "title"},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
