"""
Blog Posts API: Blog Post Route Handlers
=========================================

What:  The five CRUD endpoints under /blog-posts.
How:   FastAPI validates the body against the endpoint's input model,
       the handler awaits one BlogPostService call, and the result is
       serialized or an empty 204 is returned.
Errors: raised by the service and turned into responses by the global
        handlers in main.py (400 / 404 / 500).
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db_session
from blog_api.schemas.blog_post import (
    BlogPostCreate,
    BlogPostResponse,
    BlogPostUpdate,
    ErrorResponse,
)
from blog_api.services.blog_post_service import blog_post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blog-posts", tags=["Blog Posts"])


@router.get(
    "",
    response_model=List[BlogPostResponse],
    responses={
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List all blog posts",
)
async def list_blog_posts(
    db: AsyncSession = Depends(get_db_session),
) -> List[BlogPostResponse]:
    """Returns every post, oldest first. An empty store yields `[]`."""
    return await blog_post_service.list_posts(db)


@router.get(
    "/{post_id}",
    response_model=BlogPostResponse,
    responses={
        404: {"description": "Blog post not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single blog post by ID",
)
async def get_blog_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> BlogPostResponse:
    return await blog_post_service.get_post(db, post_id)


@router.post(
    "",
    status_code=201,
    response_model=BlogPostResponse,
    responses={
        400: {"description": "Missing or malformed field", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a blog post",
    description=(
        "Requires `title`, `author` ({firstName, lastName}) and `content`. "
        "Returns the stored post with its assigned id and creation time."
    ),
)
async def create_blog_post(
    payload: BlogPostCreate,
    db: AsyncSession = Depends(get_db_session),
) -> BlogPostResponse:
    return await blog_post_service.create_post(db, payload)


@router.put(
    "/{post_id}",
    status_code=204,
    response_class=Response,
    responses={
        400: {"description": "Path and body ids do not match", "model": ErrorResponse},
        404: {"description": "Blog post not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Partially update a blog post",
    description=(
        "The body must repeat the path id as `id`. Only `title`, `author` and "
        "`content` present in the body are changed."
    ),
)
async def update_blog_post(
    post_id: str,
    payload: BlogPostUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await blog_post_service.update_post(db, post_id, payload)
    return Response(status_code=204)


@router.delete(
    "/{post_id}",
    status_code=204,
    response_class=Response,
    responses={
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a blog post",
)
async def delete_blog_post(
    post_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await blog_post_service.delete_post(db, post_id)
    return Response(status_code=204)
