"""
Blog Posts API: Blog Post Service
==================================

What:  The five store operations behind the HTTP surface: list, get,
       create, update, delete.
How:   Each method issues its queries on the session it is given and
       returns response models. SQLAlchemy failures are logged and
       re-raised as DatabaseError; missing rows become NotFoundError.
Who:   Called by the blog post route handlers.

BlogPostService is stateless. Writes are committed here, before the handler
returns, so a store failure still reaches the client as a 500. Rollback and
close stay with the request session (see get_db_session).
"""

import logging
from datetime import timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import asc, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.exceptions import DatabaseError, NotFoundError, ValidationError
from blog_api.models.blog_post import BlogPost
from blog_api.schemas.blog_post import (
    BlogPostCreate,
    BlogPostResponse,
    BlogPostUpdate,
)

logger = logging.getLogger(__name__)

# Fields a PUT body may change; anything else in the body is ignored
UPDATABLE_FIELDS = ("title", "author", "content")


def serialize(post: BlogPost) -> BlogPostResponse:
    """Build the public view of a stored post."""
    return BlogPostResponse(
        id=post.id,
        title=post.title,
        author=post.author_string,
        content=post.content,
        created=_as_utc(post.created),
    )


def _as_utc(value):
    # SQLite drops the offset on DateTime(timezone=True); stored values are UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_post_id(post_id: str) -> Optional[UUID]:
    """Path ids are opaque strings; anything that is not a UUID cannot match a row."""
    try:
        return UUID(str(post_id))
    except ValueError:
        return None


class BlogPostService:
    """
    Business logic for blog posts.

    Responsibilities:
        - list_posts():  every post, oldest first
        - get_post():    single post, NotFoundError when absent
        - create_post(): insert, commit and return the serialized record
        - update_post(): id consistency check, then partial update
        - delete_post(): unconditional removal
    """

    async def list_posts(self, db: AsyncSession) -> List[BlogPostResponse]:
        try:
            result = await db.execute(select(BlogPost).order_by(asc(BlogPost.created)))
            posts = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing blog posts: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        return [serialize(post) for post in posts]

    async def get_post(self, db: AsyncSession, post_id: str) -> BlogPostResponse:
        """
        Retrieve a single post by id.

        Raises:
            NotFoundError: No post with this id (→ 404)
            DatabaseError: Query execution failed (→ 500)
        """
        post = await self._load(db, post_id)
        return serialize(post)

    async def create_post(self, db: AsyncSession, payload: BlogPostCreate) -> BlogPostResponse:
        """
        Insert a new post.

        `payload` has already passed structural validation, so title,
        author and content are all present here.
        """
        post = BlogPost(
            title=payload.title,
            author_first_name=payload.author.first_name,
            author_last_name=payload.author.last_name,
            content=payload.content,
        )
        try:
            db.add(post)
            await db.flush()  # Assigns id and created
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error creating blog post: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("Blog post created: %s", post.id)
        return serialize(post)

    async def update_post(
        self,
        db: AsyncSession,
        post_id: str,
        payload: BlogPostUpdate,
    ) -> None:
        """
        Apply a partial update.

        Workflow:
            1. Path id and body id must both be present and equal (else 400)
            2. Load the post (404 when absent)
            3. Copy over only the updatable fields present in the body

        Raises:
            ValidationError: Missing or mismatched ids
            NotFoundError:   No post with this id
            DatabaseError:   Store failure
        """
        if not (post_id and payload.id and post_id == payload.id):
            message = (
                f"Request path id ({post_id}) and request body id "
                f"({payload.id}) must match"
            )
            raise ValidationError(message=message, field="id")

        post = await self._load(db, post_id)

        present = payload.model_fields_set
        to_update = [field for field in UPDATABLE_FIELDS if field in present]

        if "title" in to_update:
            post.title = payload.title
        if "content" in to_update:
            post.content = payload.content
        if "author" in to_update:
            # The author is replaced as a whole, like the stored sub-document it models
            post.author_first_name = payload.author.first_name
            post.author_last_name = payload.author.last_name

        try:
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error updating blog post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(context={"post_id": post_id, "error_type": type(e).__name__})

        logger.info("Blog post %s updated fields: %s", post_id, ", ".join(to_update) or "none")

    async def delete_post(self, db: AsyncSession, post_id: str) -> None:
        """Remove a post. Deleting an id that does not exist is not an error."""
        uuid_id = parse_post_id(post_id)
        if uuid_id is None:
            logger.info("Delete of unknown blog post id %s ignored", post_id)
            return

        try:
            await db.execute(delete(BlogPost).where(BlogPost.id == uuid_id))
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting blog post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(context={"post_id": post_id, "error_type": type(e).__name__})

        logger.info("Blog post deleted: %s", post_id)

    async def _load(self, db: AsyncSession, post_id: str) -> BlogPost:
        uuid_id = parse_post_id(post_id)
        if uuid_id is None:
            raise NotFoundError(resource="blog post", resource_id=post_id)

        try:
            result = await db.execute(select(BlogPost).where(BlogPost.id == uuid_id))
            post = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching blog post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(context={"post_id": post_id, "error_type": type(e).__name__})

        if post is None:
            raise NotFoundError(resource="blog post", resource_id=post_id)
        return post


# ── Singleton Instance ────────────────────────────────────────────────────
blog_post_service = BlogPostService()
