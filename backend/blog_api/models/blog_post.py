"""
Blog Posts API: BlogPost SQLAlchemy Model
==========================================

What:  ORM model representing the `blog_posts` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by BlogPostService for CRUD operations.

Table Design:
    - id: UUID assigned on insert, never changed afterwards
    - title / content: NOT NULL text, the two fields a post cannot exist without
    - author_first_name / author_last_name: the structured author, both optional
    - created: UTC timestamp defaulting to the insert time

    Index on created: the list endpoint returns posts in creation order
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from blog_api.database import Base


class BlogPost(Base):
    """
    A single blog post.

    Lifecycle:
        1. Created by POST /blog-posts
        2. Partially updated in place by PUT /blog-posts/{id}
        3. Removed by DELETE /blog-posts/{id} (hard delete, no history)
    """

    __tablename__ = "blog_posts"

    # ── Primary Key ───────────────────────────────────────────────────────
    # Generic Uuid type: native UUID on PostgreSQL, CHAR(32) on SQLite
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Store-assigned identifier",
    )

    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Post title",
    )

    # ── Author ────────────────────────────────────────────────────────────
    author_first_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
    )
    author_last_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Post body",
    )

    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When this post was created (UTC)",
    )

    __table_args__ = (
        Index("idx_blog_posts_created", created),
    )

    @property
    def author_string(self) -> str:
        """Display name: first and last name joined by a space, trimmed."""
        first = self.author_first_name or ""
        last = self.author_last_name or ""
        return f"{first} {last}".strip()

    def __repr__(self) -> str:
        return f"<BlogPost(id={self.id}, title='{self.title}', created='{self.created}')>"
