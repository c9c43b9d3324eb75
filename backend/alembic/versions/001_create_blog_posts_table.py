"""Create blog_posts table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `blog_posts` table holding every blog post.
How:   Portable column types (sa.Uuid, timezone-aware DateTime) so the same
       revision applies to PostgreSQL and SQLite.

Rollback: downgrade() drops the table entirely (all posts are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the blog_posts table and its creation-time index."""
    op.create_table(
        "blog_posts",
        sa.Column(
            "id",
            sa.Uuid(as_uuid=True),
            nullable=False,
            comment="Store-assigned identifier",
        ),
        sa.Column("title", sa.Text(), nullable=False, comment="Post title"),
        sa.Column("author_first_name", sa.String(255), nullable=True),
        sa.Column("author_last_name", sa.String(255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False, comment="Post body"),
        sa.Column(
            "created",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this post was created (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # The list endpoint orders by creation time
    op.create_index("idx_blog_posts_created", "blog_posts", ["created"])


def downgrade() -> None:
    op.drop_index("idx_blog_posts_created", table_name="blog_posts")
    op.drop_table("blog_posts")
