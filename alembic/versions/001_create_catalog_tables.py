"""Create catalog hierarchy, news and faqs tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# (table, parent reference column) from root to leaf
HIERARCHY_TABLES = (
    ('series', None),
    ('categories', 'series_id'),
    ('sub_categories', 'category_id'),
    ('specifications', 'sub_category_id'),
    ('products', 'specification_id'),
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    """Create one table per hierarchy level plus news and faqs."""
    for table, parent_column in HIERARCHY_TABLES:
        columns = [
            sa.Column('id', sa.String(36), primary_key=True),
            sa.Column('code', sa.String(100), nullable=False),
            sa.Column('name', sa.JSON(), nullable=False),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        ]
        if parent_column:
            # Plain column, no foreign key: dangling references are tolerated
            columns.append(sa.Column(parent_column, sa.String(36), nullable=False))
        if table == 'products':
            columns.extend([
                sa.Column('description', sa.JSON(), nullable=False),
                sa.Column('features', sa.JSON(), nullable=False),
                sa.Column('images', sa.JSON(), nullable=False),
                sa.Column('documents', sa.JSON(), nullable=False),
            ])
        op.create_table(table, *columns, *_timestamps())

        op.create_index(f'ix_{table}_code', table, ['code'])
        op.create_index(f'ix_{table}_is_active', table, ['is_active'])
        op.create_index(f'ix_{table}_created_at', table, ['created_at'])
        if parent_column:
            op.create_index(f'ix_{table}_{parent_column}', table, [parent_column])

    # News table
    op.create_table(
        'news',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.JSON(), nullable=False),
        sa.Column('summary', sa.JSON(), nullable=False),
        sa.Column('content', sa.JSON(), nullable=False),
        sa.Column('category', sa.String(50), nullable=True),
        sa.Column('cover_image_url', sa.String(1000), nullable=True),
        sa.Column('author', sa.String(100), nullable=True),
        sa.Column('publish_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
    )
    op.create_index('ix_news_category', 'news', ['category'])
    op.create_index('ix_news_is_active', 'news', ['is_active'])
    op.create_index('ix_news_created_at', 'news', ['created_at'])

    # FAQ table
    op.create_table(
        'faqs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('question', sa.JSON(), nullable=False),
        sa.Column('answer', sa.JSON(), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('author', sa.String(100), nullable=True),
        sa.Column('publish_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('product_model', sa.String(100), nullable=True),
        sa.Column('video_url', sa.String(1000), nullable=True),
        sa.Column('image_urls', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
    )
    op.create_index('ix_faqs_category', 'faqs', ['category'])
    op.create_index('ix_faqs_is_active', 'faqs', ['is_active'])
    op.create_index('ix_faqs_created_at', 'faqs', ['created_at'])


def downgrade() -> None:
    """Drop catalog tables."""
    op.drop_table('faqs')
    op.drop_table('news')
    for table, _ in reversed(HIERARCHY_TABLES):
        op.drop_table(table)
