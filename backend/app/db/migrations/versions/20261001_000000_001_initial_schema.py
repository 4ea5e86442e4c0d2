############################################################
#
# inkwell - Versioned Content Management Backend
#
# 001_initial_schema.py: Initial database schema migration
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_username', 'users', ['username'])
    op.create_index('ix_users_email', 'users', ['email'])

    # Articles table (one row per version)
    op.create_table(
        'articles',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('article_number', sa.Integer(), nullable=False),
        sa.Column('version_number', sa.Integer(), nullable=False, default=1),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('title_key', sa.String(255), nullable=False, server_default=''),
        sa.Column('url_path', sa.String(1024), nullable=False, server_default=''),
        sa.Column('article_type', sa.Enum('general', 'blog_post', 'blog_stream', 'other', name='articletype'), nullable=False),
        sa.Column('blog_key', sa.String(1024), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('introduction', sa.Text(), nullable=True),
        sa.Column('banner_image', sa.String(2048), nullable=True),
        sa.Column('published', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status_code', sa.Enum('active', 'deleted', name='statuscode'), nullable=False),
        sa.Column('owner_user_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['owner_user_id'], ['users.id']),
    )
    op.create_index('ix_articles_article_number', 'articles', ['article_number'])
    op.create_index('ix_articles_title_key', 'articles', ['title_key'])
    op.create_index('ix_articles_url_path', 'articles', ['url_path'])
    op.create_index('ix_articles_blog_key', 'articles', ['blog_key'])
    op.create_index('ix_articles_number_version', 'articles', ['article_number', 'version_number'])
    op.create_index('ix_articles_blog_key_type', 'articles', ['blog_key', 'article_type'])

    # Redirects table
    op.create_table(
        'redirects',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('old_path', sa.String(1024), nullable=False),
        sa.Column('new_path', sa.String(1024), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('old_path'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
    )
    op.create_index('ix_redirects_new_path', 'redirects', ['new_path'])

    # Published pages table
    op.create_table(
        'published_pages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('article_number', sa.Integer(), nullable=False),
        sa.Column('article_id', sa.String(36), nullable=False),
        sa.Column('url_path', sa.String(1024), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('html', sa.Text(), nullable=False),
        sa.Column('published', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('article_number'),
        sa.ForeignKeyConstraint(['article_id'], ['articles.id']),
    )
    op.create_index('ix_published_pages_url_path', 'published_pages', ['url_path'])

    # Settings table
    op.create_table(
        'settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('group', sa.String(100), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('is_required', sa.Boolean(), nullable=False, default=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )


def downgrade() -> None:
    op.drop_table('settings')
    op.drop_table('published_pages')
    op.drop_table('redirects')
    op.drop_table('articles')
    op.drop_table('users')
