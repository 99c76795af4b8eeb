"""Initial schema: users, notes, ratings, attachments

Revision ID: 8f2c1d0a4b7e
Revises:
Create Date: 2025-10-02 09:14:27.118402

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8f2c1d0a4b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns():
    return [
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        *_base_columns(),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.CheckConstraint('length(username) <= 50', name='ck_users_username_len'),
        sa.CheckConstraint(
            'full_name IS NULL OR length(full_name) <= 100', name='ck_users_full_name_len'
        ),
        sa.UniqueConstraint('username'),
    )
    op.create_index('idx_users_active', 'users', ['is_active'])

    op.create_table(
        'notes',
        *_base_columns(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column(
            'owner_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('share_token', sa.String(length=128), nullable=True),
        sa.Column('share_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('view_count', sa.Integer(), nullable=False),
        sa.Column('average_rating', sa.Float(), nullable=False),
        sa.Column('rating_count', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.CheckConstraint('length(title) <= 200', name='ck_notes_title_len'),
        sa.CheckConstraint('view_count >= 0', name='ck_notes_view_count'),
        sa.CheckConstraint('rating_count >= 0', name='ck_notes_rating_count'),
        sa.CheckConstraint(
            'average_rating = 0 OR (average_rating >= 1 AND average_rating <= 5)',
            name='ck_notes_average_rating',
        ),
        sa.CheckConstraint(
            '(share_token IS NULL) = (share_token_expires_at IS NULL)',
            name='ck_notes_share_token_pair',
        ),
        sa.UniqueConstraint('share_token'),
    )
    op.create_index('idx_notes_owner_id', 'notes', ['owner_id'])
    op.create_index('idx_notes_public', 'notes', ['is_public'])
    op.create_index('idx_notes_public_rating', 'notes', ['is_public', 'average_rating'])

    op.create_table(
        'ratings',
        *_base_columns(),
        sa.Column(
            'note_id', sa.Uuid(), sa.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column(
            'user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('value', sa.Integer(), nullable=False),
        sa.Column('comment', sa.String(length=500), nullable=True),
        sa.UniqueConstraint('note_id', 'user_id', name='uq_ratings_note_user'),
        sa.CheckConstraint('value >= 1 AND value <= 5', name='ck_ratings_value_range'),
        sa.CheckConstraint(
            'comment IS NULL OR length(comment) <= 500', name='ck_ratings_comment_len'
        ),
    )
    op.create_index('idx_ratings_note_id', 'ratings', ['note_id'])
    op.create_index('idx_ratings_user_id', 'ratings', ['user_id'])

    op.create_table(
        'attachments',
        *_base_columns(),
        sa.Column(
            'note_id', sa.Uuid(), sa.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False
        ),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('mimetype', sa.String(length=100), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('path', sa.String(length=500), nullable=False),
    )
    op.create_index('idx_attachments_note_id', 'attachments', ['note_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_attachments_note_id', table_name='attachments')
    op.drop_table('attachments')
    op.drop_index('idx_ratings_user_id', table_name='ratings')
    op.drop_index('idx_ratings_note_id', table_name='ratings')
    op.drop_table('ratings')
    op.drop_index('idx_notes_public_rating', table_name='notes')
    op.drop_index('idx_notes_public', table_name='notes')
    op.drop_index('idx_notes_owner_id', table_name='notes')
    op.drop_table('notes')
    op.drop_index('idx_users_active', table_name='users')
    op.drop_table('users')
