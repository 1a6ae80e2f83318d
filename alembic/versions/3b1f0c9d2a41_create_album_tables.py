"""create users, photos, albums, album_photos

Revision ID: 3b1f0c9d2a41
Revises:
Create Date: 2026-10-19 10:02:11.418203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b1f0c9d2a41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'photos',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('public_id', sa.String(), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('folder', sa.String(), nullable=False),
        sa.Column('caption', sa.String(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('photo_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_photos_user_id', 'photos', ['user_id'])
    op.create_index('ix_photos_photo_date', 'photos', ['photo_date'])

    op.create_table(
        'albums',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_albums_user_id', 'albums', ['user_id'])

    op.create_table(
        'album_photos',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('album_id', sa.String(), sa.ForeignKey('albums.id', ondelete='CASCADE'), nullable=False),
        sa.Column('photo_id', sa.String(), sa.ForeignKey('photos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('added_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('album_id', 'photo_id', name='uq_album_photos_album_photo'),
    )
    op.create_index('ix_album_photos_album_id', 'album_photos', ['album_id'])
    op.create_index('ix_album_photos_photo_id', 'album_photos', ['photo_id'])


def downgrade() -> None:
    # 역순 삭제
    op.drop_index('ix_album_photos_photo_id')
    op.drop_index('ix_album_photos_album_id')
    op.drop_table('album_photos')
    op.drop_index('ix_albums_user_id')
    op.drop_table('albums')
    op.drop_index('ix_photos_photo_date')
    op.drop_index('ix_photos_user_id')
    op.drop_table('photos')
    op.drop_index('ix_users_email')
    op.drop_table('users')
