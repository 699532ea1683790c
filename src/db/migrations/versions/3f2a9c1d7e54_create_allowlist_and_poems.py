"""create allowlist and poems tables

Revision ID: 3f2a9c1d7e54
Revises:
Create Date: 2026-10-18 10:12:41.208317

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f2a9c1d7e54'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'allowlist',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('subject_id', sa.String(128), nullable=False),

        sa.Column('api_key', sa.String(255), nullable=True),
        sa.Column('timezone', sa.String(64), nullable=True),
        sa.Column('pen_name', sa.String(255), nullable=True),
        sa.Column('theme_mode', sa.String(32), nullable=True),
        sa.Column('display_poem_id', sa.String(36), nullable=True),
        sa.Column('added_by', sa.String(128), nullable=True),

        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_allowlist_subject_id', 'allowlist', ['subject_id'], unique=True)
    op.create_index('ix_allowlist_created_at', 'allowlist', ['created_at'])

    op.create_table(
        'poems',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('owner_id', sa.String(128), nullable=False),

        sa.Column('title', sa.String(255), nullable=False, server_default=''),
        sa.Column('text', sa.Text(), nullable=False, server_default=''),
        sa.Column('palette', sa.JSON(), nullable=False),

        sa.Column('is_favorite', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('derived_asset_url', sa.String(512), nullable=True),
        sa.Column('author_alias', sa.String(255), nullable=True),
        sa.Column('extra_data', sa.JSON(), nullable=True),
        sa.Column('version', sa.Integer(), server_default=sa.text('1'), nullable=False),

        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_poems_owner_id', 'poems', ['owner_id'])
    op.create_index('ix_poems_is_favorite', 'poems', ['is_favorite'])
    op.create_index('ix_poems_created_at', 'poems', ['created_at'])
    # Navigation order within one owner's poems
    op.create_index(
        'ix_poems_owner_favorite_created',
        'poems',
        ['owner_id', 'is_favorite', 'created_at', 'id'],
    )


def downgrade() -> None:
    op.drop_index('ix_poems_owner_favorite_created', table_name='poems')
    op.drop_index('ix_poems_created_at', table_name='poems')
    op.drop_index('ix_poems_is_favorite', table_name='poems')
    op.drop_index('ix_poems_owner_id', table_name='poems')
    op.drop_table('poems')
    op.drop_index('ix_allowlist_created_at', table_name='allowlist')
    op.drop_index('ix_allowlist_subject_id', table_name='allowlist')
    op.drop_table('allowlist')
