"""create player table with embedded active guess

Revision ID: 5c2a9d41e7b0
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2a9d41e7b0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'player' in insp.get_table_names():
        return
    op.create_table(
        'player',
        sa.Column('player_id', sa.String(length=128), primary_key=True),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('guess_direction', sa.String(length=8), nullable=True),
        sa.Column('guess_initial_price', sa.Numeric(20, 8), nullable=True),
        sa.Column('guess_submitted_at', sa.Float(), nullable=True),
    )
    op.create_index('ix_player_guess_submitted_at', 'player', ['guess_submitted_at'])


def downgrade():
    op.drop_index('ix_player_guess_submitted_at', table_name='player')
    op.drop_table('player')
