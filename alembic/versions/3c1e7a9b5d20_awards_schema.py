"""Awards schema

Revision ID: 3c1e7a9b5d20
Revises: 
Create Date: 2026-10-19 10:12:31.118204
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateSequence, DropSequence, Sequence as SQLASequence

revision: str = '3c1e7a9b5d20'
down_revision: Union[str, Sequence, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CriteriaJSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _id_column() -> sa.Column:
    if op.get_bind().dialect.name == "postgresql":
        return sa.Column('id', sa.Integer(), server_default=sa.text("nextval('id_seq')"), nullable=False)
    return sa.Column('id', sa.Integer(), nullable=False)


def upgrade() -> None:
    """Upgrade schema."""
    is_postgres = op.get_bind().dialect.name == "postgresql"
    if is_postgres:
        op.execute(CreateSequence(SQLASequence('id_seq', start=1000)))

    op.create_table('users',
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=True),
        sa.Column('avatar_url', sa.String(length=255), nullable=True),
        sa.Column('user_group', sa.String(length=50), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('partner_id', sa.Integer(), nullable=True),
        sa.Column('is_partnered', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        _id_column(),
        sa.Column('uuid', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['partner_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('uuid'),
    )

    op.create_table('awards',
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), server_default='', nullable=False),
        sa.Column('phase', sa.String(length=20), server_default='NOMINATION', nullable=False),
        sa.Column('max_nominations', sa.Integer(), server_default='1', nullable=False),
        sa.Column('finalist_count', sa.Integer(), server_default='4', nullable=False),
        sa.Column('nomination_criteria', CriteriaJSON, nullable=True),
        sa.Column('voting_criteria', CriteriaJSON, nullable=True),
        sa.Column('active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('display_order', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        _id_column(),
        sa.Column('uuid', sa.Uuid(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
    )

    op.create_table('nominations',
        sa.Column('award_id', sa.Integer(), nullable=False),
        sa.Column('nominator_id', sa.Integer(), nullable=False),
        sa.Column('nominee_id', sa.Integer(), nullable=False),
        sa.Column('nomination_group_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        _id_column(),
        sa.Column('uuid', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['award_id'], ['awards.id'], ),
        sa.ForeignKeyConstraint(['nominator_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['nominee_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uuid'),
    )
    op.create_index('ix_nominations_award_nominator', 'nominations', ['award_id', 'nominator_id'])
    op.create_index('ix_nominations_nomination_group_id', 'nominations', ['nomination_group_id'])

    op.create_table('final_votes',
        sa.Column('award_id', sa.Integer(), nullable=False),
        sa.Column('voter_id', sa.Integer(), nullable=False),
        sa.Column('nominee_id', sa.Integer(), nullable=True),
        sa.Column('nomination_group_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        _id_column(),
        sa.Column('uuid', sa.Uuid(), nullable=False),
        sa.CheckConstraint(
            '(nominee_id IS NULL) <> (nomination_group_id IS NULL)',
            name='ck_final_votes_single_target',
        ),
        sa.ForeignKeyConstraint(['award_id'], ['awards.id'], ),
        sa.ForeignKeyConstraint(['voter_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['nominee_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('award_id', 'voter_id', name='uq_final_votes_award_voter'),
        sa.UniqueConstraint('uuid'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('final_votes')
    op.drop_index('ix_nominations_nomination_group_id', table_name='nominations')
    op.drop_index('ix_nominations_award_nominator', table_name='nominations')
    op.drop_table('nominations')
    op.drop_table('awards')
    op.drop_table('users')

    if op.get_bind().dialect.name == "postgresql":
        op.execute(DropSequence(SQLASequence('id_seq')))
